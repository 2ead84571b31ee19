from marshmallow import EXCLUDE, Schema, fields, validate

from models.recording import FIRST_CHAPTER, LAST_CHAPTER

chapter_field = dict(
    allow_none=True,
    validate=validate.Range(
        min=FIRST_CHAPTER,
        max=LAST_CHAPTER,
        error=f"Invalid chapter_id. Must be between {FIRST_CHAPTER} and {LAST_CHAPTER}.",
    ),
)


class RecordingCreateSchema(Schema):
    """Admin/member create; members always create for themselves."""

    class Meta:
        unknown = EXCLUDE

    user_id = fields.Integer(validate=validate.Range(min=1))
    file_url = fields.Url(required=True)
    note = fields.String(allow_none=True, load_default=None)
    chapter_id = fields.Integer(load_default=None, **chapter_field)


class RecitationSchema(Schema):
    """Metadata for an audio file already uploaded by the caller."""

    class Meta:
        unknown = EXCLUDE

    file_url = fields.Url(required=True)
    note = fields.String(allow_none=True, load_default=None)
    chapter_id = fields.Integer(load_default=None, **chapter_field)


class RecordingUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    file_url = fields.Url()
    note = fields.String(allow_none=True)
    chapter_id = fields.Integer(**chapter_field)


class RecordingOutSchema(Schema):
    id = fields.Integer()
    user_id = fields.Integer()
    file_url = fields.String()
    note = fields.String(allow_none=True)
    chapter_id = fields.Integer(allow_none=True)
    created_at = fields.Integer()
    updated_at = fields.Integer()

