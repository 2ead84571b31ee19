from marshmallow import EXCLUDE, Schema, fields, validate


class StreakCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    # members always act on their own streak; admins name the user
    user_id = fields.Integer(validate=validate.Range(min=1))
    current_streak = fields.Integer(load_default=0, validate=validate.Range(min=0))
    longest_streak = fields.Integer(load_default=0, validate=validate.Range(min=0))
    last_recorded_at = fields.Integer(allow_none=True, validate=validate.Range(min=0))


class StreakUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    current_streak = fields.Integer(validate=validate.Range(min=0))
    longest_streak = fields.Integer(validate=validate.Range(min=0))
    last_recorded_at = fields.Integer(allow_none=True, validate=validate.Range(min=0))


class StreakOutSchema(Schema):
    id = fields.Integer()
    user_id = fields.Integer()
    current_streak = fields.Integer()
    longest_streak = fields.Integer()
    last_recorded_at = fields.Integer(allow_none=True)
    created_at = fields.Integer()
    updated_at = fields.Integer()
