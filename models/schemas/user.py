from marshmallow import EXCLUDE, Schema, fields, pre_load, validate

ROLE_CHOICES = ("admin", "member")


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=3, max=100))
    name = fields.String(required=True, validate=validate.Length(min=1))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))
    role = fields.String(load_default=None, validate=validate.OneOf(ROLE_CHOICES))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=3))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))


class RefreshSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, validate=validate.Length(min=10))


class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(validate=validate.Length(min=3, max=100))
    name = fields.String(validate=validate.Length(min=1))
    email = fields.Email()
    role = fields.String(validate=validate.OneOf(ROLE_CHOICES))
    avatar = fields.String(allow_none=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class UserOutSchema(Schema):
    id = fields.Integer()
    username = fields.String()
    email = fields.String()
    name = fields.String()
    role = fields.Method("get_role")
    avatar = fields.String(allow_none=True)
    created_at = fields.Integer()
    updated_at = fields.Integer()

    def get_role(self, obj):
        return obj.role_name
