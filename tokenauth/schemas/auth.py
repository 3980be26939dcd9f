"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema


class RegisterSchema(Schema):
    """Input payload for account registration."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class LoginSchema(Schema):
    """Input payload for authenticating a user by username or email."""

    username = fields.String(load_default=None, validate=validate.Length(max=50))
    email = fields.String(load_default=None, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))

    @validates_schema
    def _require_identifier(self, data, **kwargs):
        if not data.get("username") and not data.get("email"):
            raise ValidationError("Provide a username or an email.", field_name="username")


class LogoutSchema(Schema):
    """Optional user id whose sessions should be revoked on logout."""

    id = fields.Integer(load_default=None, validate=validate.Range(min=1))


class UserSchema(Schema):
    """Public user payload."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)


class FieldErrorSchema(Schema):
    field = fields.String(required=True)
    message = fields.String(required=True)


class UserResponseSchema(Schema):
    """Response payload of register/login/refresh."""

    user = fields.Nested(UserSchema, allow_none=True)
    access_token = fields.String(data_key="accessToken", allow_none=True)
    errors = fields.List(fields.Nested(FieldErrorSchema))
