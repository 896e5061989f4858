"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema


class RegisterSchema(Schema):
    """Input payload for account registration (multipart form fields)."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=254))
    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    full_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class LoginSchema(Schema):
    """Input payload for authenticating a user by username or email."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None, validate=validate.Length(max=50))
    email = fields.String(load_default=None, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))

    @validates_schema
    def _require_handle(self, data, **kwargs):
        if not (data.get("username") or "").strip() and not (data.get("email") or "").strip():
            raise ValidationError("username or email is required", field_name="username")


class RefreshSchema(Schema):
    """Optional body carrying the refresh token when no cookie is sent."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(load_default=None)


class ChangePasswordSchema(Schema):
    """Input payload for changing the current user's password."""

    old_password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    new_password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class TokenPairSchema(Schema):
    """Response payload containing both tokens."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
