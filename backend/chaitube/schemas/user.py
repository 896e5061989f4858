"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema


class UpdateAccountSchema(Schema):
    """Payload for updating the current user's profile."""

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(load_default=None, validate=validate.Length(min=1, max=100))
    email = fields.Email(load_default=None, validate=validate.Length(max=254))

    @validates_schema
    def _require_one(self, data, **kwargs):
        if data.get("full_name") is None and data.get("email") is None:
            raise ValidationError("full_name or email is required")


class UserSchema(Schema):
    """Public representation of a user; credential fields are never listed."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    full_name = fields.String(required=True)
    avatar_url = fields.String(allow_none=True)
    cover_url = fields.String(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
