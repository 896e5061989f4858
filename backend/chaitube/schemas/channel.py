"""Channel and subscription schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class ChannelProfileSchema(Schema):
    """Channel profile as seen by the requesting user."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    full_name = fields.String(required=True)
    email = fields.Email(required=True)
    avatar_url = fields.String(allow_none=True)
    cover_url = fields.String(allow_none=True)
    subscribers_count = fields.Integer(required=True)
    channels_subscribed_to_count = fields.Integer(required=True)
    is_subscribed = fields.Boolean(required=True)


class SubscriptionSchema(Schema):
    """A subscription edge."""

    subscriber_id = fields.Integer(required=True)
    channel_id = fields.Integer(required=True)
    created_at = fields.DateTime(allow_none=True)
    created = fields.Boolean(required=True)
