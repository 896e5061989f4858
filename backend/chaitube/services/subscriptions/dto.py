"""DTOs for SubscriptionService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class SubscriptionOut:
    """
    A ``subscriber → channel`` edge.

    :param subscriber_id: Follower user id.
    :type subscriber_id: int
    :param channel_id: Followed user id.
    :type channel_id: int
    :param created_at: When the edge was first created.
    :type created_at: datetime | None
    :param created: ``False`` when the edge already existed.
    :type created: bool
    """

    subscriber_id: int
    channel_id: int
    created_at: datetime | None
    created: bool = True


@dataclass(frozen=True, slots=True)
class ChannelProfileOut:
    """
    Public channel profile with viewer-relative subscription state.

    :param id: Channel (user) id.
    :param username: Channel handle.
    :param full_name: Display name.
    :param email: Contact email.
    :param avatar_url: Avatar reference.
    :param cover_url: Cover image reference.
    :param subscribers_count: Distinct users following this channel.
    :param channels_subscribed_to_count: Channels this user follows.
    :param is_subscribed: Whether the viewer follows this channel.
    """

    id: int
    username: str
    full_name: str
    email: str
    avatar_url: str | None
    cover_url: str | None
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool
