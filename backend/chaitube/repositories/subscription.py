"""Subscription repository: graph edges and channel profile aggregation."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import func, literal, select

from chaitube.models.subscription import Subscription
from chaitube.models.user import User
from chaitube.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    """Persistence-only repository for :class:`Subscription` edges."""

    model = Subscription

    # ---------------------------- Edges ----------------------------

    def get_edge(self, subscriber_id: int, channel_id: int) -> Subscription | None:
        """Return the edge ``subscriber → channel`` if it exists.

        :param subscriber_id: Follower user id.
        :type subscriber_id: int
        :param channel_id: Followed user id.
        :type channel_id: int
        :returns: The edge or ``None``.
        :rtype: Subscription | None
        """
        stmt = select(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
        return cast(Subscription | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Aggregation ----------------------------

    def channel_profile(self, username: str, viewer_id: int | None) -> dict[str, Any] | None:
        """Aggregate a channel's public profile in a single statement.

        The statement selects the channel's public columns plus two
        correlated counts and a viewer-relative ``is_subscribed`` flag, so
        every value comes from the same snapshot.

        :param username: Channel handle (case-insensitive).
        :type username: str
        :param viewer_id: Id of the requesting user, or ``None`` when anonymous.
        :type viewer_id: int | None
        :returns: Mapping with the profile fields or ``None`` when no user matches.
        :rtype: dict[str, Any] | None
        """
        subscribers_count = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == User.id)
            .correlate(User)
            .scalar_subquery()
            .label("subscribers_count")
        )
        channels_subscribed_to_count = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == User.id)
            .correlate(User)
            .scalar_subquery()
            .label("channels_subscribed_to_count")
        )
        if viewer_id is None:
            is_subscribed = literal(False).label("is_subscribed")
        else:
            is_subscribed = (
                select(Subscription.id)
                .where(
                    Subscription.channel_id == User.id,
                    Subscription.subscriber_id == viewer_id,
                )
                .correlate(User)
                .exists()
                .label("is_subscribed")
            )

        stmt = select(
            User.id,
            User.username,
            User.full_name,
            User.email,
            User.avatar_url,
            User.cover_url,
            subscribers_count,
            channels_subscribed_to_count,
            is_subscribed,
        ).where(User.username == username.strip().lower())

        row = self.session.execute(stmt).first()
        if row is None:
            return None
        profile = dict(row._mapping)
        profile["subscribers_count"] = int(profile["subscribers_count"] or 0)
        profile["channels_subscribed_to_count"] = int(
            profile["channels_subscribed_to_count"] or 0
        )
        profile["is_subscribed"] = bool(profile["is_subscribed"])
        return profile
