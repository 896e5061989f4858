"""
SubscriptionService
===================

Follow/unfollow edges between users and the aggregated channel profile.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from chaitube.models.subscription import Subscription
from chaitube.repositories.subscription import SubscriptionRepository
from chaitube.services._shared.base import BaseService
from chaitube.services._shared.errors import NotFoundError, ValidationError
from chaitube.services.subscriptions.dto import ChannelProfileOut, SubscriptionOut

log = logging.getLogger(__name__)


def _to_out(edge: Subscription, *, created: bool) -> SubscriptionOut:
    return SubscriptionOut(
        subscriber_id=edge.subscriber_id,
        channel_id=edge.channel_id,
        created_at=edge.created_at,
        created=created,
    )


class SubscriptionService(BaseService):
    """Application service for the subscription graph."""

    def follow(self, subscriber_id: int, channel_id: int) -> SubscriptionOut:
        """
        Make ``subscriber_id`` follow ``channel_id``. Idempotent.

        :param subscriber_id: Authenticated user id.
        :type subscriber_id: int
        :param channel_id: Channel (user) id to follow.
        :type channel_id: int
        :returns: The edge, with ``created=False`` when it already existed.
        :rtype: SubscriptionOut
        :raises ValidationError: When a user tries to follow themselves.
        :raises NotFoundError: When the channel does not exist.
        """
        if subscriber_id == channel_id:
            raise ValidationError("Cannot subscribe to your own channel")

        try:
            with self.rw_uow() as uow:
                if uow.users.get(channel_id) is None:
                    raise NotFoundError("Channel", channel_id)

                subs: SubscriptionRepository = uow.subscriptions
                existing = subs.get_edge(subscriber_id, channel_id)
                if existing is not None:
                    return _to_out(existing, created=False)

                edge = subs.add(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))
                result = _to_out(edge, created=True)
        except IntegrityError:
            # Lost a race against a concurrent follow: the edge exists now.
            with self.ro_uow() as uow_retry:
                existing = uow_retry.subscriptions.get_edge(subscriber_id, channel_id)
                if existing is None:
                    raise
                return _to_out(existing, created=False)

        log.info("subscriptions.followed", extra={"user_id": subscriber_id})
        return result

    def unfollow(self, subscriber_id: int, channel_id: int) -> bool:
        """
        Remove the ``subscriber → channel`` edge. Idempotent.

        :returns: ``True`` when an edge was removed.
        :rtype: bool
        """
        with self.rw_uow() as uow:
            subs: SubscriptionRepository = uow.subscriptions
            edge = subs.get_edge(subscriber_id, channel_id)
            if edge is None:
                return False
            subs.delete(edge)

        log.info("subscriptions.unfollowed", extra={"user_id": subscriber_id})
        return True

    def channel_profile(self, username: str | None, viewer_id: int | None) -> ChannelProfileOut:
        """
        Aggregate a channel's profile as seen by ``viewer_id``.

        :param username: Channel handle, case-insensitive.
        :type username: str | None
        :param viewer_id: Requesting user id (``None`` for anonymous).
        :type viewer_id: int | None
        :returns: Profile with follower/following counts and subscription flag.
        :rtype: ChannelProfileOut
        :raises ValidationError: When ``username`` is blank.
        :raises NotFoundError: When no user has that handle.
        """
        if not isinstance(username, str) or not username.strip():
            raise ValidationError("username is missing")

        with self.ro_uow() as uow:
            row = uow.subscriptions.channel_profile(username, viewer_id)

        if row is None:
            raise NotFoundError("Channel", username.strip().lower())
        return ChannelProfileOut(**row)
