"""Subscription edges of the social graph."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from chaitube.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin


class Subscription(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Directed edge "``subscriber`` follows ``channel``".

    ``(subscriber_id, channel_id)`` is a natural key: following a channel
    twice never produces a second row, so counts equal distinct followers.

    Fields
    ------
    subscriber_id : int
        User doing the following.
    channel_id : int
        User being followed.
    created_at : datetime
        When the edge was created (from mixin).
    """

    __tablename__ = "subscriptions"
    __repr_fields__ = ("id", "subscriber_id", "channel_id")

    subscriber_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "subscriber_id", "channel_id", name="uq_subscriptions_subscriber_id_channel_id"
        ),
        CheckConstraint("subscriber_id <> channel_id", name="not_self"),
        Index("ix_subscriptions_channel_id", "channel_id"),
        Index("ix_subscriptions_subscriber_id", "subscriber_id"),
    )
