"""Idempotent database seed helpers for local development environments."""

from __future__ import annotations

import logging
from typing import Any, TypeVar, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select
from sqlalchemy.orm import Session

from chaitube.models.subscription import Subscription
from chaitube.models.user import User

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

USER_FIXTURES: list[dict[str, str | None]] = [
    {
        "email": "alice@example.com",
        "username": "alice",
        "full_name": "Alice Liddell",
        "password": "wonderland123",
        "avatar_url": "/media/seed-alice.png",
        "cover_url": "/media/seed-alice-cover.png",
    },
    {
        "email": "bob@example.com",
        "username": "bob",
        "full_name": "Bob Builder",
        "password": "canwefixit1",
        "avatar_url": "/media/seed-bob.png",
        "cover_url": None,
    },
    {
        "email": "carol@example.com",
        "username": "carol",
        "full_name": "Carol Danvers",
        "password": "higherfurther",
        "avatar_url": "/media/seed-carol.png",
        "cover_url": None,
    },
]

# (subscriber, channel) pairs by username
SUBSCRIPTION_FIXTURES: list[tuple[str, str]] = [
    ("bob", "alice"),
    ("carol", "alice"),
    ("alice", "bob"),
]


def _session(database: SQLAlchemy) -> Session:
    """Return the current SQLAlchemy session."""
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    """Update summary counters for the given table."""
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    if created:
        entry["created"] += 1
    else:
        entry["existing"] += 1


def _get_or_create(
    session: Session,
    model: type[T],
    *,
    defaults: dict[str, Any] | None = None,
    **filters: Any,
) -> tuple[T, bool]:
    """Fetch ``model`` by ``filters`` or create it using ``defaults``."""
    instance = session.execute(select(model).filter_by(**filters)).scalar_one_or_none()
    if instance is not None:
        return instance, False
    params = dict(defaults or {})
    params.update(filters)
    instance = cast(T, model(**params))
    session.add(instance)
    return instance, True


def seed_users(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create the demo channels; existing users keep their password."""
    if verbose:
        LOGGER.info("Seeding users...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    with session.begin():
        for fixture in USER_FIXTURES:
            email = str(fixture["email"]).strip().lower()
            user = session.execute(select(User).filter_by(email=email)).scalar_one_or_none()
            created = False
            if user is None:
                user = User(
                    email=email,
                    username=str(fixture["username"]),
                    full_name=str(fixture["full_name"]),
                )
                user.password = str(fixture["password"])
                session.add(user)
                created = True
            user.avatar_url = fixture.get("avatar_url")
            user.cover_url = fixture.get("cover_url")
            session.flush()
            _touch(summary, "users", created)

    return summary


def seed_subscriptions(
    database: SQLAlchemy, *, verbose: bool = False
) -> dict[str, dict[str, int]]:
    """Create the demo subscription edges between seeded users."""
    if verbose:
        LOGGER.info("Seeding subscriptions...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    with session.begin():
        users = {
            user.username: user
            for user in session.execute(select(User)).scalars()
        }
        for subscriber_name, channel_name in SUBSCRIPTION_FIXTURES:
            subscriber = users.get(subscriber_name)
            channel = users.get(channel_name)
            if subscriber is None or channel is None:
                raise RuntimeError(
                    f"Users {subscriber_name!r}/{channel_name!r} missing while creating edge"
                )
            _, created = _get_or_create(
                session,
                Subscription,
                subscriber_id=subscriber.id,
                channel_id=channel.id,
            )
            session.flush()
            _touch(summary, "subscriptions", created)

    return summary


def run_all(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Run all seeders in the correct foreign-key order."""
    if verbose:
        LOGGER.info("Running full seed pipeline...")
    combined: dict[str, dict[str, int]] = {}
    for func in (seed_users, seed_subscriptions):
        result = func(database, verbose=verbose)
        for table, counters in result.items():
            entry = combined.setdefault(table, {"created": 0, "existing": 0})
            entry["created"] += counters.get("created", 0)
            entry["existing"] += counters.get("existing", 0)
    return combined


__all__ = [
    "USER_FIXTURES",
    "SUBSCRIPTION_FIXTURES",
    "seed_users",
    "seed_subscriptions",
    "run_all",
]
