"""Tests for the development seed pipeline and its CLI."""

from __future__ import annotations

from chaitube.core.extensions import db
from chaitube.models.user import User
from chaitube.seeds import seed_data
from chaitube.services.subscriptions.service import SubscriptionService


class TestSeedData:
    def test_run_all_is_idempotent(self, app, session):
        """
        GIVEN an empty database
        WHEN the seed pipeline runs twice
        THEN the first run creates everything and the second finds it all.
        """
        first = seed_data.run_all(db)
        second = seed_data.run_all(db)

        assert first["users"] == {"created": 3, "existing": 0}
        assert first["subscriptions"] == {"created": 3, "existing": 0}
        assert second["users"] == {"created": 0, "existing": 3}
        assert second["subscriptions"] == {"created": 0, "existing": 3}

    def test_seeded_graph_matches_fixtures(self, app, session):
        seed_data.run_all(db)

        profile = SubscriptionService().channel_profile("alice", None)
        assert profile.subscribers_count == 2
        assert profile.channels_subscribed_to_count == 1


class TestSeedCli:
    def test_seed_run_prints_summary(self, app, session):
        result = app.test_cli_runner().invoke(args=["seed", "run"])

        assert result.exit_code == 0, result.output
        assert "Seed summary:" in result.output
        assert "users" in result.output
        assert "created= 3" in result.output

    def test_seed_run_lists_demo_logins(self, app, session):
        result = app.test_cli_runner().invoke(args=["seed", "run"])

        assert result.exit_code == 0, result.output
        assert "alice / wonderland123" in result.output

    def test_fresh_is_refused_in_production(self, app, session, monkeypatch):
        """
        GIVEN an app configured like a production deployment
        WHEN ``flask seed fresh --yes`` runs
        THEN it exits with a usage error and the tables are kept.
        """
        seed_data.run_all(db)
        monkeypatch.setitem(app.config, "TESTING", False)
        monkeypatch.setitem(app.config, "DEBUG", False)

        result = app.test_cli_runner().invoke(args=["seed", "fresh", "--yes"])

        assert result.exit_code == 2
        assert "only runs with DEBUG or TESTING" in result.output
        assert session.query(User).filter_by(username="alice").count() == 1
