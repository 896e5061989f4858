"""Unit tests for token configuration validation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from chaitube.core.config import ProductionConfig, TestingConfig
from chaitube.factory import create_app
from chaitube.services.auth.dto import AuthTokenConfig


class TestAuthTokenConfig:
    def test_from_mapping_reads_lifetimes(self):
        cfg = AuthTokenConfig.from_mapping(
            {
                "ACCESS_TOKEN_SECRET": "a" * 32,
                "REFRESH_TOKEN_SECRET": "r" * 32,
                "ACCESS_TOKEN_EXPIRES_MINUTES": "5",
                "REFRESH_TOKEN_EXPIRES_DAYS": 2,
            }
        )
        assert cfg.access_expires == timedelta(minutes=5)
        assert cfg.refresh_expires == timedelta(days=2)
        assert cfg.algorithm == "HS256"

    def test_identical_secrets_are_rejected(self):
        with pytest.raises(ValueError, match="must differ"):
            AuthTokenConfig(access_secret="same", refresh_secret="same")

    @pytest.mark.parametrize(("access", "refresh"), [("", "r"), ("a", ""), ("", "")])
    def test_empty_secrets_are_rejected(self, access, refresh):
        with pytest.raises(ValueError, match="required"):
            AuthTokenConfig(access_secret=access, refresh_secret=refresh)

    def test_app_refuses_to_start_with_shared_secret(self):
        """
        GIVEN a configuration reusing one secret for both token kinds
        WHEN the application is created
        THEN startup fails instead of the first login.
        """

        class SharedSecretConfig(TestingConfig):
            REFRESH_TOKEN_SECRET = TestingConfig.ACCESS_TOKEN_SECRET

        with pytest.raises(ValueError):
            create_app(SharedSecretConfig, instance_relative_config=False)


class _IsolatedProductionConfig(ProductionConfig):
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}
    SECRET_KEY = "prod-session-key"


class TestProductionSecrets:
    def test_production_refuses_unset_secrets(self):
        """
        GIVEN a production deployment whose secret variables are unset
        WHEN the application is created
        THEN startup fails instead of signing with a built-in value.
        """

        class UnsetSecretsConfig(_IsolatedProductionConfig):
            ACCESS_TOKEN_SECRET = ""
            REFRESH_TOKEN_SECRET = ""

        with pytest.raises(ValueError, match="required"):
            create_app(UnsetSecretsConfig, instance_relative_config=False)

    def test_production_refuses_development_fallbacks(self):
        class FallbackSecretsConfig(_IsolatedProductionConfig):
            ACCESS_TOKEN_SECRET = "CHANGE_ME_ACCESS"
            REFRESH_TOKEN_SECRET = "CHANGE_ME_REFRESH"

        with pytest.raises(ValueError, match="supplied through the environment"):
            create_app(FallbackSecretsConfig, instance_relative_config=False)

    def test_production_boots_with_supplied_secrets(self):
        class SuppliedSecretsConfig(_IsolatedProductionConfig):
            ACCESS_TOKEN_SECRET = "prod-access-secret-0123456789abcdef"
            REFRESH_TOKEN_SECRET = "prod-refresh-secret-0123456789abcdef"

        app = create_app(SuppliedSecretsConfig, instance_relative_config=False)
        assert app.config["ACCESS_TOKEN_SECRET"].startswith("prod-access")

    def test_production_has_no_builtin_secret_fallbacks(self):
        for name in ("ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET"):
            value = getattr(ProductionConfig, name)
            assert not value.startswith("CHANGE_ME")
