"""Unit tests for configuration loading."""

import os
from pathlib import Path

import pytest

from dscommerce.config import (
    CommerceConfig,
    ConfigError,
    SecurityConfig,
    load_config,
    load_config_file,
    load_config_from_env,
    validate_config,
)

PLAIN_ENV_NAMES = ("DATABASE_URL", "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE", "ENVIRONMENT")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove DSCOMMERCE_* and related variables set for the test session."""
    for name in list(os.environ):
        if name.startswith("DSCOMMERCE_") or name in PLAIN_ENV_NAMES:
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    def test_default_values(self):
        config = CommerceConfig()

        assert config.database.url.startswith("sqlite+aiosqlite")
        assert config.security.client_id == "myclientid"
        assert config.security.jwt_algorithm == "HS256"
        assert config.api.default_page_size == 12
        assert config.is_production is False

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ConfigError):
            CommerceConfig.from_dict({"database": {"host": "localhost"}})

    @pytest.mark.parametrize(
        "data",
        [
            {"database": {"pool_size": "abc"}},
            {"database": {"echo": "sometimes"}},
            {"security": {"bcrypt_rounds": 4.5}},
            {"api": {"cors_origins": "https://shop.example.com"}},
            {"logging": {"level": 10}},
            {"sentry": "disabled"},
        ],
    )
    def test_from_dict_rejects_wrong_types(self, data):
        with pytest.raises(ConfigError):
            CommerceConfig.from_dict(data)

    def test_from_dict_converts_expanded_strings(self, monkeypatch):
        monkeypatch.setenv("POOL", "8")

        config = CommerceConfig.from_dict(
            {"database": {"pool_size": "${POOL}", "echo": "true"}, "sentry": {"dsn": None}}
        )

        assert config.database.pool_size == 8
        assert config.database.echo is True
        assert config.sentry.dsn is None


class TestConfigFiles:
    def test_yaml_rc_file(self, tmp_path: Path, clean_env):
        clean_env.setenv("DB_PASSWORD", "s3cret")
        (tmp_path / ".dscommercerc").write_text(
            "database:\n"
            "  url: postgresql+asyncpg://shop:${DB_PASSWORD}@db/shop\n"
            "logging:\n"
            "  format: json\n"
        )

        config = load_config(search_path=tmp_path)

        assert config.database.url == "postgresql+asyncpg://shop:s3cret@db/shop"
        assert config.logging.format == "json"

    def test_toml_file(self, tmp_path: Path, clean_env):
        (tmp_path / "dscommerce.toml").write_text(
            '[api]\ncors_origins = ["https://shop.example.com"]\nmax_page_size = 50\n'
        )

        config = load_config(search_path=tmp_path)

        assert config.api.cors_origins == ["https://shop.example.com"]
        assert config.api.max_page_size == 50

    def test_config_found_in_parent_directory(self, tmp_path: Path, clean_env):
        (tmp_path / "dscommerce.toml").write_text('[security]\nclient_id = "webapp"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        config = load_config(search_path=nested)

        assert config.security.client_id == "webapp"

    def test_config_path_from_env_skips_search(self, tmp_path: Path, clean_env):
        (tmp_path / "dscommerce.toml").write_text('[security]\nclient_id = "searched"\n')
        explicit = tmp_path / "prod.yaml"
        explicit.write_text("security:\n  client_id: explicit\n")
        clean_env.setenv("DSCOMMERCE_CONFIG", str(explicit))

        config = load_config(search_path=tmp_path)

        assert config.security.client_id == "explicit"

    def test_non_mapping_yaml_rejected(self, tmp_path: Path):
        path = tmp_path / ".dscommercerc"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError):
            load_config_file(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config_file(tmp_path / "nope.toml")


class TestEnvironment:
    def test_env_overrides_file(self, tmp_path: Path, clean_env):
        (tmp_path / "dscommerce.toml").write_text('[security]\njwt_ttl_seconds = 60\n')
        clean_env.setenv("DSCOMMERCE_JWT_TTL_SECONDS", "120")
        clean_env.setenv("DATABASE_URL", "postgresql://shop@db/shop")

        config = load_config(search_path=tmp_path)

        assert config.security.jwt_ttl_seconds == 120
        assert config.database.url == "postgresql://shop@db/shop"

    def test_invalid_int_raises(self, clean_env):
        clean_env.setenv("DSCOMMERCE_BCRYPT_ROUNDS", "many")

        with pytest.raises(ConfigError, match="DSCOMMERCE_BCRYPT_ROUNDS"):
            load_config_from_env()

    def test_invalid_sample_rate_raises(self, clean_env):
        clean_env.setenv("SENTRY_TRACES_SAMPLE_RATE", "often")

        with pytest.raises(ConfigError, match="SENTRY_TRACES_SAMPLE_RATE"):
            load_config_from_env()

    def test_cors_origins_split(self, clean_env):
        clean_env.setenv("DSCOMMERCE_CORS_ORIGINS", "https://a.example.com, https://b.example.com")

        env = load_config_from_env()

        assert env["api"]["cors_origins"] == ["https://a.example.com", "https://b.example.com"]


class TestValidateConfig:
    def test_defaults_are_clean(self):
        assert validate_config(CommerceConfig()) == []

    def test_short_secret_and_bad_rounds(self):
        config = CommerceConfig(security=SecurityConfig(jwt_secret="short", bcrypt_rounds=2))

        warnings = validate_config(config)

        assert any("jwt_secret" in w for w in warnings)
        assert any("bcrypt_rounds" in w for w in warnings)

    def test_sqlite_in_production(self):
        config = CommerceConfig.from_dict({"api": {"environment": "production"}})

        warnings = validate_config(config)

        assert any("SQLite" in w for w in warnings)
        assert any("development default" in w for w in warnings)
