from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from courseflow.core.config import AppEnv, Settings, load_settings

_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "PORT",
    "DATABASE_URL",
    "REDIS_URL",
    "DISPLAY_TIMEZONE",
    "CALENDAR_MONTHS",
    "OUTLINE_CACHE_TTL",
    "JWT_PUBLIC_KEY",
)


def _public_pem(curve: ec.EllipticCurve | None = None) -> str:
    key = ec.generate_private_key(curve or ec.SECP256R1()).public_key()
    return key.public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


# ---- valid values ----


def test_load_settings_defaults() -> None:
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8000
    assert settings.database_url is None
    assert settings.redis_url is None
    assert settings.display_timezone == "UTC"
    assert settings.calendar_months == 6
    assert settings.outline_cache_ttl == 300
    assert settings.jwt_public_key is None


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    pem = _public_pem()
    monkeypatch.setenv("JWT_PUBLIC_KEY", pem)
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "yes")
    monkeypatch.setenv("DISPLAY_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("CALENDAR_MONTHS", "12")
    monkeypatch.setenv("OUTLINE_CACHE_TTL", "0")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.tz == ZoneInfo("Europe/Berlin")
    assert settings.calendar_months == 12
    assert settings.outline_cache_ttl == 0
    assert settings.redis_url == "redis://cache:6379/0"
    assert settings.jwt_public_key == pem.strip()


def test_load_settings_normalizes_case_and_whitespace(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "  TEST ")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "debug"


def test_blank_urls_are_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "   ")
    assert load_settings().database_url is None


def test_jwt_public_key_accepts_escaped_newlines(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    pem = _public_pem().strip()
    monkeypatch.setenv("JWT_PUBLIC_KEY", pem.replace("\n", "\\n"))
    assert load_settings().jwt_public_key == pem


# ---- invalid values ----


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("APP_ENV", "staging", "APP_ENV must be dev|test|prod"),
        ("APP_ENV", "", "APP_ENV must be dev|test|prod"),
        ("LOG_LEVEL", "verbose", "LOG_LEVEL must be debug|info|warning|error"),
        ("LOG_JSON", "maybe", "LOG_JSON must be true|false"),
        ("PORT", "http", "PORT must be an integer"),
        ("CALENDAR_MONTHS", "0", "CALENDAR_MONTHS must be >= 1"),
        ("OUTLINE_CACHE_TTL", "-5", "OUTLINE_CACHE_TTL must be >= 0"),
        ("DISPLAY_TIMEZONE", "Mars/Olympus", "DISPLAY_TIMEZONE must be an IANA"),
        ("JWT_PUBLIC_KEY", "not a pem", "JWT_PUBLIC_KEY must be a PEM-encoded"),
    ],
)
def test_load_settings_rejects_invalid(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str, message: str
) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=message.replace("|", r"\|")):
        load_settings()


def test_prod_requires_jwt_public_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    with pytest.raises(ValueError, match="JWT_PUBLIC_KEY is required when APP_ENV=prod"):
        load_settings()


def test_jwt_public_key_must_be_p256(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_PUBLIC_KEY", _public_pem(ec.SECP384R1()))
    with pytest.raises(ValueError, match="JWT_PUBLIC_KEY must be a P-256 EC key"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
    )


def test_settings_env_flags() -> None:
    assert _make_settings("dev").is_dev is True
    assert _make_settings("test").is_test is True
    prod = _make_settings("prod")
    assert (prod.is_dev, prod.is_test, prod.is_prod) == (False, False, True)


def test_settings_default_timezone() -> None:
    assert _make_settings().tz == ZoneInfo("UTC")


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]
