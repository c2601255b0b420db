import pytest

from session_gateway.config import settings
from session_gateway.config.settings import AppConfig, load_settings

ENV_VARS = [
    "DEMO_MODE", "PROVISIONER_URL", "PROVISIONER_TIMEOUT", "PROVISIONER_RETRIES",
    "PROVISIONER_RETRY_BACKOFF", "PROVISIONER_POOL_SIZE", "APIUS_REALM",
    "SESSION_COOKIE_NAME", "SESSION_COOKIE_PATH", "SESSION_COOKIE_MAX_AGE",
    "SESSION_COOKIE_SECURE", "SESSION_COOKIE_HTTPONLY", "SESSION_COOKIE_SAMESITE",
    "ATTRIBUTES_FEED_TITLE", "TRUSTED_PROXY_IPS", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings, "SECRETS_DIR", str(tmp_path))


def test_production_requires_provisioner_url(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "false")
    with pytest.raises(RuntimeError, match="PROVISIONER_URL"):
        load_settings()


def test_demo_mode_defaults(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    cfg = load_settings()
    assert cfg.demo_mode is True
    assert cfg.provisioner_url == "http://localhost:8080/openam"
    assert cfg.cookie_secure is False
    assert cfg.provisioner_retries == 0


def test_production_values_from_env(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.setenv("PROVISIONER_URL", "https://sso.example.org/openam/")
    monkeypatch.setenv("PROVISIONER_TIMEOUT", "2.5")
    monkeypatch.setenv("PROVISIONER_RETRIES", "2")
    monkeypatch.setenv("APIUS_REALM", "apius")
    monkeypatch.setenv("SESSION_COOKIE_NAME", "SSO")
    monkeypatch.setenv("SESSION_COOKIE_MAX_AGE", "3600")
    monkeypatch.setenv("SESSION_COOKIE_SAMESITE", "Strict")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = load_settings()

    assert cfg.provisioner_url == "https://sso.example.org/openam"
    assert cfg.provisioner_timeout == 2.5
    assert cfg.provisioner_retries == 2
    assert cfg.challenge_realm == "apius"
    assert cfg.cookie_name == "SSO"
    assert cfg.cookie_max_age == 3600
    assert cfg.cookie_samesite == "Strict"
    assert cfg.cookie_secure is True
    assert cfg.log_level == "DEBUG"


def test_provisioner_url_reads_from_run_secrets(monkeypatch, tmp_path):
    (tmp_path / "provisioner_url").write_text("https://secret-host/openam\n")
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.setenv("PROVISIONER_URL", "https://env-host/openam")

    assert load_settings().provisioner_url == "https://secret-host/openam"


def test_empty_secret_file_falls_back_to_env(monkeypatch, tmp_path):
    (tmp_path / "provisioner_url").write_text("  \n")
    monkeypatch.setenv("PROVISIONER_URL", "https://env-host/openam")
    assert settings._load_secret_from_file("provisioner_url", "PROVISIONER_URL") == "https://env-host/openam"


def test_invalid_integer_env_raises(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("PROVISIONER_RETRIES", "lots")
    with pytest.raises(RuntimeError, match="PROVISIONER_RETRIES"):
        load_settings()


def test_invalid_float_env_raises(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("PROVISIONER_TIMEOUT", "soon")
    with pytest.raises(RuntimeError, match="PROVISIONER_TIMEOUT"):
        load_settings()


def test_secure_cookie_override_in_demo_mode(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("SESSION_COOKIE_SECURE", "yes")
    assert load_settings().cookie_secure is True


def test_invalid_samesite_rejected():
    with pytest.raises(ValueError, match="cookie_samesite"):
        AppConfig(cookie_samesite="sometimes")


def test_negative_retries_rejected():
    with pytest.raises(ValueError):
        AppConfig(provisioner_retries=-1)


def test_invalid_cookie_max_age_raises(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("SESSION_COOKIE_MAX_AGE", "an hour")
    with pytest.raises(RuntimeError, match="SESSION_COOKIE_MAX_AGE"):
        load_settings()


def test_cookie_max_age_unset_is_session_cookie(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    assert load_settings().cookie_max_age is None
