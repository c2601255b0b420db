"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SECRETS_DIR = "/run/secrets"
VALID_SAMESITE = {"Strict", "Lax", "None"}


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path(SECRETS_DIR) / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from %s", secret_name, SECRETS_DIR)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read %s/%s: %s", SECRETS_DIR, secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_bool(var_name: str, default: bool) -> bool:
    raw = os.environ.get(var_name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(var_name: str, default: int) -> int:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"Environment variable {var_name} must be an integer, got {raw!r}") from e


def _env_optional_int(var_name: str) -> Optional[int]:
    """Integer setting that stays None when unset."""
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return None
    return _env_int(var_name, 0)


def _env_float(var_name: str, default: float) -> float:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got {raw!r}") from e


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool = False

    # Provisioner
    provisioner_url: str = ""
    provisioner_timeout: float = 5.0
    provisioner_retries: int = 0
    provisioner_retry_backoff: float = 0.2
    provisioner_pool_size: int = 10

    # APIUS challenge
    challenge_realm: Optional[str] = None

    # Session cookie (holds token=<value>, never read back by the gateway)
    cookie_name: str = "APIUS_SESSION"
    cookie_path: Optional[str] = None
    cookie_max_age: Optional[int] = None
    cookie_secure: bool = True
    cookie_httponly: bool = True
    cookie_samesite: Optional[str] = "Lax"

    # Attributes document
    attributes_feed_title: str = "Session Attributes"

    # Flask / proxy
    trusted_proxy_ips: str = "127.0.0.1/32,::1/128"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.cookie_samesite is not None and self.cookie_samesite not in VALID_SAMESITE:
            raise ValueError(f"cookie_samesite must be one of {sorted(VALID_SAMESITE)}, got {self.cookie_samesite!r}")
        if self.provisioner_retries < 0:
            raise ValueError("provisioner_retries must not be negative")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = _env_bool("DEMO_MODE", False)

    # Provisioner URL may embed credentials for a fronting proxy, so it is
    # also accepted as a Docker secret.
    provisioner_url = _load_secret_from_file("provisioner_url", "PROVISIONER_URL")
    if not provisioner_url:
        if not demo_mode:
            raise RuntimeError("PROVISIONER_URL is required when DEMO_MODE is false.")
        provisioner_url = "http://localhost:8080/openam"
        logger.warning("[demo-mode] Using default PROVISIONER_URL %s", provisioner_url)

    cookie_samesite = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax").strip() or None

    cfg = AppConfig(
        demo_mode=demo_mode,
        provisioner_url=provisioner_url.rstrip("/"),
        provisioner_timeout=_env_float("PROVISIONER_TIMEOUT", 5.0),
        provisioner_retries=_env_int("PROVISIONER_RETRIES", 0),
        provisioner_retry_backoff=_env_float("PROVISIONER_RETRY_BACKOFF", 0.2),
        provisioner_pool_size=_env_int("PROVISIONER_POOL_SIZE", 10),
        challenge_realm=os.environ.get("APIUS_REALM", "").strip() or None,
        cookie_name=os.environ.get("SESSION_COOKIE_NAME", "APIUS_SESSION").strip(),
        cookie_path=os.environ.get("SESSION_COOKIE_PATH", "").strip() or None,
        cookie_max_age=_env_optional_int("SESSION_COOKIE_MAX_AGE"),
        # Secure cookies need HTTPS; demo mode runs on plain http://localhost
        cookie_secure=_env_bool("SESSION_COOKIE_SECURE", not demo_mode),
        cookie_httponly=_env_bool("SESSION_COOKIE_HTTPONLY", True),
        cookie_samesite=cookie_samesite,
        attributes_feed_title=os.environ.get("ATTRIBUTES_FEED_TITLE", "Session Attributes"),
        trusted_proxy_ips=os.environ.get("TRUSTED_PROXY_IPS", "127.0.0.1/32,::1/128"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    logger.info(
        "Mode=%s; provisioner=%s; timeout=%ss; retries=%s",
        mode_label, cfg.provisioner_url, cfg.provisioner_timeout, cfg.provisioner_retries,
    )
    return cfg
