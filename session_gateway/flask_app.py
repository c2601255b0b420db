"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with its blueprints, middleware and collaborators.
Collaborators are passed explicitly; there is no container.
"""
from __future__ import annotations
import ipaddress
import logging
from typing import Optional

from flask import Flask, abort, request
from werkzeug.middleware.proxy_fix import ProxyFix

from session_gateway.config import AppConfig, load_settings
from session_gateway.core.challenge import ChallengeCodec
from session_gateway.core.provisioner import ProvisionerClient, client_from_config
from session_gateway.core.session_proxy import SessionProxy
from session_gateway.logging_config import configure_logging

logger = logging.getLogger(__name__)

# Headers ProxyFix acts on; only peers in TRUSTED_PROXY_IPS may send them
FORWARDED_HEADERS = ("X-Forwarded-For", "X-Forwarded-Proto", "X-Forwarded-Host")


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(
    config: Optional[AppConfig] = None,
    client: Optional[ProvisionerClient] = None,
) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Settings; loaded from the environment when omitted
        client: Provisioner client; built from ``config`` when omitted
    """
    cfg = config or load_settings()
    configure_logging(cfg.log_level)

    app = Flask(__name__)

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    trusted_proxy_networks = _parse_networks(cfg.trusted_proxy_ips)
    app.config["TRUSTED_PROXY_NETWORKS"] = trusted_proxy_networks

    # Collaborators shared by all requests: the client's connection pool,
    # the stateless proxy and the codec.
    provisioner_client = client or client_from_config(cfg)
    app.extensions["session_proxy"] = SessionProxy(provisioner_client)
    app.extensions["challenge_codec"] = ChallengeCodec(cfg.challenge_realm)

    # Register blueprints
    from session_gateway.api import errors, health, session

    app.register_blueprint(health.bp)
    app.register_blueprint(session.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Register middleware/before_request handlers
    _register_middleware(app, trusted_proxy_networks)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    logger.info("Mode=%s; session API registered at /session; provisioner=%s", mode_label, provisioner_client.base_url)
    if cfg.demo_mode and not cfg.cookie_secure:
        logger.warning("Demo mode active: session cookie issued without Secure flag")

    return app


def _register_middleware(app: Flask, trusted_proxy_networks: list):
    """Register before_request middleware."""

    @app.before_request
    def enforce_proxy_headers() -> None:
        """Validate proxy headers from trusted sources only."""
        forwarded = any(request.headers.get(name) for name in FORWARDED_HEADERS)
        original_remote = request.environ.get("werkzeug.proxy_fix.orig", {}).get("REMOTE_ADDR")
        if forwarded and original_remote:
            try:
                address = ipaddress.ip_address(original_remote)
                if not any(address in network for network in trusted_proxy_networks):
                    abort(400, description="Untrusted proxy")
            except ValueError:
                abort(400, description="Invalid proxy address")

        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for and "," in forwarded_for:
            abort(400, description="Multiple forwarded clients not permitted")


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions
# ─────────────────────────────────────────────────────────────────────────────
def _parse_networks(raw: str) -> list:
    """Parse a comma-separated list of CIDRs, skipping invalid entries."""
    networks = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            logger.warning("Ignoring invalid TRUSTED_PROXY_IPS entry %r", entry)
            continue
    return networks
