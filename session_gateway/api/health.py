"""Health check endpoints."""
from flask import Blueprint

from .helpers import get_config

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Liveness: the gateway process is serving."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness: a provisioner endpoint is configured.

    The provisioner itself is not called; one round trip per client request
    is the only traffic the gateway generates.
    """
    if not get_config().provisioner_url:
        return ("provisioner not configured", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
