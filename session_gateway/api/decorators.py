"""
Flask decorators for APIUS session authentication and authorization.

``require_session_token`` pulls the session token out of an
``Authorization: APIUS token=<value>`` header and leaves it on ``g`` for the
view. ``require_authorization`` guards any resource by asking the
provisioner whether the presented token may perform the request's method on
the request's URL.

The gateway's own routes use ``require_session_token`` and, for
``GET /session/authorization``, ``authorize_request``. ``require_authorization``
is exported for host applications that register the session blueprint next
to their own views and want those views policy-checked.
"""

import logging
from functools import wraps
from typing import Optional

from flask import g, request

from session_gateway.core.errors import bad_request, unauthorized
from session_gateway.core.models import token_fingerprint
from session_gateway.core.session_proxy import MISSING_TOKEN_MESSAGE
from .helpers import get_codec, get_proxy

logger = logging.getLogger(__name__)


def extract_session_token() -> Optional[str]:
    """Decode the APIUS token of the current request, if any."""
    challenge = get_codec().parse_authorization(request.headers.get("Authorization"))
    return challenge.token if challenge else None


def require_session_token(fn):
    """
    Decorator requiring an APIUS credential on the request.

    Raises:
        400 Bad Request: No APIUS Authorization header (or an empty token)

    Example:
        @bp.route("/session", methods=["PUT"])
        @require_session_token
        def validate_session():
            token = current_session_token()
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = extract_session_token()
        if not token:
            logger.warning("Session request without APIUS credential on %s %s", request.method, request.path)
            raise bad_request(MISSING_TOKEN_MESSAGE)
        g.session_token = token
        return fn(*args, **kwargs)

    return wrapper


def authorize_request(token: Optional[str], resource_uri: str, method: str) -> None:
    """Ask the provisioner whether ``token`` may call ``method`` on ``resource_uri``.

    Raises:
        GatewayError: 401 when the token is absent or rejected, 403 when the
            provisioner denies the action, or the classified provisioner failure
    """
    outcome = get_proxy().is_authorized(token, resource_uri, method)
    if not outcome.ok:
        raise outcome.error
    if outcome.value:
        return
    if not token:
        raise unauthorized(MISSING_TOKEN_MESSAGE)
    logger.info("Denied %s %s for %s", method, resource_uri, token_fingerprint(token))
    raise unauthorized("Not authorized for this resource", status_code=403)


def require_authorization(fn):
    """
    Decorator guarding a resource with a provisioner policy check.

    The request's full URL and HTTP method are the resource and action of
    the check. The token, when valid, is left on ``g.session_token``.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = extract_session_token()
        authorize_request(token, request.url, request.method)
        g.session_token = token
        return fn(*args, **kwargs)

    return wrapper


def current_session_token() -> Optional[str]:
    """
    Get the token stored by one of the decorators above.

    Returns:
        str: Session token, or None outside a decorated view
    """
    return getattr(g, "session_token", None)
