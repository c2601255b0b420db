"""Session REST resource.

Public contract:

    POST   /session             username/password (form, query, JSON or HTTP Basic)
                                -> 201 + cookie "<name>=token=<value>"
    PUT    /session             Authorization: APIUS token=<value>
                                -> 200, 401 (+ challenge), 400 without credential
    DELETE /session             Authorization: APIUS token=<value> -> 204
    GET    /session/attributes  attributes + roles (XML, Atom or JSON)
    GET    /session/identity    {"identifier": "<uid>"}
    GET    /session/authorization
                                policy check for X-Original-URI / X-Original-Method
                                (or ?uri=&method=) -> 200, 401, 403

The cookie only stores the token client-side. Every other call must present
the token in the Authorization header.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Blueprint, Response, jsonify, make_response, request

from session_gateway.core import documents
from session_gateway.core.errors import bad_request, unauthorized
from session_gateway.core.models import Credentials
from .decorators import (
    authorize_request,
    current_session_token,
    extract_session_token,
    require_session_token,
)
from .helpers import get_config, get_proxy

logger = logging.getLogger(__name__)

bp = Blueprint("session", __name__)

JSON_MIMETYPE = "application/json"
ATTRIBUTE_MIMETYPES = [documents.XML_MIMETYPE, documents.ATOM_MIMETYPE, JSON_MIMETYPE]


# ─────────────────────────────────────────────────────────────────────────────
# Request helpers
# ─────────────────────────────────────────────────────────────────────────────
def _credentials_from_mapping(values) -> Optional[Credentials]:
    if "username" not in values or "password" not in values:
        return None
    username, password = values.get("username"), values.get("password")
    if not isinstance(username, str) or not isinstance(password, str):
        return Credentials(None, None)
    return Credentials(username, password)


def extract_credentials() -> Optional[Credentials]:
    """Find username/password on the request.

    Looked up in order: form body or query string, JSON body, HTTP Basic.
    """
    credentials = _credentials_from_mapping(request.values)
    if credentials is not None:
        return credentials

    if request.is_json:
        payload = request.get_json(silent=True)
        if isinstance(payload, dict):
            credentials = _credentials_from_mapping(payload)
            if credentials is not None:
                return credentials

    auth = request.authorization
    if auth is not None and auth.type == "basic":
        return Credentials(auth.username, auth.password)

    return None


def _cookie_path() -> str:
    cfg = get_config()
    return cfg.cookie_path or request.script_root + "/session"


def _set_session_cookie(response: Response, token: str) -> None:
    cfg = get_config()
    response.set_cookie(
        cfg.cookie_name,
        f"token={token}",
        max_age=cfg.cookie_max_age,
        path=_cookie_path(),
        secure=cfg.cookie_secure,
        httponly=cfg.cookie_httponly,
        samesite=cfg.cookie_samesite,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Handlers
# ─────────────────────────────────────────────────────────────────────────────
def create_session():
    """Create a session and hand its token back in a cookie."""
    outcome = get_proxy().create_session(extract_credentials())
    if not outcome.ok:
        raise outcome.error

    response = make_response("", 201)
    _set_session_cookie(response, outcome.value)
    return response


@require_session_token
def validate_session():
    """Validate the token; the provisioner refreshes its idle timeout."""
    outcome = get_proxy().validate(current_session_token())
    if not outcome.ok:
        raise outcome.error
    if not outcome.value:
        raise unauthorized()
    return jsonify({"valid": True}), 200


@require_session_token
def delete_session():
    """Invalidate the session and expire the client's cookie."""
    outcome = get_proxy().logout(current_session_token())
    if not outcome.ok:
        raise outcome.error

    response = make_response("", 204)
    response.delete_cookie(get_config().cookie_name, path=_cookie_path())
    return response


@require_session_token
def get_session_attributes():
    """Return attributes and roles in the negotiated representation."""
    outcome = get_proxy().get_attributes(current_session_token())
    if not outcome.ok:
        raise outcome.error

    bundle = outcome.value
    mimetype = request.accept_mimetypes.best_match(ATTRIBUTE_MIMETYPES, default=documents.XML_MIMETYPE)
    if mimetype == JSON_MIMETYPE:
        return jsonify(bundle.to_dict()), 200
    body = documents.render(bundle, mimetype, title=get_config().attributes_feed_title)
    return Response(body, status=200, mimetype=mimetype)


@require_session_token
def get_session_identity():
    """Return the username behind the token."""
    outcome = get_proxy().get_identifier(current_session_token())
    if not outcome.ok:
        raise outcome.error
    return jsonify({"identifier": outcome.value}), 200


def check_authorization():
    """Policy check for a resource on behalf of a fronting proxy."""
    resource_uri = request.headers.get("X-Original-URI") or request.args.get("uri")
    method = request.headers.get("X-Original-Method") or request.args.get("method") or "GET"
    if not resource_uri:
        raise bad_request("Resource URI required (X-Original-URI header or uri parameter)")

    authorize_request(extract_session_token(), resource_uri, method.upper())
    return jsonify({"authorized": True}), 200


# ─────────────────────────────────────────────────────────────────────────────
# Route table
# ─────────────────────────────────────────────────────────────────────────────
ROUTES = [
    ("POST", "/session", create_session),
    ("PUT", "/session", validate_session),
    ("DELETE", "/session", delete_session),
    ("GET", "/session/attributes", get_session_attributes),
    ("GET", "/session/identity", get_session_identity),
    ("GET", "/session/authorization", check_authorization),
]

for _method, _rule, _handler in ROUTES:
    bp.add_url_rule(_rule, endpoint=_handler.__name__, view_func=_handler, methods=[_method])
