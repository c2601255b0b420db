"""Session proxy: the public session contract on top of the provisioner.

Maps each session operation onto one provisioner call, interprets the reply
and returns a :class:`ProvisionerOutcome`. Failures travel back as the
outcome's ``error`` rather than as exceptions.

Lifecycle per token::

    UNAUTHENTICATED --create_session--> AUTHENTICATED --logout--> INVALIDATED

``validate``, ``is_authorized``, ``get_attributes`` and ``get_identifier``
are queries and do not move a token between states.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional

from .errors import (
    GatewayError,
    ProtocolError,
    ProvisionerTransportError,
    bad_request,
    normalize_failure,
)
from .models import (
    Credentials,
    ProvisionerOperation,
    ProvisionerOutcome,
    SessionState,
    token_fingerprint,
)
from .provisioner.client import ProvisionerClient, ProvisionerResponse
from . import response_parser

logger = logging.getLogger(__name__)

MISSING_TOKEN_MESSAGE = "APIUS session token required"


class SessionProxy:
    """Stateless mediator between the REST layer and the provisioner.

    Holds only its collaborators. Tokens, credentials and parsed attributes
    stay in local variables of the call that handles them.

    Args:
        client: Provisioner HTTP client (shared connection pool)
    """

    def __init__(self, client: ProvisionerClient):
        self.client = client

    # ─────────────────────────────────────────────────────────────────────
    # Session lifecycle
    # ─────────────────────────────────────────────────────────────────────
    def create_session(self, credentials: Optional[Credentials]) -> ProvisionerOutcome:
        """Authenticate the credentials and return the issued token.

        Incomplete credentials are rejected before any provisioner call.
        Surfacing the token to the client (cookie) is the caller's job.
        """
        if credentials is None or not credentials.is_complete():
            logger.info("Session creation rejected: incomplete credentials")
            return ProvisionerOutcome.failure(
                bad_request("Username and password are required"),
                state=SessionState.UNAUTHENTICATED,
            )

        outcome = self._call(
            ProvisionerOperation.AUTHENTICATE,
            lambda: self.client.authenticate(credentials.identifier, credentials.secret),
            response_parser.parse_token,
        )
        if not outcome.ok:
            logger.info("Session creation failed for %s: %s", credentials.identifier, outcome.error.kind.name)
            return ProvisionerOutcome.failure(outcome.error, state=SessionState.UNAUTHENTICATED)

        logger.info("Session created for %s (token %s)", credentials.identifier, token_fingerprint(outcome.value))
        return ProvisionerOutcome.success(outcome.value, state=SessionState.AUTHENTICATED)

    def validate(self, token: Optional[str]) -> ProvisionerOutcome:
        """Check the token and refresh its idle timeout on the provisioner."""
        if not token:
            return ProvisionerOutcome.failure(bad_request(MISSING_TOKEN_MESSAGE))
        outcome = self._call(
            ProvisionerOperation.VALIDATE,
            lambda: self.client.is_token_valid(token),
            response_parser.parse_boolean,
        )
        logger.debug("Validate %s -> %s", token_fingerprint(token), outcome.value if outcome.ok else outcome.error.kind.name)
        return outcome

    def is_authorized(self, token: Optional[str], resource_uri: str, method: str) -> ProvisionerOutcome:
        """Ask whether the token may perform ``method`` on ``resource_uri``.

        A missing token is simply not authorized; no call is made.
        """
        if not token:
            return ProvisionerOutcome.success(False)
        return self._call(
            ProvisionerOperation.AUTHORIZE,
            lambda: self.client.authorize(resource_uri, method, token),
            response_parser.parse_boolean,
        )

    def get_attributes(self, token: Optional[str]) -> ProvisionerOutcome:
        """Fetch the session's attributes and roles as a SessionAttributes bundle."""
        if not token:
            return ProvisionerOutcome.failure(bad_request(MISSING_TOKEN_MESSAGE))
        return self._call(
            ProvisionerOperation.ATTRIBUTES,
            lambda: self.client.attributes(token),
            response_parser.parse_session_attributes,
        )

    def get_identifier(self, token: Optional[str]) -> ProvisionerOutcome:
        """Resolve the username (``uid``) behind the token."""
        if not token:
            return ProvisionerOutcome.failure(bad_request(MISSING_TOKEN_MESSAGE))
        return self._call(
            ProvisionerOperation.ATTRIBUTES,
            lambda: self.client.attributes(token),
            response_parser.extract_username,
        )

    def logout(self, token: Optional[str]) -> ProvisionerOutcome:
        """Invalidate the session.

        Once the provisioner has answered at all, the token is considered
        invalidated, whatever the classified result. Only a transport fault
        leaves its state unknown.
        """
        if not token:
            return ProvisionerOutcome.failure(bad_request(MISSING_TOKEN_MESSAGE))

        try:
            resp = self.client.logout(token)
        except ProvisionerTransportError as exc:
            logger.warning("Logout of %s failed in transport", token_fingerprint(token))
            return ProvisionerOutcome.failure(exc)

        if resp.ok:
            logger.info("Session %s logged out", token_fingerprint(token))
            return ProvisionerOutcome.success(None, state=SessionState.INVALIDATED)

        error = normalize_failure(resp.operation, resp.status_code, resp.text)
        logger.info("Logout of %s answered %s -> %s", token_fingerprint(token), resp.status_code, error.kind.name)
        return ProvisionerOutcome.failure(error, state=SessionState.INVALIDATED)

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────
    def _call(
        self,
        operation: ProvisionerOperation,
        send: Callable[[], ProvisionerResponse],
        parse: Callable[[str], object],
    ) -> ProvisionerOutcome:
        """Send one request, classify failures, parse success."""
        try:
            resp = send()
        except ProvisionerTransportError as exc:
            return ProvisionerOutcome.failure(exc)

        if not resp.ok:
            error: GatewayError = normalize_failure(operation, resp.status_code, resp.text)
            logger.info("Provisioner %s answered %s -> %s", operation.value, resp.status_code, error.kind.name)
            return ProvisionerOutcome.failure(error)

        try:
            return ProvisionerOutcome.success(parse(resp.text))
        except ProtocolError as exc:
            exc.operation = operation
            logger.error("Provisioner %s reply malformed: %s", operation.value, exc.message)
            return ProvisionerOutcome.failure(exc)
