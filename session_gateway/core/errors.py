"""Error taxonomy and provisioner failure normalization.

All provisioner-originated classification happens in :func:`normalize_failure`
so the "Invalid session ID" remap lives in exactly one place.
"""
from __future__ import annotations
from enum import Enum
from typing import Optional

from .models import ProvisionerOperation

INVALID_SESSION_MARKER = "Invalid session ID"

# Calls for which the provisioner reports a bad/expired token as a 5xx.
TOKEN_BOUND_OPERATIONS = frozenset({
    ProvisionerOperation.LOGOUT,
    ProvisionerOperation.VALIDATE,
    ProvisionerOperation.AUTHORIZE,
    ProvisionerOperation.ATTRIBUTES,
})


class ErrorKind(Enum):
    """Canonical failure kinds with their default HTTP status and public message."""

    BAD_REQUEST = (400, "Bad Request", "Missing or malformed credentials")
    UNAUTHORIZED = (401, "Unauthorized", "Invalid or expired session token")
    PROTOCOL = (502, "Bad Gateway", "Unexpected response from session provisioner")
    INTERNAL = (500, "Internal Server Error", "Session provisioner request failed")

    def __init__(self, status: int, title: str, default_message: str):
        self.status = status
        self.title = title
        self.default_message = default_message


class GatewayError(Exception):
    """Classified failure of a session operation.

    Attributes:
        kind: Canonical :class:`ErrorKind`
        message: Safe, client-facing message
        status_code: Explicit HTTP status (provisioner pass-through or a
            REST-layer override); falls back to ``kind.status``
        operation: Provisioner call that failed, when there was one
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        operation: Optional[ProvisionerOperation] = None,
    ):
        self.kind = kind
        self.message = message or kind.default_message
        self.status_code = status_code
        self.operation = operation
        super().__init__(self.message)

    @property
    def http_status(self) -> int:
        return self.status_code or self.kind.status

    def to_dict(self) -> dict:
        return {"error": self.kind.title, "message": self.message}

    def __repr__(self) -> str:
        op = self.operation.value if self.operation else None
        return f"{type(self).__name__}(kind={self.kind.name}, status={self.http_status}, operation={op!r})"


class ProtocolError(GatewayError):
    """Provisioner reply does not match the expected line format."""

    def __init__(self, message: str):
        super().__init__(ErrorKind.PROTOCOL, message)


class ProvisionerTransportError(GatewayError):
    """The provisioner could not be reached or the exchange broke mid-flight."""

    def __init__(self, operation: ProvisionerOperation, cause: Exception):
        self.cause = cause
        super().__init__(ErrorKind.INTERNAL, operation=operation)


def bad_request(message: Optional[str] = None) -> GatewayError:
    return GatewayError(ErrorKind.BAD_REQUEST, message)


def unauthorized(message: Optional[str] = None, status_code: Optional[int] = None) -> GatewayError:
    return GatewayError(ErrorKind.UNAUTHORIZED, message, status_code=status_code)


def normalize_failure(operation: ProvisionerOperation, status_code: int, body: Optional[str]) -> GatewayError:
    """Classify a non-2xx provisioner response.

    Args:
        operation: Provisioner call that produced the response
        status_code: HTTP status returned by the provisioner
        body: Response entity, inspected but never echoed to clients

    Returns:
        GatewayError for the caller to surface
    """
    body = body or ""

    if status_code >= 500 and operation in TOKEN_BOUND_OPERATIONS and INVALID_SESSION_MARKER in body:
        return GatewayError(ErrorKind.UNAUTHORIZED, operation=operation)

    if 400 <= status_code < 500:
        if status_code in (401, 403):
            return GatewayError(ErrorKind.UNAUTHORIZED, status_code=status_code, operation=operation)
        return GatewayError(
            ErrorKind.INTERNAL,
            "Session provisioner rejected the request",
            status_code=status_code,
            operation=operation,
        )

    return GatewayError(ErrorKind.INTERNAL, operation=operation)
