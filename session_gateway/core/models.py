"""Request-scoped data model for session operations.

Every object in this module is built fresh for a single inbound request and
dropped once the response is rendered. Nothing here is cached on the proxy,
the client, or the Flask app.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .errors import GatewayError

APIUS_SCHEME = "APIUS"

# Attribute name -> ordered values. Insertion order is first-seen order.
AttributeSet = Dict[str, List[str]]
RoleSet = List[str]


class ProvisionerOperation(Enum):
    """The five calls the provisioner exposes."""

    AUTHENTICATE = "authenticate"
    VALIDATE = "isTokenValid"
    AUTHORIZE = "authorize"
    ATTRIBUTES = "attributes"
    LOGOUT = "logout"

    @property
    def path(self) -> str:
        return f"/identity/{self.value}"


class SessionState(Enum):
    """Where a token stands after an operation completes."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    INVALIDATED = "invalidated"


@dataclass(frozen=True)
class Credentials:
    """Username/password pair presented on POST /session."""

    identifier: Optional[str]
    secret: Optional[str] = field(repr=False)

    def is_complete(self) -> bool:
        return bool(self.identifier) and bool(self.secret)


@dataclass(frozen=True)
class AuthChallenge:
    """Decoded (or to-be-encoded) APIUS Authorization value."""

    token: str = ""
    realm: Optional[str] = None
    scheme: str = APIUS_SCHEME


@dataclass(frozen=True)
class SessionAttributes:
    """Attributes and roles returned for a session token.

    Roles are kept apart from attributes even though both come from the
    same provisioner reply.
    """

    token: str
    attributes: AttributeSet
    roles: RoleSet

    def first_value(self, name: str) -> Optional[str]:
        values = self.attributes.get(name) or []
        return values[0] if values else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "attributes": {name: list(values) for name, values in self.attributes.items()},
            "roles": list(self.roles),
        }


@dataclass(frozen=True)
class ProvisionerOutcome:
    """Tagged result of one SessionProxy operation.

    ``value`` holds a bool (validate/authorize), a token string (create), a
    username (identifier), a :class:`SessionAttributes` bundle (attributes)
    or ``None`` (logout). ``error`` is set instead when the operation failed.
    """

    value: Any = None
    error: Optional["GatewayError"] = None
    state: Optional[SessionState] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, raising the carried error if there is one."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: Any = None, state: Optional[SessionState] = None) -> "ProvisionerOutcome":
        return cls(value=value, state=state)

    @classmethod
    def failure(cls, error: "GatewayError", state: Optional[SessionState] = None) -> "ProvisionerOutcome":
        return cls(error=error, state=state)


def token_fingerprint(token: Optional[str]) -> str:
    """Short, log-safe prefix of a token."""
    if not token:
        return "<none>"
    return f"{token[:8]}..." if len(token) > 16 else "***"
