"""Translation of provisioner replies into structured results.

The provisioner answers with newline-delimited ``key=value`` lines::

    userdetails.token.id=AQIC5wM2LY4SfczIKuNd_hAtjrJgLaZmKCszk_Dsqh1QVT0.*AAJTSQACMDE.*
    userdetails.role=id=Hello World Group,ou=group,dc=apius,dc=org
    userdetails.attribute.name=uid
    userdetails.attribute.value=pmorris
    userdetails.attribute.name=objectclass
    userdetails.attribute.value=organizationalPerson
    userdetails.attribute.value=person

Every function here is pure: no I/O, no module or instance state. Each call
builds its own accumulators and parses the whole reply before returning.
"""
from __future__ import annotations
from typing import List, Optional, Tuple

from .errors import ProtocolError
from .models import AttributeSet, RoleSet, SessionAttributes

BOOLEAN_PREFIX = "boolean="
TOKEN_KEY = "token.id"
ROLE_KEY = "role"
ROLE_ID_MARKER = "id="
ATTRIBUTE_NAME_KEY = "attribute.name"
ATTRIBUTE_VALUE_KEY = "attribute.value"
USERNAME_ATTRIBUTE = "uid"


def _lines(raw: Optional[str]) -> List[str]:
    return [line.rstrip("\r") for line in (raw or "").split("\n")]


def _after_first(line: str, marker: str) -> str:
    """Everything after the first occurrence of ``marker``."""
    return line.split(marker, 1)[1]


def parse_boolean(raw: Optional[str]) -> bool:
    """Parse a ``boolean=<true|false>`` reply.

    Only a case-insensitive ``true`` yields True. Anything else, including
    garbage such as ``boolean=maybe``, is False.
    """
    value = (raw or "").replace(BOOLEAN_PREFIX, "", 1).replace("\n", "", 1)
    return value.strip().lower() == "true"


def parse_token(raw: Optional[str]) -> str:
    """Return the session token from an authenticate reply.

    Args:
        raw: Provisioner reply; the token line may appear anywhere

    Returns:
        Token value, everything after the first ``=`` of the line

    Raises:
        ProtocolError: No ``token.id`` line, or the line carries no value
    """
    for line in _lines(raw):
        key, sep, value = line.partition("=")
        if sep and TOKEN_KEY in key:
            token = value.strip()
            if not token:
                raise ProtocolError("Provisioner returned an empty token")
            return token
    raise ProtocolError("Provisioner reply has no token.id line")


def parse_attributes_and_roles(raw: Optional[str]) -> Tuple[AttributeSet, RoleSet]:
    """Group attribute and role lines of an attributes reply.

    Per line, in this order:

    1. a line containing ``role`` (and an ``id=``) contributes the text after
       its first ``id=`` to the roles; it does not move the current attribute
    2. a line containing ``attribute.name`` opens (or re-opens) that name as
       the current attribute
    3. a line containing ``attribute.value`` appends to the current attribute
    4. anything else is ignored

    Names are committed as soon as they are seen, so an attribute with no
    values still shows up with an empty list.

    Raises:
        ProtocolError: A value line appears before any attribute name
    """
    attributes: AttributeSet = {}
    roles: RoleSet = []
    current: Optional[str] = None

    for line in _lines(raw):
        if ROLE_KEY in line and ROLE_ID_MARKER in line:
            roles.append(_after_first(line, ROLE_ID_MARKER))
        elif ATTRIBUTE_NAME_KEY in line and "=" in line:
            current = _after_first(line, "=")
            attributes.setdefault(current, [])
        elif ATTRIBUTE_VALUE_KEY in line and "=" in line:
            if current is None:
                raise ProtocolError("Attribute value before any attribute name")
            attributes[current].append(_after_first(line, "="))

    return attributes, roles


def parse_session_attributes(raw: Optional[str]) -> SessionAttributes:
    """Parse an attributes reply into a :class:`SessionAttributes` bundle.

    The reply normally echoes the token; when it does not, the bundle's
    token is empty.
    """
    attributes, roles = parse_attributes_and_roles(raw)
    try:
        token = parse_token(raw)
    except ProtocolError:
        token = ""
    return SessionAttributes(token=token, attributes=attributes, roles=roles)


def extract_username(raw: Optional[str]) -> str:
    """Return the first ``uid`` value of an attributes reply.

    Raises:
        ProtocolError: The reply has no ``uid`` attribute or it has no value
    """
    attributes, _ = parse_attributes_and_roles(raw)
    values = attributes.get(USERNAME_ATTRIBUTE)
    if not values:
        raise ProtocolError("Provisioner reply has no uid attribute")
    return values[0]
