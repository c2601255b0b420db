"""Output documents for session attributes.

Two renderings of a :class:`SessionAttributes` bundle:

XML (default)::

    <session-attributes>
      <roles><role id="Hello World Group,ou=group,dc=apius,dc=org"/></roles>
      <attributes>
        <attribute name="uid"><value>pmorris</value></attribute>
      </attributes>
    </session-attributes>

Atom feed: feed id is the session token, one entry per attribute titled
with its name, values joined with ``;`` in the entry content, and a final
``roles`` entry.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
from xml.etree import ElementTree as ET

from .errors import ProtocolError
from .models import AttributeSet, RoleSet, SessionAttributes

XML_MIMETYPE = "application/xml"
ATOM_MIMETYPE = "application/atom+xml"
ATOM_NS = "http://www.w3.org/2005/Atom"
DEFAULT_FEED_TITLE = "Session Attributes"
VALUE_SEPARATOR = ";"


def attributes_to_xml(bundle: SessionAttributes) -> bytes:
    """Render attributes and roles as a ``session-attributes`` document."""
    root = ET.Element("session-attributes")
    roles_el = ET.SubElement(root, "roles")
    for role in bundle.roles:
        ET.SubElement(roles_el, "role", {"id": role})

    attributes_el = ET.SubElement(root, "attributes")
    for name, values in bundle.attributes.items():
        attribute_el = ET.SubElement(attributes_el, "attribute", {"name": name})
        for value in values:
            ET.SubElement(attribute_el, "value").text = value

    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def attributes_from_xml(document: bytes, token: str = "") -> SessionAttributes:
    """Read back a document produced by :func:`attributes_to_xml`.

    Intended for documents this gateway rendered itself (CLI, tests).

    Raises:
        ProtocolError: Not a ``session-attributes`` document
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise ProtocolError(f"Malformed session-attributes document: {exc}") from exc
    if root.tag != "session-attributes":
        raise ProtocolError(f"Unexpected root element {root.tag!r}")

    roles: RoleSet = [el.get("id", "") for el in root.iterfind("roles/role")]
    attributes: AttributeSet = {}
    for attribute_el in root.iterfind("attributes/attribute"):
        values = attributes.setdefault(attribute_el.get("name", ""), [])
        values.extend(value_el.text or "" for value_el in attribute_el.iterfind("value"))
    return SessionAttributes(token=token, attributes=attributes, roles=roles)


def _atom_entry(feed: ET.Element, entry_id: str, title: str, content: str, updated: str) -> None:
    entry = ET.SubElement(feed, "entry")
    ET.SubElement(entry, "id").text = entry_id
    ET.SubElement(entry, "title").text = title
    ET.SubElement(entry, "updated").text = updated
    ET.SubElement(entry, "content", {"type": "text"}).text = content


def attributes_to_atom(
    bundle: SessionAttributes,
    title: str = DEFAULT_FEED_TITLE,
    now: Optional[datetime] = None,
) -> bytes:
    """Render attributes and roles as an Atom feed."""
    updated = (now or datetime.now(timezone.utc)).isoformat()
    feed_id = bundle.token or "urn:apius:session"

    # Children stay unqualified and inherit the Atom default namespace
    feed = ET.Element("feed", {"xmlns": ATOM_NS})
    ET.SubElement(feed, "id").text = feed_id
    ET.SubElement(feed, "title").text = title
    ET.SubElement(feed, "updated").text = updated

    for name, values in bundle.attributes.items():
        _atom_entry(feed, f"{feed_id}#{name}", name, VALUE_SEPARATOR.join(values), updated)
    _atom_entry(feed, f"{feed_id}#roles", "roles", VALUE_SEPARATOR.join(bundle.roles), updated)

    return ET.tostring(feed, encoding="utf-8", xml_declaration=True)


def render(bundle: SessionAttributes, mimetype: str, title: str = DEFAULT_FEED_TITLE) -> bytes:
    """Render for a negotiated mimetype (Atom or XML)."""
    if mimetype == ATOM_MIMETYPE:
        return attributes_to_atom(bundle, title=title)
    return attributes_to_xml(bundle)
