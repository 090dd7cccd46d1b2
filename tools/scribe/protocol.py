"""
Model builder: turns a Wayland protocol XML document into a ``Protocol`` tree.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .errors import Malformed, MissingProtocolName, NotAProtocolDocument

# Only recognized value of an event/request ``type`` attribute.
KIND_DESTRUCTOR = "destructor"


# ── Model nodes ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class EnumEntry:
    name: str
    value: str                      # integer literal, kept as written
    summary: Optional[str] = None


@dataclass(frozen=True)
class Enum:
    name: str
    entries: Tuple[EnumEntry, ...] = ()


@dataclass(frozen=True)
class Argument:
    name: str
    wire_type: str
    interface_ref: str = ""         # empty means generic/dynamic
    summary: Optional[str] = None
    allow_null: bool = False

    @property
    def is_new_id(self) -> bool:
        return self.wire_type == "new_id"


@dataclass(frozen=True)
class Event:
    """A request (``is_request``) or an event of an interface."""
    name: str
    is_request: bool
    kind: str = ""
    arguments: Tuple[Argument, ...] = ()

    @property
    def is_destructor(self) -> bool:
        return self.kind == KIND_DESTRUCTOR


@dataclass(frozen=True)
class Interface:
    name: str
    version: int = 1
    enums: Tuple[Enum, ...] = ()
    events: Tuple[Event, ...] = ()
    requests: Tuple[Event, ...] = ()


@dataclass(frozen=True)
class Protocol:
    name: str
    interfaces: Tuple[Interface, ...] = ()


# ── Builder ──────────────────────────────────────────────────────────

def _attr(elem: ET.Element, name: str) -> str:
    return elem.get(name, "")


def _optional_attr(elem: ET.Element, name: str) -> Optional[str]:
    return elem.get(name)


def _int_attr(elem: ET.Element, name: str, default: int) -> int:
    try:
        return int(elem.get(name, ""))
    except ValueError:
        return default


def _read_enum(elem: ET.Element) -> Enum:
    entries = tuple(
        EnumEntry(name=_attr(child, "name"),
                  value=_attr(child, "value"),
                  summary=_optional_attr(child, "summary"))
        for child in elem if child.tag == "entry")
    return Enum(name=_attr(elem, "name"), entries=entries)


def _read_event(elem: ET.Element, is_request: bool) -> Event:
    arguments = tuple(
        Argument(name=_attr(child, "name"),
                 wire_type=_attr(child, "type"),
                 interface_ref=_attr(child, "interface"),
                 summary=_optional_attr(child, "summary"),
                 allow_null=_attr(child, "allow-null") == "true")
        for child in elem if child.tag == "arg")
    return Event(name=_attr(elem, "name"), is_request=is_request,
                 kind=_attr(elem, "type"), arguments=arguments)


def _read_interface(elem: ET.Element) -> Interface:
    enums, events, requests = [], [], []
    for child in elem:
        if child.tag == "enum":
            enums.append(_read_enum(child))
        elif child.tag == "event":
            events.append(_read_event(child, is_request=False))
        elif child.tag == "request":
            requests.append(_read_event(child, is_request=True))
        # description, copyright and unknown children are ignored

    version = _int_attr(elem, "version", 1)
    if version < 1:
        version = 1

    return Interface(name=_attr(elem, "name"), version=version,
                     enums=tuple(enums), events=tuple(events),
                     requests=tuple(requests))


def build_protocol(text: Union[str, bytes]) -> Protocol:
    """
    Parse a protocol description into an immutable ``Protocol``.

    Raises:
        Malformed: the document is not well-formed XML.
        NotAProtocolDocument: the root element is not ``<protocol>``.
        MissingProtocolName: the ``name`` attribute is absent or empty.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise Malformed(str(e), getattr(e, "position", None)) from e

    if root.tag != "protocol":
        raise NotAProtocolDocument(root.tag)

    name = _attr(root, "name")
    if not name:
        raise MissingProtocolName()

    interfaces = tuple(_read_interface(child)
                       for child in root if child.tag == "interface")
    return Protocol(name=name, interfaces=interfaces)
