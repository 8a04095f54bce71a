"""Read-only element views and the processor interface for trail walking."""

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

from lxml import etree


def split_name(name: str) -> Tuple[Optional[str], str]:
    """Split a ``{namespace}local`` name into ``(namespace, local)``."""
    if not name:
        return None, ""
    qname = etree.QName(name)
    return qname.namespace, qname.localname


@dataclass(frozen=True)
class Attribute:
    """One attribute of an opened element."""

    name: str
    local_name: str
    namespace: Optional[str]
    value: str


@dataclass(frozen=True)
class StartElement:
    """An element that has just been opened.

    Attributes:
        name: Qualified name (``{namespace}local`` when namespaced)
        local_name: Namespace-stripped tag name
        namespace: Namespace URI, or None
        attributes: Attributes in document order
    """

    name: str
    local_name: str
    namespace: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()

    @classmethod
    def from_parser(cls, tag: str, attrib: Mapping[str, str]) -> "StartElement":
        namespace, local_name = split_name(tag)
        attributes = []
        for attr_name, value in attrib.items():
            attr_namespace, attr_local = split_name(attr_name)
            attributes.append(Attribute(attr_name, attr_local, attr_namespace, value))
        return cls(tag, local_name, namespace, tuple(attributes))


@dataclass(frozen=True)
class EndElement:
    """An element that is being closed."""

    name: str
    local_name: str
    namespace: Optional[str] = None

    @classmethod
    def from_parser(cls, tag: str) -> "EndElement":
        namespace, local_name = split_name(tag)
        return cls(tag, local_name, namespace)


class XmlProcessor:
    """Receives trail walking notifications.

    Every hook is a no-op, so subclasses only override what they need. The
    trail passed to a hook is a snapshot and is never mutated afterwards.
    """

    def process_element_start(self, trail: Sequence[str], element: StartElement) -> None:
        """An element was just opened; ``trail`` ends with its tag."""

    def process_element_end(self, trail: Sequence[str], element: EndElement) -> None:
        """An element is being closed; ``trail`` still ends with its tag."""

    def process_characters(self, trail: Sequence[str], text: str) -> None:
        """Non-blank text was found inside the element at the end of ``trail``.

        ``text`` is trimmed. Comments and processing instructions split text,
        so one element can produce several calls.
        """
