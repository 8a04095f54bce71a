"""Streaming XML walking with a tag trail.

Walk an XML document event by event while keeping the list of open tags (the
trail), and match that trail against ``tag1/tag2`` paths.
"""

from .events import Attribute, EndElement, StartElement, XmlProcessor
from .matching import get_attribute, is_path, is_tag, path_ends_with
from .walker import (
    TrailInvariantError,
    TrailWalker,
    XmlErrorKind,
    XmlProcessingError,
    process_xml,
    process_xml_file,
)

__all__ = [
    "Attribute",
    "EndElement",
    "StartElement",
    "XmlProcessor",
    "get_attribute",
    "is_path",
    "is_tag",
    "path_ends_with",
    "TrailInvariantError",
    "TrailWalker",
    "XmlErrorKind",
    "XmlProcessingError",
    "process_xml",
    "process_xml_file",
]
