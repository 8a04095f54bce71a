"""Streaming XML walker that tracks the tag trail.

The walker drives an ``lxml`` push parser and turns its events into three
processor notifications (element start, characters, element end), each given
the trail of local tag names leading to the current element. Nothing is kept
in memory besides the trail and the pending text run, so large files can be
inspected without building a tree.

Quick and dirty by intent: anything that goes wrong (bad XML, missing file,
read error) aborts the walk with an ``XmlProcessingError`` for the operator to
look at. There are no partial results and no retries.
"""

import time
from enum import Enum, auto
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Union

from lxml import etree

from cmdtool.shared import WalkerConfig, WalkSummary, get_logger

from .events import EndElement, StartElement, XmlProcessor
from .matching import get_attribute, is_path, is_tag, path_ends_with

XmlSource = Union[str, bytes]
XmlFile = Union[str, Path, IO[bytes], IO[str]]

STRING_SOURCE = "<string>"
MS_PER_SECOND = 1000


class XmlErrorKind(Enum):
    """What made a walk fail."""

    INVALID_XML = auto()
    FILE_NOT_FOUND = auto()
    READ_ERROR = auto()
    DTD_FORBIDDEN = auto()


class XmlProcessingError(Exception):
    """A walk was aborted. Not recoverable: fix the input and walk again."""

    def __init__(self, message: str, kind: XmlErrorKind, source: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.source = source


class TrailInvariantError(RuntimeError):
    """A closing tag did not match the innermost tag of the trail."""


class _TrailTarget:
    """lxml parser target maintaining the trail and calling the processor."""

    def __init__(
        self,
        processor: XmlProcessor,
        summary: WalkSummary,
        strict_trail: bool = True,
    ) -> None:
        self.processor = processor
        self.summary = summary
        self.strict_trail = strict_trail
        self.trail: List[str] = []
        self._text: List[str] = []

    def start(self, tag: str, attrib) -> None:
        self._flush_text()
        element = StartElement.from_parser(tag, attrib)

        # Pushed even when empty so depth stays right; only named tags are reported.
        self.trail.append(element.local_name)
        self.summary.elements += 1
        self.summary.max_depth = max(self.summary.max_depth, len(self.trail))

        if element.local_name:
            self.processor.process_element_start(tuple(self.trail), element)

    def end(self, tag: str) -> None:
        self._flush_text()
        element = EndElement.from_parser(tag)

        if self.strict_trail and (not self.trail or self.trail[-1] != element.local_name):
            raise TrailInvariantError(
                f"Closing tag {element.local_name!r} does not match trail {self.trail!r}"
            )

        self.processor.process_element_end(tuple(self.trail), element)
        if self.trail:
            self.trail.pop()

    def data(self, data: str) -> None:
        self._text.append(data)

    def comment(self, text: str) -> None:
        self._flush_text()

    def pi(self, target: str, data: Optional[str] = None) -> None:
        self._flush_text()

    def doctype(self, name: str, pubid: Optional[str], system: Optional[str]) -> None:
        raise XmlProcessingError(
            f"DOCTYPE declarations are not allowed: {self.summary.source}",
            XmlErrorKind.DTD_FORBIDDEN,
            self.summary.source,
        )

    def close(self) -> None:
        self._flush_text()

    def _flush_text(self) -> None:
        if not self._text:
            return
        text = "".join(self._text).strip()
        self._text = []
        if text:
            self.summary.character_runs += 1
            self.processor.process_characters(tuple(self.trail), text)


class TrailWalker:
    """Walk XML sources, keeping track of the trail of open tags.

    Example:
        >>> class Errors(XmlProcessor):
        ...     def process_element_start(self, trail, element):
        ...         if TrailWalker.path_ends_with(trail, "httpErrors/error"):
        ...             print(TrailWalker.get_attribute(element, "statusCode"))
        >>> _ = TrailWalker().process_xml(
        ...     '<httpErrors><error statusCode="404"/></httpErrors>', Errors())
        404
    """

    is_path = staticmethod(is_path)
    is_tag = staticmethod(is_tag)
    path_ends_with = staticmethod(path_ends_with)
    get_attribute = staticmethod(get_attribute)

    def __init__(self, config: Optional[WalkerConfig] = None) -> None:
        self.config = config or WalkerConfig()
        self.logger = get_logger(__name__, "trail_walker")

    def process_xml(self, source: XmlSource, processor: XmlProcessor) -> WalkSummary:
        """Walk an in-memory XML document.

        Raises:
            XmlProcessingError: when the XML is invalid
        """
        if isinstance(source, str):
            source = source.encode(self.config.encoding)
        return self._walk([source], processor, STRING_SOURCE)

    def process_xml_file(self, xml_file: XmlFile, processor: XmlProcessor) -> WalkSummary:
        """Walk an XML file given by path or as an open file handle.

        Handles passed in are read but left open.

        Raises:
            XmlProcessingError: when the file is missing, unreadable or invalid
        """
        if hasattr(xml_file, "read"):
            source = str(getattr(xml_file, "name", "<stream>"))
            return self._walk(self._read_chunks(xml_file, source), processor, source)

        path = Path(xml_file)
        source = str(path)
        try:
            handle = path.open("rb")
        except FileNotFoundError as e:
            self.logger.debug("Walk aborted, XML file not found", extra={"source": source})
            raise XmlProcessingError(
                f"File not found: {source}", XmlErrorKind.FILE_NOT_FOUND, source
            ) from e
        except OSError as e:
            self.logger.debug("Walk aborted, could not open XML file", extra={"source": source})
            raise XmlProcessingError(
                f"Error reading XML file: {source}", XmlErrorKind.READ_ERROR, source
            ) from e

        with handle:
            return self._walk(self._read_chunks(handle, source), processor, source)

    def _read_chunks(self, handle: IO, source: str) -> Iterator[Union[bytes, str]]:
        # Only read failures are wrapped; processor errors raised from feed() pass through.
        while True:
            try:
                chunk = handle.read(self.config.chunk_size)
            except OSError as e:
                self.logger.debug("Walk aborted, read error", extra={"source": source, "error": str(e)})
                raise XmlProcessingError(
                    f"Error reading XML file: {source}", XmlErrorKind.READ_ERROR, source
                ) from e
            if not chunk:
                return
            yield chunk

    def _new_parser(self, target: _TrailTarget) -> etree.XMLParser:
        # One parser per walk; never fetch DTDs, schemas or external entities.
        return etree.XMLParser(
            target=target,
            resolve_entities=False,
            no_network=True,
            load_dtd=False,
            dtd_validation=False,
            huge_tree=False,
        )

    def _walk(
        self,
        chunks: Iterable[Union[bytes, str]],
        processor: XmlProcessor,
        source: str,
    ) -> WalkSummary:
        logger = self.logger.bind(source=source)
        summary = WalkSummary(source=source)
        target = _TrailTarget(processor, summary, self.config.strict_trail)
        parser = self._new_parser(target)
        start_time = time.time()

        logger.debug("Starting XML walk", extra={"chunk_size": self.config.chunk_size})
        try:
            for chunk in chunks:
                if isinstance(chunk, str):
                    chunk = chunk.encode(self.config.encoding)
                parser.feed(chunk)
            parser.close()
        except etree.XMLSyntaxError as e:
            logger.debug("Walk aborted, invalid XML", extra={"error": str(e)})
            raise XmlProcessingError(
                f"Invalid XML in {source}: {e}", XmlErrorKind.INVALID_XML, source
            ) from e
        summary.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        logger.debug(
            "Finished XML walk",
            extra={
                "elements": summary.elements,
                "character_runs": summary.character_runs,
                "processing_time_ms": summary.processing_time_ms,
            },
        )
        return summary


def process_xml(
    source: XmlSource,
    processor: XmlProcessor,
    config: Optional[WalkerConfig] = None,
) -> WalkSummary:
    """Walk an in-memory XML document with a default walker."""
    return TrailWalker(config).process_xml(source, processor)


def process_xml_file(
    xml_file: XmlFile,
    processor: XmlProcessor,
    config: Optional[WalkerConfig] = None,
) -> WalkSummary:
    """Walk an XML file with a default walker."""
    return TrailWalker(config).process_xml_file(xml_file, processor)
