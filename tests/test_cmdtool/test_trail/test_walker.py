"""Tests for the streaming trail walker."""

import io

import pytest

from cmdtool.shared import WalkerConfig, WalkSummary
from cmdtool.trail import (
    TrailInvariantError,
    TrailWalker,
    XmlErrorKind,
    XmlProcessingError,
    XmlProcessor,
    process_xml,
    process_xml_file,
)
from cmdtool.trail.walker import STRING_SOURCE, _TrailTarget

WEB_CONFIG = """<?xml version="1.0" encoding="utf-8"?>
<configuration>
  <system.webServer>
    <httpErrors errorMode="Custom">
      <error statusCode="404" path="/404.html" />
      <error statusCode="500" path="/500.html" />
    </httpErrors>
  </system.webServer>
  <appSettings>
    <add key="mode" value="debug" />
  </appSettings>
</configuration>
"""


class RecordingProcessor(XmlProcessor):
    """Records every notification with the trail it came with."""

    def __init__(self):
        self.events = []

    def process_element_start(self, trail, element):
        self.events.append(("start", trail, element.local_name))

    def process_element_end(self, trail, element):
        self.events.append(("end", trail, element.local_name))

    def process_characters(self, trail, text):
        self.events.append(("chars", trail, text))


class TestTraversal:
    """Test trail maintenance and hook ordering."""

    def test_event_order_and_trails(self):
        """Test hooks fire in document order with the right trails."""
        processor = RecordingProcessor()
        process_xml("<a><b>hi</b><c/></a>", processor)

        assert processor.events == [
            ("start", ("a",), "a"),
            ("start", ("a", "b"), "b"),
            ("chars", ("a", "b"), "hi"),
            ("end", ("a", "b"), "b"),
            ("start", ("a", "c"), "c"),
            ("end", ("a", "c"), "c"),
            ("end", ("a",), "a"),
        ]

    def test_end_hook_sees_closing_tag_then_pop(self):
        """Test the closed element is popped once its end hook returns."""
        processor = RecordingProcessor()
        process_xml("<root><first/><second/></root>", processor)

        ends = [e for e in processor.events if e[0] == "end"]
        assert ends[0] == ("end", ("root", "first"), "first")
        starts = [e for e in processor.events if e[0] == "start"]
        assert starts[2] == ("start", ("root", "second"), "second")

    def test_trail_is_snapshot(self):
        """Test trails given to hooks are not mutated afterwards."""
        processor = RecordingProcessor()
        process_xml("<a><b/></a>", processor)

        first_trail = processor.events[0][1]
        assert first_trail == ("a",)
        assert isinstance(first_trail, tuple)

    def test_web_config_paths(self):
        """Test suffix matching during a real walk."""
        found = []

        class HttpErrors(XmlProcessor):
            def process_element_start(self, trail, element):
                if TrailWalker.path_ends_with(trail, "httpErrors/error"):
                    found.append(TrailWalker.get_attribute(element, "statusCode"))

        summary = TrailWalker().process_xml(WEB_CONFIG, HttpErrors())

        assert found == ["404", "500"]
        assert summary.elements == 7
        assert summary.max_depth == 4
        assert summary.source == STRING_SOURCE

    def test_bytes_source(self):
        """Test bytes are accepted as in-memory input."""
        processor = RecordingProcessor()
        process_xml("<a>café</a>".encode("utf-8"), processor)
        assert ("chars", ("a",), "café") in processor.events

    def test_namespaced_tags_use_local_names(self):
        """Test trails hold namespace-stripped names."""
        seen = []

        class Capture(XmlProcessor):
            def process_element_start(self, trail, element):
                seen.append((trail, element))

        process_xml(
            '<r xmlns="urn:root" xmlns:p="urn:p"><p:item p:id="7" name="n"/></r>',
            Capture(),
        )

        trail, item = seen[1]
        assert trail == ("r", "item")
        assert item.namespace == "urn:p"
        assert item.name == "{urn:p}item"
        assert TrailWalker.get_attribute(item, "id") == "7"
        assert TrailWalker.get_attribute(item, "name") == "n"
        assert TrailWalker.get_attribute(item, "missing") is None


class TestCharacters:
    """Test character data handling."""

    def test_whitespace_only_runs_suppressed(self):
        """Test indentation never reaches the characters hook."""
        processor = RecordingProcessor()
        process_xml("<a>\n  <b>  x  </b>\n  \t\n</a>", processor)

        chars = [e for e in processor.events if e[0] == "chars"]
        assert chars == [("chars", ("a", "b"), "x")]

    def test_mixed_content(self):
        """Test text around child elements is reported per run."""
        processor = RecordingProcessor()
        process_xml("<a> hello <b/> world </a>", processor)

        chars = [e for e in processor.events if e[0] == "chars"]
        assert chars == [("chars", ("a",), "hello"), ("chars", ("a",), "world")]

    def test_comment_splits_text(self):
        """Test a comment breaks text into several calls."""
        processor = RecordingProcessor()
        process_xml("<a>one<!-- note -->two</a>", processor)

        chars = [e[2] for e in processor.events if e[0] == "chars"]
        assert chars == ["one", "two"]

    def test_entities_and_cdata(self):
        """Test entities and CDATA arrive decoded in one run."""
        processor = RecordingProcessor()
        process_xml("<a>fish &amp; chips</a>", processor)
        process_xml("<b><![CDATA[x < y]]></b>", processor)

        chars = [e[2] for e in processor.events if e[0] == "chars"]
        assert chars == ["fish & chips", "x < y"]

    def test_character_runs_counted(self):
        """Test the summary counts characters hook calls."""
        summary = process_xml("<a><b>1</b><c>2</c><d> </d></a>", XmlProcessor())
        assert summary.character_runs == 2


class TestFileSources:
    """Test file paths and file handles."""

    def test_file_path(self, tmp_path):
        """Test walking a file by path."""
        xml_file = tmp_path / "web.config"
        xml_file.write_text(WEB_CONFIG, encoding="utf-8")

        processor = RecordingProcessor()
        summary = process_xml_file(xml_file, processor)

        assert summary.source == str(xml_file)
        assert ("start", ("configuration", "appSettings", "add"), "add") in processor.events

    def test_string_path(self, tmp_path):
        """Test walking a file given as a string path."""
        xml_file = tmp_path / "doc.xml"
        xml_file.write_text("<doc><item>value</item></doc>", encoding="utf-8")

        processor = RecordingProcessor()
        TrailWalker().process_xml_file(str(xml_file), processor)
        assert ("chars", ("doc", "item"), "value") in processor.events

    def test_small_chunks(self, tmp_path):
        """Test chunked reading gives the same notifications."""
        xml_file = tmp_path / "web.config"
        xml_file.write_text(WEB_CONFIG, encoding="utf-8")

        whole = RecordingProcessor()
        chunked = RecordingProcessor()
        TrailWalker().process_xml_file(xml_file, whole)
        TrailWalker(WalkerConfig(chunk_size=3)).process_xml_file(xml_file, chunked)

        assert chunked.events == whole.events

    def test_binary_handle_left_open(self, tmp_path):
        """Test an open binary handle is read but not closed."""
        xml_file = tmp_path / "doc.xml"
        xml_file.write_bytes(b"<doc><item>value</item></doc>")

        processor = RecordingProcessor()
        with xml_file.open("rb") as handle:
            summary = process_xml_file(handle, processor)
            assert not handle.closed

        assert summary.source == str(xml_file)
        assert ("chars", ("doc", "item"), "value") in processor.events

    def test_text_handle(self):
        """Test a text handle is encoded and walked."""
        processor = RecordingProcessor()
        summary = process_xml_file(io.StringIO("<doc><n>1</n></doc>"), processor)

        assert summary.source == "<stream>"
        assert ("chars", ("doc", "n"), "1") in processor.events


class TestErrors:
    """Test failures abort the walk with XmlProcessingError."""

    def test_mismatched_tags(self):
        """Test mismatched tags are reported as invalid XML."""
        with pytest.raises(XmlProcessingError) as exc_info:
            process_xml("<a><b></a>", XmlProcessor())

        assert exc_info.value.kind is XmlErrorKind.INVALID_XML
        assert exc_info.value.source == STRING_SOURCE
        assert STRING_SOURCE in str(exc_info.value)

    def test_unclosed_tag(self):
        """Test an unfinished document fails instead of returning partial results."""
        processor = RecordingProcessor()
        with pytest.raises(XmlProcessingError) as exc_info:
            process_xml("<a><b>text", processor)

        assert exc_info.value.kind is XmlErrorKind.INVALID_XML

    def test_invalid_file_references_file(self, tmp_path):
        """Test the error message names the broken file."""
        xml_file = tmp_path / "broken.xml"
        xml_file.write_text("<root><child></root>", encoding="utf-8")

        with pytest.raises(XmlProcessingError) as exc_info:
            process_xml_file(xml_file, XmlProcessor())

        assert exc_info.value.kind is XmlErrorKind.INVALID_XML
        assert "broken.xml" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    def test_missing_file(self, tmp_path):
        """Test a missing file is reported as such."""
        missing = tmp_path / "missing.xml"
        with pytest.raises(XmlProcessingError) as exc_info:
            process_xml_file(missing, XmlProcessor())

        assert exc_info.value.kind is XmlErrorKind.FILE_NOT_FOUND
        assert exc_info.value.source == str(missing)
        assert "File not found" in str(exc_info.value)

    def test_directory_is_read_error(self, tmp_path):
        """Test a directory cannot be walked."""
        with pytest.raises(XmlProcessingError) as exc_info:
            process_xml_file(tmp_path, XmlProcessor())

        assert exc_info.value.kind is XmlErrorKind.READ_ERROR

    def test_doctype_rejected(self):
        """Test DOCTYPE declarations abort the walk."""
        with pytest.raises(XmlProcessingError) as exc_info:
            process_xml("<!DOCTYPE a><a/>", XmlProcessor())

        assert exc_info.value.kind is XmlErrorKind.DTD_FORBIDDEN

    def test_external_entity_never_resolved(self, tmp_path):
        """Test external entity declarations are refused before any fetch."""
        secret = tmp_path / "secret.txt"
        secret.write_text("top secret", encoding="utf-8")
        xml = (
            f'<!DOCTYPE a [<!ENTITY x SYSTEM "{secret.as_uri()}">]>'
            "<a>&x;</a>"
        )
        processor = RecordingProcessor()

        with pytest.raises(XmlProcessingError) as exc_info:
            process_xml(xml, processor)

        assert exc_info.value.kind is XmlErrorKind.DTD_FORBIDDEN
        assert all("top secret" not in str(e) for e in processor.events)

    def test_processor_errors_propagate(self):
        """Test exceptions from the processor are not rewrapped."""
        class Failing(XmlProcessor):
            def process_element_start(self, trail, element):
                raise ValueError("processor failure")

        with pytest.raises(ValueError, match="processor failure"):
            process_xml("<a/>", Failing())

    def test_processor_os_errors_propagate(self):
        """Test OS errors from the processor are not mistaken for read errors."""
        class BrokenOutput(XmlProcessor):
            def process_element_start(self, trail, element):
                raise BrokenPipeError("output closed")

        with pytest.raises(BrokenPipeError, match="output closed"):
            process_xml("<a/>", BrokenOutput())

    def test_handle_read_failure(self):
        """Test a handle failing mid-read is reported as a read error."""
        class FailingHandle(io.BytesIO):
            name = "flaky.xml"

            def read(self, size=-1):
                if self.tell() > 0:
                    raise OSError("device gone")
                return super().read(size)

        handle = FailingHandle(b"<root><child/></root>")
        with pytest.raises(XmlProcessingError) as exc_info:
            process_xml_file(handle, XmlProcessor(), WalkerConfig(chunk_size=4))

        assert exc_info.value.kind is XmlErrorKind.READ_ERROR
        assert exc_info.value.source == "flaky.xml"
        assert isinstance(exc_info.value.__cause__, OSError)


class TestTrailTarget:
    """Test the parser target directly for degenerate events."""

    def test_closing_mismatch_raises(self):
        """Test a closing tag that is not the trail tail is an invariant error."""
        target = _TrailTarget(XmlProcessor(), WalkSummary(source="test"))
        target.start("a", {})

        with pytest.raises(TrailInvariantError):
            target.end("b")

    def test_closing_on_empty_trail_raises(self):
        """Test an end event with an empty trail is an invariant error."""
        target = _TrailTarget(XmlProcessor(), WalkSummary(source="test"))
        with pytest.raises(TrailInvariantError):
            target.end("a")

    def test_lenient_mode_pops(self):
        """Test mismatches are tolerated when strict checks are off."""
        processor = RecordingProcessor()
        target = _TrailTarget(processor, WalkSummary(source="test"), strict_trail=False)
        target.start("a", {})
        target.end("b")

        assert target.trail == []
        assert processor.events[-1] == ("end", ("a",), "b")

    def test_empty_tag_pushed_without_start_hook(self):
        """Test an empty tag name keeps depth but skips the start hook."""
        processor = RecordingProcessor()
        summary = WalkSummary(source="test")
        target = _TrailTarget(processor, summary)

        target.start("a", {})
        target.start("", {})
        assert target.trail == ["a", ""]
        assert summary.max_depth == 2
        assert processor.events == [("start", ("a",), "a")]

        target.data("inside")
        target.end("")
        assert processor.events[-2:] == [
            ("chars", ("a", ""), "inside"),
            ("end", ("a", ""), ""),
        ]
        assert target.trail == ["a"]

    def test_close_flushes_pending_text(self):
        """Test pending text is flushed when the parser closes."""
        processor = RecordingProcessor()
        target = _TrailTarget(processor, WalkSummary(source="test"))
        target.data("  tail  ")
        target.close()

        assert processor.events == [("chars", (), "tail")]
