"""Tests for result sinks."""

import io
import json

import pytest

from tagger.output import CollectSink, JsonLinesSink, Sink, TextSink, create_sink, decode_path


class TestTextSink:
    def test_line_format_sorted_tags(self):
        buf = io.StringIO()
        TextSink(buf).emit(b"servers.web01.", {"b=2", "a=1"})
        assert buf.getvalue() == "servers.web01. a=1,b=2\n"

    def test_undecodable_bytes_survive(self):
        buf = io.StringIO()
        TextSink(buf).emit(b"bad\xff.", {"t"})
        assert buf.getvalue().encode("utf-8", errors="surrogateescape") == b"bad\xff. t\n"

    def test_raw_bytes_through_strict_stream(self):
        """A strict UTF-8 text stream still receives non-UTF-8 paths verbatim."""
        raw = io.BytesIO()
        stream = io.TextIOWrapper(raw, encoding="utf-8", errors="strict")
        sink = TextSink(stream)
        sink.emit(b"a.ok", {"t"})
        sink.emit(b"a.bad\xff", {"t"})
        stream.flush()
        assert raw.getvalue() == b"a.ok t\na.bad\xff t\n"

    def test_pending_text_written_first(self):
        raw = io.BytesIO()
        stream = io.TextIOWrapper(raw, encoding="utf-8")
        stream.write("header\n")
        TextSink(stream).emit(b"a.", {"t"})
        stream.flush()
        assert raw.getvalue() == b"header\na. t\n"

    def test_defaults_to_stdout(self, capsys):
        TextSink().emit(b"a.", ["t"])
        assert capsys.readouterr().out == "a. t\n"


class TestJsonLinesSink:
    def test_one_object_per_line(self):
        buf = io.StringIO()
        sink = JsonLinesSink(buf)
        sink.emit(b"a.", {"y", "x"})
        sink.emit(b"a.b", {"x"})
        lines = buf.getvalue().splitlines()
        assert [json.loads(line) for line in lines] == [
            {"path": "a.", "tags": ["x", "y"]},
            {"path": "a.b", "tags": ["x"]},
        ]

    def test_undecodable_bytes_escaped(self):
        buf = io.StringIO()
        JsonLinesSink(buf).emit(b"bad\xff", {"t"})
        assert json.loads(buf.getvalue())["path"] == "bad\\xff"


class TestCollectSink:
    def test_keeps_order_and_snapshots(self):
        sink = CollectSink()
        tags = {"a"}
        sink.emit(b"x", tags)
        tags.add("b")
        sink.emit(b"y", tags)
        assert sink.results == [(b"x", frozenset({"a"})), (b"y", frozenset({"a", "b"}))]
        assert sink.as_dict()[b"x"] == frozenset({"a"})


class TestCreateSink:
    def test_text(self):
        assert isinstance(create_sink("text"), TextSink)

    def test_jsonl(self):
        buf = io.StringIO()
        sink = create_sink("jsonl", buf)
        assert isinstance(sink, JsonLinesSink)
        assert sink.stream is buf

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown output format"):
            create_sink("csv")

    def test_sinks_satisfy_protocol(self):
        for sink in (TextSink(io.StringIO()), JsonLinesSink(io.StringIO()), CollectSink()):
            assert isinstance(sink, Sink)


def test_decode_path():
    assert decode_path(b"caf\xc3\xa9") == "café"
    assert decode_path(b"\xff") == "\udcff"
