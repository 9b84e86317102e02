"""Tests for event-stream demultiplexing."""

import json

import pytest

from companion_ai.core.exceptions import ProviderError
from companion_ai.providers.ai.streaming import (
    ANTHROPIC_STREAM,
    GEMINI_STREAM,
    OPENAI_STREAM,
    StreamDemultiplexer,
    stream_error_message,
)


def openai_frame(text):
    return f"data: {json.dumps({'choices': [{'index': 0, 'delta': {'content': text}}]})}\n\n"


def gemini_frame(text):
    record = {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}
    return f"data: {json.dumps(record)}\r\n\r\n"


def split_every(data: bytes, size: int):
    return [data[i:i + size] for i in range(0, len(data), size)]


def decode_chunks(chunks, dialect):
    demux = StreamDemultiplexer(dialect)
    fragments = []
    for chunk in chunks:
        fragments.extend(demux.feed(chunk))
    return fragments + demux.close()


class TestStreamDemultiplexer:
    """Tests for StreamDemultiplexer."""

    def setup_method(self):
        self.pieces = ["Shall ", "we play ", "a game?"]
        body = "".join(openai_frame(piece) for piece in self.pieces) + "data: [DONE]\n\n"
        self.body = body.encode("utf-8")

    def test_whole_body(self):
        """Test decoding a body delivered in one chunk."""
        assert decode_chunks([self.body], OPENAI_STREAM) == self.pieces

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 16, 64])
    def test_arbitrary_chunk_boundaries(self, size):
        """Test that split points never change the decoded text."""
        fragments = decode_chunks(split_every(self.body, size), OPENAI_STREAM)
        assert "".join(fragments) == "Shall we play a game?"

    def test_done_sentinel_is_not_decoded(self):
        """Test that the [DONE] sentinel is skipped rather than dropped."""
        demux = StreamDemultiplexer(OPENAI_STREAM)
        demux.feed(self.body)
        demux.close()

        assert demux.frames_decoded == 3
        assert demux.frames_dropped == 0

    def test_malformed_line_is_skipped(self):
        """Test that a truncated data line is dropped and later lines still decode."""
        body = (
            'data: {"choices": [{"delta": {"content": "GREET\n'
            + openai_frame("GREETINGS ")
            + openai_frame("PROFESSOR FALKEN.")
        ).encode("utf-8")
        demux = StreamDemultiplexer(OPENAI_STREAM)

        fragments = demux.feed(body) + demux.close()

        assert fragments == ["GREETINGS ", "PROFESSOR FALKEN."]
        assert demux.frames_dropped == 1

    def test_non_data_lines_ignored(self):
        """Test that event and comment lines are ignored."""
        body = (
            "event: message_start\n"
            'data: {"type": "message_start", "message": {"id": "msg_1"}}\n\n'
            ": keep-alive\n"
            "event: content_block_delta\n"
            'data: {"type": "content_block_delta", "index": 0, '
            '"delta": {"type": "text_delta", "text": "INTERESTING."}}\n\n'
            'data: {"type": "message_stop"}\n\n'
        ).encode("utf-8")

        assert decode_chunks([body], ANTHROPIC_STREAM) == ["INTERESTING."]

    def test_anthropic_ignores_non_text_deltas(self):
        """Test that tool-input deltas carry no text."""
        body = (
            'data: {"type": "content_block_delta", "index": 0, '
            '"delta": {"type": "input_json_delta", "partial_json": "{\\"q\\""}}\n\n'
        ).encode("utf-8")

        assert decode_chunks([body], ANTHROPIC_STREAM) == []

    def test_trailing_line_without_newline(self):
        """Test that the last frame is decoded even without a final newline."""
        body = (gemini_frame("hi ") + gemini_frame("there").rstrip()).encode("utf-8")

        assert decode_chunks(split_every(body, 5), GEMINI_STREAM) == ["hi ", "there"]

    def test_multibyte_character_split(self):
        """Test UTF-8 sequences split across chunks."""
        body = gemini_frame("café ☕ time").encode("utf-8")
        # json.dumps escapes non-ASCII by default; send raw UTF-8 instead
        body = body.replace(b"\\u00e9", "é".encode()).replace(b"\\u2615", "☕".encode())

        fragments = decode_chunks(split_every(body, 1), GEMINI_STREAM)

        assert "".join(fragments) == "café ☕ time"

    def test_empty_text_produces_no_delta(self):
        """Test that records with empty text are not emitted."""
        body = (openai_frame("") + openai_frame("A")).encode("utf-8")
        assert decode_chunks([body], OPENAI_STREAM) == ["A"]

    def test_non_object_record_dropped(self):
        """Test that JSON values other than objects are dropped."""
        demux = StreamDemultiplexer(GEMINI_STREAM)
        assert demux.decode_line("data: [1, 2, 3]") is None
        assert demux.frames_dropped == 1

    def test_anthropic_error_event_raises(self):
        """Test that an in-band error event ends the stream with ProviderError."""
        body = (
            "event: content_block_delta\n"
            'data: {"type": "content_block_delta", "index": 0, '
            '"delta": {"type": "text_delta", "text": "THINKING"}}\n\n'
            "event: error\n"
            'data: {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}\n\n'
        ).encode("utf-8")
        demux = StreamDemultiplexer(ANTHROPIC_STREAM)

        with pytest.raises(ProviderError, match="Overloaded") as exc_info:
            demux.feed(body)

        assert exc_info.value.provider == "anthropic"

    def test_openai_error_record_raises(self):
        body = b'data: {"error": {"message": "The server had an error", "type": "server_error"}}\n\n'

        with pytest.raises(ProviderError, match="The server had an error"):
            decode_chunks([body], OPENAI_STREAM)

    @pytest.mark.parametrize(
        "record,expected",
        [
            ({"type": "error", "error": {"message": "Overloaded"}}, "Overloaded"),
            ({"type": "error"}, "Stream error"),
            ({"error": {"code": 500}}, "Stream error"),
            ({"error": "plain string"}, None),
            ({"type": "message_stop"}, None),
        ],
    )
    def test_stream_error_message(self, record, expected):
        assert stream_error_message(record) == expected
