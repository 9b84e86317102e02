"""Server-sent event decoding for the provider streaming dialects."""

import codecs
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

import structlog

from ...core.exceptions import ProviderError


logger = structlog.get_logger()


DATA_MARKER = "data:"
# Error events arrive in-band on an already successful response
IN_BAND_STATUS = 200


def _openai_text(record: Dict[str, Any]) -> str:
    choices = record.get("choices") or []
    if not choices:
        return ""
    delta = choices[0].get("delta") or {}
    return delta.get("content") or ""


def _anthropic_text(record: Dict[str, Any]) -> str:
    if record.get("type") != "content_block_delta":
        return ""
    delta = record.get("delta") or {}
    return delta.get("text") or ""


def _gemini_text(record: Dict[str, Any]) -> str:
    candidates = record.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text") or "" for part in parts if isinstance(part, dict))


def stream_error_message(record: Dict[str, Any]) -> Optional[str]:
    """Message of an in-band error record, or None for ordinary records."""
    error = record.get("error")
    if record.get("type") != "error" and not isinstance(error, dict):
        return None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return "Stream error"


@dataclass(frozen=True)
class StreamDialect:
    """Where a provider puts its text inside each event-stream record."""
    name: str
    extract_text: Callable[[Dict[str, Any]], str]
    # Payload that marks end-of-stream and must not be decoded
    sentinel: Optional[str] = None
    marker: str = DATA_MARKER


OPENAI_STREAM = StreamDialect("openai", _openai_text, sentinel="[DONE]")
ANTHROPIC_STREAM = StreamDialect("anthropic", _anthropic_text)
GEMINI_STREAM = StreamDialect("gemini", _gemini_text)


class StreamDemultiplexer:
    """
    Turns raw byte chunks of an event stream into ordered text fragments.

    Partial lines (and partial UTF-8 sequences) are carried over to the next
    chunk, so the split points of the transport never change the decoded
    text. Data lines that fail to decode are dropped.
    """

    def __init__(self, dialect: StreamDialect):
        self.dialect = dialect
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.frames_decoded = 0
        self.frames_dropped = 0

    def feed(self, chunk: bytes) -> List[str]:
        """Consume one chunk and return the text fragments it completed."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._process(lines)

    def close(self) -> List[str]:
        """Flush whatever is left once the body has ended."""
        remaining = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        if not remaining:
            return []
        return self._process([remaining])

    def _process(self, lines: Iterable[str]) -> List[str]:
        fragments = []
        for line in lines:
            text = self.decode_line(line)
            if text:
                fragments.append(text)
        return fragments

    def decode_line(self, line: str) -> Optional[str]:
        """Return the text carried by one event-stream line, if any."""
        line = line.strip()
        if not line.startswith(self.dialect.marker):
            return None

        payload = line[len(self.dialect.marker):].strip()
        if self.dialect.sentinel is not None and payload == self.dialect.sentinel:
            return None

        try:
            record = json.loads(payload)
        except ValueError:
            self.frames_dropped += 1
            logger.debug(
                "Dropped undecodable stream frame",
                dialect=self.dialect.name,
                frame=payload[:100],
            )
            return None

        if not isinstance(record, dict):
            self.frames_dropped += 1
            return None

        message = stream_error_message(record)
        if message:
            logger.error(
                "Provider reported an error mid-stream",
                dialect=self.dialect.name,
                error=message,
            )
            raise ProviderError(self.dialect.name, IN_BAND_STATUS, message)

        self.frames_decoded += 1
        return self.dialect.extract_text(record) or None
