import codecs
import json
from typing import Any, AsyncGenerator, AsyncIterable

import structlog

from chathub.services.ollama.ollama_types import ChunkRecord


logger = structlog.get_logger(__name__)

MAX_LOGGED_LINE_LENGTH = 200


class ChunkStreamDecoder:
    """
    Turns a newline-delimited JSON byte feed into parsed records.

    Network chunks do not line up with records: one chunk may carry several
    records, and one record may be split across chunks. Incomplete trailing
    lines stay buffered until the next `feed` or `flush`.
    """

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.skipped_lines = 0

    def feed(self, data: bytes) -> list[dict[str, Any]]:
        self._buffer += self._utf8.decode(data)
        if "\n" not in self._buffer:
            return []

        *lines, self._buffer = self._buffer.split("\n")
        return self._parse_lines(lines)

    def flush(self) -> list[dict[str, Any]]:
        """Parse whatever is left once the upstream closes the stream"""
        self._buffer += self._utf8.decode(b"", final=True)
        remaining, self._buffer = self._buffer, ""
        return self._parse_lines([remaining])

    def _parse_lines(self, lines: list[str]) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        for line in lines:
            line = line.strip()
            if not line:
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError as e:
                self._skip(line, str(e))
                continue
            if not isinstance(payload, dict):
                self._skip(line, "record is not a JSON object")
                continue
            records.append(payload)
        return records

    def _skip(self, line: str, reason: str) -> None:
        self.skipped_lines += 1
        logger.warning(
            "malformed_chunk_skipped",
            reason=reason,
            line=line[:MAX_LOGGED_LINE_LENGTH],
        )


async def decode_stream(chunks: AsyncIterable[bytes]) -> AsyncGenerator[dict[str, Any], None]:
    """Yield parsed records from an async byte stream, in arrival order"""
    decoder = ChunkStreamDecoder()
    async for chunk in chunks:
        for payload in decoder.feed(chunk):
            yield payload
    for payload in decoder.flush():
        yield payload


class GenerationAccumulator:
    """Folds generate-stream records into the full response text and final context"""

    def __init__(self) -> None:
        self.text = ""
        self.context: list[Any] = []
        self.model: str | None = None
        self.done = False

    def add(self, record: ChunkRecord) -> None:
        if record.response:
            self.text += record.response
        if record.model:
            self.model = record.model
        if record.done:
            self.done = True
            # Replaced, never merged: only the final record's context is meaningful
            self.context = record.context or []
