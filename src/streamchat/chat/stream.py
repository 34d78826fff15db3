"""Stream consumer: incremental assembly of an assistant message.

Reads chunks from a ByteStream, parses each one into explicit results and
appends text deltas to a pending message. The pending message is published
after every fragment and committed to the store once the stream ends.
"""

import json
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel

from ..llm import ByteStream
from ..store import ChatStore, IdGenerator, Message, PendingMessage
from ..store.ids import default_id_generator

logger = logging.getLogger(__name__)

CONTENT_DELTA_EVENT = "content_block_delta"


class ChunkKind(str, Enum):
    """Outcome of parsing one event line."""

    DELTA = "delta"          # Text fragment to append
    IGNORED = "ignored"      # Valid event that carries no text
    MALFORMED = "malformed"  # Not a JSON object; skipped


class ChunkResult(BaseModel):
    """Parse result for one event line."""

    kind: ChunkKind
    fragment: str | None = None
    event_type: str | None = None
    usage: dict[str, int] | None = None


class ConsumerState(str, Enum):
    STREAMING = "streaming"
    DONE = "done"


def _parse_event(line: str) -> ChunkResult:
    try:
        event = json.loads(line)
    except json.JSONDecodeError:
        return ChunkResult(kind=ChunkKind.MALFORMED)
    if not isinstance(event, dict):
        return ChunkResult(kind=ChunkKind.MALFORMED)

    event_type = event.get("type")
    if event_type == CONTENT_DELTA_EVENT:
        delta = event.get("delta")
        text = delta.get("text") if isinstance(delta, dict) else None
        if isinstance(text, str):
            return ChunkResult(kind=ChunkKind.DELTA, fragment=text, event_type=event_type)

    return ChunkResult(
        kind=ChunkKind.IGNORED,
        event_type=event_type if isinstance(event_type, str) else None,
        usage=_extract_usage(event),
    )


def _extract_usage(event: dict[str, Any]) -> dict[str, int] | None:
    # message_start carries input tokens, message_delta cumulative output tokens
    if event.get("type") == "message_start":
        message = event.get("message")
        usage = message.get("usage") if isinstance(message, dict) else None
    elif event.get("type") == "message_delta":
        usage = event.get("usage")
    else:
        return None
    if not isinstance(usage, dict):
        return None
    return {k: v for k, v in usage.items() if k in ("input_tokens", "output_tokens") and isinstance(v, int)}


def parse_chunk(chunk: bytes) -> list[ChunkResult]:
    """Parse a raw chunk into one result per newline-delimited event.

    Undecodable bytes are replaced rather than raised, so a corrupt chunk
    ends up as a MALFORMED result.
    """
    text = chunk.decode("utf-8", errors="replace")
    return [_parse_event(line) for line in text.split("\n") if line.strip()]


class StreamConsumer:
    """Two-state consumer (STREAMING -> DONE) for one assistant response.

    Usage:
        consumer = StreamConsumer(store, conversation_id, on_update=show)
        message = await consumer.consume(response.stream)
    """

    def __init__(
        self,
        store: ChatStore,
        conversation_id: str,
        on_update: Callable[[PendingMessage], None] | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self._store = store
        self._conversation_id = conversation_id
        self._on_update = on_update
        self._ids = id_generator or default_id_generator
        self._state = ConsumerState.STREAMING
        self._usage = {"input_tokens": 0, "output_tokens": 0}
        self._skipped = 0
        self.pending = PendingMessage(id=self._ids())

    @property
    def state(self) -> ConsumerState:
        return self._state

    @property
    def usage(self) -> dict[str, int]:
        """Token usage seen on the stream (complete once DONE)."""
        return dict(self._usage)

    @property
    def skipped(self) -> int:
        """Number of malformed event lines skipped."""
        return self._skipped

    def feed(self, chunk: bytes) -> None:
        """Apply one raw chunk to the pending message."""
        if self._state is ConsumerState.DONE:
            raise RuntimeError("Stream consumer already finished")

        for result in parse_chunk(chunk):
            if result.kind is ChunkKind.DELTA:
                self.pending.append(result.fragment)
                if self._on_update is not None:
                    self._on_update(self.pending.model_copy())
            elif result.kind is ChunkKind.MALFORMED:
                self._skipped += 1
                logger.debug("Skipped malformed chunk (%d bytes)", len(chunk))
            elif result.usage:
                self._usage.update(result.usage)

    def finish(self) -> Message | None:
        """Transition to DONE; commit the message if it has content."""
        self._state = ConsumerState.DONE
        if not self.pending.content.strip():
            logger.debug("Stream ended with no content; nothing committed")
            return None
        message = self.pending.freeze()
        self._store.add_message(self._conversation_id, message)
        logger.debug(
            "Committed assistant message %s (%d chars, %d skipped chunks)",
            message.id, len(message.content), self._skipped,
        )
        return message

    async def consume(self, stream: ByteStream) -> Message | None:
        """Read the stream to the end and return the committed message, if any."""
        try:
            while True:
                chunk = await stream.read()
                if chunk is None:
                    break
                self.feed(chunk)
        finally:
            await stream.aclose()
        return self.finish()
