"""Unit tests for chunk parsing and the stream consumer."""
import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from streamchat.chat import ChunkKind, ConsumerState, StreamConsumer, parse_chunk
from streamchat.llm import ByteStream
from streamchat.store import ChatStore, Conversation, IdGenerator


async def _iterate(chunks):
    for chunk in chunks:
        yield chunk


def _delta_line(text):
    return (json.dumps({"type": "content_block_delta", "delta": {"text": text}}, ensure_ascii=False) + "\n").encode()


@pytest.fixture
def conversation_store(store):
    store.add_conversation(Conversation(id="c1", title="Chat"))
    return store


class TestParseChunk:
    """Tests for parse_chunk()."""

    def test_delta(self, delta):
        results = parse_chunk(delta("Hel"))

        assert len(results) == 1
        assert results[0].kind is ChunkKind.DELTA
        assert results[0].fragment == "Hel"

    def test_non_delta_event_is_ignored(self, raw_event):
        results = parse_chunk(raw_event({"type": "content_block_start", "index": 0}))

        assert results[0].kind is ChunkKind.IGNORED
        assert results[0].event_type == "content_block_start"

    def test_invalid_json_is_malformed(self):
        results = parse_chunk(b"{not json\n")

        assert [r.kind for r in results] == [ChunkKind.MALFORMED]

    def test_json_array_is_malformed(self):
        assert parse_chunk(b"[1, 2]")[0].kind is ChunkKind.MALFORMED

    def test_delta_without_text_is_ignored(self, raw_event):
        chunk = raw_event({
            "type": "content_block_delta",
            "delta": {"type": "input_json_delta", "partial_json": "{"},
        })

        assert parse_chunk(chunk)[0].kind is ChunkKind.IGNORED

    def test_multiple_lines_in_one_chunk(self, delta):
        results = parse_chunk(delta("a") + b"garbage\n" + delta("b"))

        assert [r.kind for r in results] == [ChunkKind.DELTA, ChunkKind.MALFORMED, ChunkKind.DELTA]

    def test_blank_chunk_yields_nothing(self):
        assert parse_chunk(b"\n\n  \n") == []

    def test_invalid_utf8_is_malformed(self):
        assert parse_chunk(b"\xff\xfe\n")[0].kind is ChunkKind.MALFORMED

    def test_usage_from_message_start(self, raw_event):
        chunk = raw_event({
            "type": "message_start",
            "message": {"usage": {"input_tokens": 12, "output_tokens": 1}},
        })

        assert parse_chunk(chunk)[0].usage == {"input_tokens": 12, "output_tokens": 1}

    def test_usage_from_message_delta(self, raw_event):
        chunk = raw_event({"type": "message_delta", "usage": {"output_tokens": 40}})

        assert parse_chunk(chunk)[0].usage == {"output_tokens": 40}

    @given(st.binary(max_size=200))
    def test_never_raises(self, data):
        """Arbitrary bytes parse into results instead of raising."""
        for result in parse_chunk(data):
            assert result.kind in set(ChunkKind)


class TestStreamConsumer:
    """Tests for StreamConsumer."""

    def test_fragments_accumulate_and_commit(self, conversation_store, ids, delta):
        updates = []
        consumer = StreamConsumer(conversation_store, "c1", on_update=updates.append, id_generator=ids)

        consumer.feed(delta("Hel"))
        consumer.feed(delta("lo"))
        message = consumer.finish()

        assert [u.content for u in updates] == ["Hel", "Hello"]
        assert message.content == "Hello"
        assert message.role == "assistant"
        assert consumer.state is ConsumerState.DONE
        assert conversation_store.get_conversation("c1").messages[-1].content == "Hello"

    def test_pending_id_is_committed_id(self, conversation_store, ids, delta):
        consumer = StreamConsumer(conversation_store, "c1", id_generator=ids)
        pending_id = consumer.pending.id

        consumer.feed(delta("x"))

        assert consumer.finish().id == pending_id

    def test_malformed_chunk_between_deltas_is_skipped(self, conversation_store, ids, delta):
        consumer = StreamConsumer(conversation_store, "c1", id_generator=ids)

        consumer.feed(delta("Hel"))
        consumer.feed(b"not json at all")
        consumer.feed(delta("lo"))

        assert consumer.skipped == 1
        assert consumer.finish().content == "Hello"

    def test_empty_response_commits_nothing(self, conversation_store, ids, raw_event):
        consumer = StreamConsumer(conversation_store, "c1", id_generator=ids)

        consumer.feed(raw_event({"type": "message_stop"}))

        assert consumer.finish() is None
        assert conversation_store.get_conversation("c1").messages == []

    def test_whitespace_only_response_commits_nothing(self, conversation_store, ids, delta):
        consumer = StreamConsumer(conversation_store, "c1", id_generator=ids)

        consumer.feed(delta("  \n "))

        assert consumer.finish() is None

    def test_feed_after_finish_raises(self, conversation_store, ids, delta):
        consumer = StreamConsumer(conversation_store, "c1", id_generator=ids)
        consumer.finish()

        with pytest.raises(RuntimeError):
            consumer.feed(delta("late"))

    def test_usage_is_tracked(self, conversation_store, ids, raw_event):
        consumer = StreamConsumer(conversation_store, "c1", id_generator=ids)

        consumer.feed(raw_event({"type": "message_start", "message": {"usage": {"input_tokens": 7}}}))
        consumer.feed(raw_event({"type": "message_delta", "usage": {"output_tokens": 3}}))

        assert consumer.usage == {"input_tokens": 7, "output_tokens": 3}

    @pytest.mark.asyncio
    async def test_consume_reads_to_end_and_closes(self, conversation_store, ids, delta):
        closed = []

        async def on_close():
            closed.append(True)

        stream = ByteStream(_iterate([delta("Hel"), delta("lo")]), on_close=on_close)
        consumer = StreamConsumer(conversation_store, "c1", id_generator=ids)

        message = await consumer.consume(stream)

        assert message.content == "Hello"
        assert stream.closed
        assert closed == [True]

    @pytest.mark.asyncio
    async def test_consume_closes_stream_on_error(self, store, ids, delta):
        # Committing into a missing conversation fails after the stream ends
        stream = ByteStream(_iterate([delta("x")]))
        consumer = StreamConsumer(store, "missing", id_generator=ids)

        with pytest.raises(KeyError):
            await consumer.consume(stream)

        assert stream.closed

    @given(st.lists(st.text(max_size=10), max_size=10))
    def test_content_is_concatenation_of_fragments(self, fragments):
        """The pending content is always the in-order join of the deltas."""
        store = ChatStore()
        store.add_conversation(Conversation(id="c1", title="Chat"))
        consumer = StreamConsumer(store, "c1", id_generator=IdGenerator())
        for fragment in fragments:
            consumer.feed(_delta_line(fragment))

        assert consumer.pending.content == "".join(fragments)
