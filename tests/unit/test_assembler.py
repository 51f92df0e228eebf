"""Unit tests for folding stream events into a thread."""

import logging

import pytest_check as check

from src.streaming.assembler import MessageAssembler
from src.streaming.decoder import iter_payloads
from src.streaming.events import TextDelta, ThreadCreated, Unrecognized, interpret_stream
from src.threads.store import STORAGE_KEY, ThreadStore
from tests.helpers import aiter_chunks, encode_sse, item_delta, split_every, text_delta, thread_created


def assistant_messages(store: ThreadStore, thread_id: str) -> list[str]:
    thread = store.get(thread_id)
    assert thread is not None
    return [m.content for m in thread.messages if m.role == "assistant"]


class TestApply:
    """Tests for applying individual events."""

    def test_deltas_upsert_single_message(self, store: ThreadStore) -> None:
        thread_id = store.active.id
        store.add_user_message(thread_id, "Hello")
        assembler = MessageAssembler(store, thread_id)

        assembler.apply(TextDelta(text="Hi"))
        assembler.apply(TextDelta(text=" there"))

        messages = store.active.messages
        check.equal([(m.role, m.content) for m in messages], [("user", "Hello"), ("assistant", "Hi there")])
        check.equal(messages[1].id, assembler.message_id)
        check.equal(assembler.content, "Hi there")

    def test_each_delta_is_persisted(self, storage, store: ThreadStore) -> None:
        assembler = MessageAssembler(store, store.active.id)

        assembler.apply(TextDelta(text="streaming"))

        assert "streaming" in storage[STORAGE_KEY]

    def test_thread_created_first_writer_wins(self, store: ThreadStore, caplog) -> None:
        assembler = MessageAssembler(store, store.active.id)

        with caplog.at_level(logging.INFO, logger="src.streaming.assembler"):
            assembler.apply(ThreadCreated(remote_thread_id="thr_1"))
            assembler.apply(ThreadCreated(remote_thread_id="thr_2"))

        check.equal(store.active.remote_thread_id, "thr_1")
        check.is_in("ignoring thr_2", caplog.text)

    def test_unrecognized_is_ignored(self, storage, store: ThreadStore) -> None:
        before = storage[STORAGE_KEY]

        MessageAssembler(store, store.active.id).apply(Unrecognized(type="progress_update"))

        assert storage[STORAGE_KEY] == before
        assert store.active.messages == []

    def test_finish_starts_a_fresh_turn(self, store: ThreadStore) -> None:
        assembler = MessageAssembler(store, store.active.id)
        assembler.apply(TextDelta(text="first"))
        first_id = assembler.message_id

        assembler.finish()
        assembler.apply(TextDelta(text="second"))

        check.not_equal(assembler.message_id, first_id)
        check.equal(assistant_messages(store, store.active.id), ["first", "second"])


class TestBoundThread:
    """The assembler writes to the thread captured at send time."""

    def test_switching_threads_mid_stream(self, store: ThreadStore) -> None:
        original = store.active.id
        assembler = MessageAssembler(store, original)
        assembler.apply(TextDelta(text="Hi"))

        store.create()
        assembler.apply(TextDelta(text=" there"))
        assembler.apply(ThreadCreated(remote_thread_id="thr_1"))

        check.equal(store.active.messages, [])
        check.is_none(store.active.remote_thread_id)
        check.equal(assistant_messages(store, original), ["Hi there"])
        check.equal(store.get(original).remote_thread_id, "thr_1")

    def test_deleted_thread_discards_output(self, store: ThreadStore, caplog) -> None:
        store.create()
        doomed = store.active.id
        assembler = MessageAssembler(store, doomed)

        store.delete(0)
        with caplog.at_level(logging.WARNING, logger="src.streaming.assembler"):
            assembler.apply(TextDelta(text="late"))
            assembler.apply(ThreadCreated(remote_thread_id="thr_late"))

        check.is_none(store.get(doomed))
        check.equal(len(store), 1)
        check.equal(store.active.messages, [])
        check.is_in("no longer exists", caplog.text)


class TestAssemble:
    """Tests for folding a whole event stream."""

    async def test_assemble_returns_text_and_resets(self, store: ThreadStore) -> None:
        assembler = MessageAssembler(store, store.active.id)

        async def events():
            yield ThreadCreated(remote_thread_id="thr_1")
            yield TextDelta(text="Hi")
            yield Unrecognized(type="thread.item.done")
            yield TextDelta(text=" there")

        text = await assembler.assemble(events())

        check.equal(text, "Hi there")
        check.equal(assembler.content, "")
        check.equal(assistant_messages(store, store.active.id), ["Hi there"])

    async def test_byte_chunking_does_not_change_text(self) -> None:
        """The same stream chunked differently assembles identical text."""
        stream = encode_sse(
            thread_created("thr_1"),
            text_delta("Über "),
            "{broken",
            item_delta("naïve ", "çafé"),
            "[DONE]",
            text_delta(" ☕"),
        )
        results = []
        for size in (len(stream), 1, 2, 7, 64):
            store = ThreadStore({})
            assembler = MessageAssembler(store, store.active.id)
            events = interpret_stream(iter_payloads(aiter_chunks(split_every(stream, size))))
            await assembler.assemble(events)
            results.append(assistant_messages(store, store.active.id))

        assert all(result == ["Über naïve çafé ☕"] for result in results)
