from __future__ import annotations

import asyncio
from pathlib import Path
import sys
import threading

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from trustai.core.errors import BatchInProgressError, UpstreamError
from trustai.domain import ItemKind, ItemStatus
from trustai.infrastructure import ItemStore
from trustai.workers.queue import QueueProcessor


class RecordingAdapter:
    """Adapter double answering from a name -> text/exception mapping."""

    def __init__(self, store: ItemStore, answers: dict[str, object] | None = None) -> None:
        self.store = store
        self.answers = answers or {}
        self.calls: list[tuple[str, object]] = []
        self.seen_statuses: list[ItemStatus] = []

    def _answer(self, key: str, fallback: str) -> str:
        processing = self.store.items_by_status(ItemStatus.PROCESSING)
        self.seen_statuses.extend(item.status for item in processing)
        answer = self.answers.get(key, fallback)
        if isinstance(answer, Exception):
            raise answer
        return answer  # type: ignore[return-value]

    def transcribe(self, payload: bytes, filename: str) -> str:
        self.calls.append((filename, payload))
        return self._answer(filename, f"transcript of {filename}")

    def extract_text(self, payload: bytes, mime_type: str) -> str:
        self.calls.append((mime_type, payload))
        return self._answer(payload.decode(), f"text of {payload.decode()}")


def _processor(store: ItemStore, adapter: RecordingAdapter) -> QueueProcessor:
    return QueueProcessor(store, transcription=adapter, extraction=adapter)


def test_single_audio_item_completes_with_adapter_output():
    store = ItemStore()
    adapter = RecordingAdapter(store, {"call.mp3": "<adapter output>"})
    item_id = store.add_item(ItemKind.AUDIO, "call.mp3", b"audio-bytes")
    assert store.get_item(item_id).status is ItemStatus.PENDING

    result = asyncio.run(_processor(store, adapter).run(ItemKind.AUDIO))

    item = store.get_item(item_id)
    assert adapter.seen_statuses == [ItemStatus.PROCESSING]
    assert item.status is ItemStatus.COMPLETED
    assert item.content == "<adapter output>"
    assert item.source_payload is None
    assert adapter.calls == [("call.mp3", b"audio-bytes")]
    assert result.combined[0] == "### call.mp3\n<adapter output>"
    assert result.attempted == [item_id]


def test_failing_item_is_isolated_from_the_batch():
    store = ItemStore()
    adapter = RecordingAdapter(store, {"second": UpstreamError("service unavailable")})
    first = store.add_item(ItemKind.IMAGE_TEXT, "first.png", b"first")
    second = store.add_item(ItemKind.IMAGE_TEXT, "second.png", b"second")

    result = asyncio.run(_processor(store, adapter).run(ItemKind.IMAGE_TEXT))

    assert store.get_item(first).status is ItemStatus.COMPLETED
    failed = store.get_item(second)
    assert failed.status is ItemStatus.ERROR
    assert failed.content is None
    assert failed.error == "service unavailable"
    assert result.failed == [second]
    assert [entry.name for entry in result.completed] == ["first.png"]
    assert len(store.completed_entries(ItemKind.IMAGE_TEXT)) == 1


def test_every_pending_item_reaches_a_terminal_state():
    store = ItemStore()
    names = [f"rec-{index}.mp3" for index in range(6)]
    adapter = RecordingAdapter(
        store,
        {"rec-1.mp3": UpstreamError("timeout"), "rec-3.mp3": RuntimeError("bug in adapter")},
    )
    ids = [store.add_item(ItemKind.AUDIO, name, name.encode()) for name in names]

    result = asyncio.run(_processor(store, adapter).run(ItemKind.AUDIO))

    assert [call[0] for call in adapter.calls] == names
    assert all(store.get_item(item_id).status.is_terminal for item_id in ids)
    assert result.failed == [ids[1], ids[3]]
    assert [entry.name for entry in result.completed] == ["rec-0.mp3", "rec-2.mp3", "rec-4.mp3", "rec-5.mp3"]
    assert result.combined_text.index("rec-0.mp3") < result.combined_text.index("rec-5.mp3")


def test_blank_adapter_output_is_recorded_as_error():
    store = ItemStore()
    adapter = RecordingAdapter(store, {"quiet.mp3": "   "})
    item_id = store.add_item(ItemKind.AUDIO, "quiet.mp3", b"x")

    result = asyncio.run(_processor(store, adapter).run(ItemKind.AUDIO))

    assert store.get_item(item_id).status is ItemStatus.ERROR
    assert store.get_item(item_id).content is None
    assert result.completed == []


def test_only_items_of_the_requested_kind_are_processed():
    store = ItemStore()
    adapter = RecordingAdapter(store)
    audio = store.add_item(ItemKind.AUDIO, "a.mp3", b"a")
    image = store.add_item(ItemKind.IMAGE_TEXT, "i.png", b"i")

    asyncio.run(_processor(store, adapter).run(ItemKind.IMAGE_TEXT))

    assert store.get_item(audio).status is ItemStatus.PENDING
    assert store.get_item(image).status is ItemStatus.COMPLETED


def test_items_added_during_a_run_wait_for_the_next_run():
    store = ItemStore()
    late_ids: list[str] = []

    class AddingAdapter(RecordingAdapter):
        def transcribe(self, payload: bytes, filename: str) -> str:
            if filename == "early.mp3":
                late_ids.append(self.store.add_item(ItemKind.AUDIO, "late.mp3", b"late"))
            return super().transcribe(payload, filename)

    adapter = AddingAdapter(store)
    processor = _processor(store, adapter)
    early = store.add_item(ItemKind.AUDIO, "early.mp3", b"early")

    first = asyncio.run(processor.run(ItemKind.AUDIO))
    assert first.attempted == [early]
    assert store.get_item(late_ids[0]).status is ItemStatus.PENDING

    second = asyncio.run(processor.run(ItemKind.AUDIO))
    assert second.attempted == late_ids
    assert store.get_item(late_ids[0]).status is ItemStatus.COMPLETED


def test_item_removed_mid_run_is_skipped():
    store = ItemStore()
    doomed: list[str] = []

    class RemovingAdapter(RecordingAdapter):
        def transcribe(self, payload: bytes, filename: str) -> str:
            self.store.remove_item(doomed[0])
            return super().transcribe(payload, filename)

    adapter = RemovingAdapter(store)
    first = store.add_item(ItemKind.AUDIO, "first.mp3", b"1")
    doomed.append(store.add_item(ItemKind.AUDIO, "second.mp3", b"2"))

    result = asyncio.run(_processor(store, adapter).run(ItemKind.AUDIO))

    assert result.attempted == [first]
    assert result.skipped == doomed
    assert [call[0] for call in adapter.calls] == ["first.mp3"]


def test_image_items_receive_a_mime_hint_from_their_name():
    store = ItemStore()
    adapter = RecordingAdapter(store)
    store.add_item(ItemKind.IMAGE_TEXT, "scan.PNG", b"png")
    store.add_item(ItemKind.IMAGE_TEXT, "photo.jpeg", b"jpeg")
    store.add_item(ItemKind.IMAGE_TEXT, "no-suffix", b"other")

    asyncio.run(_processor(store, adapter).run(ItemKind.IMAGE_TEXT))

    assert [call[0] for call in adapter.calls] == ["image/png", "image/jpeg", "image/jpeg"]


def test_second_run_while_one_is_outstanding_is_rejected():
    store = ItemStore()
    started = threading.Event()
    release = threading.Event()

    class BlockingAdapter(RecordingAdapter):
        def transcribe(self, payload: bytes, filename: str) -> str:
            started.set()
            release.wait(timeout=5)
            return super().transcribe(payload, filename)

    processor = _processor(store, BlockingAdapter(store))
    item_id = store.add_item(ItemKind.AUDIO, "slow.mp3", b"slow")

    async def scenario():
        task = asyncio.create_task(processor.run(ItemKind.AUDIO))
        await asyncio.to_thread(started.wait, 5)
        assert processor.is_running
        with pytest.raises(BatchInProgressError):
            await processor.run(ItemKind.AUDIO)
        release.set()
        return await task

    result = asyncio.run(scenario())

    assert result.attempted == [item_id]
    assert not processor.is_running
    assert store.get_item(item_id).status is ItemStatus.COMPLETED
