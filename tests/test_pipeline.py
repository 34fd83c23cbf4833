from __future__ import annotations

from datetime import UTC, datetime, timedelta

import allure
import pytest

from thaings.pipeline import (
    EMPTY_PROMPT_RESPONSE,
    AnnounceReadyStep,
    AnnounceWorkingStep,
    AskAgentStep,
    CommitStep,
    Pipeline,
    ProcessesQueue,
    ProcessingContext,
)
from thaings.queue.lock import KeyLock
from thaings.queue.store import QueueStore
from thaings.things.todo import ToDo

pytestmark = [
    allure.epic("Work Queue"),
    allure.feature("Processing Pipeline"),
]

T0 = datetime(2026, 1, 17, 12, 0, tzinfo=UTC)


def _context(store: QueueStore, things_payload, **payload) -> ProcessingContext:
    queue = store.append("abc", things_payload(todo_id="abc", **payload), at=T0)
    message = queue.latest_message()
    return ProcessingContext(queue=queue, message=message, to_do=ToDo.from_message(message))


def test_steps_run_in_order_and_thread_context(store, things, agent, things_payload) -> None:
    ctx = _context(store, things_payload, title="Help me", notes="With this task", tags="Home")
    agent.response = "Here is my answer"
    events: list[str] = []

    def spy(name):
        def step(context: ProcessingContext) -> ProcessingContext:
            events.append(name)
            return context

        return step

    result = Pipeline(
        [
            AnnounceWorkingStep(things=things),
            spy("working-sent"),
            AskAgentStep(agent=agent),
            spy("asked"),
            CommitStep(store=store),
            spy("committed"),
            AnnounceReadyStep(things=things),
        ],
    )(ctx)

    assert events == ["working-sent", "asked", "committed"]
    assert result.response == "Here is my answer"
    assert ctx.response is None
    assert things.calls[0] == {"id": "abc", "tags": ["Home", "Working"], "append_notes": None}
    assert things.calls[1]["tags"] == ["Home", "Ready"]
    assert "Here is my answer" in things.calls[1]["append_notes"]
    assert agent.prompts == ["Help me\n\nWith this task"]
    assert agent.workdirs == [ctx.queue.dir]


def test_blank_prompt_skips_agent(store, things, agent, things_payload) -> None:
    ctx = _context(store, things_payload, title="   ")

    result = AskAgentStep(agent=agent)(ctx)

    assert result.response == EMPTY_PROMPT_RESPONSE
    assert agent.prompts == []


def test_processes_queue_end_to_end(store, things, agent, things_payload) -> None:
    queue = store.append("abc", things_payload(todo_id="abc", title="Help me"), at=T0)

    assert ProcessesQueue(queue, store=store, things=things, agent=agent).call() is True

    assert [call["tags"] for call in things.calls] == [["Working"], ["Ready"]]
    assert store.read_watermark("abc") == queue.latest_message().received_at
    assert not store.markers.exists("abc")


def test_processes_queue_uses_captured_latest_message(store, things, agent, things_payload) -> None:
    store.append("abc", things_payload(todo_id="abc", title="Old"), at=T0)
    later = T0 + timedelta(seconds=1)
    queue = store.append("abc", things_payload(todo_id="abc", title="New"), at=later)

    ProcessesQueue(queue, store=store, things=things, agent=agent).call()

    assert agent.prompts == ["New"]
    assert store.read_watermark("abc") == queue.messages[1].received_at


def test_processes_queue_skips_when_locked(store, things, agent, things_payload) -> None:
    queue = store.append("abc", things_payload(todo_id="abc", title="Help"), at=T0)
    holder = KeyLock(queue.lock_file)
    assert holder.acquire()
    try:
        assert ProcessesQueue(queue, store=store, things=things, agent=agent).call() is False
    finally:
        holder.release()

    assert things.calls == []
    assert agent.prompts == []
    assert store.markers.exists("abc")


def test_processes_queue_without_messages_is_noop(store, settings, things, agent) -> None:
    (settings.to_dos_dir / "empty").mkdir(parents=True)
    queue = store.load("empty")

    assert ProcessesQueue(queue, store=store, things=things, agent=agent).call() is True
    assert things.calls == []
    assert agent.prompts == []


def test_ready_failure_after_commit_keeps_watermark(store, things, agent, things_payload) -> None:
    things.fail_on_append = True
    queue = store.append("abc", things_payload(todo_id="abc", title="Help"), at=T0)

    with pytest.raises(RuntimeError, match="Things is not running"):
        ProcessesQueue(queue, store=store, things=things, agent=agent).call()

    assert store.read_watermark("abc") == queue.latest_message().received_at
    assert not store.markers.exists("abc")
    lock = KeyLock(queue.lock_file)
    assert lock.acquire()
    lock.release()


def test_reprocessing_same_snapshot_is_safe(store, things, agent, things_payload) -> None:
    queue = store.append("abc", things_payload(todo_id="abc", title="Help"), at=T0)

    ProcessesQueue(queue, store=store, things=things, agent=agent).call()
    ProcessesQueue(queue, store=store, things=things, agent=agent).call()

    assert [call["tags"] for call in things.calls] == [
        ["Working"],
        ["Ready"],
        ["Working"],
        ["Ready"],
    ]
    reloaded = store.load("abc")
    assert reloaded.watermark == queue.latest_message().received_at
    assert len(reloaded.messages) == 1
    assert not store.markers.exists("abc")
