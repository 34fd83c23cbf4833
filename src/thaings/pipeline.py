"""Ordered side effects for processing one to-do under its lock."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol

from thaings.queue.lock import held
from thaings.queue.models import Message, Queue
from thaings.queue.store import QueueStore
from thaings.things.client import ThingsClient
from thaings.things.todo import ToDo, response_note

logger = logging.getLogger(__name__)

EMPTY_PROMPT_RESPONSE = "Nothing to process - add a title or notes and try again."


class Agent(Protocol):
    def __call__(self, prompt: str, *, workdir: Path) -> str: ...


@dataclass(frozen=True, slots=True)
class ProcessingContext:
    """Value threaded through the steps; each step returns a new one."""

    queue: Queue
    message: Message
    to_do: ToDo
    response: str | None = None

    @property
    def key(self) -> str:
        return self.queue.key

    def with_response(self, response: str) -> ProcessingContext:
        return replace(self, response=response)


Step = Callable[[ProcessingContext], ProcessingContext]


class AnnounceWorkingStep:
    """Show the Working tag in Things."""

    def __init__(self, *, things: ThingsClient) -> None:
        self.things = things

    def __call__(self, ctx: ProcessingContext) -> ProcessingContext:
        self.things.update(ctx.key, tags=ctx.to_do.marked_working().final_tags())
        return ctx


class AskAgentStep:
    def __init__(self, *, agent: Agent) -> None:
        self.agent = agent

    def __call__(self, ctx: ProcessingContext) -> ProcessingContext:
        prompt = ctx.to_do.prompt()
        if not prompt.strip():
            logger.info("[%s] skipped agent: no content to process", ctx.key)
            return ctx.with_response(EMPTY_PROMPT_RESPONSE)

        first_line = prompt.strip().splitlines()[0]
        logger.info("[%s] prompt: %s", ctx.key, first_line)
        return ctx.with_response(self.agent(prompt, workdir=ctx.queue.dir))


class CommitStep:
    """Advance the watermark to the captured message before announcing."""

    def __init__(self, *, store: QueueStore) -> None:
        self.store = store

    def __call__(self, ctx: ProcessingContext) -> ProcessingContext:
        self.store.commit(ctx.queue, ctx.message.received_at)
        return ctx


class AnnounceReadyStep:
    def __init__(self, *, things: ThingsClient) -> None:
        self.things = things

    def __call__(self, ctx: ProcessingContext) -> ProcessingContext:
        self.things.update(
            ctx.key,
            tags=ctx.to_do.marked_ready().final_tags(),
            append_notes=response_note(ctx.response or ""),
        )
        return ctx


class Pipeline:
    """Run steps in order, threading the context through each."""

    def __init__(self, steps: Sequence[Step]) -> None:
        self.steps = tuple(steps)

    def __call__(self, ctx: ProcessingContext) -> ProcessingContext:
        for step in self.steps:
            ctx = step(ctx)
        return ctx


def default_steps(*, store: QueueStore, things: ThingsClient, agent: Agent) -> list[Step]:
    return [
        AnnounceWorkingStep(things=things),
        AskAgentStep(agent=agent),
        CommitStep(store=store),
        AnnounceReadyStep(things=things),
    ]


class ProcessesQueue:
    """Process the latest message of one snapshot while holding its key lock."""

    def __init__(
        self,
        queue: Queue,
        *,
        store: QueueStore,
        things: ThingsClient,
        agent: Agent,
    ) -> None:
        self.queue = queue
        self.pipeline = Pipeline(default_steps(store=store, things=things, agent=agent))

    def call(self) -> bool:
        """Return ``False`` when another process holds the lock."""

        with held(self.queue.lock_file) as acquired:
            if not acquired:
                logger.info("[%s] SKIPPED: lock held by another process", self.queue.key)
                return False
            self._process()
        return True

    def _process(self) -> None:
        message = self.queue.latest_message()
        if message is None:
            logger.info("[%s] no messages - skipping", self.queue.key)
            return

        logger.info("[%s] processing %s", self.queue.key, message.received_at)
        self.pipeline(
            ProcessingContext(
                queue=self.queue,
                message=message,
                to_do=ToDo.from_message(message),
            ),
        )
        logger.info("[%s] done", self.queue.key)
