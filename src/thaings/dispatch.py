"""Entry point woken by the filesystem watcher: drain pending to-dos."""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field

from thaings.pipeline import Agent, ProcessesQueue
from thaings.queue.models import Queue
from thaings.queue.store import QueueStore
from thaings.things.client import ThingsClient

logger = logging.getLogger(__name__)

TRACEBACK_FRAMES = 3


@dataclass(slots=True)
class DispatchSummary:
    """Aggregate counters for CLI reporting."""

    found: int = 0
    processed: int = 0
    skipped: int = 0
    settled: int = 0
    failed_keys: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_keys)


class RespondsToThingsToDo:
    """One dispatch cycle over every pending key.

    A failure is isolated to its key: the watermark is not advanced, the
    marker stays, and the remaining keys are still processed.
    """

    def __init__(self, *, store: QueueStore, things: ThingsClient, agent: Agent) -> None:
        self.store = store
        self.things = things
        self.agent = agent

    def call(self) -> DispatchSummary:
        summary = DispatchSummary()
        logger.info("[daemon] triggered")

        keys = self.store.pending_keys()
        if not keys:
            logger.info("[daemon] queue empty")
            return summary

        summary.found = len(keys)
        logger.info("[daemon] found %d queued", len(keys))

        for key in keys:
            try:
                self._dispatch(key, summary)
            except Exception as error:  # noqa: BLE001
                frames = traceback.format_tb(error.__traceback__)[:TRACEBACK_FRAMES]
                logger.error(
                    "[%s] UNEXPECTED ERROR: %s: %s\n%s",
                    key,
                    type(error).__name__,
                    error,
                    "".join(frames).rstrip(),
                )
                summary.failed_keys.append(key)

        if summary.failed_keys:
            logger.error(
                "[daemon] finished with %d FAILED: %s",
                summary.failed,
                ", ".join(summary.failed_keys),
            )
        else:
            logger.info("[daemon] finished")
        return summary

    def _dispatch(self, key: str, summary: DispatchSummary) -> None:
        queue = self.store.load(key)
        if queue is None:
            logger.warning("[%s] marker without to-do directory; skipping", key)
            return

        if not queue.processable():
            if self.store.settle(queue):
                logger.info("[%s] already caught up; cleared stale marker", key)
                summary.settled += 1
            return

        if self._process(queue):
            summary.processed += 1
        else:
            summary.skipped += 1

    def _process(self, queue: Queue) -> bool:
        return ProcessesQueue(
            queue,
            store=self.store,
            things=self.things,
            agent=self.agent,
        ).call()
