"""Receive a Things to-do payload and queue it."""

from __future__ import annotations

import logging

from thaings.queue.models import Queue
from thaings.queue.store import QueueStore
from thaings.things.input import ThingsInput

logger = logging.getLogger(__name__)


class ReceivesThingsToDo:
    """Validate the payload fully before anything touches the disk."""

    def __init__(self, payload: ThingsInput, *, store: QueueStore) -> None:
        self.payload = payload
        self.store = store

    def call(self) -> Queue | None:
        """Return the updated snapshot, or ``None`` for ignored payload types."""

        if not self.payload.is_to_do:
            logger.info("[receive] ignored payload of type %r", self.payload.data.get("Type"))
            return None

        todo_id = self.payload.id
        self.payload.validate_has_content()
        queue = self.store.append(todo_id, self.payload.data)
        logger.info("[%s] received: %s", todo_id, self.payload.title)
        return queue
