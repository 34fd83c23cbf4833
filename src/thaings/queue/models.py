"""Immutable queue values handed from the store to the pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class Message:
    """One payload received from Things at a point in time."""

    received_at: str
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @property
    def title(self) -> str | None:
        return self.data.get("Title")

    @property
    def notes(self) -> str:
        return self.data.get("Notes") or ""

    @property
    def checklist(self) -> str | None:
        return self.data.get("Checklist Items")

    @property
    def tags(self) -> tuple[str, ...]:
        raw = self.data.get("Tags") or ""
        return tuple(tag.strip() for tag in raw.split(",") if tag.strip())


@dataclass(frozen=True, slots=True)
class Queue:
    """Snapshot of one to-do's message log and watermark.

    Loaded once by :class:`thaings.queue.store.QueueStore`; never refreshed.
    """

    key: str
    dir: Path
    messages: tuple[Message, ...] = ()
    watermark: str = ""

    def latest_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    def processable(self) -> bool:
        latest = self.latest_message()
        return latest is not None and latest.received_at > self.watermark

    @property
    def messages_dir(self) -> Path:
        return self.dir / "messages"

    @property
    def watermark_file(self) -> Path:
        return self.dir / "processed"

    @property
    def lock_file(self) -> Path:
        return self.dir / ".lock"
