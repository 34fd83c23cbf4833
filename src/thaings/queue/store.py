"""Filesystem-backed message store for to-do queues."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import uuid4

from thaings.errors import CorruptMessageError
from thaings.queue.ids import validate_key
from thaings.queue.markers import MarkerIndex
from thaings.queue.models import Message, Queue

logger = logging.getLogger(__name__)

STAMP_FORMAT = "%Y-%m-%dT%H-%M-%S-%fZ"
MESSAGE_SUFFIX = ".json"


def format_stamp(moment: datetime) -> str:
    """Render a sortable message stamp, e.g. ``2026-01-17T12-00-00-000123Z``."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime(STAMP_FORMAT)


def parse_stamp(stamp: str) -> datetime:
    return datetime.strptime(stamp, STAMP_FORMAT).replace(tzinfo=UTC)


class QueueStore:
    """All queue I/O; returns immutable :class:`Queue` snapshots."""

    def __init__(self, *, to_dos_dir: Path, pending_dir: Path) -> None:
        self.to_dos_dir = to_dos_dir
        self.markers = MarkerIndex(pending_dir)

    def pending_keys(self) -> list[str]:
        return self.markers.list()

    def load(self, key: str) -> Queue | None:
        """Load a snapshot, or ``None`` if the to-do was never seen."""

        directory = self._dir(key)
        if not directory.is_dir():
            return None
        return self._load_queue(key, directory)

    def append(self, key: str, data: Mapping[str, Any], at: datetime | None = None) -> Queue:
        """Persist one inbound payload, mark the key pending, return a fresh snapshot."""

        directory = self._dir(key)
        messages_dir = directory / "messages"
        messages_dir.mkdir(parents=True, exist_ok=True)

        body = json.dumps(dict(data), ensure_ascii=False, indent=2)
        stamp = _write_exclusive(
            messages_dir,
            body=body,
            moment=at or datetime.now(tz=UTC),
            after=_latest_stamp(messages_dir),
        )
        logger.debug("[%s] stored message %s", key, stamp)

        self.markers.mark(key)
        return self._load_queue(key, directory)

    def commit(self, queue: Queue, received_at: str) -> None:
        """Record ``received_at`` as processed and clear the marker if caught up.

        The latest stamp is re-read from disk: a message appended after the
        snapshot was taken keeps the key pending.
        """

        current = self.read_watermark(queue.key)
        if received_at > current:
            _write_atomic(queue.watermark_file, received_at)
        else:
            logger.warning(
                "[%s] watermark %s is not behind %s; leaving it",
                queue.key,
                current,
                received_at,
            )
        self._clear_if_caught_up(queue.key, max(current, received_at))

    def settle(self, queue: Queue) -> bool:
        """Drop a stale marker for a caught-up queue. Returns ``True`` if cleared."""

        return self._clear_if_caught_up(queue.key, self.read_watermark(queue.key))

    def read_watermark(self, key: str) -> str:
        path = self._dir(key) / "processed"
        if not path.exists():
            return ""
        return path.read_text("utf-8").strip()

    def latest_received_at(self, key: str) -> str | None:
        return _latest_stamp(self._dir(key) / "messages")

    def _clear_if_caught_up(self, key: str, watermark: str) -> bool:
        latest = self.latest_received_at(key)
        if latest is not None and latest > watermark:
            logger.info("[%s] newer message %s arrived; staying queued", key, latest)
            return False

        self.markers.clear(key)
        # An append may have landed between the read above and the clear.
        latest = self.latest_received_at(key)
        if latest is not None and latest > watermark:
            logger.info("[%s] message %s arrived while clearing; re-queued", key, latest)
            self.markers.mark(key)
            return False
        return True

    def _load_queue(self, key: str, directory: Path) -> Queue:
        messages = tuple(
            _read_message(path) for path in _message_files(directory / "messages")
        )
        return Queue(
            key=key,
            dir=directory,
            messages=messages,
            watermark=self.read_watermark(key),
        )

    def _dir(self, key: str) -> Path:
        return self.to_dos_dir / validate_key(key)


def _message_files(messages_dir: Path) -> list[Path]:
    if not messages_dir.is_dir():
        return []
    return sorted(messages_dir.glob(f"*{MESSAGE_SUFFIX}"), key=lambda path: path.name)


def _latest_stamp(messages_dir: Path) -> str | None:
    files = _message_files(messages_dir)
    return files[-1].stem if files else None


def _read_message(path: Path) -> Message:
    try:
        data = json.loads(path.read_text("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise CorruptMessageError(f"Unreadable message {path}: {error}", path=str(path)) from error
    if not isinstance(data, dict):
        raise CorruptMessageError(f"Expected JSON object in {path}", path=str(path))
    return Message(received_at=path.stem, data=data)


def _write_exclusive(
    messages_dir: Path,
    *,
    body: str,
    moment: datetime,
    after: str | None,
) -> str:
    """Write ``body`` under the first free stamp at or after ``moment``.

    Stamps stay strictly increasing within a key: collisions and clock
    steps backwards are resolved by moving forward one microsecond.
    """

    if after is not None and format_stamp(moment) <= after:
        moment = parse_stamp(after) + timedelta(microseconds=1)

    tmp_path = messages_dir / f".{uuid4().hex}.tmp"
    tmp_path.write_text(body, "utf-8")
    try:
        while True:
            stamp = format_stamp(moment)
            try:
                os.link(tmp_path, messages_dir / f"{stamp}{MESSAGE_SUFFIX}")
            except FileExistsError:
                moment += timedelta(microseconds=1)
                continue
            return stamp
    finally:
        tmp_path.unlink(missing_ok=True)


def _write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.{uuid4().hex}.tmp")
    tmp_path.write_text(text, "utf-8")
    os.replace(tmp_path, path)
