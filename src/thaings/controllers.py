"""Controllers for thaings CLI commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from thaings.agent import AsksClaude, ClaudeCliBackend
from thaings.config import Settings
from thaings.dispatch import RespondsToThingsToDo
from thaings.errors import CorruptMessageError, InvalidKeyError
from thaings.logging_setup import configure_logging
from thaings.queue.store import QueueStore
from thaings.receive import ReceivesThingsToDo
from thaings.things.client import ThingsClient, ThingsUrlClient
from thaings.things.input import ThingsInput

ThingsFactory = Callable[[Settings], ThingsClient]


@dataclass(slots=True)
class ReceiveCommand:
    """CLI input for one inbound Things payload."""

    root: Path | None
    raw_input: str


@dataclass(slots=True)
class RespondCommand:
    """CLI input for one dispatch cycle."""

    root: Path | None


@dataclass(slots=True)
class PendingCommand:
    """CLI input for pending queue listing."""

    root: Path | None


@dataclass(slots=True)
class RespondResult:
    """Dispatch report to render in CLI."""

    lines: list[str]
    success: bool


def _url_client(settings: Settings) -> ThingsClient:
    return ThingsUrlClient(auth_token=settings.things_auth_token or "")


class ThaingsCliController:
    """Wires settings, store and collaborators for each command."""

    def __init__(self, *, things_factory: ThingsFactory = _url_client) -> None:
        self.things_factory = things_factory

    def receive(self, command: ReceiveCommand) -> list[str]:
        settings = Settings.from_env(root=command.root)
        configure_logging(settings.receive_log, settings.log_level)

        payload = ThingsInput.parse(command.raw_input.strip())
        queue = ReceivesThingsToDo(payload, store=_store(settings)).call()
        if queue is None:
            return ["Ignored: payload is not a to-do."]
        return [f"Queued: id={queue.key} messages={len(queue.messages)}"]

    def respond(self, command: RespondCommand) -> RespondResult:
        settings = Settings.from_env(root=command.root)
        settings.validate_for_respond()
        configure_logging(settings.daemon_log, settings.log_level)

        dispatcher = RespondsToThingsToDo(
            store=_store(settings),
            things=self.things_factory(settings),
            agent=AsksClaude(
                backend=ClaudeCliBackend(settings.agent),
                timeout_seconds=settings.agent.timeout_seconds,
            ),
        )
        summary = dispatcher.call()

        lines = [
            "Dispatch finished: "
            f"found={summary.found} processed={summary.processed} "
            f"skipped={summary.skipped} settled={summary.settled} failed={summary.failed}",
        ]
        if summary.failed_keys:
            lines.append(f"Failed: {', '.join(summary.failed_keys)}")
        return RespondResult(lines=lines, success=not summary.failed_keys)

    def pending(self, command: PendingCommand) -> list[str]:
        settings = Settings.from_env(root=command.root)
        store = _store(settings)

        keys = store.pending_keys()
        if not keys:
            return ["No pending to-dos."]

        lines = [f"Pending to-dos: {len(keys)}"]
        for key in keys:
            try:
                queue = store.load(key)
            except (CorruptMessageError, InvalidKeyError) as error:
                lines.append(f"  id={key} (unreadable: {error})")
                continue
            if queue is None:
                lines.append(f"  id={key} (missing to-do directory)")
                continue
            latest = queue.latest_message()
            lines.append(
                f"  id={key} messages={len(queue.messages)} "
                f"latest={latest.received_at if latest else '-'} "
                f"processed={queue.watermark or '-'}",
            )
        return lines


def _store(settings: Settings) -> QueueStore:
    return QueueStore(to_dos_dir=settings.to_dos_dir, pending_dir=settings.pending_dir)
