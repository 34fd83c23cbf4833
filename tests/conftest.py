"""Shared test fixtures."""

from __future__ import annotations

import json
import os
import stat
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from thaings.config import AgentSettings, Settings
from thaings.queue.store import QueueStore

_THAINGS_ENV = (
    "THAINGS_ROOT",
    "THAINGS_THINGS_AUTH_TOKEN",
    "THAINGS_CLAUDE_PATH",
    "THAINGS_SYSTEM_PROMPT_FILE",
    "THAINGS_MAX_TURNS",
    "THAINGS_TIMEOUT_SECONDS",
    "THAINGS_ALLOWED_TOOLS",
    "THAINGS_LOG_LEVEL",
)


@dataclass
class StubThings:
    """Records Things updates instead of opening URLs."""

    calls: list[dict[str, object]] = field(default_factory=list)
    fail_on_append: bool = False

    def update(
        self,
        todo_id: str,
        *,
        tags: Sequence[str] | None = None,
        append_notes: str | None = None,
    ) -> None:
        if self.fail_on_append and append_notes is not None:
            raise RuntimeError("Things is not running")
        self.calls.append(
            {
                "id": todo_id,
                "tags": list(tags) if tags is not None else None,
                "append_notes": append_notes,
            },
        )


@dataclass
class StubAgent:
    """Returns a canned answer and remembers prompts."""

    response: str = "Test response from Claude"
    prompts: list[str] = field(default_factory=list)
    workdirs: list[Path] = field(default_factory=list)

    def __call__(self, prompt: str, *, workdir: Path) -> str:
        self.prompts.append(prompt)
        self.workdirs.append(workdir)
        return self.response


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in _THAINGS_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    root = tmp_path / "thaings-root"
    root.mkdir()
    prompt_file = root / "default-system-prompt.md"
    prompt_file.write_text("You are a helpful assistant.", "utf-8")
    return Settings(
        root=root,
        things_auth_token="secret-token",
        agent=AgentSettings(system_prompt_file=prompt_file, timeout_seconds=5),
    )


@pytest.fixture()
def store(settings: Settings) -> QueueStore:
    return QueueStore(to_dos_dir=settings.to_dos_dir, pending_dir=settings.pending_dir)


@pytest.fixture()
def things() -> StubThings:
    return StubThings()


@pytest.fixture()
def agent() -> StubAgent:
    return StubAgent()


@pytest.fixture()
def echo_agent_path(tmp_path: Path) -> Path:
    """Executable stand-in for the claude binary."""

    script = tmp_path / "bin" / "claude"
    script.parent.mkdir(parents=True, exist_ok=True)
    script.write_text(
        f"#!{sys.executable}\n"
        "import sys\n"
        "from thaings.agent.echo_agent import main\n"
        "sys.exit(main())\n",
        "utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    assert os.access(script, os.X_OK)
    return script


def _things_payload(
    *,
    todo_id: str,
    title: str,
    notes: str = "",
    tags: str = "",
    type_: str = "To-Do",
    **extra: object,
) -> dict[str, object]:
    payload: dict[str, object] = {
        "Type": type_,
        "ID": todo_id,
        "Title": title,
        "Notes": notes,
        "Tags": tags,
    }
    payload.update(extra)
    return payload


@pytest.fixture()
def things_payload():
    """Factory for Things to-do payloads."""

    return _things_payload


@pytest.fixture()
def things_json():
    """Factory for raw Things stdin JSON."""

    return lambda **kwargs: json.dumps(_things_payload(**kwargs))
