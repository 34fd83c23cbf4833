"""Backend interface for agent execution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(slots=True)
class AgentRunRequest:
    """Inputs required for one agent run."""

    prompt: str
    workdir: Path
    timeout_seconds: int


@dataclass(slots=True)
class AgentRunResult:
    """Execution outcome from the backend."""

    exit_code: int
    timed_out: bool
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


class AgentBackend(Protocol):
    """Protocol implemented by agent runners."""

    def run(self, request: AgentRunRequest) -> AgentRunResult:
        """Run the agent once and return its captured output."""
