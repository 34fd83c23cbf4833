"""Runtime configuration for receive/respond commands."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_ROOT = Path("~/.thaings")
DEFAULT_SYSTEM_PROMPT_FILE = "default-system-prompt.md"
DEFAULT_CLAUDE_PATH = "/opt/homebrew/bin/claude"
DEFAULT_ALLOWED_TOOLS = "WebSearch,WebFetch"


@dataclass(slots=True)
class AgentSettings:
    """Claude CLI invocation settings."""

    system_prompt_file: Path = Path(DEFAULT_SYSTEM_PROMPT_FILE)
    claude_path: str = DEFAULT_CLAUDE_PATH
    max_turns: int = 10
    timeout_seconds: int = 300
    allowed_tools: str = DEFAULT_ALLOWED_TOOLS


@dataclass(slots=True)
class Settings:
    """Application settings; built once per process and passed down."""

    root: Path = DEFAULT_ROOT.expanduser()
    things_auth_token: str | None = None
    log_level: str = "INFO"
    agent: AgentSettings = field(default_factory=AgentSettings)

    @classmethod
    def from_env(cls, root: Path | None = None) -> Settings:
        """Load settings from ``<root>/.env`` and the process environment.

        Variables already present in the environment win over the file.
        """

        resolved_root = (root or Path(os.getenv("THAINGS_ROOT", str(DEFAULT_ROOT)))).expanduser()
        env_file = resolved_root / ".env"
        if env_file.is_file():
            load_dotenv(env_file, override=False)

        return cls(
            root=resolved_root,
            things_auth_token=os.getenv("THAINGS_THINGS_AUTH_TOKEN") or None,
            log_level=os.getenv("THAINGS_LOG_LEVEL", "INFO").strip().upper(),
            agent=AgentSettings(
                system_prompt_file=Path(
                    os.getenv(
                        "THAINGS_SYSTEM_PROMPT_FILE",
                        str(resolved_root / DEFAULT_SYSTEM_PROMPT_FILE),
                    ),
                ).expanduser(),
                claude_path=os.getenv("THAINGS_CLAUDE_PATH", DEFAULT_CLAUDE_PATH),
                max_turns=_env_int("THAINGS_MAX_TURNS", 10),
                timeout_seconds=_env_int("THAINGS_TIMEOUT_SECONDS", 300),
                allowed_tools=os.getenv("THAINGS_ALLOWED_TOOLS", DEFAULT_ALLOWED_TOOLS),
            ),
        )

    @property
    def to_dos_dir(self) -> Path:
        return self.root / "to-dos"

    @property
    def pending_dir(self) -> Path:
        return self.root / "pending"

    @property
    def log_dir(self) -> Path:
        return self.root / "log"

    @property
    def daemon_log(self) -> Path:
        return self.log_dir / "daemon.log"

    @property
    def receive_log(self) -> Path:
        return self.log_dir / "receive.log"

    @property
    def env_file(self) -> Path:
        return self.root / ".env"

    def validate_for_respond(self) -> None:
        """Raise configuration error if the daemon cannot talk to Things or Claude."""

        if not self.things_auth_token:
            raise ValueError(f"Missing THAINGS_THINGS_AUTH_TOKEN in {self.env_file}")
        if self.agent.max_turns <= 0:
            raise ValueError("THAINGS_MAX_TURNS must be > 0.")
        if self.agent.timeout_seconds <= 0:
            raise ValueError("THAINGS_TIMEOUT_SECONDS must be > 0.")
        if not self.agent.claude_path.strip():
            raise ValueError("THAINGS_CLAUDE_PATH must not be empty.")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Invalid THAINGS_LOG_LEVEL: {self.log_level!r}")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error
