"""Subprocess-based runner for the Claude CLI."""

from __future__ import annotations

import os
import signal
import subprocess

from thaings.agent.base import AgentRunRequest, AgentRunResult
from thaings.config import AgentSettings
from thaings.errors import AgentRunError

TIMEOUT_EXIT_CODE = 124


class ClaudeCliBackend:
    """Run ``claude --print`` inside the to-do directory.

    ``--continue`` picks up the conversation Claude keeps per working
    directory, so each to-do has its own thread.
    """

    def __init__(self, settings: AgentSettings) -> None:
        self.settings = settings

    def build_args(self, prompt: str) -> list[str]:
        return [
            self.settings.claude_path,
            "--continue",
            "--print",
            "--max-turns",
            str(self.settings.max_turns),
            "--append-system-prompt-file",
            str(self.settings.system_prompt_file),
            "--allowedTools",
            self.settings.allowed_tools,
            prompt,
        ]

    def run(self, request: AgentRunRequest) -> AgentRunResult:
        run_args = self.build_args(request.prompt)
        try:
            process = subprocess.Popen(  # noqa: S603
                run_args,
                cwd=request.workdir,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=True,
            )
        except FileNotFoundError as error:
            raise AgentRunError(f"Agent command not found: {run_args[0]}") from error
        except OSError as error:
            raise AgentRunError(f"Agent failed to start: {error}") from error

        try:
            stdout, stderr = process.communicate(timeout=request.timeout_seconds)
        except subprocess.TimeoutExpired:
            stdout, stderr = _terminate_process(process)
            return AgentRunResult(
                exit_code=TIMEOUT_EXIT_CODE,
                timed_out=True,
                stdout=stdout,
                stderr=stderr,
            )
        return AgentRunResult(
            exit_code=process.returncode,
            timed_out=False,
            stdout=stdout,
            stderr=stderr,
        )


def _terminate_process(process: subprocess.Popen[str]) -> tuple[str, str]:
    """Stop the agent and everything it spawned; its session is its process group."""

    for sig in (signal.SIGTERM, signal.SIGKILL):
        _signal_group(process, sig)
        try:
            stdout, stderr = process.communicate(timeout=2)
        except subprocess.TimeoutExpired:
            continue
        return stdout or "", stderr or ""

    # A descendant that left the group still holds the pipes.
    for stream in (process.stdout, process.stderr):
        if stream is not None:
            stream.close()
    process.kill()
    process.wait(timeout=2)
    return "", ""


def _signal_group(process: subprocess.Popen[str], sig: signal.Signals) -> None:
    try:
        os.killpg(process.pid, sig)
    except ProcessLookupError:
        pass
    except OSError:
        process.send_signal(sig)
