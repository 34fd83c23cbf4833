"""Turn an agent run into the text shown to the user."""

from __future__ import annotations

import logging
from pathlib import Path

from thaings.agent.base import AgentBackend, AgentRunRequest
from thaings.errors import AgentRunError

logger = logging.getLogger(__name__)


class AsksClaude:
    """Ask the agent one question; failures become the answer text.

    A failed run is not a pipeline failure: the user sees the error in
    the to-do notes instead of silence.
    """

    def __init__(self, *, backend: AgentBackend, timeout_seconds: int) -> None:
        self.backend = backend
        self.timeout_seconds = timeout_seconds

    def __call__(self, prompt: str, *, workdir: Path) -> str:
        try:
            result = self.backend.run(
                AgentRunRequest(
                    prompt=prompt,
                    workdir=workdir,
                    timeout_seconds=self.timeout_seconds,
                ),
            )
        except AgentRunError as error:
            logger.error("Agent could not start: %s", error)
            return f"Error: Claude execution failed.\n{error}"

        if result.timed_out:
            logger.warning("Agent timed out after %s seconds in %s", self.timeout_seconds, workdir)
            return f"Error: Claude timed out after {self.timeout_seconds} seconds."
        if not result.ok:
            logger.warning("Agent exited with %s in %s", result.exit_code, workdir)
            return f"Error: Claude execution failed.\n{result.stderr}"
        return result.stdout
