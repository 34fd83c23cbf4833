"""Claude CLI agent invocation."""

from thaings.agent.asks import AsksClaude
from thaings.agent.base import AgentBackend, AgentRunRequest, AgentRunResult
from thaings.agent.cli_backend import ClaudeCliBackend

__all__ = [
    "AgentBackend",
    "AgentRunRequest",
    "AgentRunResult",
    "AsksClaude",
    "ClaudeCliBackend",
]
