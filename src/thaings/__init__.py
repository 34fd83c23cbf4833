"""Things 3 to-dos answered by the Claude CLI."""

__version__ = "0.1.0"
