"""Exception hierarchy shared across thaings modules."""

from __future__ import annotations


class ThaingsError(Exception):
    """Base class for thaings failures."""


class InvalidKeyError(ThaingsError, ValueError):
    """To-do identifier is unsafe to use as a path segment."""


class InvalidInput(ThaingsError):  # noqa: N818
    """Inbound Things payload is malformed or incomplete."""


class CorruptMessageError(ThaingsError):
    """A stored message file cannot be decoded."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message)
        self.path = path


class UpdateFailedError(ThaingsError):
    """Things URL scheme call did not succeed."""


class AgentRunError(ThaingsError):
    """Agent process could not be started."""
