"""Things URL scheme client (``things:///update``)."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import Protocol
from urllib.parse import quote

from thaings.errors import UpdateFailedError

logger = logging.getLogger(__name__)

UPDATE_URL = "things:///update"


class ThingsClient(Protocol):
    """Sends the desired state of one to-do back to Things."""

    def update(
        self,
        todo_id: str,
        *,
        tags: Sequence[str] | None = None,
        append_notes: str | None = None,
    ) -> None:
        """Replace tags and/or append to notes."""


def build_update_url(
    todo_id: str,
    *,
    auth_token: str,
    tags: Sequence[str] | None = None,
    append_notes: str | None = None,
) -> str:
    params: list[tuple[str, str]] = []
    if append_notes is not None:
        params.append(("append-notes", append_notes))
    if tags is not None:
        params.append(("tags", ",".join(tags)))
    params.append(("id", todo_id))
    params.append(("auth-token", auth_token))
    query = "&".join(f"{name}={quote(value, safe='')}" for name, value in params)
    return f"{UPDATE_URL}?{query}"


class ThingsUrlClient:
    """Opens update URLs in the background with macOS ``open -g``."""

    def __init__(self, *, auth_token: str, open_command: Sequence[str] = ("open", "-g")) -> None:
        if not auth_token:
            raise ValueError("Things auth token is required (THAINGS_THINGS_AUTH_TOKEN).")
        self.auth_token = auth_token
        self.open_command = tuple(open_command)

    def update(
        self,
        todo_id: str,
        *,
        tags: Sequence[str] | None = None,
        append_notes: str | None = None,
    ) -> None:
        if tags is None and append_notes is None:
            return
        url = build_update_url(
            todo_id,
            auth_token=self.auth_token,
            tags=tags,
            append_notes=append_notes,
        )
        try:
            completed = subprocess.run(  # noqa: S603
                [*self.open_command, url],
                check=False,
                capture_output=True,
            )
        except OSError as error:
            raise UpdateFailedError(f"Failed to open Things URL: {url[:50]}...") from error
        if completed.returncode != 0:
            raise UpdateFailedError(f"Failed to open Things URL: {url[:50]}...")
        logger.debug("[%s] sent Things update (tags=%s)", todo_id, tags)
