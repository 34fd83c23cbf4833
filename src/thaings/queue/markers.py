"""Sparse index of to-dos that may have unprocessed messages."""

from __future__ import annotations

from pathlib import Path

from thaings.queue.ids import validate_key


class MarkerIndex:
    """Zero-byte marker files, one per pending key."""

    def __init__(self, root_dir: Path) -> None:
        self.root_dir = root_dir

    def list(self) -> list[str]:
        """Return pending keys; an absent index directory means none."""

        if not self.root_dir.is_dir():
            return []
        return sorted(
            path.name
            for path in self.root_dir.iterdir()
            if path.is_file() and not path.name.startswith(".")
        )

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def mark(self, key: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)

    def clear(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def _path(self, key: str) -> Path:
        return self.root_dir / validate_key(key)
