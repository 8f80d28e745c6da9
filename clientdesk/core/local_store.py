"""Local key-value fallback store: one JSON array per key on disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

LOGGER = logging.getLogger(__name__)


class LocalKeyValueStore:
    """File-backed stand-in for browser local storage.

    Each key maps to ``<root>/<key>.json`` holding a JSON array. Values are
    always read and rewritten whole.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get_list(self, key: str) -> list[dict[str, Any]]:
        """Read the array stored under ``key``; unreadable content reads as empty."""
        path = self._path(key)
        if not path.exists():
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            LOGGER.exception("Failed to parse saved %s", key, extra={"collection": key})
            return []
        if not isinstance(payload, list):
            LOGGER.error(
                "Saved %s is not a JSON array; ignoring it", key, extra={"collection": key}
            )
            return []
        return [item for item in payload if isinstance(item, dict)]

    def set_list(self, key: str, items: list[dict[str, Any]]) -> None:
        """Replace the array stored under ``key``."""
        self._path(key).write_text(
            json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8"
        )
