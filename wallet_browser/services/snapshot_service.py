from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from wallet_browser.core.comparison import ComparisonSelection
from wallet_browser.core.presets import SavedFilterPreset
from wallet_browser.services.storage import StorageBackend

logger = logging.getLogger(__name__)

PRESETS_KEY = "saved_filters.json"
COMPARISON_KEY = "comparison.json"
DISPLAY_MODE_KEY = "display_mode.json"


class SnapshotService:
    """
    Persists the slice of browser state that survives restarts: saved filter
    presets, the comparison selection (with its capacity) and the last-used
    display mode. Each lives under its own key.

    Write failures are logged, never raised, so a broken disk cannot take down
    the live store. Unreadable values load as None (caller keeps defaults).
    """

    def __init__(self, storage: StorageBackend, prefix: str = ""):
        self.storage = storage
        self.prefix = prefix

    def _path(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def _write(self, key: str, data: Any) -> None:
        path = self._path(key)
        try:
            json_bytes = json.dumps(data, indent=2).encode("utf-8")
            self.storage.write_bytes(path, json_bytes)
        except Exception:
            logger.exception("Failed to persist %s", path)

    def _read(self, key: str) -> Any:
        path = self._path(key)
        if not self.storage.exists(path):
            return None
        try:
            return json.loads(self.storage.read_bytes(path))
        except Exception:
            logger.exception("Failed to load %s", path)
            return None

    # ---- presets ------------------------------------------------------------

    def save_presets(self, presets: List[SavedFilterPreset]) -> None:
        self._write(PRESETS_KEY, [p.to_dict() for p in presets])

    def load_presets(self) -> Optional[List[SavedFilterPreset]]:
        raw = self._read(PRESETS_KEY)
        if raw is None:
            return None
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed presets snapshot", extra={"type": type(raw).__name__})
            return None

        presets: List[SavedFilterPreset] = []
        for entry in raw:
            try:
                presets.append(SavedFilterPreset.from_dict(entry))
            except Exception:
                logger.exception("Skipping unreadable preset entry")
        return presets

    # ---- comparison ---------------------------------------------------------

    def save_comparison(self, selection: ComparisonSelection) -> None:
        self._write(COMPARISON_KEY, selection.to_dict())

    def load_comparison(self) -> Optional[ComparisonSelection]:
        raw = self._read(COMPARISON_KEY)
        if not isinstance(raw, dict):
            return None
        try:
            return ComparisonSelection.from_dict(raw)
        except Exception:
            logger.exception("Ignoring unreadable comparison snapshot")
            return None

    # ---- display mode -------------------------------------------------------

    def save_display_mode(self, mode: str) -> None:
        self._write(DISPLAY_MODE_KEY, {"activeView": mode})

    def load_display_mode(self) -> Optional[str]:
        raw = self._read(DISPLAY_MODE_KEY)
        if isinstance(raw, dict) and isinstance(raw.get("activeView"), str):
            return raw["activeView"]
        return None
