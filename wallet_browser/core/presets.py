from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

from wallet_browser.core.filter_state import FilterSpec
from wallet_browser.core.record import coerce_bool


def generate_preset_id() -> str:
    return f"preset-{uuid.uuid4().hex[:8]}"


def now_iso() -> str:
    """Return a current UTC timestamp in ISO-8601 format."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class SavedFilterPreset:
    """
    A named snapshot of a FilterSpec for later recall.

    - id: key used for save (overwrite) / delete / load
    - name, description: human-readable labels
    - snapshot: the FilterSpec restored by load
    - created_at: ISO8601 timestamp (UTC)
    - is_public: sharing flag, opaque to the store
    """

    id: str
    name: str
    snapshot: FilterSpec
    description: str = ""
    created_at: str = field(default_factory=now_iso)
    is_public: bool = False

    @classmethod
    def create(cls, name: str, snapshot: FilterSpec, description: str = "") -> SavedFilterPreset:
        return cls(id=generate_preset_id(), name=name, snapshot=snapshot, description=description)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "filters": self.snapshot.to_dict(),
            "createdAt": self.created_at,
            "isPublic": self.is_public,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SavedFilterPreset:
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            snapshot=FilterSpec.from_dict(data.get("filters")),
            created_at=data.get("createdAt", now_iso()),
            is_public=coerce_bool(data.get("isPublic", False), "isPublic"),
        )
