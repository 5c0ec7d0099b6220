from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, Tuple

from wallet_browser.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SELECTION = 5


@dataclass(frozen=True)
class ComparisonSelection:
    """
    Ordered, bounded set of record ids being compared side by side.

    Insertion order is preserved; len(selected) <= max_selection and there
    are no duplicate ids.
    """

    selected: Tuple[str, ...] = ()
    max_selection: int = DEFAULT_MAX_SELECTION

    def __post_init__(self) -> None:
        object.__setattr__(self, "selected", tuple(self.selected))
        if self.max_selection < 1:
            raise ValidationError.single("COMPARISON_CAPACITY", "max_selection must be at least 1")
        if len(self.selected) > self.max_selection:
            raise ValidationError.single(
                "COMPARISON_OVERFLOW",
                f"{len(self.selected)} ids selected, capacity is {self.max_selection}",
            )
        if len(set(self.selected)) != len(self.selected):
            raise ValidationError.single("COMPARISON_DUPLICATE", "Comparison contains duplicate ids")

    def __len__(self) -> int:
        return len(self.selected)

    def __iter__(self) -> Iterator[str]:
        return iter(self.selected)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self.selected

    @property
    def is_full(self) -> bool:
        return len(self.selected) >= self.max_selection

    def to_dict(self) -> Dict[str, Any]:
        return {"selected": list(self.selected), "maxSelection": self.max_selection}

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> ComparisonSelection:
        """
        Rebuild from a persisted snapshot. Duplicates and overflow are dropped
        rather than rejected so a corrupt snapshot cannot block startup.
        """
        data = data or {}
        max_selection = max(1, int(data.get("maxSelection", DEFAULT_MAX_SELECTION)))
        ids: list[str] = []
        for raw in data.get("selected", []):
            rid = str(raw)
            if rid not in ids and len(ids) < max_selection:
                ids.append(rid)
        return cls(selected=tuple(ids), max_selection=max_selection)


def toggle(selection: ComparisonSelection, record_id: str) -> ComparisonSelection:
    """
    Remove `record_id` if selected, otherwise append it.

    At capacity, adding is a silent no-op and the selection is returned as is.
    """
    if record_id in selection:
        return replace(selection, selected=tuple(i for i in selection.selected if i != record_id))

    if selection.is_full:
        logger.debug(
            "Comparison full, ignoring toggle",
            extra={"record_id": record_id, "max_selection": selection.max_selection},
        )
        return selection

    return replace(selection, selected=selection.selected + (record_id,))


def clear(selection: ComparisonSelection) -> ComparisonSelection:
    return replace(selection, selected=())


def resize(selection: ComparisonSelection, max_selection: int) -> ComparisonSelection:
    """Change the capacity; when shrinking, the oldest selections are kept."""
    return ComparisonSelection(selected=selection.selected[:max_selection], max_selection=max_selection)
