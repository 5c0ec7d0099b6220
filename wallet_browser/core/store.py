from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from wallet_browser.core import comparison as cmp
from wallet_browser.core import filter_engine
from wallet_browser.core.comparison import DEFAULT_MAX_SELECTION, ComparisonSelection
from wallet_browser.core.debounce import DEFAULT_SEARCH_DEBOUNCE_MS, Debouncer, Scheduler
from wallet_browser.core.exceptions import DuplicateIdError, NotFoundError, WalletBrowserError
from wallet_browser.core.filter_state import FilterSpec
from wallet_browser.core.presets import SavedFilterPreset
from wallet_browser.core.record import Record
from wallet_browser.core.result import Result

if TYPE_CHECKING:
    from wallet_browser.services.record_source import RecordSource
    from wallet_browser.services.snapshot_service import SnapshotService

logger = logging.getLogger(__name__)

DISPLAY_MODES = ("grid", "table", "comparison")
DEFAULT_DISPLAY_MODE = "grid"


def split_duplicates(records: Sequence[Record]) -> Tuple[List[Record], List[str]]:
    """Keep the first record per id; return (unique records, colliding ids)."""
    seen: Dict[str, Record] = {}
    dupes: List[str] = []
    for record in records:
        if record.id in seen:
            if record.id not in dupes:
                dupes.append(record.id)
            continue
        seen[record.id] = record
    return list(seen.values()), dupes


class RecordStore:
    """
    Single owner of the browser state: the canonical record collection, the
    live FilterSpec, the derived view, the comparison selection, saved presets
    and the display mode.

    The view is recomputed synchronously after every mutation, so readers see
    either the state before a call or the state after it, never a mix.

    When a SnapshotService is given, the persisted slice (presets, comparison,
    display mode) is restored on construction and written through on change.
    Records and the live FilterSpec are never persisted.
    """

    def __init__(
            self,
            *,
            snapshot: Optional[SnapshotService] = None,
            max_selection: int = DEFAULT_MAX_SELECTION,
    ) -> None:
        self._snapshot = snapshot
        self._records: List[Record] = []
        self._by_id: Dict[str, Record] = {}
        self._filters = FilterSpec()
        self._view: List[Record] = []
        self._comparison = ComparisonSelection(max_selection=max_selection)
        self._presets: Dict[str, SavedFilterPreset] = {}
        self._display_mode = DEFAULT_DISPLAY_MODE

        if snapshot is not None:
            self._restore(snapshot)

    # -------------------------------------------------------------------------
    # Read-only accessors
    # -------------------------------------------------------------------------
    @property
    def records(self) -> Tuple[Record, ...]:
        return tuple(self._records)

    @property
    def filters(self) -> FilterSpec:
        return self._filters

    @property
    def view(self) -> Tuple[Record, ...]:
        return tuple(self._view)

    @property
    def comparison(self) -> ComparisonSelection:
        return self._comparison

    @property
    def presets(self) -> List[SavedFilterPreset]:
        return list(self._presets.values())

    @property
    def display_mode(self) -> str:
        return self._display_mode

    def get_record(self, record_id: str) -> Record:
        try:
            return self._by_id[record_id]
        except KeyError:
            raise NotFoundError("record", record_id) from None

    def comparison_records(self) -> List[Record]:
        """Selected records in selection order; ids not in the collection are skipped."""
        return [self._by_id[i] for i in self._comparison.selected if i in self._by_id]

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------
    def set_records(self, records: Sequence[Record], *, dedupe: bool = False) -> List[str]:
        """
        Replace the whole collection and recompute the view.

        Duplicate ids raise DuplicateIdError before any state changes, unless
        `dedupe` is set, in which case the first record per id is kept and the
        dropped ids are returned.
        """
        unique, dupes = split_duplicates(records)
        if dupes and not dedupe:
            logger.warning("Rejected record collection with duplicate ids", extra={"ids": dupes})
            raise DuplicateIdError(dupes, unique)

        if dupes:
            logger.warning("Dropped duplicate record ids", extra={"ids": dupes})

        view = filter_engine.apply(unique, self._filters)
        self._records = unique
        self._by_id = {r.id: r for r in unique}
        self._view = view
        logger.info("Loaded records", extra={"n_records": len(unique)})
        return dupes

    def load_from(self, source: RecordSource, *, dedupe: bool = True) -> Result[int]:
        """Pull the collection from a record source. Returns the record count."""
        try:
            records = source.load()
            dropped = self.set_records(records, dedupe=dedupe)
        except WalletBrowserError as exc:
            logger.error("Failed to load records", extra={"error": str(exc)})
            return Result.failure(exc)

        warnings = list(source.errors)
        warnings.extend(f"Duplicate id '{rid}' ignored" for rid in dropped)
        return Result.success(len(self._records), warnings)

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------
    def set_filters(self, partial: Optional[Mapping[str, Any]] = None, **changes: Any) -> FilterSpec:
        """
        Merge a partial filter spec into the live one and recompute the view.

        Accepts a mapping, keyword arguments, or both (keywords win).
        """
        merged: Dict[str, Any] = dict(partial or {})
        merged.update(changes)
        self._apply_filters(self._filters.merged(merged))
        return self._filters

    def reset_filters(self) -> None:
        self._apply_filters(FilterSpec())

    def _apply_filters(self, spec: FilterSpec) -> None:
        # Commit spec and view together, only once the view has been derived
        view = filter_engine.apply(self._records, spec)
        self._filters = spec
        self._view = view

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------
    def toggle_comparison(self, record_id: str) -> ComparisonSelection:
        updated = cmp.toggle(self._comparison, record_id)
        if updated is not self._comparison:
            self._comparison = updated
            self._persist_comparison()
        return self._comparison

    def clear_comparison(self) -> None:
        self._comparison = cmp.clear(self._comparison)
        self._persist_comparison()

    def set_max_selection(self, max_selection: int) -> None:
        self._comparison = cmp.resize(self._comparison, max_selection)
        self._persist_comparison()

    # -------------------------------------------------------------------------
    # Saved presets
    # -------------------------------------------------------------------------
    def save_preset(self, preset: SavedFilterPreset) -> bool:
        """Store `preset` under its id. Returns True if an existing one was overwritten."""
        is_overwrite = preset.id in self._presets
        self._presets[preset.id] = preset
        self._persist_presets()
        return is_overwrite

    def delete_preset(self, preset_id: str) -> None:
        if preset_id not in self._presets:
            raise NotFoundError("preset", preset_id)
        del self._presets[preset_id]
        self._persist_presets()

    def load_preset(self, preset_id: str) -> FilterSpec:
        preset = self._presets.get(preset_id)
        if preset is None:
            raise NotFoundError("preset", preset_id)
        self._apply_filters(preset.snapshot)
        return self._filters

    # -------------------------------------------------------------------------
    # Display mode
    # -------------------------------------------------------------------------
    def set_display_mode(self, mode: str) -> None:
        if mode not in DISPLAY_MODES:
            logger.warning("Unknown display mode stored as-is", extra={"mode": mode})
        self._display_mode = mode
        if self._snapshot is not None:
            self._snapshot.save_display_mode(mode)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------
    def _persist_comparison(self) -> None:
        if self._snapshot is not None:
            self._snapshot.save_comparison(self._comparison)

    def _persist_presets(self) -> None:
        if self._snapshot is not None:
            self._snapshot.save_presets(self.presets)

    def _restore(self, snapshot: SnapshotService) -> None:
        presets = snapshot.load_presets()
        if presets is not None:
            self._presets = {p.id: p for p in presets}

        comparison = snapshot.load_comparison()
        if comparison is not None:
            self._comparison = comparison

        mode = snapshot.load_display_mode()
        if mode is not None:
            self._display_mode = mode

        logger.info(
            "Restored persisted state",
            extra={"n_presets": len(self._presets), "n_compared": len(self._comparison)},
        )


def make_search_debouncer(
        store: RecordStore,
        scheduler: Scheduler,
        delay_ms: int = DEFAULT_SEARCH_DEBOUNCE_MS,
) -> Debouncer[str]:
    """Debouncer that issues one set_filters(search=...) per quiet window."""
    return Debouncer(lambda text: store.set_filters(search=text), scheduler=scheduler, delay_ms=delay_ms)
