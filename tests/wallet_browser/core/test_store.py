from __future__ import annotations

import json

import pytest

from wallet_browser.core.debounce import ManualScheduler
from wallet_browser.core.exceptions import DuplicateIdError, NotFoundError, ValidationError
from wallet_browser.core.filter_state import FeatureFilter, FilterSpec
from wallet_browser.core.presets import SavedFilterPreset
from wallet_browser.core.store import RecordStore, make_search_debouncer
from wallet_browser.services.record_source import StaticRecordSource
from wallet_browser.services.snapshot_service import COMPARISON_KEY, PRESETS_KEY, SnapshotService
from wallet_browser.services.storage import InMemoryStorage


@pytest.fixture()
def store(catalog):
    s = RecordStore()
    s.set_records(catalog)
    return s


def _ids(records):
    return [r.id for r in records]


def test_view_starts_as_full_catalog_sorted_by_name(store):
    assert _ids(store.view) == ["coinbase-wallet", "ledger-live", "phantom", "regional-pay", "tiny-wallet"]


def test_duplicate_ids_rejected_without_touching_state(store, make_record):
    dupes = [make_record("A"), make_record("B"), make_record("a", website="https://other.example")]

    with pytest.raises(DuplicateIdError) as exc_info:
        store.set_records(dupes)

    assert exc_info.value.ids == ["a"]
    assert len(store.records) == 5


def test_dedupe_keeps_first_record_per_id(make_record):
    store = RecordStore()
    first = make_record("A")

    dropped = store.set_records([first, make_record("a", version="2.0")], dedupe=True)

    assert dropped == ["a"]
    assert store.records == (first,)


def test_set_filters_merges_partial_updates(store):
    store.set_filters(platforms={"chrome"})
    store.set_filters({"features": {"dexSwap": True}})

    assert store.filters.platforms == FilterSpec(platforms={"chrome"}).platforms
    assert _ids(store.view) == ["coinbase-wallet", "phantom"]

    store.set_filters(features={"payment_qr": "full"})
    assert _ids(store.view) == ["phantom"]

    # None lifts a single feature constraint
    store.set_filters(features={"dexSwap": None, "payment_qr": None})
    assert store.filters.features == FeatureFilter()
    assert _ids(store.view) == ["coinbase-wallet", "phantom"]


def test_set_filters_rejects_unknown_fields(store):
    before = store.filters

    with pytest.raises(ValidationError):
        store.set_filters(colour="blue")
    with pytest.raises(ValidationError):
        store.set_filters(features={"teleport": True})

    assert store.filters == before


def test_clearing_features_keeps_filters_and_view_consistent(store):
    store.set_filters(features={"staking": True})
    assert _ids(store.view) == ["ledger-live", "phantom"]

    store.set_filters(features=None)

    assert store.filters.features == FeatureFilter()
    assert len(store.view) == 5

    store.set_filters(search="ledger")
    assert _ids(store.view) == ["ledger-live"]


def test_rejected_filter_update_leaves_view_untouched(store):
    store.set_filters(categories={"niche"})
    before = (store.filters, store.view)

    with pytest.raises(ValidationError):
        store.set_filters(features=["staking"])

    assert (store.filters, store.view) == before


def test_reset_filters_restores_full_view(store):
    store.set_filters(search="ledger")
    assert len(store.view) == 1

    store.reset_filters()

    assert store.filters == FilterSpec()
    assert len(store.view) == 5


def test_view_is_recomputed_after_reload(store, make_record):
    store.set_filters(categories={"niche"})
    assert _ids(store.view) == ["tiny-wallet"]

    store.set_records([make_record("Niche One", category="niche"), make_record("Big", category="major")])

    assert _ids(store.view) == ["niche-one"]


def test_get_record_and_comparison_records(store):
    assert store.get_record("phantom").name == "Phantom"
    with pytest.raises(NotFoundError):
        store.get_record("missing")

    store.toggle_comparison("tiny-wallet")
    store.toggle_comparison("ghost")
    store.toggle_comparison("phantom")

    assert _ids(store.comparison_records()) == ["tiny-wallet", "phantom"]


def test_comparison_capacity_and_clear(catalog):
    store = RecordStore(max_selection=2)
    store.set_records(catalog)

    for rid in ("phantom", "ledger-live", "tiny-wallet"):
        store.toggle_comparison(rid)

    assert store.comparison.selected == ("phantom", "ledger-live")

    store.clear_comparison()
    assert store.comparison.selected == ()
    assert store.comparison.max_selection == 2


def test_preset_save_overwrite_load_delete(store):
    spec = FilterSpec(platforms={"android"}, sort_key="uptime")
    preset = SavedFilterPreset(id="p1", name="Android", snapshot=spec)

    assert store.save_preset(preset) is False
    assert store.save_preset(SavedFilterPreset(id="p1", name="Android v2", snapshot=spec)) is True
    assert [p.name for p in store.presets] == ["Android v2"]

    store.load_preset("p1")
    assert store.filters == spec
    assert _ids(store.view) == ["regional-pay", "phantom"]

    store.delete_preset("p1")
    assert store.presets == []

    with pytest.raises(NotFoundError):
        store.load_preset("p1")
    with pytest.raises(NotFoundError):
        store.delete_preset("p1")


def test_persisted_slice_survives_restart(catalog):
    storage = InMemoryStorage()
    first = RecordStore(snapshot=SnapshotService(storage), max_selection=3)
    first.set_records(catalog)
    first.toggle_comparison("phantom")
    first.toggle_comparison("ledger-live")
    first.save_preset(SavedFilterPreset(id="p1", name="Chrome", snapshot=FilterSpec(platforms={"chrome"})))
    first.set_display_mode("table")
    first.set_filters(search="wallet")

    second = RecordStore(snapshot=SnapshotService(storage))

    assert second.comparison.selected == ("phantom", "ledger-live")
    assert second.comparison.max_selection == 3
    assert [p.id for p in second.presets] == ["p1"]
    assert second.display_mode == "table"
    # live filters and records are not persisted
    assert second.filters == FilterSpec()
    assert second.records == ()

    stored = json.loads(storage.read_bytes(COMPARISON_KEY))
    assert stored == {"selected": ["phantom", "ledger-live"], "maxSelection": 3}
    assert json.loads(storage.read_bytes(PRESETS_KEY))[0]["name"] == "Chrome"


def test_unknown_display_mode_is_stored(store):
    store.set_display_mode("carousel")

    assert store.display_mode == "carousel"


def test_set_max_selection_truncates_selection(store):
    for rid in ("phantom", "ledger-live", "tiny-wallet"):
        store.toggle_comparison(rid)

    store.set_max_selection(1)

    assert store.comparison.selected == ("phantom",)


def test_load_from_reports_dropped_duplicates(make_record):
    store = RecordStore()
    source = StaticRecordSource([make_record("A"), make_record("B"), make_record("a")])

    result = store.load_from(source)

    assert result.ok
    assert result.value == 2
    assert result.warnings == ["Duplicate id 'a' ignored"]


def test_search_debouncer_issues_single_update(store):
    scheduler = ManualScheduler()
    debouncer = make_search_debouncer(store, scheduler, delay_ms=300)

    for text in ("l", "le", "led", "ledger"):
        debouncer.submit(text)
        scheduler.advance(0.1)

    assert store.filters.search == ""

    scheduler.advance(0.3)

    assert store.filters.search == "ledger"
    assert _ids(store.view) == ["ledger-live"]
