from __future__ import annotations

from wallet_browser.core import filter_engine
from wallet_browser.core.filter_state import FeatureFilter, FilterSpec


def _ids(records):
    return [r.id for r in records]


def test_platform_filter_matches_any_requested_platform(make_record):
    a = make_record("a", platforms=("ios", "web"))
    b = make_record("b", platforms=("android",))

    result = filter_engine.apply([a, b], FilterSpec(platforms={"ios"}))

    assert _ids(result) == ["a"]


def test_search_is_case_insensitive_over_description(make_record):
    a = make_record("a", description="Native Staking rewards")
    b = make_record("b", description="Swaps only")

    result = filter_engine.apply([a, b], FilterSpec(search="stak"))

    assert _ids(result) == ["a"]


def test_search_covers_name_and_notes(catalog):
    assert _ids(filter_engine.apply(catalog, FilterSpec(search="LEDGER"))) == ["ledger-live"]
    assert _ids(filter_engine.apply(catalog, FilterSpec(search="merchant"))) == ["regional-pay"]


def test_custody_and_category_facets_or_within_and_across(catalog):
    spec = FilterSpec(custody_models={"mpc", "custodial"}, categories={"major"})

    result = filter_engine.apply(catalog, spec)

    assert _ids(result) == ["coinbase-wallet"]


def test_feature_constraints_must_all_match(catalog):
    spec = FilterSpec(features=FeatureFilter(dex_swap=True, payment_qr="full"))
    assert _ids(filter_engine.apply(catalog, spec)) == ["phantom"]

    spec = FilterSpec(features=FeatureFilter(staking=False))
    assert set(_ids(filter_engine.apply(catalog, spec))) == {"coinbase-wallet", "regional-pay", "tiny-wallet"}


def test_default_spec_sorts_by_name_ascending(catalog):
    result = filter_engine.apply(catalog, FilterSpec())

    assert _ids(result) == ["coinbase-wallet", "ledger-live", "phantom", "regional-pay", "tiny-wallet"]


def test_security_rank_descending(catalog):
    result = filter_engine.apply(catalog, FilterSpec(sort_key="securityRank", sort_direction="desc"))

    # audited first, then pending, then unaudited; ties keep input order
    assert _ids(result) == ["phantom", "ledger-live", "coinbase-wallet", "regional-pay", "tiny-wallet"]


def test_uptime_and_last_tested_sorting(catalog):
    by_uptime = filter_engine.apply(catalog, FilterSpec(sort_key="uptime"))
    assert _ids(by_uptime) == ["regional-pay", "tiny-wallet", "coinbase-wallet", "ledger-live", "phantom"]

    by_date = filter_engine.apply(catalog, FilterSpec(sort_key="lastTested", sort_direction="desc"))
    assert _ids(by_date) == ["phantom", "coinbase-wallet", "ledger-live", "tiny-wallet", "regional-pay"]


def test_equal_keys_keep_input_order_in_both_directions(catalog):
    reordered = list(reversed(catalog))

    for direction in ("asc", "desc"):
        spec = FilterSpec(sort_key="uptime", sort_direction=direction)
        tied = [r.id for r in filter_engine.apply(reordered, spec) if r.performance.uptime == 97.0]
        assert tied == ["tiny-wallet", "regional-pay"]


def test_apply_does_not_mutate_input(catalog):
    before = list(catalog)

    filter_engine.apply(catalog, FilterSpec(sort_key="uptime", sort_direction="desc"))

    assert catalog == before


def test_subset_monotonic_and_idempotent(catalog):
    loose = FilterSpec(platforms={"chrome", "android"})
    tight = FilterSpec(
        platforms={"chrome", "android"},
        custody_models={"self-custody", "mpc"},
        features=FeatureFilter(dex_swap=True),
    )

    loose_ids = set(_ids(filter_engine.apply(catalog, loose)))
    tight_result = filter_engine.apply(catalog, tight)

    assert loose_ids <= set(_ids(catalog))
    assert set(_ids(tight_result)) <= loose_ids
    assert filter_engine.apply(tight_result, tight) == tight_result
    assert filter_engine.apply(catalog, tight) == tight_result
