from __future__ import annotations

import random

import pytest

from wallet_browser.core import comparison as cmp
from wallet_browser.core.comparison import ComparisonSelection
from wallet_browser.core.exceptions import ValidationError


def test_toggle_appends_until_capacity_then_ignores():
    sel = ComparisonSelection(max_selection=2)

    sel = cmp.toggle(sel, "a")
    assert sel.selected == ("a",)

    sel = cmp.toggle(sel, "b")
    assert sel.selected == ("a", "b")

    full = cmp.toggle(sel, "c")
    assert full.selected == ("a", "b")
    assert full is sel


def test_toggle_removes_present_id_keeping_order():
    sel = ComparisonSelection(selected=("a", "b", "c"))

    sel = cmp.toggle(sel, "b")

    assert sel.selected == ("a", "c")


def test_double_toggle_restores_selection():
    sel = ComparisonSelection(selected=("a", "b"), max_selection=3)
    assert cmp.toggle(cmp.toggle(sel, "x"), "x") == sel

    full = ComparisonSelection(selected=("a", "b"), max_selection=2)
    assert cmp.toggle(cmp.toggle(full, "x"), "x") == full


def test_random_toggles_never_break_invariants():
    rng = random.Random(7)
    sel = ComparisonSelection(max_selection=3)

    for _ in range(500):
        sel = cmp.toggle(sel, f"id-{rng.randrange(8)}")
        assert len(sel) <= 3
        assert len(set(sel.selected)) == len(sel.selected)


def test_clear_keeps_capacity():
    sel = ComparisonSelection(selected=("a",), max_selection=4)

    cleared = cmp.clear(sel)

    assert cleared.selected == ()
    assert cleared.max_selection == 4


def test_resize_keeps_oldest():
    sel = ComparisonSelection(selected=("a", "b", "c"))

    assert cmp.resize(sel, 2).selected == ("a", "b")


def test_constructor_rejects_broken_selections():
    with pytest.raises(ValidationError):
        ComparisonSelection(selected=("a", "a"))
    with pytest.raises(ValidationError):
        ComparisonSelection(selected=("a", "b", "c"), max_selection=2)
    with pytest.raises(ValidationError):
        ComparisonSelection(max_selection=0)


def test_from_dict_repairs_corrupt_snapshot():
    sel = ComparisonSelection.from_dict({"selected": ["a", "a", "b", "c"], "maxSelection": 2})

    assert sel.selected == ("a", "b")
    assert sel.to_dict() == {"selected": ["a", "b"], "maxSelection": 2}
