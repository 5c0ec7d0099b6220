from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Sequence

from wallet_browser.core.filter_state import FilterSpec, SortDirection, SortKey
from wallet_browser.core.record import AuditStatus, Record

logger = logging.getLogger(__name__)

SECURITY_RANK: Dict[AuditStatus, int] = {
    AuditStatus.AUDITED: 2,
    AuditStatus.PENDING: 1,
    AuditStatus.UNAUDITED: 0,
}

_SORT_VALUE: Dict[SortKey, Callable[[Record], Any]] = {
    SortKey.NAME: lambda r: r.name,
    SortKey.LAST_TESTED: lambda r: r.last_tested,
    SortKey.SECURITY_RANK: lambda r: SECURITY_RANK[r.security.audit_status],
    SortKey.UPTIME: lambda r: r.performance.uptime,
}


def matches_search(record: Record, search: str) -> bool:
    if not search:
        return True
    term = search.lower()
    return (
        term in record.name.lower()
        or term in record.description.lower()
        or term in record.notes.lower()
    )


def matches(record: Record, spec: FilterSpec) -> bool:
    """
    True if `record` passes every facet of `spec`.

    Facets combine with AND; within a facet set any value may match.
    """
    if not matches_search(record, spec.search):
        return False

    if spec.platforms and spec.platforms.isdisjoint(record.platforms):
        return False

    if spec.custody_models and record.custody_model not in spec.custody_models:
        return False

    if spec.categories and record.category not in spec.categories:
        return False

    for attr, wanted in spec.features.active().items():
        if getattr(record.features, attr) != wanted:
            return False

    return True


def sort_records(records: Sequence[Record], key: SortKey, direction: SortDirection) -> List[Record]:
    # sorted() is stable in both directions: equal keys keep their input order
    return sorted(
        records,
        key=_SORT_VALUE[key],
        reverse=direction is SortDirection.DESC,
    )


def apply(records: Sequence[Record], spec: FilterSpec) -> List[Record]:
    """
    Derive the ordered view of `records` for `spec`.

    Pure: the input sequence is never mutated and the result only ever holds
    records from it.
    """
    kept = [r for r in records if matches(r, spec)]
    result = sort_records(kept, spec.sort_key, spec.sort_direction)
    logger.debug(
        "Applied filters",
        extra={"n_in": len(records), "n_out": len(result), "sort_key": spec.sort_key.value},
    )
    return result
