from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import pandas as pd

from wallet_browser.core.record import (
    BOOLEAN_FEATURES,
    FEATURE_KEYS,
    AuditStatus,
    Level,
    QRLevel,
    Record,
    SourceCode,
)

_FRAME_COLUMNS = [
    "id",
    "name",
    "category",
    "custody_model",
    "platforms",
    "audit_status",
    "transaction_speed",
    "uptime",
    "payment_qr",
    *BOOLEAN_FEATURES,
]


@dataclass(frozen=True)
class FeatureGap:
    feature: str
    support_percentage: float
    missing_ids: List[str]


@dataclass(frozen=True)
class QRStats:
    total_supported: int
    full: int
    partial: int
    none: int


@dataclass
class AnalyticsSummary:
    """
    Derived aggregates over a record collection.
    Every count is keyed by the enum tag / camelCase feature key.
    """
    total: int
    categories: Dict[str, int] = field(default_factory=dict)
    custody_models: Dict[str, int] = field(default_factory=dict)
    platforms: Dict[str, int] = field(default_factory=dict)
    features: Dict[str, int] = field(default_factory=dict)
    audit_status: Dict[str, int] = field(default_factory=dict)
    transaction_speed: Dict[str, int] = field(default_factory=dict)
    payment_qr: QRStats = QRStats(0, 0, 0, 0)
    average_uptime: float = 0.0
    feature_gaps: List[FeatureGap] = field(default_factory=list)


@dataclass(frozen=True)
class FeatureComparison:
    feature: str
    supported: int
    total: int
    percentage: float


@dataclass
class ComparisonSummary:
    """Security scores (by record id, selection order) and per-feature support across compared records."""
    security_scores: Dict[str, int] = field(default_factory=dict)
    features: List[FeatureComparison] = field(default_factory=list)


def records_frame(records: Sequence[Record]) -> pd.DataFrame:
    """One row per record, enum fields as their string tags."""
    rows = []
    for r in records:
        row = {
            "id": r.id,
            "name": r.name,
            "category": r.category.value,
            "custody_model": r.custody_model.value,
            "platforms": [p.value for p in r.platforms],
            "audit_status": r.security.audit_status.value,
            "transaction_speed": r.performance.transaction_speed.value,
            "uptime": r.performance.uptime,
            "payment_qr": r.features.payment_qr.value,
        }
        for attr in BOOLEAN_FEATURES:
            row[attr] = getattr(r.features, attr)
        rows.append(row)
    return pd.DataFrame(rows, columns=_FRAME_COLUMNS)


def _counts(series: pd.Series) -> Dict[str, int]:
    return {str(k): int(v) for k, v in series.value_counts().items()}


def platform_counts(df: pd.DataFrame) -> Dict[str, int]:
    if df.empty:
        return {}
    return _counts(df["platforms"].explode().dropna())


def feature_support(df: pd.DataFrame) -> Dict[str, int]:
    return {FEATURE_KEYS[attr]: int(df[attr].astype(bool).sum()) for attr in BOOLEAN_FEATURES}


def feature_gaps(df: pd.DataFrame) -> List[FeatureGap]:
    """Boolean features ordered from least to most supported."""
    total = len(df)
    gaps: List[FeatureGap] = []
    for attr in BOOLEAN_FEATURES:
        supported = df[attr].astype(bool)
        pct = round(100.0 * supported.sum() / total, 1) if total else 0.0
        gaps.append(
            FeatureGap(
                feature=FEATURE_KEYS[attr],
                support_percentage=float(pct),
                missing_ids=df.loc[~supported, "id"].tolist(),
            )
        )
    return sorted(gaps, key=lambda g: g.support_percentage)


def qr_stats(df: pd.DataFrame) -> QRStats:
    counts = df["payment_qr"].value_counts()
    full = int(counts.get(QRLevel.FULL.value, 0))
    partial = int(counts.get(QRLevel.PARTIAL.value, 0))
    none = int(counts.get(QRLevel.NONE.value, 0))
    return QRStats(total_supported=full + partial, full=full, partial=partial, none=none)


def summarize(records: Sequence[Record]) -> AnalyticsSummary:
    df = records_frame(records)
    return AnalyticsSummary(
        total=len(df),
        categories=_counts(df["category"]),
        custody_models=_counts(df["custody_model"]),
        platforms=platform_counts(df),
        features=feature_support(df),
        audit_status=_counts(df["audit_status"]),
        transaction_speed=_counts(df["transaction_speed"]),
        payment_qr=qr_stats(df),
        average_uptime=round(float(df["uptime"].mean()), 2) if len(df) else 0.0,
        feature_gaps=feature_gaps(df),
    )


# -------------------------------------------------------------------------
# Comparison
# -------------------------------------------------------------------------

_AUDIT_POINTS = {AuditStatus.AUDITED: 40, AuditStatus.PENDING: 20}
_SOURCE_POINTS = {SourceCode.OPEN: 30, SourceCode.PARTIAL: 15}
_FAILURE_POINTS = {Level.LOW: 10, Level.MEDIUM: 5}
MAX_SECURITY_SCORE = 100


def security_score(record: Record) -> int:
    """Weighted 0-100 score from audit status, source availability, uptime and failure rate."""
    score = _AUDIT_POINTS.get(record.security.audit_status, 0)
    score += _SOURCE_POINTS.get(record.security.source_code, 0)

    uptime = record.performance.uptime
    if uptime > 99:
        score += 20
    elif uptime > 95:
        score += 10

    score += _FAILURE_POINTS.get(record.performance.failure_rate, 0)
    return min(score, MAX_SECURITY_SCORE)


def feature_comparison(records: Sequence[Record]) -> List[FeatureComparison]:
    """
    Support for every feature key across `records`, in catalog key order.
    Boolean features count when set; payment QR counts only full support.
    """
    df = records_frame(records)
    total = len(df)
    out: List[FeatureComparison] = []
    for attr, key in FEATURE_KEYS.items():
        if attr in BOOLEAN_FEATURES:
            supported = int(df[attr].astype(bool).sum())
        else:
            supported = int((df[attr] == QRLevel.FULL.value).sum())
        out.append(
            FeatureComparison(
                feature=key,
                supported=supported,
                total=total,
                percentage=100.0 * supported / total if total else 0.0,
            )
        )
    return out


def compare(records: Sequence[Record]) -> ComparisonSummary:
    """Aggregates for a comparison selection, e.g. RecordStore.comparison_records()."""
    return ComparisonSummary(
        security_scores={r.id: security_score(r) for r in records},
        features=feature_comparison(records),
    )
