from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Type

from wallet_browser.core.exceptions import ValidationError
from wallet_browser.core.record import (
    FEATURE_KEYS,
    Category,
    CustodyModel,
    Platform,
    QRLevel,
    coerce_bool,
    coerce_enum,
    feature_attr,
)


class SortKey(str, Enum):
    NAME = "name"
    LAST_TESTED = "lastTested"
    SECURITY_RANK = "securityRank"
    UPTIME = "uptime"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Sort tags used by older saved presets
_LEGACY_SORT_KEYS = {"security": SortKey.SECURITY_RANK, "popularity": SortKey.UPTIME}


def _coerce_sort_key(value: Any) -> SortKey:
    if isinstance(value, str) and value in _LEGACY_SORT_KEYS:
        return _LEGACY_SORT_KEYS[value]
    if isinstance(value, SortKey):
        return value
    try:
        return SortKey(value)
    except ValueError:
        raise ValidationError.single("FILTER_SORT_KEY", f"Invalid sort key '{value}'") from None


def _enum_set(enum_cls: Type[Enum], values: Iterable[Any] | None, label: str) -> FrozenSet[Any]:
    if values is None:
        return frozenset()
    if isinstance(values, (str, Enum)):
        values = [values]
    return frozenset(coerce_enum(enum_cls, v, label) for v in values)


@dataclass(frozen=True)
class FeatureFilter:
    """
    Partial feature constraints: one optional field per feature key.

    None means "unconstrained"; every non-None field must match (AND).
    """
    dex_swap: Optional[bool] = None
    nft_gallery: Optional[bool] = None
    staking: Optional[bool] = None
    fiat_on_ramp: Optional[bool] = None
    fiat_off_ramp: Optional[bool] = None
    push_notifications: Optional[bool] = None
    payment_qr: Optional[QRLevel] = None
    biometric_auth: Optional[bool] = None
    hardware_wallet_support: Optional[bool] = None
    multi_chain: Optional[bool] = None
    dapp_browser: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.payment_qr is not None:
            object.__setattr__(self, "payment_qr", coerce_enum(QRLevel, self.payment_qr, "payment QR level"))

    def active(self) -> Dict[str, Any]:
        """Only the constrained keys, as attribute -> required value."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def merged(self, partial: Mapping[str, Any]) -> FeatureFilter:
        """
        Merge key by key. Keys may use either snake_case or camelCase spelling;
        a None value removes the constraint.
        """
        updates: Dict[str, Any] = {}
        for key, value in partial.items():
            try:
                attr = feature_attr(key)
            except KeyError:
                raise ValidationError.single("FILTER_FEATURE_KEY", f"Unknown feature '{key}'") from None
            if value is not None and attr != "payment_qr":
                value = coerce_bool(value, key)
            updates[attr] = value
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for attr, value in self.active().items():
            out[FEATURE_KEYS[attr]] = value.value if isinstance(value, Enum) else value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> FeatureFilter:
        return cls().merged(data or {})


@dataclass(frozen=True)
class FilterSpec:
    """
    Represents the current user selection/filters.

    Fields:

    - platforms / custody_models / categories: facet sets. Empty means no
      constraint, otherwise a record matches if it hits any value in the set.
    - features: partial feature constraints, all of which must match.
    - search: case-insensitive substring over name, description and notes.
    - sort_key / sort_direction: ordering of the derived view.
    """

    platforms: FrozenSet[Platform] = field(default_factory=frozenset)
    custody_models: FrozenSet[CustodyModel] = field(default_factory=frozenset)
    categories: FrozenSet[Category] = field(default_factory=frozenset)
    features: FeatureFilter = field(default_factory=FeatureFilter)
    search: str = ""

    sort_key: SortKey = SortKey.NAME
    sort_direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        object.__setattr__(self, "platforms", _enum_set(Platform, self.platforms, "platform"))
        object.__setattr__(self, "custody_models", _enum_set(CustodyModel, self.custody_models, "custody model"))
        object.__setattr__(self, "categories", _enum_set(Category, self.categories, "category"))
        if self.features is None:
            object.__setattr__(self, "features", FeatureFilter())
        elif isinstance(self.features, Mapping):
            object.__setattr__(self, "features", FeatureFilter.from_dict(self.features))
        elif not isinstance(self.features, FeatureFilter):
            raise ValidationError.single(
                "FILTER_FEATURES", f"Invalid feature constraints '{self.features!r}'"
            )
        object.__setattr__(self, "search", self.search or "")
        object.__setattr__(self, "sort_key", _coerce_sort_key(self.sort_key))
        try:
            object.__setattr__(self, "sort_direction", SortDirection(self.sort_direction))
        except ValueError:
            raise ValidationError.single(
                "FILTER_SORT_DIRECTION", f"Invalid sort direction '{self.sort_direction}'"
            ) from None

    def merged(self, partial: Mapping[str, Any]) -> FilterSpec:
        """
        Shallow merge of `partial` into this spec. `features` given as a mapping
        merges key by key, given as a FeatureFilter replaces the constraints, given
        as None clears them.
        """
        known = {f.name for f in fields(self)}
        updates: Dict[str, Any] = {}
        for key, value in partial.items():
            if key not in known:
                raise ValidationError.single("FILTER_KEY", f"Unknown filter field '{key}'")
            if key == "features" and isinstance(value, Mapping):
                value = self.features.merged(value)
            updates[key] = value
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "platforms": sorted(p.value for p in self.platforms),
            "custodyModel": sorted(c.value for c in self.custody_models),
            "categories": sorted(c.value for c in self.categories),
            "features": self.features.to_dict(),
            "search": self.search,
            "sortBy": self.sort_key.value,
            "sortOrder": self.sort_direction.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> FilterSpec:
        data = data or {}
        return cls(
            platforms=data.get("platforms") or (),
            custody_models=data.get("custodyModel") or data.get("custodyModels") or (),
            categories=data.get("categories") or (),
            features=FeatureFilter.from_dict(data.get("features")),
            search=str(data.get("search") or ""),
            sort_key=data.get("sortBy") or SortKey.NAME,
            sort_direction=data.get("sortOrder") or SortDirection.ASC,
        )
