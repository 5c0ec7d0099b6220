from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

from wallet_browser.core.exceptions import ValidationError, ValidationIssue

E = TypeVar("E", bound=Enum)


# -------------------------------------------------------------------------
# Enumerations
# -------------------------------------------------------------------------

class Platform(str, Enum):
    WEB = "web"
    CHROME = "chrome"
    FIREFOX = "firefox"
    SAFARI = "safari"
    EDGE = "edge"
    IOS = "ios"
    ANDROID = "android"
    DESKTOP = "desktop"
    HARDWARE = "hardware"


class Category(str, Enum):
    MAJOR = "major"
    HARDWARE = "hardware"
    REGIONAL = "regional"
    NICHE = "niche"


class CustodyModel(str, Enum):
    SELF_CUSTODY = "self-custody"
    MPC = "mpc"
    CUSTODIAL = "custodial"


class QRLevel(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class AuditStatus(str, Enum):
    AUDITED = "audited"
    PENDING = "pending"
    UNAUDITED = "unaudited"


class SourceCode(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    PARTIAL = "partial"


class Speed(str, Enum):
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


class Level(str, Enum):
    """Shared low/medium/high scale (failure rate, transaction fees)."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Onboarding(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    COMPLEX = "complex"


class PaymentUX(str, Enum):
    ONE_TAP = "one-tap"
    BURIED = "buried"
    NONE = "none"


# Older catalogs used yes/no for the payment QR level
_LEGACY_QR = {"yes": QRLevel.FULL, "no": QRLevel.NONE}


# -------------------------------------------------------------------------
# Coercion helpers
# -------------------------------------------------------------------------

def make_record_id(name: str) -> str:
    """Derive the stable record id from its name: lowercase, whitespace -> '-'."""
    return re.sub(r"\s+", "-", name.strip().lower())


def coerce_enum(enum_cls: Type[E], value: Any, label: str) -> E:
    if isinstance(value, enum_cls):
        return value
    if enum_cls is QRLevel and isinstance(value, str) and value.strip().lower() in _LEGACY_QR:
        return _LEGACY_QR[value.strip().lower()]  # type: ignore[return-value]
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError.single(
            f"INVALID_{label.upper().replace(' ', '_')}",
            f"Invalid {label} '{value}' (expected one of: {allowed})",
        ) from None


def coerce_date(value: Any, label: str) -> date:
    """Accept a date, a datetime or an ISO-8601 string (date or timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationError.single(
            f"INVALID_{label.upper().replace(' ', '_')}",
            f"Invalid {label} '{text}' (expected YYYY-MM-DD)",
        ) from None


TRUE_TOKENS = frozenset({"yes", "true", "1"})
FALSE_TOKENS = frozenset({"no", "false", "0", ""})


def coerce_bool(value: Any, label: str) -> bool:
    """Accept real booleans, 0/1, and yes|true|1 / no|false|0 strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        token = value.strip().lower()
        if token in TRUE_TOKENS:
            return True
        if token in FALSE_TOKENS:
            return False
    raise ValidationError.single(
        f"INVALID_{label.upper().replace(' ', '_')}",
        f"Invalid {label} '{value}' (expected a boolean)",
    )


def _optional_date(value: Any, label: str) -> Optional[date]:
    if value in (None, ""):
        return None
    return coerce_date(value, label)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# -------------------------------------------------------------------------
# Nested value types
# -------------------------------------------------------------------------

# snake_case attribute -> camelCase key used in catalog/JSON files
FEATURE_KEYS: Dict[str, str] = {
    "dex_swap": "dexSwap",
    "nft_gallery": "nftGallery",
    "staking": "staking",
    "fiat_on_ramp": "fiatOnRamp",
    "fiat_off_ramp": "fiatOffRamp",
    "push_notifications": "pushNotifications",
    "payment_qr": "paymentQR",
    "biometric_auth": "biometricAuth",
    "hardware_wallet_support": "hardwareWalletSupport",
    "multi_chain": "multiChain",
    "dapp_browser": "dappBrowser",
}

BOOLEAN_FEATURES: Tuple[str, ...] = tuple(k for k in FEATURE_KEYS if k != "payment_qr")


def feature_attr(key: str) -> str:
    """Map either spelling of a feature key (or the legacy QR key) to its attribute."""
    if key in FEATURE_KEYS:
        return key
    for attr, camel in FEATURE_KEYS.items():
        if key == camel:
            return attr
    if key == "solanaPayQR":
        return "payment_qr"
    raise KeyError(key)


@dataclass(frozen=True)
class Features:
    """
    Closed feature bag: ten capability flags plus the tri-state payment QR level.
    """
    dex_swap: bool = False
    nft_gallery: bool = False
    staking: bool = False
    fiat_on_ramp: bool = False
    fiat_off_ramp: bool = False
    push_notifications: bool = False
    payment_qr: QRLevel = QRLevel.NONE
    biometric_auth: bool = False
    hardware_wallet_support: bool = False
    multi_chain: bool = False
    dapp_browser: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "payment_qr", coerce_enum(QRLevel, self.payment_qr, "payment QR level"))

    def get(self, key: str) -> Any:
        return getattr(self, feature_attr(key))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for attr, camel in FEATURE_KEYS.items():
            value = getattr(self, attr)
            out[camel] = value.value if isinstance(value, Enum) else value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> Features:
        data = data or {}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            try:
                attr = feature_attr(key)
            except KeyError:
                continue
            kwargs[attr] = value if attr == "payment_qr" else coerce_bool(value, key)
        return cls(**kwargs)


@dataclass(frozen=True)
class Security:
    audit_status: AuditStatus = AuditStatus.UNAUDITED
    audit_company: Optional[str] = None
    audit_date: Optional[date] = None
    source_code: SourceCode = SourceCode.CLOSED

    def __post_init__(self) -> None:
        object.__setattr__(self, "audit_status", coerce_enum(AuditStatus, self.audit_status, "audit status"))
        object.__setattr__(self, "source_code", coerce_enum(SourceCode, self.source_code, "source code"))
        object.__setattr__(self, "audit_date", _optional_date(self.audit_date, "audit date"))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"auditStatus": self.audit_status.value}
        if self.audit_company:
            out["auditCompany"] = self.audit_company
        if self.audit_date:
            out["auditDate"] = self.audit_date.isoformat()
        out["sourceCode"] = self.source_code.value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> Security:
        data = data or {}
        return cls(
            audit_status=data.get("auditStatus") or AuditStatus.UNAUDITED,
            audit_company=_optional_str(data.get("auditCompany")),
            audit_date=data.get("auditDate"),
            source_code=data.get("sourceCode") or SourceCode.CLOSED,
        )


@dataclass(frozen=True)
class Performance:
    transaction_speed: Speed = Speed.MEDIUM
    failure_rate: Level = Level.MEDIUM
    uptime: float = 95.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "transaction_speed", coerce_enum(Speed, self.transaction_speed, "transaction speed"))
        object.__setattr__(self, "failure_rate", coerce_enum(Level, self.failure_rate, "failure rate"))
        try:
            uptime = float(self.uptime)
        except (TypeError, ValueError):
            raise ValidationError.single("INVALID_UPTIME", f"Invalid uptime '{self.uptime}'") from None
        if not 0.0 <= uptime <= 100.0:
            raise ValidationError.single("INVALID_UPTIME", f"Uptime {uptime} is outside 0-100")
        object.__setattr__(self, "uptime", uptime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionSpeed": self.transaction_speed.value,
            "failureRate": self.failure_rate.value,
            "uptime": self.uptime,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> Performance:
        data = data or {}
        return cls(
            transaction_speed=data.get("transactionSpeed") or Speed.MEDIUM,
            failure_rate=data.get("failureRate") or Level.MEDIUM,
            uptime=data.get("uptime", 95.0),
        )


@dataclass(frozen=True)
class UserExperience:
    onboarding: Onboarding = Onboarding.MEDIUM
    payment_ux: PaymentUX = PaymentUX.BURIED
    mobile_optimized: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "onboarding", coerce_enum(Onboarding, self.onboarding, "onboarding"))
        object.__setattr__(self, "payment_ux", coerce_enum(PaymentUX, self.payment_ux, "payment UX"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "onboarding": self.onboarding.value,
            "paymentUX": self.payment_ux.value,
            "mobileOptimized": self.mobile_optimized,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> UserExperience:
        data = data or {}
        return cls(
            onboarding=data.get("onboarding") or Onboarding.MEDIUM,
            payment_ux=data.get("paymentUX") or data.get("solanaPayUX") or PaymentUX.BURIED,
            mobile_optimized=coerce_bool(data.get("mobileOptimized", False), "mobile optimized"),
        )


@dataclass(frozen=True)
class Pricing:
    free: bool = True
    transaction_fees: Level = Level.MEDIUM
    additional_costs: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "transaction_fees", coerce_enum(Level, self.transaction_fees, "transaction fees"))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"free": self.free, "transactionFees": self.transaction_fees.value}
        if self.additional_costs:
            out["additionalCosts"] = self.additional_costs
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> Pricing:
        data = data or {}
        return cls(
            free=coerce_bool(data.get("free", True), "free"),
            transaction_fees=data.get("transactionFees") or Level.MEDIUM,
            additional_costs=_optional_str(data.get("additionalCosts")),
        )


@dataclass(frozen=True)
class DownloadLinks:
    """Optional download URL per platform."""
    web: Optional[str] = None
    chrome: Optional[str] = None
    firefox: Optional[str] = None
    safari: Optional[str] = None
    edge: Optional[str] = None
    ios: Optional[str] = None
    android: Optional[str] = None
    desktop: Optional[str] = None
    hardware: Optional[str] = None

    def get(self, platform: Platform | str) -> Optional[str]:
        return getattr(self, Platform(platform).value)

    def to_dict(self) -> Dict[str, str]:
        return {p.value: getattr(self, p.value) for p in Platform if getattr(self, p.value)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> DownloadLinks:
        data = data or {}
        return cls(**{p.value: _optional_str(data.get(p.value)) for p in Platform})


# -------------------------------------------------------------------------
# Record
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class Record:
    """
    One wallet profile.

    Required fields are validated on construction; enum-typed fields accept
    their string tags and are coerced. `id` is always make_record_id(name);
    a conflicting id is rejected.
    Records are never mutated: a collection is replaced wholesale on reload.
    """

    name: str
    category: Category
    custody_model: CustodyModel
    platforms: Tuple[Platform, ...]
    version: str
    last_tested: date
    website: str

    id: str = ""
    description: str = ""
    notes: str = ""
    logo: str = ""
    features: Features = field(default_factory=Features)
    security: Security = field(default_factory=Security)
    performance: Performance = field(default_factory=Performance)
    user_experience: UserExperience = field(default_factory=UserExperience)
    pricing: Pricing = field(default_factory=Pricing)
    download_links: DownloadLinks = field(default_factory=DownloadLinks)

    def __post_init__(self) -> None:
        issues: List[ValidationIssue] = []

        if not (self.name or "").strip():
            issues.append(ValidationIssue("RECORD_NAME", "Name is required"))
        if not (self.version or "").strip():
            issues.append(ValidationIssue("RECORD_VERSION", "Version is required"))
        if not (self.website or "").strip():
            issues.append(ValidationIssue("RECORD_WEBSITE", "Website is required"))

        if not self.category:
            issues.append(ValidationIssue("RECORD_CATEGORY", "Category is required"))
        else:
            self._coerce_into("category", Category, "category", issues)

        if not self.custody_model:
            issues.append(ValidationIssue("RECORD_CUSTODY", "Custody model is required"))
        else:
            self._coerce_into("custody_model", CustodyModel, "custody model", issues)

        platforms = _dedupe_platforms(self.platforms or (), issues)
        if not platforms:
            issues.append(ValidationIssue("RECORD_PLATFORMS", "At least one platform is required"))
        object.__setattr__(self, "platforms", platforms)

        if not self.last_tested:
            issues.append(ValidationIssue("RECORD_LAST_TESTED", "Last tested date is required"))
        else:
            try:
                object.__setattr__(self, "last_tested", coerce_date(self.last_tested, "last tested date"))
            except ValidationError as exc:
                issues.extend(exc.issues)

        derived_id = make_record_id(self.name or "")
        if self.id and derived_id and self.id != derived_id:
            issues.append(
                ValidationIssue("RECORD_ID", f"Id '{self.id}' does not match name (expected '{derived_id}')")
            )

        if issues:
            raise ValidationError(issues)

        object.__setattr__(self, "id", derived_id)

    def _coerce_into(self, attr: str, enum_cls: Type[Enum], label: str, issues: List[ValidationIssue]) -> None:
        try:
            object.__setattr__(self, attr, coerce_enum(enum_cls, getattr(self, attr), label))
        except ValidationError as exc:
            issues.extend(exc.issues)

    def to_dict(self) -> Dict[str, Any]:
        """Full camelCase shape, as stored in catalog files."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "custodyModel": self.custody_model.value,
            "platforms": [p.value for p in self.platforms],
            "features": self.features.to_dict(),
            "lastTested": self.last_tested.isoformat(),
            "version": self.version,
            "logo": self.logo,
            "website": self.website,
            "downloadLinks": self.download_links.to_dict(),
            "notes": self.notes,
            "security": self.security.to_dict(),
            "performance": self.performance.to_dict(),
            "userExperience": self.user_experience.to_dict(),
            "pricing": self.pricing.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Record:
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            notes=str(data.get("notes") or data.get("solanaPayNotes") or ""),
            category=data.get("category"),
            custody_model=data.get("custodyModel"),
            platforms=tuple(data.get("platforms") or ()),
            version=str(data.get("version") or ""),
            last_tested=data.get("lastTested"),
            website=str(data.get("website") or ""),
            logo=str(data.get("logo") or ""),
            features=Features.from_dict(data.get("features")),
            security=Security.from_dict(data.get("security")),
            performance=Performance.from_dict(data.get("performance")),
            user_experience=UserExperience.from_dict(data.get("userExperience")),
            pricing=Pricing.from_dict(data.get("pricing")),
            download_links=DownloadLinks.from_dict(data.get("downloadLinks")),
        )


def _dedupe_platforms(raw: Iterable[Any], issues: List[ValidationIssue]) -> Tuple[Platform, ...]:
    seen: List[Platform] = []
    for value in raw:
        try:
            platform = coerce_enum(Platform, value, "platform")
        except ValidationError as exc:
            issues.extend(exc.issues)
            continue
        if platform not in seen:
            seen.append(platform)
    return tuple(seen)
