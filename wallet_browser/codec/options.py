from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from wallet_browser.core.record import coerce_bool


@dataclass(frozen=True)
class IncludeOptions:
    """
    Which optional column blocks / record sections an export carries.

    - features: the eleven feature fields
    - security: audit status, auditor, audit date, source openness
    - performance: speed, failure rate, uptime plus pricing (and user
      experience in JSON)
    - links: per-platform download links
    """
    features: bool = True
    security: bool = True
    performance: bool = True
    links: bool = False

    @classmethod
    def all(cls) -> IncludeOptions:
        return cls(features=True, security=True, performance=True, links=True)

    @classmethod
    def none(cls) -> IncludeOptions:
        return cls(features=False, security=False, performance=False, links=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "includeFeatures": self.features,
            "includeSecurity": self.security,
            "includePerformance": self.performance,
            "includeLinks": self.links,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> IncludeOptions:
        data = data or {}
        return cls(
            features=coerce_bool(data.get("includeFeatures", True), "includeFeatures"),
            security=coerce_bool(data.get("includeSecurity", True), "includeSecurity"),
            performance=coerce_bool(data.get("includePerformance", True), "includePerformance"),
            links=coerce_bool(data.get("includeLinks", False), "includeLinks"),
        )
