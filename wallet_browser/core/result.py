from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, TypeVar

from wallet_browser.core.exceptions import WalletBrowserError

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """
    Outcome of a fallible entry point.

    ok with warnings  -> succeeded, but something was skipped or repaired
    not ok            -> hard failure, `error` says why and state is unchanged
    """

    value: Optional[T] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[WalletBrowserError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, warnings: Sequence[str] = ()) -> Result[T]:
        return cls(value=value, warnings=list(warnings))

    @classmethod
    def failure(cls, error: WalletBrowserError, warnings: Sequence[str] = ()) -> Result[T]:
        return cls(error=error, warnings=list(warnings))

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
