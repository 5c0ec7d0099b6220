from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from wallet_browser.core.record import Record


class WalletBrowserError(Exception):
    """Base exception for all wallet_browser errors"""
    pass


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str


class ValidationError(WalletBrowserError):
    """
    Malformed or missing required Record / filter fields.
    Carries every issue found, not just the first one.
    """

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(i.message for i in issues))

    @classmethod
    def single(cls, code: str, message: str) -> ValidationError:
        return cls([ValidationIssue(code, message)])


class DuplicateIdError(WalletBrowserError):
    """
    A record collection contains more than one record with the same id.

    `deduplicated` holds the collection with only the first record per id kept,
    so callers may still proceed with it.
    """

    def __init__(self, ids: Iterable[str], deduplicated: Sequence["Record"] = ()):
        self.ids = sorted(set(ids))
        self.deduplicated = list(deduplicated)
        super().__init__(f"Duplicate record ids: {', '.join(self.ids)}")


class NotFoundError(WalletBrowserError):
    """Operating on an unknown preset or record id"""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"Unknown {kind} '{item_id}'")


class UnsupportedFormatError(WalletBrowserError):
    """Export requested with an unrecognised format tag"""

    def __init__(self, fmt: str):
        self.format = fmt
        super().__init__(f"Unsupported export format '{fmt}'")


class DecodeError(WalletBrowserError):
    """
    The whole input could not be turned into records: no header, no rows,
    or zero valid rows. Row-level messages are kept in `row_errors`.
    """

    def __init__(self, message: str, row_errors: Sequence[str] = ()):
        self.row_errors = list(row_errors)
        super().__init__(message)


class EmptyExportError(WalletBrowserError):
    """The requested export scope resolved to zero records"""
    pass


class UnsupportedScopeError(WalletBrowserError):
    """Export requested for a scope other than the view or the comparison"""

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(f"Unknown export scope '{scope}'")
