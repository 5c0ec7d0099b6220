from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

from wallet_browser.codec.json_codec import decode_json
from wallet_browser.core.exceptions import WalletBrowserError
from wallet_browser.core.record import Record

logger = logging.getLogger(__name__)


class CatalogError(WalletBrowserError):
    """
    Raised when the record catalog cannot be read at all.
    """
    pass


class RecordSource(ABC):
    """
    Provider of the full record collection. The store only calls load().
    """

    def __init__(self) -> None:
        self.errors: List[str] = []

    @abstractmethod
    def load(self) -> List[Record]:
        pass


class StaticRecordSource(RecordSource):
    """Serves an in-memory collection."""

    def __init__(self, records: Sequence[Record]):
        super().__init__()
        self._records = list(records)

    def load(self) -> List[Record]:
        return list(self._records)


class JsonFileRecordSource(RecordSource):
    """
    Reads a catalog file: a JSON array of records (camelCase keys) or an
    export envelope. Entries that fail validation are skipped and kept in
    `errors`.
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)

    def load(self) -> List[Record]:
        if not self.path.is_file():
            raise CatalogError(f"Record catalog not found at {self.path}.")

        logger.info("Loading record catalog", extra={"path": str(self.path)})
        result = decode_json(self.path.read_text(encoding="utf-8"))
        self.errors = list(result.errors)
        if result.errors:
            logger.warning(
                "Catalog entries skipped",
                extra={"path": str(self.path), "n_skipped": len(result.errors)},
            )
        return result.records
