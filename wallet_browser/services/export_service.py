from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from wallet_browser.codec.csv_codec import encode_csv
from wallet_browser.codec.json_codec import encode_json
from wallet_browser.codec.options import IncludeOptions
from wallet_browser.core.exceptions import (
    EmptyExportError,
    UnsupportedFormatError,
    UnsupportedScopeError,
    WalletBrowserError,
)
from wallet_browser.core.record import Record
from wallet_browser.core.result import Result
from wallet_browser.core.store import RecordStore
from wallet_browser.services.storage import StorageBackend

logger = logging.getLogger(__name__)

Renderer = Callable[[Sequence[Record], IncludeOptions, datetime], str]

# format tag -> (renderer, file extension, content type)
FORMATS: Dict[str, Tuple[Renderer, str, str]] = {
    "csv": (lambda records, options, _at: encode_csv(records, options), "csv", "text/csv"),
    "json": (lambda records, options, at: encode_json(records, options, at), "json", "application/json"),
}

SCOPES = ("view", "comparison")


@dataclass(frozen=True)
class ExportArtifact:
    content: str
    filename: str
    content_type: str
    record_count: int


class FileSink(ABC):
    """Receives finished export files (download, disk, object store ...)."""

    @abstractmethod
    def save(self, content: Union[bytes, str], filename: str, content_type: str) -> None:
        pass


class StorageFileSink(FileSink):
    """Writes exports through a StorageBackend, optionally under a folder."""

    def __init__(self, storage: StorageBackend, folder: str = "exports"):
        self.storage = storage
        self.folder = folder

    def save(self, content: Union[bytes, str], filename: str, content_type: str) -> None:
        data = content.encode("utf-8") if isinstance(content, str) else content
        path = f"{self.folder}/{filename}" if self.folder else filename
        self.storage.write_bytes(path, data)
        logger.info("Saved export", extra={"path": path, "content_type": content_type, "bytes": len(data)})


def export_filename(ext: str, on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"wallets-{on.isoformat()}.{ext}"


class ExportService:
    """
    Renders record collections to CSV/JSON and hands the file to a sink.
    Stateless apart from the sink and the clock.
    """

    def __init__(
            self,
            sink: Optional[FileSink] = None,
            *,
            clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._sink = sink
        self._clock = clock

    def render(
            self,
            records: Sequence[Record],
            fmt: str,
            options: IncludeOptions = IncludeOptions(),
    ) -> ExportArtifact:
        spec = FORMATS.get(fmt.lower())
        if spec is None:
            raise UnsupportedFormatError(fmt)
        if not records:
            raise EmptyExportError("Nothing to export: the selected scope has no records")

        renderer, ext, content_type = spec
        now = self._clock()
        return ExportArtifact(
            content=renderer(records, options, now),
            filename=export_filename(ext, now.date()),
            content_type=content_type,
            record_count=len(records),
        )

    def export(
            self,
            records: Sequence[Record],
            fmt: str,
            options: IncludeOptions = IncludeOptions(),
    ) -> ExportArtifact:
        artifact = self.render(records, fmt, options)
        if self._sink is not None:
            self._sink.save(artifact.content, artifact.filename, artifact.content_type)
        logger.info(
            "Exported records",
            extra={"format": fmt, "n_records": artifact.record_count, "filename": artifact.filename},
        )
        return artifact

    def try_export(
            self,
            records: Sequence[Record],
            fmt: str,
            options: IncludeOptions = IncludeOptions(),
    ) -> Result[ExportArtifact]:
        try:
            return Result.success(self.export(records, fmt, options))
        except WalletBrowserError as exc:
            logger.error("Export failed", extra={"format": fmt, "error": str(exc)})
            return Result.failure(exc)

    def export_store(
            self,
            store: RecordStore,
            fmt: str,
            options: IncludeOptions = IncludeOptions(),
            scope: str = "view",
    ) -> Result[ExportArtifact]:
        """
        Export the store's derived view, or just the compared records within it
        (kept in view order).
        """
        if scope not in SCOPES:
            error = UnsupportedScopeError(scope)
            logger.error("Export failed", extra={"scope": scope, "error": str(error)})
            return Result.failure(error)

        records = list(store.view)
        if scope == "comparison":
            records = [r for r in records if r.id in store.comparison]
        return self.try_export(records, fmt, options)
