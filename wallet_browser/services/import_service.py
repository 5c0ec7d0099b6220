from __future__ import annotations

import logging
from typing import Callable

from wallet_browser.codec.csv_codec import DecodeResult, decode_csv
from wallet_browser.codec.json_codec import decode_json
from wallet_browser.core.exceptions import WalletBrowserError
from wallet_browser.core.result import Result
from wallet_browser.core.store import RecordStore

logger = logging.getLogger(__name__)


def _import(store: RecordStore, text: str, decode: Callable[[str], DecodeResult], label: str) -> Result[int]:
    """
    Decode `text` and replace the store's collection with the result.

    Skipped rows and dropped duplicate ids come back as warnings; a decode
    failure leaves the store untouched.
    """
    try:
        decoded = decode(text)
    except WalletBrowserError as exc:
        logger.error("Import failed", extra={"format": label, "error": str(exc)})
        return Result.failure(exc, getattr(exc, "row_errors", ()))

    dropped = store.set_records(decoded.records, dedupe=True)
    warnings = list(decoded.errors)
    warnings.extend(f"Duplicate id '{rid}' ignored" for rid in dropped)

    logger.info(
        "Imported records",
        extra={"format": label, "n_records": len(store.records), "n_warnings": len(warnings)},
    )
    return Result.success(len(store.records), warnings)


def import_csv(store: RecordStore, text: str) -> Result[int]:
    return _import(store, text, decode_csv, "csv")


def import_json(store: RecordStore, text: str) -> Result[int]:
    return _import(store, text, decode_json, "json")
