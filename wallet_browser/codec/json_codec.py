from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from wallet_browser.codec.csv_codec import DecodeResult
from wallet_browser.codec.options import IncludeOptions
from wallet_browser.core.exceptions import DecodeError, ValidationError
from wallet_browser.core.record import Record
from wallet_browser.validation.record_validation import validate_record_dict

logger = logging.getLogger(__name__)

# Always exported, whatever the options
BASE_FIELDS = (
    "id",
    "name",
    "description",
    "category",
    "custodyModel",
    "platforms",
    "version",
    "lastTested",
    "website",
    "logo",
    "notes",
)


def project_record(record: Record, options: IncludeOptions) -> Dict[str, Any]:
    """Select the sections of the full record shape that `options` asks for."""
    full = record.to_dict()
    out = {key: full[key] for key in BASE_FIELDS}

    if options.features:
        out["features"] = full["features"]
    if options.security:
        out["security"] = full["security"]
    if options.performance:
        out["performance"] = full["performance"]
        out["userExperience"] = full["userExperience"]
        out["pricing"] = full["pricing"]
    if options.links:
        out["downloadLinks"] = full["downloadLinks"]

    return out


def export_envelope(
        records: Sequence[Record],
        options: IncludeOptions = IncludeOptions(),
        exported_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    exported_at = exported_at or datetime.now(timezone.utc)
    return {
        "exportedAt": exported_at.isoformat(),
        "recordCount": len(records),
        "options": options.to_dict(),
        "records": [project_record(r, options) for r in records],
    }


def encode_json(
        records: Sequence[Record],
        options: IncludeOptions = IncludeOptions(),
        exported_at: Optional[datetime] = None,
) -> str:
    return json.dumps(export_envelope(records, options, exported_at), indent=2)


def decode_json(text: str) -> DecodeResult:
    """
    Parse records from either an export envelope or a bare array of records.

    Entries that fail validation are skipped and reported, like CSV rows.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Invalid JSON: {exc}") from exc

    entries: List[Any]
    if isinstance(raw, list):
        entries = raw
    elif isinstance(raw, dict) and isinstance(raw.get("records"), list):
        entries = raw["records"]
    elif isinstance(raw, dict) and isinstance(raw.get("wallets"), list):
        # older exports used "wallets" for the record array
        entries = raw["wallets"]
    else:
        raise DecodeError("JSON input is neither a record array nor an export envelope")

    if not entries:
        raise DecodeError("JSON input holds no records")

    result = DecodeResult()
    for pos, entry in enumerate(entries, start=1):
        try:
            validate_record_dict(entry)
            result.records.append(Record.from_dict(entry))
        except ValidationError as exc:
            logger.warning("Skipped JSON record", extra={"position": pos, "error": str(exc)})
            result.errors.append(f"Record {pos}: {exc}")

    if not result.records:
        raise DecodeError("No valid records found in JSON input", result.errors)

    logger.info(
        "Decoded JSON",
        extra={"n_records": len(result.records), "n_skipped": len(result.errors)},
    )
    return result
