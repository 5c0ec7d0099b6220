"""
CSV interchange for record collections.

Encoding assembles a fixed base column set plus optional blocks selected by
IncludeOptions. Decoding runs a two-state character scanner so quoted cells
may hold commas, doubled quotes and line breaks, then maps each row back to a
Record by header name. Bad rows are skipped and reported, never fatal on
their own.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from wallet_browser.codec.options import IncludeOptions
from wallet_browser.core.exceptions import DecodeError, ValidationError
from wallet_browser.core.record import (
    BOOLEAN_FEATURES,
    Category,
    CustodyModel,
    DownloadLinks,
    Features,
    Performance,
    Pricing,
    QRLevel,
    Record,
    Security,
    TRUE_TOKENS,
)

logger = logging.getLogger(__name__)

PLATFORM_SEPARATOR = "; "
NOT_AVAILABLE = "N/A"
DEFAULT_UPTIME = 95.0

Getter = Callable[[Record], str]


# -------------------------------------------------------------------------
# Column layout
# -------------------------------------------------------------------------

def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _or_na(value: Optional[str]) -> str:
    return value if value else NOT_AVAILABLE


def _format_uptime(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


BASE_COLUMNS: List[Tuple[str, Getter]] = [
    ("Name", lambda r: r.name),
    ("Category", lambda r: r.category.value),
    ("Custody Model", lambda r: r.custody_model.value),
    ("Platforms", lambda r: PLATFORM_SEPARATOR.join(p.value for p in r.platforms)),
    ("Version", lambda r: r.version),
    ("Last Tested", lambda r: r.last_tested.isoformat()),
    ("Website", lambda r: r.website),
]

# header -> Features attribute
FEATURE_HEADERS: List[Tuple[str, str]] = [
    ("DEX Swap", "dex_swap"),
    ("NFT Gallery", "nft_gallery"),
    ("Staking", "staking"),
    ("Fiat On-Ramp", "fiat_on_ramp"),
    ("Fiat Off-Ramp", "fiat_off_ramp"),
    ("Push Notifications", "push_notifications"),
    ("Payment QR", "payment_qr"),
    ("Biometric Auth", "biometric_auth"),
    ("Hardware Support", "hardware_wallet_support"),
    ("Multi-chain", "multi_chain"),
    ("DApp Browser", "dapp_browser"),
]

def _feature_getter(attr: str) -> Getter:
    if attr == "payment_qr":
        return lambda r: r.features.payment_qr.value
    return lambda r: _yes_no(getattr(r.features, attr))


FEATURE_COLUMNS: List[Tuple[str, Getter]] = [(header, _feature_getter(attr)) for header, attr in FEATURE_HEADERS]

SECURITY_COLUMNS: List[Tuple[str, Getter]] = [
    ("Audit Status", lambda r: r.security.audit_status.value),
    ("Audit Company", lambda r: _or_na(r.security.audit_company)),
    ("Audit Date", lambda r: _or_na(r.security.audit_date.isoformat() if r.security.audit_date else None)),
    ("Source Code", lambda r: r.security.source_code.value),
]

PERFORMANCE_COLUMNS: List[Tuple[str, Getter]] = [
    ("Transaction Speed", lambda r: r.performance.transaction_speed.value),
    ("Failure Rate", lambda r: r.performance.failure_rate.value),
    ("Uptime", lambda r: _format_uptime(r.performance.uptime)),
    ("Free", lambda r: _yes_no(r.pricing.free)),
    ("Transaction Fees", lambda r: r.pricing.transaction_fees.value),
]

# header -> DownloadLinks attribute
LINK_HEADERS: List[Tuple[str, str]] = [
    ("Web Link", "web"),
    ("Chrome Link", "chrome"),
    ("Firefox Link", "firefox"),
    ("iOS Link", "ios"),
    ("Android Link", "android"),
    ("Desktop Link", "desktop"),
]

def _link_getter(attr: str) -> Getter:
    return lambda r: _or_na(getattr(r.download_links, attr))


LINK_COLUMNS: List[Tuple[str, Getter]] = [(header, _link_getter(attr)) for header, attr in LINK_HEADERS]

# Headers written by older exports
_HEADER_ALIASES = {"Solana Pay QR": "Payment QR"}


def columns_for(options: IncludeOptions) -> List[Tuple[str, Getter]]:
    columns = list(BASE_COLUMNS)
    if options.features:
        columns.extend(FEATURE_COLUMNS)
    if options.security:
        columns.extend(SECURITY_COLUMNS)
    if options.performance:
        columns.extend(PERFORMANCE_COLUMNS)
    if options.links:
        columns.extend(LINK_COLUMNS)
    return columns


# -------------------------------------------------------------------------
# Encode
# -------------------------------------------------------------------------

def escape_cell(value: str) -> str:
    """Quote a cell if it holds a comma, quote or line break; double inner quotes."""
    if any(ch in value for ch in (",", '"', "\n", "\r")):
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_csv(records: Sequence[Record], options: IncludeOptions = IncludeOptions()) -> str:
    columns = columns_for(options)
    lines = [",".join(escape_cell(header) for header, _ in columns)]
    for record in records:
        lines.append(",".join(escape_cell(getter(record)) for _, getter in columns))
    logger.debug("Encoded CSV", extra={"n_records": len(records), "n_columns": len(columns)})
    return "\n".join(lines)


# -------------------------------------------------------------------------
# Scanner
# -------------------------------------------------------------------------

class _ScanState(Enum):
    NORMAL = "normal"
    IN_QUOTES = "in_quotes"


def scan_rows(text: str) -> Iterator[List[str]]:
    """
    Split CSV text into rows of cells, one character at a time.

    In NORMAL, commas end a cell and CR/LF/CRLF end a row. A quote switches to
    IN_QUOTES, where everything is literal except `""` (one quote) and a lone
    quote (back to NORMAL). Unquoted cells are whitespace-trimmed; quoted
    content is kept verbatim. An unterminated quote runs to end of input.
    """
    state = _ScanState.NORMAL
    row: List[str] = []
    cell: List[str] = []
    quoted = False
    i = 0
    n = len(text)

    def finish_cell() -> None:
        nonlocal cell, quoted
        value = "".join(cell)
        row.append(value if quoted else value.strip())
        cell = []
        quoted = False

    while i < n:
        ch = text[i]

        if state is _ScanState.IN_QUOTES:
            if ch == '"':
                if i + 1 < n and text[i + 1] == '"':
                    cell.append('"')
                    i += 1
                else:
                    state = _ScanState.NORMAL
            else:
                cell.append(ch)

        elif ch == '"':
            state = _ScanState.IN_QUOTES
            quoted = True
        elif ch == ",":
            finish_cell()
        elif ch in ("\n", "\r"):
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            finish_cell()
            yield row
            row = []
        else:
            cell.append(ch)

        i += 1

    if state is _ScanState.IN_QUOTES:
        logger.warning("Unterminated quoted field at end of CSV input")

    if cell or row or quoted:
        finish_cell()
        yield row


def _is_blank(row: List[str]) -> bool:
    return all(not cell for cell in row)


# -------------------------------------------------------------------------
# Decode
# -------------------------------------------------------------------------

@dataclass
class DecodeResult:
    """Records that decoded cleanly plus one message per skipped row."""
    records: List[Record] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class _Row:
    """Cell lookup by header name; missing columns and N/A read as ''."""

    def __init__(self, index: Dict[str, int], values: List[str]):
        self._index = index
        self._values = values

    def get(self, header: str) -> str:
        pos = self._index.get(header)
        if pos is None or pos >= len(self._values):
            return ""
        value = self._values[pos]
        return "" if value.strip() == NOT_AVAILABLE else value

    def get_bool(self, header: str) -> bool:
        return self.get(header).strip().lower() in TRUE_TOKENS


def parse_uptime(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        return DEFAULT_UPTIME
    return value if math.isfinite(value) else DEFAULT_UPTIME


def _record_from_row(row: _Row) -> Record:
    feature_kwargs = {attr: row.get_bool(header) for header, attr in FEATURE_HEADERS if attr in BOOLEAN_FEATURES}
    features = Features(payment_qr=row.get("Payment QR") or QRLevel.NONE, **feature_kwargs)

    security = Security(
        audit_status=row.get("Audit Status") or "unaudited",
        audit_company=row.get("Audit Company") or None,
        audit_date=row.get("Audit Date") or None,
        source_code=row.get("Source Code") or "closed",
    )

    performance = Performance(
        transaction_speed=row.get("Transaction Speed") or "medium",
        failure_rate=row.get("Failure Rate") or "medium",
        uptime=parse_uptime(row.get("Uptime")),
    )

    pricing = Pricing(
        free=row.get_bool("Free"),
        transaction_fees=row.get("Transaction Fees") or "medium",
    )

    links = DownloadLinks(**{attr: row.get(header) or None for header, attr in LINK_HEADERS})

    platforms = tuple(p.strip() for p in row.get("Platforms").split(";") if p.strip())

    return Record(
        name=row.get("Name"),
        description=row.get("Description"),
        category=row.get("Category") or Category.NICHE,
        custody_model=row.get("Custody Model") or CustodyModel.SELF_CUSTODY,
        platforms=platforms,
        version=row.get("Version"),
        last_tested=row.get("Last Tested"),
        website=row.get("Website"),
        features=features,
        security=security,
        performance=performance,
        pricing=pricing,
        download_links=links,
    )


def decode_csv(text: str) -> DecodeResult:
    """
    Parse CSV text into records.

    Raises DecodeError when there is no header, no data rows, or not a single
    valid row. Otherwise returns every valid record and one error message per
    skipped row ("Row N: ..."; the header is row 1).
    """
    rows = [r for r in scan_rows(text.lstrip("\ufeff")) if not _is_blank(r)]
    if not rows:
        raise DecodeError("CSV input is empty")

    header = [_HEADER_ALIASES.get(h.strip(), h.strip()) for h in rows[0]]
    if "Name" not in header:
        raise DecodeError("CSV header has no 'Name' column")

    index: Dict[str, int] = {}
    for pos, name in enumerate(header):
        index.setdefault(name, pos)

    data_rows = rows[1:]
    if not data_rows:
        raise DecodeError("CSV input has no data rows")

    result = DecodeResult()
    for row_no, values in enumerate(data_rows, start=2):
        try:
            result.records.append(_record_from_row(_Row(index, values)))
        except ValidationError as exc:
            message = f"Row {row_no}: {exc}"
            logger.warning("Skipped CSV row", extra={"row": row_no, "error": str(exc)})
            result.errors.append(message)

    if not result.records:
        raise DecodeError("No valid records found in CSV input", result.errors)

    logger.info(
        "Decoded CSV",
        extra={"n_records": len(result.records), "n_skipped": len(result.errors)},
    )
    return result
