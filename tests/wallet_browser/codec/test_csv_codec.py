from __future__ import annotations

from datetime import date

import pytest

from wallet_browser.codec.csv_codec import decode_csv, encode_csv, escape_cell, scan_rows
from wallet_browser.codec.options import IncludeOptions
from wallet_browser.core.exceptions import DecodeError
from wallet_browser.core.record import AuditStatus, DownloadLinks, Platform, QRLevel, Security

HEADER = "Name,Category,Custody Model,Platforms,Version,Last Tested,Website"


def test_escape_cell_quotes_only_when_needed():
    assert escape_cell("plain") == "plain"
    assert escape_cell('Wallet, "Pro"') == '"Wallet, ""Pro"""'
    assert escape_cell("two\nlines") == '"two\nlines"'


def test_header_reflects_include_options(catalog):
    base_only = encode_csv(catalog, IncludeOptions.none()).split("\n")[0]
    assert base_only == HEADER

    with_links = encode_csv(catalog, IncludeOptions(features=False, security=False, performance=False, links=True))
    assert with_links.split("\n")[0].endswith("Android Link,Desktop Link")


def test_encode_renders_sets_booleans_and_qr_tags(catalog):
    lines = encode_csv(catalog[:1]).split("\n")
    header = lines[0].split(",")
    row = dict(zip(header, lines[1].split(",")))

    assert row["Platforms"] == "chrome; ios; android"
    assert row["DEX Swap"] == "Yes"
    assert row["NFT Gallery"] == "No"
    assert row["Payment QR"] == "full"
    assert row["Audit Company"] == "N/A"
    assert row["Uptime"] == "99.9"


def test_roundtrip_keeps_every_exported_field(catalog, make_record):
    extra = make_record(
        "Link Wallet",
        platforms=("ios", "android"),
        security=Security(audit_status="audited", audit_company="Trail of Bits", audit_date=date(2024, 3, 1)),
        download_links=DownloadLinks(ios="https://apps.example/ios", android="https://play.example/a"),
    )
    records = catalog + [extra]

    decoded = decode_csv(encode_csv(records, IncludeOptions.all()))

    assert decoded.errors == []
    assert [r.id for r in decoded.records] == [r.id for r in records]
    for original, back in zip(records, decoded.records):
        assert back.platforms == original.platforms
        assert back.features == original.features
        assert back.security == original.security
        assert back.performance == original.performance
        assert back.pricing == original.pricing
        assert back.last_tested == original.last_tested
    assert decoded.records[-1].download_links == extra.download_links


def test_scanner_handles_quoted_commas_quotes_and_newlines():
    text = 'a,"b, ""c""\nd",e\r\nf,g,h\n'

    assert list(scan_rows(text)) == [["a", 'b, "c"\nd', "e"], ["f", "g", "h"]]


def test_scanner_trims_unquoted_cells_only():
    assert list(scan_rows(' x , " y ",z')) == [["x", " y ", "z"]]


def test_description_with_comma_quote_and_newline_survives():
    description = 'Wallet, "Pro"\nsecond line'
    text = (
        f"{HEADER},Description\n"
        f"Pro Wallet,major,self-custody,web,1.0,2024-01-01,https://pro.example,{escape_cell(description)}\n"
    )

    result = decode_csv(text)

    assert result.records[0].description == description


def test_bad_row_is_skipped_and_reported():
    text = "\n".join(
        [
            HEADER,
            "Alpha,major,self-custody,web,1.0,2024-01-01,https://alpha.example",
            ",major,self-custody,web,1.0,2024-01-01,https://nameless.example",
            "Gamma,niche,mpc,ios; android,2.1,2024-02-02,https://gamma.example",
        ]
    )

    result = decode_csv(text)

    assert [r.id for r in result.records] == ["alpha", "gamma"]
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Row 3:")
    assert result.records[1].platforms == (Platform.IOS, Platform.ANDROID)


def test_absent_optional_columns_use_defaults():
    text = "Name,Platforms,Version,Last Tested,Website\nBare,web,1.0,2024-01-01,https://bare.example"

    record = decode_csv(text).records[0]

    assert record.category.value == "niche"
    assert record.custody_model.value == "self-custody"
    assert record.security.audit_status is AuditStatus.UNAUDITED
    assert record.performance.uptime == 95.0
    assert record.pricing.free is False
    assert record.features.payment_qr is QRLevel.NONE


def test_booleans_and_uptime_parsing():
    text = (
        f"{HEADER},Staking,DEX Swap,NFT Gallery,Uptime\n"
        "A,major,self-custody,web,1.0,2024-01-01,https://a.example,TRUE,1,maybe,abc\n"
    )

    record = decode_csv(text).records[0]

    assert record.features.staking is True
    assert record.features.dex_swap is True
    assert record.features.nft_gallery is False
    assert record.performance.uptime == 95.0


def test_legacy_payment_qr_header_and_tags():
    text = f"{HEADER},Solana Pay QR\nA,major,self-custody,web,1.0,2024-01-01,https://a.example,yes\n"

    assert decode_csv(text).records[0].features.payment_qr is QRLevel.FULL


def test_bom_crlf_and_blank_lines_are_tolerated():
    text = (
        "\ufeff" + HEADER + "\r\n"
        "\r\n"
        "A,major,self-custody,web,1.0,2024-01-01,https://a.example\r\n"
    )

    assert [r.id for r in decode_csv(text).records] == ["a"]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "\n\n",
        "Category,Version\nmajor,1.0",
        HEADER,
        f"{HEADER}\n,major,self-custody,web,1.0,2024-01-01,https://x.example",
    ],
)
def test_unusable_input_raises_decode_error(text):
    with pytest.raises(DecodeError):
        decode_csv(text)


def test_zero_valid_rows_keeps_row_errors():
    with pytest.raises(DecodeError) as exc_info:
        decode_csv(f"{HEADER}\nA,galaxy,self-custody,web,1.0,2024-01-01,https://a.example")

    assert exc_info.value.row_errors[0].startswith("Row 2:")
