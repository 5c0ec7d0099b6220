from __future__ import annotations

from datetime import date

import pytest

from wallet_browser.core.exceptions import ValidationError
from wallet_browser.core.record import (
    Category,
    Features,
    Platform,
    QRLevel,
    Record,
    make_record_id,
)


def test_make_record_id_lowercases_and_hyphenates():
    assert make_record_id("Coinbase  Wallet") == "coinbase-wallet"
    assert make_record_id(" Trust Wallet\tPro ") == "trust-wallet-pro"


def test_record_coerces_tags_and_derives_id(make_record):
    r = make_record("Solflare", category="HARDWARE", platforms=["iOS", "web", "ios"], last_tested="2024-05-06T10:00:00Z")

    assert r.id == "solflare"
    assert r.category is Category.HARDWARE
    assert r.platforms == (Platform.IOS, Platform.WEB)
    assert r.last_tested == date(2024, 5, 6)


def test_record_reports_every_missing_field():
    with pytest.raises(ValidationError) as exc_info:
        Record(
            name="",
            category=None,
            custody_model="self-custody",
            platforms=(),
            version="",
            last_tested=None,
            website="https://x.example",
        )

    codes = {issue.code for issue in exc_info.value.issues}
    assert codes == {"RECORD_NAME", "RECORD_CATEGORY", "RECORD_PLATFORMS", "RECORD_VERSION", "RECORD_LAST_TESTED"}


def test_invalid_enum_tag_is_a_validation_error(make_record):
    with pytest.raises(ValidationError) as exc_info:
        make_record("x", platforms=("web", "smartwatch"))

    assert "smartwatch" in str(exc_info.value)


def test_uptime_must_be_a_percentage(make_record):
    from wallet_browser.core.record import Performance

    with pytest.raises(ValidationError):
        Performance(uptime=101)


def test_from_dict_accepts_legacy_keys():
    r = Record.from_dict(
        {
            "name": "Old Wallet",
            "category": "niche",
            "custodyModel": "custodial",
            "platforms": ["android"],
            "version": "0.9",
            "lastTested": "2023-01-02",
            "website": "https://old.example",
            "solanaPayNotes": "Legacy notes",
            "features": {"solanaPayQR": "yes", "staking": True},
            "userExperience": {"solanaPayUX": "one-tap"},
        }
    )

    assert r.notes == "Legacy notes"
    assert r.features.payment_qr is QRLevel.FULL
    assert r.features.staking is True
    assert r.user_experience.payment_ux.value == "one-tap"


def test_to_dict_from_dict_roundtrip(make_record):
    r = make_record(
        "Backpack",
        description="xNFT wallet",
        features=Features(nft_gallery=True, payment_qr="partial"),
    )

    assert Record.from_dict(r.to_dict()) == r


def test_explicit_id_must_match_name(make_record):
    assert make_record("Glow Wallet", id="glow-wallet").id == "glow-wallet"

    with pytest.raises(ValidationError) as exc_info:
        make_record("Glow Wallet", id="glow")

    assert [issue.code for issue in exc_info.value.issues] == ["RECORD_ID"]


@pytest.mark.parametrize("raw, expected", [("false", False), ("No", False), ("0", False), ("yes", True), (1, True)])
def test_feature_flags_parse_boolean_strings(raw, expected):
    assert Features.from_dict({"staking": raw}).staking is expected


def test_unrecognised_feature_flag_is_rejected():
    with pytest.raises(ValidationError):
        Features.from_dict({"staking": "maybe"})
