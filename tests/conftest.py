from __future__ import annotations

from datetime import date

import pytest

from wallet_browser.core.record import (
    Features,
    Performance,
    Record,
    Security,
    make_record_id,
)


def _make_record(name: str, **overrides) -> Record:
    fields = dict(
        name=name,
        category="major",
        custody_model="self-custody",
        platforms=("web",),
        version="1.0.0",
        last_tested=date(2024, 1, 1),
        website=f"https://{make_record_id(name)}.example",
    )
    fields.update(overrides)
    return Record(**fields)


@pytest.fixture()
def make_record():
    return _make_record


@pytest.fixture()
def catalog() -> list[Record]:
    """Five records spread across every facet."""
    return [
        _make_record(
            "Phantom",
            platforms=("chrome", "ios", "android"),
            description="Swaps, NFTs and Staking in one place",
            features=Features(dex_swap=True, staking=True, payment_qr="full"),
            security=Security(audit_status="audited"),
            performance=Performance(uptime=99.9),
            last_tested=date(2024, 11, 2),
        ),
        _make_record(
            "Ledger Live",
            category="hardware",
            platforms=("desktop", "hardware"),
            features=Features(staking=True, hardware_wallet_support=True),
            security=Security(audit_status="audited"),
            performance=Performance(uptime=99.5),
            last_tested=date(2024, 9, 18),
        ),
        _make_record(
            "Coinbase Wallet",
            custody_model="mpc",
            platforms=("chrome", "ios"),
            features=Features(dex_swap=True, payment_qr="partial"),
            security=Security(audit_status="pending"),
            performance=Performance(uptime=98.7),
            last_tested=date(2024, 10, 5),
        ),
        _make_record(
            "Regional Pay",
            category="regional",
            custody_model="custodial",
            platforms=("android",),
            notes="Merchant QR payments only",
            features=Features(payment_qr="partial"),
            performance=Performance(uptime=97.0),
            last_tested=date(2023, 12, 1),
        ),
        _make_record(
            "Tiny Wallet",
            category="niche",
            platforms=("web",),
            performance=Performance(uptime=97.0),
            last_tested=date(2024, 2, 14),
        ),
    ]
