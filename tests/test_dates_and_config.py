from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from oxr_bank.config import BankConfig, looks_like_currency
from oxr_bank.utils.dates import parse_date, to_datetime


def test_parse_date_accepts_strings_and_dates() -> None:
    assert parse_date("2024-03-01") == date(2024, 3, 1)
    assert parse_date(date(2024, 3, 1)) == date(2024, 3, 1)
    assert parse_date(datetime(2024, 3, 1, 12, 30)) == date(2024, 3, 1)


def test_parse_date_rejects_other_formats() -> None:
    with pytest.raises(ValueError):
        parse_date("01/03/2024")


def test_to_datetime_returns_aware_utc() -> None:
    assert to_datetime(None) is None
    assert to_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_bank_config_normalises_fields() -> None:
    config = BankConfig(app_id="  ", date="2023-12-31", symbols=["eur", "gbp"])

    assert config.has_credential is False
    assert config.is_historical is True
    assert config.date == date(2023, 12, 31)
    assert config.symbols == ["EUR", "GBP"]


def test_bank_config_from_env_reads_oxr_variables() -> None:
    config = BankConfig.from_env(
        {"OXR_APP_ID": "abc", "OXR_BASE_URL": "https://example.test/api/", "OXR_TIMEOUT": "5"},
        prettyprint=True,
    )

    assert config.app_id == "abc"
    assert config.base_url == "https://example.test/api/"
    assert config.timeout == 5.0
    assert config.prettyprint is True


def test_bank_config_from_env_without_variables_uses_defaults() -> None:
    config = BankConfig.from_env({})

    assert config.app_id is None
    assert config.source == "USD"


@pytest.mark.parametrize(
    "code, expected",
    [("EUR", True), ("BTC", True), ("eur", False), ("EURO", False), ("", False)],
)
def test_looks_like_currency(code: str, expected: bool) -> None:
    assert looks_like_currency(code) is expected
