from __future__ import annotations

import json
from datetime import date
from typing import Any

import pytest
import requests

from oxr_bank.config import BankConfig
from oxr_bank.errors import (
    AccessRestrictedError,
    ApiError,
    CredentialInactiveError,
    DocumentNotFoundError,
    FetchError,
    InvalidCredentialError,
    NoCredentialError,
)
from oxr_bank.ingestion.source import RateSource, build_request_url


class _Response:
    def __init__(self, body: str, status_code: int = 200) -> None:
        self.text = body
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)  # type: ignore[arg-type]


class _Session:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, Any]] = []

    def get(self, url: str, timeout: Any = None) -> _Response:
        self.calls.append((url, timeout))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        pass


def test_latest_url_with_defaults() -> None:
    url = build_request_url(BankConfig(app_id="abc"))

    assert url == (
        "https://openexchangerates.org/api/latest.json"
        "?app_id=abc&show_alternative=false&prettyprint=false"
    )


def test_historical_url_with_all_options() -> None:
    config = BankConfig(
        app_id="abc",
        source="eur",
        date=date(2024, 1, 31),
        symbols=["gbp", "jpy"],
        show_alternative=True,
        prettyprint=True,
        show_bid_ask=True,
        base_url="https://example.test/api",
    )

    assert build_request_url(config) == (
        "https://example.test/api/historical/2024-01-31.json"
        "?app_id=abc&base=EUR&symbols=GBP,JPY&show_alternative=true&prettyprint=true"
        "&show_bid_ask=1"
    )


@pytest.mark.parametrize("app_id", [None, "", "   "])
def test_missing_credential_fails_before_any_request(app_id: str | None) -> None:
    session = _Session()
    source = RateSource(BankConfig(app_id=app_id), session=session)  # type: ignore[arg-type]

    with pytest.raises(NoCredentialError):
        source.fetch()
    with pytest.raises(NoCredentialError):
        source.fetch("https://openexchangerates.org/api/latest.json")
    assert session.calls == []


def test_fetch_returns_body_and_uses_timeout() -> None:
    body = json.dumps({"timestamp": 1, "rates": {"EUR": 0.9}})
    session = _Session(_Response(body))
    source = RateSource(BankConfig(app_id="abc", timeout=3.5), session=session)  # type: ignore[arg-type]

    assert source.fetch() == body
    assert session.calls[0][0].startswith("https://openexchangerates.org/api/latest.json?app_id=abc")
    assert session.calls[0][1] == 3.5


def test_transport_failure_is_a_fetch_error() -> None:
    session = _Session(requests.ConnectionError("boom"))
    source = RateSource(BankConfig(app_id="abc"), session=session)  # type: ignore[arg-type]

    with pytest.raises(FetchError) as excinfo:
        source.fetch()
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_http_error_without_api_payload_is_a_fetch_error() -> None:
    session = _Session(_Response("<html>Bad gateway</html>", status_code=502))
    source = RateSource(BankConfig(app_id="abc"), session=session)  # type: ignore[arg-type]

    with pytest.raises(FetchError, match="502"):
        source.fetch()


@pytest.mark.parametrize(
    "code, status, error_cls",
    [
        ("access_restricted", 429, AccessRestrictedError),
        ("not_allowed", 403, AccessRestrictedError),
        ("app_id_inactive", 401, CredentialInactiveError),
        ("invalid_app_id", 401, InvalidCredentialError),
        ("not_found", 404, DocumentNotFoundError),
        ("something_new", 400, ApiError),
    ],
)
def test_api_error_payloads_map_to_typed_errors(code: str, status: int, error_cls: type) -> None:
    body = json.dumps(
        {"error": True, "status": status, "message": code, "description": f"{code} happened"}
    )
    source = RateSource(BankConfig(app_id="abc"), session=_Session(_Response(body, status)))  # type: ignore[arg-type]

    with pytest.raises(error_cls) as excinfo:
        source.fetch()
    assert type(excinfo.value) is error_cls
    assert excinfo.value.code == code
    assert excinfo.value.status == status
    assert str(excinfo.value) == f"{code} happened"


def test_missing_app_id_payload_is_a_credential_error() -> None:
    body = json.dumps({"error": True, "status": 401, "message": "missing_app_id"})
    source = RateSource(BankConfig(app_id="abc"), session=_Session(_Response(body, 401)))  # type: ignore[arg-type]

    with pytest.raises(NoCredentialError) as excinfo:
        source.fetch()
    assert isinstance(excinfo.value, ApiError)


def test_error_payload_with_success_status_is_still_raised() -> None:
    body = json.dumps({"error": True, "message": "access_restricted"})
    source = RateSource(BankConfig(app_id="abc"), session=_Session(_Response(body)))  # type: ignore[arg-type]

    with pytest.raises(AccessRestrictedError):
        source.fetch()


def test_non_error_json_body_is_returned_verbatim() -> None:
    body = json.dumps({"error": "An error"})
    source = RateSource(BankConfig(app_id="abc"), session=_Session(_Response(body)))  # type: ignore[arg-type]

    assert source.fetch() == body
