"""requests-based client for the Open Exchange Rates JSON API."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import urlencode

import requests

from oxr_bank.config import DEFAULT_SOURCE, BankConfig
from oxr_bank.errors import FetchError, NoCredentialError, api_error_for
from oxr_bank.utils.logger import get_logger

LOGGER = get_logger(__name__)

LATEST_PATH = "latest.json"
HISTORICAL_PATH = "historical/{date}.json"
USER_AGENT = "oxr-bank/1.0"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def build_request_url(config: BankConfig) -> str:
    """Return the API URL for ``config``.

    Raises :class:`NoCredentialError` when no ``app_id`` is configured so that
    no request can be attempted without a credential.
    """

    if not config.has_credential:
        raise NoCredentialError()

    base_url = config.base_url if config.base_url.endswith("/") else f"{config.base_url}/"
    if config.date is not None:
        path = HISTORICAL_PATH.format(date=config.date.isoformat())
    else:
        path = LATEST_PATH

    params: list[tuple[str, str]] = [("app_id", str(config.app_id).strip())]
    if config.source and config.source.upper() != DEFAULT_SOURCE:
        params.append(("base", config.source.upper()))
    if config.symbols:
        params.append(("symbols", ",".join(config.symbols)))
    params.append(("show_alternative", _flag(config.show_alternative)))
    params.append(("prettyprint", _flag(config.prettyprint)))
    if config.show_bid_ask:
        params.append(("show_bid_ask", "1"))
    return f"{base_url}{path}?{urlencode(params, safe=',')}"


class RateSource:
    """Fetch raw rate documents over HTTP."""

    def __init__(self, config: BankConfig, *, session: requests.Session | None = None) -> None:
        self.config = config
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.setdefault("User-Agent", USER_AGENT)
        return self._session

    def build_request_url(self) -> str:
        return build_request_url(self.config)

    def fetch(self, url: str | None = None) -> str:
        """Perform a blocking GET and return the response body.

        Typed :class:`~oxr_bank.errors.ApiError` subclasses are raised when
        the body is an API error payload; transport failures and other HTTP
        error statuses raise :class:`FetchError`.
        """

        if not self.config.has_credential:
            raise NoCredentialError()
        target = url or self.build_request_url()
        LOGGER.info("Fetching rates from %s", _redact(target))
        try:
            response = self.session.get(target, timeout=self.config.timeout)
        except requests.RequestException as exc:
            raise FetchError(f"Request to Open Exchange Rates failed: {exc}") from exc

        body = response.text
        error_payload = _error_payload(body)
        if error_payload is not None:
            error = api_error_for(error_payload)
            LOGGER.warning(
                "Open Exchange Rates returned error %s (status %s)", error.code, error.status
            )
            raise error
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise FetchError(
                f"Open Exchange Rates answered HTTP {response.status_code}"
            ) from exc
        return body

    def close(self) -> None:
        if self._session is not None:
            self._session.close()


def _error_payload(body: str) -> dict[str, Any] | None:
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if isinstance(payload, dict) and payload.get("error") is True:
        return payload
    return None


def _redact(url: str) -> str:
    head, sep, query = url.partition("app_id=")
    if not sep:
        return url
    _, amp, rest = query.partition("&")
    return f"{head}app_id=***{amp}{rest}"


__all__ = ["HISTORICAL_PATH", "LATEST_PATH", "RateSource", "build_request_url"]
