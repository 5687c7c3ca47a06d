"""Public interface for the oxr_bank package."""

from __future__ import annotations

import threading
import warnings
from datetime import date, datetime
from importlib import metadata as importlib_metadata
from typing import Callable, Iterable

import requests

from oxr_bank.config import DEFAULT_SOURCE, BankConfig, looks_like_currency
from oxr_bank.errors import (
    AccessRestrictedError,
    ApiError,
    CredentialInactiveError,
    DocumentNotFoundError,
    FetchError,
    InvalidBaseError,
    InvalidCacheError,
    InvalidCredentialError,
    MalformedDocumentError,
    NoCredentialError,
    NoRateError,
    OXRBankError,
    ZeroRateError,
)
from oxr_bank.expiry import Clock, TTLExpiryController
from oxr_bank.ingestion.models import RateQuote, RatesDocument, RateType
from oxr_bank.ingestion.source import RateSource
from oxr_bank.ingestion.validator import DocumentValidator
from oxr_bank.resolver import RateResolver
from oxr_bank.store.cache import CacheChannel, CacheLocation, CallbackCache
from oxr_bank.store.rate_store import RateStore
from oxr_bank.utils.dates import parse_date, to_datetime
from oxr_bank.utils.logger import get_logger

__all__ = [
    "__version__",
    "AccessRestrictedError",
    "ApiError",
    "BankConfig",
    "CallbackCache",
    "CredentialInactiveError",
    "DocumentNotFoundError",
    "FetchError",
    "InvalidBaseError",
    "InvalidCacheError",
    "InvalidCredentialError",
    "MalformedDocumentError",
    "NoCredentialError",
    "NoRateError",
    "OXRBankError",
    "OpenExchangeRatesBank",
    "RateQuote",
    "RateStore",
    "RateType",
    "RatesDocument",
    "SQLDocumentCache",
    "ZeroRateError",
]

try:
    __version__ = importlib_metadata.version("oxr-bank")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.4.0"

LOGGER = get_logger(__name__)


class OpenExchangeRatesBank:
    """Exchange-rate provider backed by the Open Exchange Rates API.

    Rates are stored relative to :attr:`source` (``USD`` unless configured)
    and any other pair is derived on demand. The last valid raw response is
    kept in :attr:`cache` (a path, a ``(write, read)`` callback pair or any
    object exposing ``write``/``read``) and is preferred over the network on
    :meth:`update_rates`. When :attr:`ttl_in_seconds` is set, every
    :meth:`get_rate` call first checks expiry and refreshes inline.

    One instance-level lock covers lookups, updates and expiry so concurrent
    readers never observe the store between clear and repopulate.
    """

    # Provide direct access to the package version as a class attribute.
    __version__ = __version__

    def __init__(
        self,
        app_id: str | None = None,
        *,
        cache: CacheLocation = None,
        source: str = DEFAULT_SOURCE,
        date: date | str | None = None,
        symbols: Iterable[str] | None = None,
        show_alternative: bool | None = None,
        prettyprint: bool | None = None,
        show_bid_ask: bool | None = None,
        force_refresh_rate_on_expire: bool = False,
        ttl_in_seconds: int | None = None,
        config: BankConfig | None = None,
        session: requests.Session | None = None,
        currency_check: Callable[[str], bool] | None = None,
        clock: Clock | None = None,
    ) -> None:
        supplied_config = config is not None
        self.config = config if config is not None else BankConfig()
        if app_id is not None:
            self.config.app_id = app_id
        if date is not None:
            self.date = date
        if symbols is not None:
            self.symbols = symbols
        if show_alternative is not None:
            self.show_alternative = show_alternative
        if prettyprint is not None:
            self.prettyprint = prettyprint
        if show_bid_ask is not None:
            self.show_bid_ask = show_bid_ask
        self.is_known_currency: Callable[[str], bool] = currency_check or looks_like_currency
        self.force_refresh_rate_on_expire = force_refresh_rate_on_expire
        self.store = RateStore()
        self.doc: RatesDocument | None = None
        self._lock = threading.RLock()
        self._cache = CacheChannel(cache)
        self._rate_source = RateSource(self.config, session=session)
        self._resolver = RateResolver(self.store, lambda: self.config.source)
        self._expiry = TTLExpiryController(clock=clock)
        self.source = self.config.source if supplied_config and source == DEFAULT_SOURCE else source
        self.ttl_in_seconds = ttl_in_seconds

    # Configuration -------------------------------------------------------

    @property
    def app_id(self) -> str | None:
        return self.config.app_id

    @app_id.setter
    def app_id(self, value: str | None) -> None:
        self.config.app_id = value

    @property
    def cache(self) -> CacheLocation:
        return self._cache.location

    @cache.setter
    def cache(self, value: CacheLocation) -> None:
        self._cache = CacheChannel(value)

    @property
    def source(self) -> str:
        return self.config.source

    @source.setter
    def source(self, value: str | None) -> None:
        code = (value or "").strip().upper()
        if not self.is_known_currency(code):
            message = f"Unknown source currency {value!r}; falling back to {DEFAULT_SOURCE}"
            LOGGER.warning(message)
            warnings.warn(message, UserWarning, stacklevel=2)
            code = DEFAULT_SOURCE
        self.config.source = code

    @property
    def date(self) -> date | None:
        return self.config.date

    @date.setter
    def date(self, value: date | str | None) -> None:
        self.config.date = parse_date(value) if value is not None else None

    @property
    def symbols(self) -> list[str]:
        return list(self.config.symbols)

    @symbols.setter
    def symbols(self, value: Iterable[str] | None) -> None:
        self.config.symbols = [symbol.upper() for symbol in value or []]

    @property
    def show_alternative(self) -> bool:
        return self.config.show_alternative

    @show_alternative.setter
    def show_alternative(self, value: bool) -> None:
        self.config.show_alternative = bool(value)

    @property
    def prettyprint(self) -> bool:
        return self.config.prettyprint

    @prettyprint.setter
    def prettyprint(self, value: bool) -> None:
        self.config.prettyprint = bool(value)

    @property
    def show_bid_ask(self) -> bool:
        return self.config.show_bid_ask

    @show_bid_ask.setter
    def show_bid_ask(self, value: bool) -> None:
        self.config.show_bid_ask = bool(value)

    @property
    def ttl_in_seconds(self) -> int | None:
        return self._expiry.ttl_seconds

    @ttl_in_seconds.setter
    def ttl_in_seconds(self, value: int | None) -> None:
        self._expiry.set_ttl(value)

    @property
    def rates_expiration(self) -> datetime | None:
        """When the loaded rates go stale (``None`` without a TTL)."""

        return to_datetime(self._expiry.expires_at)

    @property
    def rates_timestamp(self) -> datetime | None:
        return to_datetime(self.doc.timestamp) if self.doc is not None else None

    @property
    def oer_rates(self) -> dict[str, RateQuote]:
        """Per-currency quotes of the last loaded document."""

        return dict(self.doc.rates) if self.doc is not None else {}

    @property
    def source_url(self) -> str:
        return self._rate_source.build_request_url()

    @property
    def validator(self) -> DocumentValidator:
        return DocumentValidator(require_bid_ask=self.config.show_bid_ask)

    # Rate lookups --------------------------------------------------------

    def get_rate(
        self,
        from_currency: str,
        to_currency: str,
        rate_type: RateType | str = RateType.MID,
    ) -> float:
        """Return the rate converting ``from_currency`` into ``to_currency``.

        Raises :class:`NoRateError` when the pair cannot be derived, including
        when a bid/ask rate was requested but not supplied by the API.
        """

        with self._lock:
            self.expire_rates()
            return self._resolver.get_rate(from_currency, to_currency, rate_type)

    def add_rate(self, from_currency: str, to_currency: str, rate: float) -> None:
        with self._lock:
            self.store.set_rate(from_currency.upper(), to_currency.upper(), rate)

    set_rate = add_rate

    def rates(self) -> list[tuple[str, str, float]]:
        with self._lock:
            return list(self.store)

    # Refresh cycle -------------------------------------------------------

    def update_rates(self) -> bool:
        """Reload the store from the cache, falling back to the network.

        Returns ``False`` and keeps the current rates when the document is
        invalid.
        """

        with self._lock:
            return self._reload() is not None

    def refresh_rates(self) -> str:
        """Fetch from the API, caching the body when it is a valid document."""

        text = self._rate_source.fetch()
        if self._cache.configured and self.validator.is_valid(text):
            try:
                self._cache.write(text)
            except InvalidCacheError as exc:
                LOGGER.warning("Could not cache fetched rates: %s", exc)
        return text

    read_from_url = refresh_rates

    def save_rates(self) -> bool:
        """Fetch from the API into the cache; return whether it was stored."""

        if not self._cache.configured:
            raise InvalidCacheError("save_rates requires a cache location")
        text = self._rate_source.fetch()
        if not self.validator.is_valid(text):
            LOGGER.warning(
                "Fetched rates document is invalid; cache %s left untouched",
                self._cache.describe(),
            )
            return False
        self._cache.write(text)
        return True

    def fetch_document(self) -> RatesDocument:
        """Fetch from the API and parse, raising :class:`MalformedDocumentError`."""

        text = self._rate_source.fetch()
        return RatesDocument.from_text(text, require_bid_ask=self.config.show_bid_ask)

    def expire_rates(self) -> bool:
        """Refresh the rates when the TTL has elapsed; return whether it did."""

        with self._lock:
            return self._expiry.check_and_expire(self._refresh_on_expiry)

    def read_from_cache(self) -> str | None:
        """Return the cached text when it holds a valid document."""

        text = self._cache.read()
        if text is None:
            return None
        document = self.validator.parse(text)
        if document is None:
            LOGGER.warning("Ignoring invalid rates document in cache %s", self._cache.describe())
            return None
        if not self._matches_source(document):
            LOGGER.warning(
                "Ignoring cached rates based on %s while the source is %s",
                document.base,
                self.source,
            )
            return None
        return text

    def _matches_source(self, document: RatesDocument) -> bool:
        return document.base is None or document.base == self.source

    def _refresh_on_expiry(self) -> float | None:
        if self.force_refresh_rate_on_expire:
            return self._reload(self.refresh_rates())
        return self._reload()

    def _reload(self, text: str | None = None) -> float | None:
        if text is None:
            text = self.read_from_cache()
        if text is None:
            text = self.refresh_rates()
        document = self.validator.parse(text)
        if document is None or not self._matches_source(document):
            LOGGER.warning("Rates document rejected; keeping %s existing rates", len(self.store))
            return None
        self._apply(document)
        self._expiry.mark_refreshed(document.timestamp)
        return document.timestamp

    def _apply(self, document: RatesDocument) -> None:
        source = self.source
        bid_ask = self.config.show_bid_ask
        self.store.clear()
        for currency, quote in document.rates.items():
            if not self.is_known_currency(currency):
                continue
            self.store.set_rate(source, currency, quote.mid)
            if quote.mid != 0:
                self.store.set_rate(currency, source, 1.0 / quote.mid)
            if bid_ask and quote.bid is not None:
                self.store.set_rate(source, RateType.BID.store_key(currency), quote.bid)
            if bid_ask and quote.ask is not None:
                self.store.set_rate(source, RateType.ASK.store_key(currency), quote.ask)
        self.doc = document
        LOGGER.info(
            "Loaded %s rates relative to %s (timestamp %s)",
            len(document.rates),
            source,
            document.timestamp,
        )

    def close(self) -> None:
        self._rate_source.close()


def __getattr__(name: str):
    """Lazily import the SQLAlchemy cache so the engine stack loads on demand."""

    if name == "SQLDocumentCache":
        from oxr_bank.store.sql_cache import SQLDocumentCache as _cache

        return _cache
    raise AttributeError(f"module 'oxr_bank' has no attribute {name}")
