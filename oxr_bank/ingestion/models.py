"""Data models for parsed Open Exchange Rates responses."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Mapping

from oxr_bank.errors import MalformedDocumentError

RATES_KEY = "rates"
TIMESTAMP_KEY = "timestamp"


class RateType(str, Enum):
    """Rate variants a lookup can ask for."""

    MID = "mid"
    BID = "bid"
    ASK = "ask"

    @classmethod
    def coerce(cls, value: "RateType | str | None") -> "RateType":
        if value is None:
            return cls.MID
        if isinstance(value, RateType):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"rate_type must be one of: mid, bid, ask (got {value!r})") from None

    def store_key(self, currency: str) -> str:
        """Return the store key used for ``currency`` under this variant."""

        if self is RateType.MID:
            return currency
        return f"{currency}_{self.value}"


@dataclass(slots=True, frozen=True)
class RateQuote:
    """A single currency entry of a rates document."""

    mid: float
    bid: float | None = None
    ask: float | None = None

    @property
    def has_bid_ask(self) -> bool:
        return self.bid is not None and self.ask is not None


@dataclass(slots=True)
class RatesDocument:
    """Parsed ``latest.json``/``historical`` response body."""

    timestamp: int
    rates: dict[str, RateQuote]
    base: str | None = None
    raw: str = field(default="", repr=False)

    @classmethod
    def from_text(cls, text: str | bytes | None, *, require_bid_ask: bool = False) -> "RatesDocument":
        """Parse ``text`` or raise :class:`MalformedDocumentError`."""

        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedDocumentError(f"Rates document is not UTF-8: {exc}") from exc
        if not text:
            raise MalformedDocumentError("Empty rates document")
        try:
            payload = json.loads(text)
        except (ValueError, RecursionError) as exc:
            raise MalformedDocumentError(f"Rates document is not valid JSON: {exc}") from exc
        return cls.from_payload(payload, raw=text, require_bid_ask=require_bid_ask)

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        *,
        raw: str = "",
        require_bid_ask: bool = False,
    ) -> "RatesDocument":
        if not isinstance(payload, Mapping):
            raise MalformedDocumentError("Rates document must be a JSON object")
        rates = payload.get(RATES_KEY)
        if not isinstance(rates, Mapping):
            raise MalformedDocumentError(f"Rates document has no '{RATES_KEY}' mapping")
        timestamp = payload.get(TIMESTAMP_KEY)
        if not _is_number(timestamp):
            raise MalformedDocumentError(f"Rates document has no numeric '{TIMESTAMP_KEY}'")

        quotes = {
            str(code).upper(): _parse_quote(code, value, require_bid_ask=require_bid_ask)
            for code, value in rates.items()
        }
        base = payload.get("base")
        return cls(
            timestamp=int(timestamp),
            rates=quotes,
            base=str(base).upper() if base else None,
            raw=raw,
        )


def _is_number(value: object) -> bool:
    """Return True for finite real numbers (``bool`` excluded)."""

    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _rate_value(code: object, label: str, value: object) -> float:
    if not _is_number(value):
        raise MalformedDocumentError(f"Rate for {code} has a non-numeric or non-finite '{label}'")
    rate = float(value)  # type: ignore[arg-type]
    if rate < 0:
        raise MalformedDocumentError(f"Rate for {code} has a negative '{label}'")
    return rate


def _parse_quote(code: object, value: object, *, require_bid_ask: bool) -> RateQuote:
    if isinstance(value, Real) and not isinstance(value, bool):
        return RateQuote(mid=_rate_value(code, "rate", value))
    if not isinstance(value, Mapping):
        raise MalformedDocumentError(f"Rate for {code} is neither a number nor an object")

    mid = value.get("mid", value.get("rate"))
    if mid is None:
        raise MalformedDocumentError(f"Rate for {code} has no 'mid' or 'rate'")
    bid = value.get("bid")
    ask = value.get("ask")
    if require_bid_ask and (bid is None) != (ask is None):
        raise MalformedDocumentError(f"Rate for {code} carries only one of bid/ask")
    return RateQuote(
        mid=_rate_value(code, "mid", mid),
        bid=_rate_value(code, "bid", bid) if bid is not None else None,
        ask=_rate_value(code, "ask", ask) if ask is not None else None,
    )


__all__ = ["RATES_KEY", "TIMESTAMP_KEY", "RateQuote", "RateType", "RatesDocument"]
