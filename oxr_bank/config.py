"""Request options shared by the bank facade and the rate source."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping

from oxr_bank.utils.dates import parse_date

BASE_URL = "https://openexchangerates.org/api/"
DEFAULT_SOURCE = "USD"
DEFAULT_TIMEOUT = 30.0

_CURRENCY_CODE = re.compile(r"[A-Z]{3}")


def looks_like_currency(code: str) -> bool:
    """Default host check: accept any three-letter alphabetic code."""

    return bool(_CURRENCY_CODE.fullmatch(code or ""))


@dataclass(slots=True)
class BankConfig:
    """Everything needed to build an Open Exchange Rates request."""

    app_id: str | None = None
    base_url: str = BASE_URL
    source: str = DEFAULT_SOURCE
    date: date | None = None
    symbols: list[str] = field(default_factory=list)
    show_alternative: bool = False
    prettyprint: bool = False
    show_bid_ask: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.date is not None:
            self.date = parse_date(self.date)
        self.symbols = [symbol.upper() for symbol in self.symbols or []]

    @property
    def has_credential(self) -> bool:
        """Return True when a non-blank ``app_id`` is configured."""

        return bool(self.app_id and self.app_id.strip())

    @property
    def is_historical(self) -> bool:
        return self.date is not None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> "BankConfig":
        """Build a config from ``OXR_*`` environment variables.

        ``OXR_APP_ID`` supplies the credential, ``OXR_BASE_URL`` and
        ``OXR_TIMEOUT`` optionally override the endpoint and request timeout.
        Keyword overrides win over the environment.
        """

        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if env.get("OXR_APP_ID"):
            values["app_id"] = env["OXR_APP_ID"]
        if env.get("OXR_BASE_URL"):
            values["base_url"] = env["OXR_BASE_URL"]
        if env.get("OXR_TIMEOUT"):
            values["timeout"] = float(env["OXR_TIMEOUT"])
        values.update(overrides)
        return cls(**values)


__all__ = ["BASE_URL", "BankConfig", "DEFAULT_SOURCE", "DEFAULT_TIMEOUT", "looks_like_currency"]
