"""Derive any-to-any rates from base-relative, direct and inverse edges."""

from __future__ import annotations

from typing import Callable

from oxr_bank.errors import NoRateError, ZeroRateError
from oxr_bank.ingestion.models import RateType
from oxr_bank.store.rate_store import RateStore
from oxr_bank.utils.logger import get_logger

LOGGER = get_logger(__name__)


class RateResolver:
    """Answer ``from -> to`` lookups against a :class:`RateStore`.

    Lookups try, in order: parity, the direct edge, the inverted reverse edge
    and finally triangulation through the source currency. Derived mid rates
    are written back to the store so later lookups hit the direct edge.
    """

    __slots__ = ("store", "_source")

    def __init__(self, store: RateStore, source: str | Callable[[], str]) -> None:
        self.store = store
        self._source = source

    @property
    def source(self) -> str:
        source = self._source() if callable(self._source) else self._source
        return source.upper()

    def get_rate(
        self,
        from_currency: str,
        to_currency: str,
        rate_type: RateType | str = RateType.MID,
    ) -> float:
        variant = RateType.coerce(rate_type)
        from_code = from_currency.upper()
        to_code = to_currency.upper()
        if from_code == to_code:
            return 1.0
        if variant is not RateType.MID:
            return self._bid_ask_rate(from_code, to_code, variant)

        rate = self._direct_or_inverse(from_code, to_code)
        if rate is not None:
            return rate
        return self._triangulate(from_code, to_code)

    def _bid_ask_rate(self, from_code: str, to_code: str, variant: RateType) -> float:
        rate = self.store.get_rate(from_code, variant.store_key(to_code))
        if rate is None:
            raise NoRateError(from_code, to_code, variant.value)
        return rate

    def _direct_or_inverse(self, from_code: str, to_code: str) -> float | None:
        if from_code == to_code:
            return 1.0
        rate = self.store.get_rate(from_code, to_code)
        if rate is not None:
            return rate
        inverse = self.store.get_rate(to_code, from_code)
        if inverse is None:
            return None
        if inverse == 0:
            raise ZeroRateError(from_code, to_code)
        rate = 1.0 / inverse
        self.store.set_rate(from_code, to_code, rate)
        LOGGER.debug("Memoised inverse rate %s -> %s = %s", from_code, to_code, rate)
        return rate

    def _triangulate(self, from_code: str, to_code: str) -> float:
        source = self.source
        from_leg = self._direct_or_inverse(source, from_code)
        to_leg = self._direct_or_inverse(source, to_code)
        if from_leg is None or to_leg is None:
            raise NoRateError(from_code, to_code)
        if from_leg == 0:
            raise ZeroRateError(from_code, to_code)
        rate = to_leg / from_leg
        self.store.set_rate(from_code, to_code, rate)
        LOGGER.debug("Memoised %s -> %s = %s via %s", from_code, to_code, rate, source)
        return rate


__all__ = ["RateResolver"]
