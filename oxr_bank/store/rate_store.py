"""Mapping of ordered currency pairs to rates."""

from __future__ import annotations

from typing import Iterator


class RateStore:
    """Plain key-value ledger of directed rates.

    Each ordered ``(from, to)`` pair holds at most one rate and the last write
    wins. The store does no locking; callers serialise access themselves.
    """

    __slots__ = ("_rates",)

    def __init__(self) -> None:
        self._rates: dict[tuple[str, str], float] = {}

    def set_rate(self, from_currency: str, to_currency: str, rate: float) -> None:
        self._rates[(from_currency, to_currency)] = float(rate)

    def get_rate(self, from_currency: str, to_currency: str) -> float | None:
        """Return the stored rate, or ``None`` when the pair is unknown."""

        return self._rates.get((from_currency, to_currency))

    def clear(self) -> None:
        self._rates.clear()

    def snapshot(self) -> dict[tuple[str, str], float]:
        return dict(self._rates)

    def __iter__(self) -> Iterator[tuple[str, str, float]]:
        for (from_currency, to_currency), rate in list(self._rates.items()):
            yield from_currency, to_currency, rate

    def __len__(self) -> int:
        return len(self._rates)

    def __contains__(self, pair: object) -> bool:
        return pair in self._rates

    def __repr__(self) -> str:
        return f"RateStore({len(self._rates)} rates)"


__all__ = ["RateStore"]
