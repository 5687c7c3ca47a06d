"""In-memory rate storage and raw document caches."""

from __future__ import annotations

from oxr_bank.store.cache import CacheChannel, CallbackCache
from oxr_bank.store.rate_store import RateStore

__all__ = ["CacheChannel", "CallbackCache", "RateStore"]
