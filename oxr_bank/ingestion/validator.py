"""Pre-commit gate for raw rates documents."""

from __future__ import annotations

from oxr_bank.errors import MalformedDocumentError
from oxr_bank.ingestion.models import RatesDocument
from oxr_bank.utils.logger import get_logger

LOGGER = get_logger(__name__)


class DocumentValidator:
    """Decide whether raw text may replace the cache or the rate store.

    The validator never raises: malformed input is reported as ``False`` (or
    ``None`` from :meth:`parse`) so callers can keep their current state.
    """

    __slots__ = ("require_bid_ask",)

    def __init__(self, *, require_bid_ask: bool = False) -> None:
        self.require_bid_ask = require_bid_ask

    def parse(self, text: str | bytes | None) -> RatesDocument | None:
        try:
            return RatesDocument.from_text(text, require_bid_ask=self.require_bid_ask)
        except MalformedDocumentError as exc:
            LOGGER.debug("Rejected rates document: %s", exc)
            return None

    def is_valid(self, text: str | bytes | None) -> bool:
        return self.parse(text) is not None


__all__ = ["DocumentValidator"]
