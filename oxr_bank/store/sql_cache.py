"""SQLAlchemy-backed document cache for callers that keep rates in a database."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, text

from oxr_bank.store.cache import CallbackCache
from oxr_bank.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - type checker helper
    from sqlalchemy.engine import Engine
else:  # pragma: no cover - runtime alias
    Engine = Any

LOGGER = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS oxr_rate_documents (
    cache_key VARCHAR(64) NOT NULL PRIMARY KEY,
    body TEXT NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
"""

SELECT_SQL = "SELECT body FROM oxr_rate_documents WHERE cache_key = :cache_key"
DELETE_SQL = "DELETE FROM oxr_rate_documents WHERE cache_key = :cache_key"
INSERT_SQL = """
INSERT INTO oxr_rate_documents(cache_key, body, updated_at)
VALUES(:cache_key, :body, :updated_at)
"""


class SQLDocumentCache:
    """Store the raw rates document in a single row of a SQL table.

    Any SQLAlchemy URL works (``sqlite:///rates.db``, ``postgresql://...``,
    ``mysql+pymysql://...``). The instance can be passed straight to
    ``OpenExchangeRatesBank(cache=...)``.
    """

    def __init__(self, url: str, *, cache_key: str = "latest", engine: Engine | None = None) -> None:
        self.url = url
        self.cache_key = cache_key
        self._engine_instance: Engine | None = engine
        self._schema_ready = False

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True)
        return self._engine_instance

    def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        with self._get_engine().begin() as connection:
            LOGGER.info("Ensuring oxr_rate_documents schema exists")
            connection.execute(text(SCHEMA_SQL))
        self._schema_ready = True

    def write(self, body: str) -> None:
        self.ensure_schema()
        params = {"cache_key": self.cache_key}
        with self._get_engine().begin() as connection:
            connection.execute(text(DELETE_SQL), params)
            connection.execute(
                text(INSERT_SQL),
                {**params, "body": body, "updated_at": datetime.now(timezone.utc)},
            )

    def read(self) -> str | None:
        self.ensure_schema()
        with self._get_engine().connect() as connection:
            row = connection.execute(text(SELECT_SQL), {"cache_key": self.cache_key}).first()
        return row[0] if row else None

    def as_callbacks(self) -> CallbackCache:
        return CallbackCache(write=self.write, read=self.read)

    def close(self) -> None:
        if self._engine_instance is not None:
            self._engine_instance.dispose()
            self._engine_instance = None
            self._schema_ready = False


__all__ = ["SQLDocumentCache"]
