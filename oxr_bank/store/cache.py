"""Where the last fetched raw rates document lives."""

from __future__ import annotations

import io
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, Union, runtime_checkable

from oxr_bank.errors import InvalidCacheError
from oxr_bank.utils.logger import get_logger

LOGGER = get_logger(__name__)


@runtime_checkable
class DocumentCache(Protocol):
    """Caller-owned storage for the raw document (database row, key-value store...)."""

    def write(self, text: str) -> object: ...  # pragma: no cover - protocol definition

    def read(self) -> str | None: ...  # pragma: no cover - protocol definition


@dataclass(frozen=True, slots=True)
class CallbackCache:
    """A pair of callables standing in for a cache destination."""

    write: Callable[[str], object]
    read: Callable[[], str | None]


CacheLocation = Union[str, "os.PathLike[str]", CallbackCache, DocumentCache, tuple, None]


class CacheChannel:
    """Read-if-exists / write-or-fail access to a cache location.

    A location is either a filesystem path or something exposing
    ``write(text)``/``read()`` (:class:`CallbackCache`, a ``(write, read)``
    tuple, or any :class:`DocumentCache`). ``None`` means no cache: reads
    return ``None`` and writes raise :class:`InvalidCacheError`.
    """

    __slots__ = ("location", "_path", "_hook")

    def __init__(self, location: CacheLocation = None) -> None:
        self.location = location
        self._path: Path | None = None
        self._hook: DocumentCache | None = None
        if location is None:
            return
        if isinstance(location, (str, os.PathLike)):
            if not os.fspath(location):
                raise InvalidCacheError("Cache path must not be empty")
            self._path = Path(location).expanduser()
        elif isinstance(location, tuple):
            if len(location) != 2 or not all(callable(item) for item in location):
                raise InvalidCacheError("A callback cache must be a (write, read) pair of callables")
            self._hook = CallbackCache(write=location[0], read=location[1])
        elif isinstance(location, io.IOBase):
            raise InvalidCacheError("Pass a path rather than an open file object as cache")
        elif callable(getattr(location, "write", None)) and callable(getattr(location, "read", None)):
            self._hook = location  # type: ignore[assignment]
        else:
            raise InvalidCacheError(
                f"Unsupported cache location {location!r}; use a path or a (write, read) pair"
            )

    @property
    def configured(self) -> bool:
        return self._path is not None or self._hook is not None

    @property
    def is_file(self) -> bool:
        return self._path is not None

    @property
    def path(self) -> Path | None:
        return self._path

    def describe(self) -> str:
        if self._path is not None:
            return str(self._path)
        if self._hook is not None:
            return type(self._hook).__name__
        return "no cache"

    def read(self) -> str | None:
        """Return the cached text, or ``None`` when nothing is cached."""

        if self._hook is not None:
            return self._hook.read()
        if self._path is None:
            return None
        try:
            text = self._path.read_text(encoding="utf-8")
        except (FileNotFoundError, NotADirectoryError):
            return None
        except UnicodeDecodeError as exc:
            LOGGER.warning("Ignoring undecodable cache file %s: %s", self._path, exc)
            return None
        except OSError as exc:
            raise InvalidCacheError(f"Unable to read cache file {self._path}: {exc}") from exc
        return text or None

    def write(self, text: str) -> None:
        """Replace the cached text wholesale."""

        if self._hook is not None:
            try:
                self._hook.write(text)
            except Exception as exc:
                raise InvalidCacheError(f"Cache callback failed: {exc}") from exc
            LOGGER.info("Stored rates document via %s", self.describe())
            return
        if self._path is None:
            raise InvalidCacheError("No cache location configured")
        self._atomic_write(self._path, text)
        LOGGER.info("Stored rates document at %s", self._path)

    @staticmethod
    def _atomic_write(path: Path, text: str) -> None:
        directory = path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=directory)
        except OSError as exc:
            raise InvalidCacheError(f"Cache directory {directory} is not writable: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise InvalidCacheError(f"Unable to write cache file {path}: {exc}") from exc


__all__ = ["CacheChannel", "CacheLocation", "CallbackCache", "DocumentCache"]
