from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from oxr_bank.errors import InvalidCacheError
from oxr_bank.store.cache import CacheChannel, CallbackCache


def test_file_cache_reads_absent_when_missing(tmp_path: Path) -> None:
    channel = CacheChannel(tmp_path / "latest.json")

    assert channel.configured is True
    assert channel.is_file is True
    assert channel.read() is None


def test_file_cache_treats_empty_file_as_absent(tmp_path: Path) -> None:
    path = tmp_path / "latest.json"
    path.write_text("", encoding="utf-8")

    assert CacheChannel(str(path)).read() is None


def test_file_cache_treats_undecodable_file_as_absent(tmp_path: Path) -> None:
    path = tmp_path / "latest.json"
    path.write_bytes(b"\xff\xfe garbage")

    assert CacheChannel(path).read() is None


def test_file_cache_write_logs_plain_ascii(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "latest.json"

    with caplog.at_level(logging.INFO, logger="oxr_bank.store.cache"):
        CacheChannel(path).write("{}")

    assert caplog.messages == [f"Stored rates document at {path}"]
    assert caplog.messages[0].replace(str(path), "").isascii()


def test_file_cache_replaces_contents(tmp_path: Path) -> None:
    path = tmp_path / "latest.json"
    path.write_text("old contents that are longer", encoding="utf-8")
    channel = CacheChannel(path)

    channel.write("new")

    assert path.read_text(encoding="utf-8") == "new"
    assert channel.read() == "new"
    assert [p.name for p in tmp_path.iterdir()] == ["latest.json"]


def test_file_cache_in_missing_directory_fails_write_but_reads_absent(tmp_path: Path) -> None:
    channel = CacheChannel(tmp_path / "missing_dir" / "latest.json")

    assert channel.read() is None
    with pytest.raises(InvalidCacheError):
        channel.write("{}")


def test_failed_replace_keeps_previous_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "latest.json"
    path.write_text("previous", encoding="utf-8")

    def _broken_replace(src: str, dst: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("oxr_bank.store.cache.os.replace", _broken_replace)

    with pytest.raises(InvalidCacheError):
        CacheChannel(path).write("next")
    assert path.read_text(encoding="utf-8") == "previous"
    assert [p.name for p in tmp_path.iterdir()] == ["latest.json"]


def test_callback_pair_is_used_for_reads_and_writes() -> None:
    stored: dict[str, str] = {}
    channel = CacheChannel((lambda text: stored.update(body=text), lambda: stored.get("body")))

    assert channel.read() is None
    channel.write("payload")

    assert stored == {"body": "payload"}
    assert channel.read() == "payload"
    assert channel.is_file is False


def test_callback_cache_dataclass_and_duck_typed_objects() -> None:
    class _Memory:
        def __init__(self) -> None:
            self.body: str | None = None

        def write(self, text: str) -> None:
            self.body = text

        def read(self) -> str | None:
            return self.body

    memory = _Memory()
    CacheChannel(memory).write("a")
    assert memory.body == "a"

    box: list[str] = []
    channel = CacheChannel(CallbackCache(write=box.append, read=lambda: box[-1] if box else None))
    channel.write("b")
    assert channel.read() == "b"
    assert channel.describe() == "CallbackCache"


def test_callback_write_failure_is_reported() -> None:
    def _write(text: str) -> None:
        raise ConnectionError("db offline")

    channel = CacheChannel((_write, lambda: None))

    with pytest.raises(InvalidCacheError, match="db offline"):
        channel.write("payload")


def test_no_cache_reads_absent_and_refuses_writes() -> None:
    channel = CacheChannel(None)

    assert channel.configured is False
    assert channel.read() is None
    with pytest.raises(InvalidCacheError):
        channel.write("payload")


@pytest.mark.parametrize(
    "location",
    [42, "", (lambda text: None,), (lambda text: None, "not callable"), io.StringIO()],
)
def test_unrecognised_locations_are_rejected(location: object) -> None:
    with pytest.raises(InvalidCacheError):
        CacheChannel(location)  # type: ignore[arg-type]
