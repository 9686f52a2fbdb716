"""Test configuration."""

import os
import shutil
import tempfile
import threading
import time
from collections.abc import Generator
from pathlib import Path
from typing import Any, Callable, Optional

# Point the service at throwaway storage before any filevault module is imported
_TEST_ROOT = tempfile.mkdtemp(prefix="filevault-tests-")
os.environ["TESTING"] = "1"
os.environ["STORAGE_DIR"] = os.path.join(_TEST_ROOT, "storage")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_ROOT, 'test.db')}"
os.environ.setdefault("WORKER_COUNT", "2")

import pytest

from filevault.db import init_db, make_engine
from filevault.jobs import CancelToken
from filevault.models import FileStatus
from filevault.repository import MetadataRepo


def pytest_sessionfinish(session: Any, exitstatus: int) -> None:
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


class RecordingReporter:
    """StatusReporter double that records every delivery."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.calls: list[tuple[str, str, FileStatus]] = []
        self.fail_with = fail_with
        self._lock = threading.Lock()

    def report_result(self, file_id: str, hash: str, status: FileStatus) -> None:
        with self._lock:
            self.calls.append((file_id, hash, status))
        if self.fail_with is not None:
            raise self.fail_with

    def for_file(self, file_id: str) -> list[tuple[str, str, FileStatus]]:
        with self._lock:
            return [call for call in self.calls if call[0] == file_id]


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it returns True or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


FAKE_DIGEST = "f" * 64


class BlockingHasher:
    """Hasher that holds every call until ``release`` is set.

    Tracks how many calls are running at once.
    """

    def __init__(self) -> None:
        self.release = threading.Event()
        self._lock = threading.Lock()
        self.current = 0
        self.peak = 0
        self.calls = 0

    def __call__(self, path: str, token: Optional[CancelToken] = None) -> str:
        with self._lock:
            self.current += 1
            self.calls += 1
            self.peak = max(self.peak, self.current)
        try:
            assert self.release.wait(10), "hasher was never released"
            return FAKE_DIGEST
        finally:
            with self._lock:
                self.current -= 1


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def engine(tmp_path: Path):
    engine = make_engine(f"sqlite:///{tmp_path / 'metadata.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repo(engine) -> MetadataRepo:
    return MetadataRepo(engine)


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    def _make(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture
def empty_file(make_file) -> Generator[Path, None, None]:
    yield make_file("empty", b"")
