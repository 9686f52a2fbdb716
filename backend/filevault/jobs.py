# backend/filevault/jobs.py
"""Job values handed from the coordinator to the worker pool."""

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from .errors import ReportAlreadySentError
from .models import FileStatus


class StatusReporter(Protocol):
    """Records the terminal outcome of a job against its file id.

    Implementations raise on delivery failure. Workers log the error and
    move on; nothing is retried.
    """

    def report_result(self, file_id: str, hash: str, status: FileStatus) -> None: ...


class CancelToken:
    """Per-job cancellation signal owned by whoever submitted the job."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    def __repr__(self):
        return f"CancelToken(cancelled={self.cancelled})"


class _ReportOnce:
    def __init__(self):
        self._lock = threading.Lock()
        self.sent = False

    def claim(self) -> bool:
        with self._lock:
            if self.sent:
                return False
            self.sent = True
            return True


@dataclass(frozen=True)
class ProcessingJob:
    file_id: str
    file_path: str
    reporter: StatusReporter
    cancel_token: CancelToken = field(default_factory=CancelToken)
    on_finish: Optional[Callable[["ProcessingJob"], None]] = field(
        default=None, compare=False
    )
    _once: _ReportOnce = field(
        default_factory=_ReportOnce, init=False, repr=False, compare=False
    )

    @property
    def reported(self) -> bool:
        return self._once.sent

    def report_result(self, hash: str, status: FileStatus) -> None:
        # the slot is claimed before delivery; a failed delivery still counts
        if not self._once.claim():
            raise ReportAlreadySentError(self.file_id)
        self.reporter.report_result(self.file_id, hash, status)
