# backend/filevault/coordinator.py
import os
import threading
from typing import Dict, Optional, Union

from .jobs import CancelToken, ProcessingJob, StatusReporter
from .logging_config import get_logger
from .worker import WorkerPool

logger = get_logger(__name__)


class IngestionCoordinator:
    """
    Turns a stored, PENDING-registered file into a job on the worker pool.

    Jobs get their own CancelToken rather than anything tied to the request
    that uploaded the file, so a client disconnect never stops hashing that
    has already been scheduled. Tokens are tracked by file id until the
    worker is done with the job.
    """

    def __init__(self, pool: WorkerPool):
        self.pool = pool
        self._lock = threading.Lock()
        self._tokens: Dict[str, CancelToken] = {}

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._tokens)

    def submit_job(
        self,
        file_id: str,
        file_path: Union[str, os.PathLike],
        reporter: StatusReporter,
        cancel_token: Optional[CancelToken] = None,
    ) -> None:
        """Queue hashing for ``file_id``. Blocks while the pool is saturated."""
        token = cancel_token if cancel_token is not None else CancelToken()
        job = ProcessingJob(
            file_id=file_id,
            file_path=os.fspath(file_path),
            reporter=reporter,
            cancel_token=token,
            on_finish=self._forget,
        )

        with self._lock:
            self._tokens[file_id] = token
        try:
            self.pool.submit(job)
        except Exception:
            with self._lock:
                self._tokens.pop(file_id, None)
            raise
        logger.info("job_submitted", file_id=file_id, file_path=job.file_path)

    def cancel(self, file_id: str) -> bool:
        with self._lock:
            token = self._tokens.get(file_id)
        if token is None:
            return False
        token.cancel()
        logger.info("job_cancel_requested", file_id=file_id)
        return True

    def cancel_all(self) -> int:
        with self._lock:
            tokens = list(self._tokens.values())
        for token in tokens:
            token.cancel()
        return len(tokens)

    def _forget(self, job: ProcessingJob):
        with self._lock:
            if self._tokens.get(job.file_id) is job.cancel_token:
                del self._tokens[job.file_id]
