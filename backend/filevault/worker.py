# backend/filevault/worker.py
import queue
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from . import config
from .errors import JobCancelled, PoolClosedError
from .hashing import hash_file
from .jobs import CancelToken, ProcessingJob
from .logging_config import get_logger
from .models import FileStatus

logger = get_logger(__name__)

Hasher = Callable[[str, Optional[CancelToken]], str]

_STOP = object()


class WorkerPool:
    """
    Fixed set of threads hashing submitted files and reporting the outcome.

    At most ``worker_count + queue_size`` jobs are accepted and unfinished at
    any time; submit() blocks past that. With the default queue_size of 0 a
    submitter waits until a worker is free to take its job.
    """

    def __init__(
        self,
        worker_count: int = config.WORKER_COUNT,
        hasher: Hasher = hash_file,
        queue_size: int = config.QUEUE_SIZE,
        name: str = "hash-worker",
    ):
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        if queue_size < 0:
            raise ValueError("queue_size must not be negative")

        self._hasher = hasher
        self._jobs: queue.Queue = queue.Queue()
        self._slots = threading.BoundedSemaphore(worker_count + queue_size)
        self._lock = threading.Lock()
        self._closed = False
        self._in_flight = 0

        self._threads = [
            threading.Thread(target=self._run, name=f"{name}-{i}", daemon=True)
            for i in range(worker_count)
        ]
        for t in self._threads:
            t.start()

    @property
    def worker_count(self) -> int:
        return len(self._threads)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def submit(self, job: ProcessingJob) -> None:
        if self._closed:
            raise PoolClosedError("worker pool is shut down")

        # backpressure: wait for a free slot
        self._slots.acquire()
        with self._lock:
            if self._closed:
                self._slots.release()
                raise PoolClosedError("worker pool is shut down")
            self._jobs.put(job)

    def shutdown(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            # queued after every accepted job, so those drain first
            for _ in self._threads:
                self._jobs.put(_STOP)

        for t in self._threads:
            t.join()
        logger.info("pool_shutdown", workers=len(self._threads))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()

    def _run(self):
        while True:
            job = self._jobs.get()
            if job is _STOP:
                return
            with self._lock:
                self._in_flight += 1
            try:
                self._process(job)
            except Exception:
                # _process contains its own failures; this only guards the thread
                logger.exception("worker_error", file_id=job.file_id)
            finally:
                with self._lock:
                    self._in_flight -= 1
                self._slots.release()
                self._finish(job)

    def _process(self, job: ProcessingJob):
        log = logger.bind(file_id=job.file_id, worker=threading.current_thread().name)

        if job.cancel_token.cancelled:
            log.warning("processing_cancelled", stage="queued")
            return

        start = time.monotonic()
        log.info("processing_started", start_time=datetime.now(timezone.utc).isoformat())

        digest = ""
        error: Optional[BaseException] = None
        try:
            digest = self._hasher(job.file_path, job.cancel_token)
        except JobCancelled:
            log.warning(
                "processing_cancelled",
                stage="hashing",
                elapsed_ms=int((time.monotonic() - start) * 1000),
            )
            return
        except Exception as exc:
            error = exc

        status = FileStatus.FAILED if error is not None else FileStatus.COMPLETED

        reported = True
        try:
            job.report_result(digest, status)
        except Exception as exc:
            reported = False
            log.error("status_report_failed", status=status.value, error=repr(exc))

        log.info(
            "processing_finished",
            end_time=datetime.now(timezone.utc).isoformat(),
            latency_ms=int((time.monotonic() - start) * 1000),
            status=status.value,
            error=repr(error) if error is not None else None,
            reported=reported,
        )

    def _finish(self, job: ProcessingJob):
        if job.on_finish is None:
            return
        try:
            job.on_finish(job)
        except Exception:
            logger.exception("on_finish_failed", file_id=job.file_id)
