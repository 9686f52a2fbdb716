# backend/filevault/main.py
from fastapi import FastAPI, UploadFile, File, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from uuid import uuid4
import os

import anyio
import anyio.to_thread

from . import config
from .coordinator import IngestionCoordinator
from .db import init_db, engine
from .errors import FileRecordNotFound, PoolClosedError
from .logging_config import configure_logging, get_logger
from .repository import MetadataRepo, MetadataStatusReporter
from .storage import disk_writable, file_extension, remove_quietly, save_upload_file
from .worker import WorkerPool

logger = get_logger(__name__)

app = FastAPI(title="filevault")

STORAGE_DIR = config.STORAGE_DIR


@app.on_event("startup")
async def startup():
    configure_logging(testing=config.TESTING)
    os.makedirs(STORAGE_DIR, exist_ok=True)
    init_db()
    pool = WorkerPool(config.WORKER_COUNT, queue_size=config.QUEUE_SIZE)
    app.state.pool = pool
    app.state.coordinator = IngestionCoordinator(pool)
    # blocked submits wait here, never in the shared threadpool
    app.state.submit_limiter = anyio.CapacityLimiter(max(1, config.SUBMIT_THREADS))
    logger.info("startup", workers=pool.worker_count, storage_dir=STORAGE_DIR)


@app.on_event("shutdown")
def shutdown():
    pool = getattr(app.state, "pool", None)
    if pool is not None:
        # drains queued and in-flight jobs before returning
        pool.shutdown()


def get_repo() -> MetadataRepo:
    return MetadataRepo(engine)


def get_coordinator(request: Request) -> IngestionCoordinator:
    return request.app.state.coordinator


def get_submit_limiter(request: Request) -> anyio.CapacityLimiter:
    return request.app.state.submit_limiter


@app.post("/files")
async def upload_file(
    file: UploadFile = File(...),
    repo: MetadataRepo = Depends(get_repo),
    coordinator: IngestionCoordinator = Depends(get_coordinator),
    submit_limiter: anyio.CapacityLimiter = Depends(get_submit_limiter),
):
    """
    Accept multipart field 'file', store it, register it PENDING and queue
    hashing. Returns the new file id; status is read back from /files/{id}.
    """
    if coordinator.pool.closed:
        raise HTTPException(status_code=503, detail="service shutting down")

    file_id = str(uuid4())
    extension = file_extension(file.filename)

    try:
        path, size = await save_upload_file(file, STORAGE_DIR, file_id)
    except Exception:
        logger.exception("upload_store_failed", file_id=file_id)
        raise HTTPException(status_code=500, detail="could not save file")

    try:
        repo.register_file(file_id, path, size, extension)
    except Exception:
        logger.exception("register_failed", file_id=file_id)
        remove_quietly(path)
        raise HTTPException(status_code=500, detail="could not register file")

    # submit() blocks while every worker is busy; keep that off the event loop
    try:
        await anyio.to_thread.run_sync(
            coordinator.submit_job,
            file_id,
            path,
            MetadataStatusReporter(repo),
            limiter=submit_limiter,
        )
    except PoolClosedError:
        # record stays PENDING; only a worker may move it on
        logger.warning("job_not_submitted", file_id=file_id, reason="pool closed")
        remove_quietly(path)
        raise HTTPException(status_code=503, detail="service shutting down")

    return {"id": file_id}


@app.get("/files/{file_id}")
def get_file(file_id: str, repo: MetadataRepo = Depends(get_repo)):
    try:
        record = repo.get_file(file_id)
    except FileRecordNotFound:
        raise HTTPException(status_code=404, detail="not found")

    return {
        "id": record.id,
        "path": record.path,
        "hash": record.hash,
        "size": record.size,
        "extension": record.extension,
        "status": record.status,
    }


@app.get("/healthz")
def healthz(repo: MetadataRepo = Depends(get_repo)):
    try:
        db_ok = repo.ping()
    except Exception as exc:
        logger.warning("healthz_db_failed", error=repr(exc))
        db_ok = False
    disk_ok = disk_writable(STORAGE_DIR)

    status = {"db": db_ok, "disk": disk_ok}
    return JSONResponse(status, status_code=200 if db_ok and disk_ok else 503)
