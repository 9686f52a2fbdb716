# backend/filevault/storage.py
import os
import tempfile
from typing import Tuple

import aiofiles
from fastapi import UploadFile

from . import config
from .logging_config import get_logger

logger = get_logger(__name__)


def file_extension(filename) -> str:
    return os.path.splitext(filename or "")[1].lower()


# Save uploaded file in chunks (async), then move it into place
async def save_upload_file(
    upload_file: UploadFile,
    storage_dir: str,
    file_id: str,
    chunk_size: int = config.UPLOAD_CHUNK_SIZE,
) -> Tuple[str, int]:
    safe_id = os.path.basename(file_id)
    temp_path = os.path.join(storage_dir, f".tmp-{safe_id}")
    final_path = os.path.join(storage_dir, safe_id)

    size = 0
    try:
        async with aiofiles.open(temp_path, "wb") as out_file:
            while True:
                chunk = await upload_file.read(chunk_size)
                if not chunk:
                    break
                await out_file.write(chunk)
                size += len(chunk)
        os.replace(temp_path, final_path)
    except Exception:
        remove_quietly(temp_path)
        raise
    finally:
        await upload_file.close()

    return final_path, size


def remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("cleanup_failed", path=path, error=repr(exc))


def disk_writable(storage_dir: str) -> bool:
    try:
        fd, scratch = tempfile.mkstemp(prefix="healthz-", dir=storage_dir)
    except OSError:
        return False
    os.close(fd)
    remove_quietly(scratch)
    return True
