# backend/filevault/hashing.py
import hashlib
import os
from typing import Optional, Union

from . import config
from .errors import JobCancelled
from .jobs import CancelToken

EMPTY_SHA256 = hashlib.sha256(b"").hexdigest()


def hash_file(
    path: Union[str, os.PathLike],
    cancel_token: Optional[CancelToken] = None,
    chunk_size: int = config.HASH_CHUNK_SIZE,
) -> str:
    """Return the hex SHA-256 of the file at ``path``.

    The file is read once, front to back, ``chunk_size`` bytes at a time.
    Raises OSError if the file can't be opened or read, and JobCancelled if
    ``cancel_token`` fires before the last chunk is consumed.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    if cancel_token is not None and cancel_token.cancelled:
        raise JobCancelled(str(path))

    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        while True:
            chunk = fh.read(chunk_size)
            if not chunk:
                break
            digest.update(chunk)
            if cancel_token is not None and cancel_token.cancelled:
                raise JobCancelled(str(path))
    return digest.hexdigest()
