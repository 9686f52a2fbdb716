# backend/filevault/errors.py
"""Exceptions raised by the ingestion pipeline and the metadata store."""


class FileVaultError(Exception):
    """Base class for filevault errors."""


class JobCancelled(FileVaultError):
    """The job's cancel token fired before hashing finished."""


class PoolClosedError(FileVaultError):
    """A job was submitted after the worker pool was shut down."""


class ReportAlreadySentError(FileVaultError):
    """report_result() was called more than once for the same job."""


class FileRecordNotFound(FileVaultError):
    def __init__(self, file_id: str):
        super().__init__(f"file record not found: {file_id}")
        self.file_id = file_id


class DuplicateFileError(FileVaultError):
    def __init__(self, file_id: str):
        super().__init__(f"file record already exists: {file_id}")
        self.file_id = file_id


class InvalidStatusTransition(FileVaultError):
    def __init__(self, file_id: str, current: str, target: str):
        super().__init__(f"cannot move {file_id} from {current} to {target}")
        self.file_id = file_id
        self.current = current
        self.target = target
