# backend/filevault/repository.py
from sqlalchemy import text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col

from .errors import DuplicateFileError, FileRecordNotFound, InvalidStatusTransition
from .models import FileRecord, FileStatus, utcnow


class MetadataRepo:
    """File metadata keyed by id. Every call opens its own session."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def register_file(self, file_id: str, path: str, size: int, extension: str) -> FileRecord:
        record = FileRecord(
            id=file_id,
            path=path,
            size=size,
            extension=extension,
            status=FileStatus.PENDING.value,
        )
        with Session(self.engine) as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateFileError(file_id) from exc
            session.refresh(record)
            return record

    def update_status(self, file_id: str, hash: str, status: FileStatus) -> None:
        target = FileStatus(status)
        # only PENDING -> COMPLETED/FAILED, exactly once; the WHERE clause
        # makes the check and the write a single statement
        stmt = (
            update(FileRecord)
            .where(col(FileRecord.id) == file_id)
            .where(col(FileRecord.status) == FileStatus.PENDING.value)
            .values(
                hash=hash if target is FileStatus.COMPLETED else "",
                status=target.value,
                updated_at=utcnow(),
            )
        )
        with Session(self.engine) as session:
            if target.terminal:
                result = session.connection().execute(stmt)
                if result.rowcount == 1:
                    session.commit()
                    return
                session.rollback()

            record = session.get(FileRecord, file_id)
            if record is None:
                raise FileRecordNotFound(file_id)
            raise InvalidStatusTransition(file_id, record.status, target.value)

    def get_file(self, file_id: str) -> FileRecord:
        with Session(self.engine) as session:
            record = session.get(FileRecord, file_id)
            if record is None:
                raise FileRecordNotFound(file_id)
            return record

    def ping(self) -> bool:
        with Session(self.engine) as session:
            session.connection().execute(text("SELECT 1"))
        return True


class MetadataStatusReporter:
    """StatusReporter that writes job outcomes through a MetadataRepo."""

    def __init__(self, repo: MetadataRepo):
        self.repo = repo

    def report_result(self, file_id: str, hash: str, status: FileStatus) -> None:
        self.repo.update_status(file_id, hash, status)
