# backend/filevault/models.py
from datetime import datetime, timezone
from enum import Enum

from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def terminal(self) -> bool:
        return self is not FileStatus.PENDING


class FileRecord(SQLModel, table=True):
    __tablename__ = "files"

    id: str = Field(primary_key=True, nullable=False)
    path: str = Field(nullable=False)
    size: int = Field(default=0, nullable=False)
    extension: str = Field(default="", nullable=False)
    hash: str = Field(default="", nullable=False)  # hex sha256, empty until COMPLETED
    status: str = Field(default=FileStatus.PENDING.value, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
