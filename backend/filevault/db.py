# backend/filevault/db.py
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from . import config


def make_engine(url: str = config.DATABASE_URL, timeout: float = config.DB_TIMEOUT) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # worker threads write through the same engine as the request path;
        # a locked database fails the call after `timeout` seconds
        connect_args = {"check_same_thread": False, "timeout": timeout}
    return create_engine(url, echo=False, connect_args=connect_args)


engine = make_engine()


def init_db(bind: Engine = engine):
    SQLModel.metadata.create_all(bind)
