from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from chatrelay.config import DATABASE_URL


def make_engine(url=DATABASE_URL, echo=False):
    """Build an engine for ``url``.

    SQLite connections are shared across FastAPI's threadpool, and the
    in-memory database needs a single pooled connection to stay visible.
    """
    kwargs = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def create_db_and_tables(engine):
    SQLModel.metadata.create_all(engine)
