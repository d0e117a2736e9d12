from sqlalchemy import event
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine, Session

from .config import settings


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    # One file connection per session; "timeout" is how long a writer waits for the lock
    return {
        "connect_args": {"check_same_thread": False, "timeout": 60},
        "poolclass": NullPool,
    }


engine = create_engine(
    settings.database_url,
    echo=settings.sql_echo,
    **_engine_options(settings.database_url),
)


if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def _enable_wal(dbapi_connection, connection_record):
        # Readers keep working while a timeline writer holds the write lock
        dbapi_connection.execute("PRAGMA journal_mode=WAL")


def get_session():
    with Session(engine) as session:
        yield session


def init_db():
    from .models import user, minijob_setting  # noqa: F401

    SQLModel.metadata.create_all(engine)
