from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from licenseptium.config import Settings

SUPPORTED_BACKENDS = ("postgresql", "sqlite")


def build_engine(settings: Settings) -> Engine:
    url = make_url(settings.database_url)
    if url.get_backend_name() not in SUPPORTED_BACKENDS:
        raise ValueError(f"Unsupported database backend: {url.get_backend_name()}")
    if url.get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            connect_args={"timeout": settings.database_timeout_seconds, "check_same_thread": False},
        )
        _use_immediate_transactions(engine)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        connect_args={"connect_timeout": settings.database_timeout_seconds},
    )


def build_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def _use_immediate_transactions(engine: Engine) -> None:
    """Make every SQLite transaction take the write lock when it begins.

    pysqlite defers BEGIN until the first write, which lets two admissions
    read the ledger concurrently. Emitting BEGIN IMMEDIATE ourselves gives
    SQLite the same per-transaction serialization the row lock gives
    PostgreSQL.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")
