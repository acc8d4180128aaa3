from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .models.generated import Base

# Execution option read by the SQLite "begin" hook
SQLITE_BEGIN_OPTION = "sqlite_begin"


def make_engine(url: str, busy_timeout: float | None = None) -> Engine:
    """
    Create an engine for the booking database.

    SQLite has no row-level locks. Reads run in ordinary deferred
    transactions on a WAL journal, so they neither block each other nor
    block writers. A connection procured through begin_write() opens its
    transaction with BEGIN IMMEDIATE instead: the write lock is taken up
    front and concurrent reservation transactions queue behind each other
    (up to busy_timeout). Other backends rely on SELECT ... FOR UPDATE
    issued by the reservation code.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    timeout = settings.sqlite_busy_timeout if busy_timeout is None else busy_timeout

    # check_same_thread=False: required for SQLite from FastAPI worker threads
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": timeout},
    )

    @event.listens_for(engine, "connect")
    def _sqlite_on_connect(dbapi_connection, _):
        # Let SQLAlchemy emit BEGIN itself (see _sqlite_on_begin)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _sqlite_on_begin(conn):
        mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine


def begin_write(db: Session) -> None:
    """
    Start the session's write transaction.

    Ends the read transaction left by earlier lookups, then procures a fresh
    connection whose BEGIN is IMMEDIATE on SQLite. On other backends this is
    a plain transaction and the caller takes row locks.
    """
    if db.in_transaction():
        db.commit()
    db.connection(execution_options={SQLITE_BEGIN_OPTION: "IMMEDIATE"})


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


engine = make_engine(settings.resolved_database_url)

# SessionLocal: main way to work with the DB
SessionLocal = make_session_factory(engine)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
