from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker, declarative_base
from fastapi import Request
import logging
import threading
import contextvars
import uuid

Base = declarative_base()

# --- Pool monitoring: log connects and checkouts to help diagnose excess connections ---
_pool_logger = logging.getLogger("transporte.db.pool")
_pool_lock = threading.Lock()
_counters = {"connect": 0, "checkout": 0, "checkin": 0, "queries": 0}

# --- Per-request DB query counting using ContextVar ---
# The request middleware sets a one-item list at the start of each request and
# the cursor listener increments it in place: handlers run in a copied context
# (threadpool), so rebinding the variable would not reach the middleware.
request_db_query_count = contextvars.ContextVar("request_db_query_count", default=None)


def _bump(name: str) -> int:
    with _pool_lock:
        _counters[name] += 1
        return _counters[name]


def _attach_listeners(engine: Engine, log_every_n: int) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cnt = _bump("connect")
        if cnt % log_every_n == 0:
            _pool_logger.info(f"SQLAlchemy Pool CONNECT events: total opened={cnt}")

    @event.listens_for(engine, "checkout")
    def _on_checkout(dbapi_connection, connection_record, connection_proxy):
        cnt = _bump("checkout")
        if cnt % log_every_n == 0:
            _pool_logger.info(f"SQLAlchemy Pool CHECKOUT events: total checkouts={cnt}")

    @event.listens_for(engine, "checkin")
    def _on_checkin(dbapi_connection, connection_record):
        cnt = _bump("checkin")
        if cnt % log_every_n == 0:
            _pool_logger.info(f"SQLAlchemy Pool CHECKIN events: total checkins={cnt}")

    @event.listens_for(engine, "before_cursor_execute")
    def _on_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        counter = request_db_query_count.get()
        if counter is not None:
            counter[0] += 1
        _bump("queries")

    if engine.dialect.name == "sqlite":
        # SQLite ignores foreign keys unless asked per connection
        @event.listens_for(engine, "connect")
        def _sqlite_fk_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()


def get_global_db_queries_total() -> int:
    """Return the total number of DB roundtrips since process start."""
    with _pool_lock:
        return _counters["queries"]


def build_engine(settings, url: str = None) -> Engine:
    """Create the engine for ``url`` (defaults to ``settings.DATABASE_URL``).

    In-memory SQLite gets a StaticPool so every session sees the same database.
    """
    url = url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
    else:
        # pool_pre_ping avoids "server has gone away" errors on stale pooled connections
        engine = create_engine(
            url,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
            pool_recycle=settings.DB_POOL_RECYCLE,
            poolclass=QueuePool,
        )
    _attach_listeners(engine, max(1, settings.DB_LOG_EVERY_N))
    return engine


def build_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db(request: Request):
    """FastAPI dependency that provides a scoped SQLAlchemy Session.

    The sessionmaker is owned by the application (``app.state``); the session
    is always closed after the request, returning its connection to the pool.
    """
    db = request.app.state.sessionmaker()
    try:
        yield db
    finally:
        db.close()


def create_db(engine: Engine):
    # Import models here so they are registered on the metadata
    import transporte.models.transportadora  # noqa: F401
    import transporte.models.motorista  # noqa: F401
    import transporte.models.viagem  # noqa: F401
    import transporte.models.receita  # noqa: F401
    import transporte.models.despesa  # noqa: F401
    import transporte.models.acerto  # noqa: F401
    import transporte.models.usuario  # noqa: F401
    import transporte.models.session  # noqa: F401
    Base.metadata.create_all(bind=engine)


def new_id() -> str:
    """Primary keys are UUID strings generated by the application."""
    return str(uuid.uuid4())


def commit_or_conflict(db, message: str):
    """Commit; a constraint violation is rolled back and reported as Conflict."""
    from sqlalchemy.exc import IntegrityError
    from transporte.core.errors import Conflict

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(message)
