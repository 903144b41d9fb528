import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .core.config import settings
from .models import Base

logger = logging.getLogger(__name__)

# Execution option carried by connections of a write unit of work
WRITE_TRANSACTION_OPTION = "prompt_release_write"


def _install_sqlite_transaction_hooks(engine: Engine) -> None:
    """Open SQLite transactions explicitly.

    pysqlite defers BEGIN until the first write, so two sessions could both read
    the same max(version) before either writes. Write units of work take the
    write lock up front with BEGIN IMMEDIATE; reads use a deferred BEGIN and
    keep reading while another connection holds the write lock. PostgreSQL
    relies on SELECT ... FOR UPDATE instead.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        if conn.get_execution_options().get(WRITE_TRANSACTION_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create a database engine for the given URL (defaults to settings.DATABASE_URL)."""
    database_url = database_url or settings.DATABASE_URL
    url = make_url(database_url)
    if echo is None:
        echo = settings.LOG_LEVEL == "DEBUG"  # Enable SQL logging in debug mode

    if url.get_backend_name() == "sqlite":
        database = url.database
        if database and database != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)
            engine = create_engine(
                database_url,
                connect_args={
                    "check_same_thread": False,
                    "timeout": 30,  # 30 second busy timeout
                },
                echo=echo,
            )
        else:
            # A single shared connection keeps the in-memory database alive.
            # Sessions on other threads would share its transaction, so this
            # mode only suits tests and single-threaded tools.
            logger.warning(
                "In-memory SQLite database uses one shared connection; "
                "do not serve concurrent requests from it"
            )
            engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=echo,
            )
        _install_sqlite_transaction_hooks(engine)
    else:
        engine = create_engine(
            database_url,
            connect_args={"connect_timeout": 10},
            pool_pre_ping=True,  # Verify connections before using them
            pool_recycle=300,    # Recycle connections after 5 minutes
            pool_timeout=30,
            max_overflow=10,
            pool_size=5,
            echo=echo,
        )

    logger.info(f"Created database engine for {url.render_as_string(hide_password=True)}")
    return engine


class SessionFactory(sessionmaker):
    """sessionmaker whose begin() opens a write unit of work.

    Sessions from begin() are bound to the engine with WRITE_TRANSACTION_OPTION
    set; plain calls give read sessions.
    """

    @contextmanager
    def begin(self) -> Iterator[Session]:
        bind = self.kw["bind"].execution_options(**{WRITE_TRANSACTION_OPTION: True})
        with self(bind=bind) as session:
            with session.begin():
                yield session


def create_session_factory(engine: Engine) -> SessionFactory:
    """Session factory handed to every engine service as its storage port."""
    return SessionFactory(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that don't exist yet."""
    Base.metadata.create_all(bind=engine)
