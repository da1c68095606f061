# mentor_matching/database.py
import logging
from typing import Optional, Union

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import get_settings

logger = logging.getLogger(__name__)

def _database_url(database_url: Optional[Union[str, URL]] = None) -> URL:
    settings = get_settings()
    if database_url is None:
        database_url = settings.DATABASE_URL
    if database_url is not None:
        return make_url(database_url)
    return URL.create(
        "postgresql+psycopg2",
        username=settings.POSTGRES_USER,
        password=settings.POSTGRES_PASSWORD,
        host=settings.POSTGRES_HOST,
        port=settings.POSTGRES_PORT,
        database=settings.POSTGRES_DB,
    )

def _enable_sqlite_write_serialization(engine: Engine) -> None:
    """
    Makes every SQLite transaction start with BEGIN IMMEDIATE.
    pysqlite defers BEGIN until the first write, which lets two check-then-insert
    transactions read the same state before either takes the write lock.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Hand transaction control to SQLAlchemy instead of pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

def get_engine(database_url: Optional[Union[str, URL]] = None) -> Engine:
    settings = get_settings()
    url = _database_url(database_url)

    if url.get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": settings.SQLITE_BUSY_TIMEOUT},
        )
        _enable_sqlite_write_serialization(engine)
        return engine

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )

def make_session_factory(bind: Engine) -> sessionmaker:
    # Records returned by the engine stay readable after their transaction commits
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)

# Create the SQLAlchemy engine globally after defining get_engine
engine = get_engine()

# Create a SessionLocal class
SessionLocal = make_session_factory(engine)

# Base class for declarative models
Base = declarative_base()

# Dependency to get a DB session
def get_db():
    """Provides a database session for a request and closes it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Helper function to create all tables
def create_db_and_tables(bind: Optional[Engine] = None):
    """Creates all defined database tables."""
    # Registers the models on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created or already exist.")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_db_and_tables()
