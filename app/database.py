import logging
import os
import time
from typing import Callable, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import DATABASE_URL, TRANSACTION_MAX_RETRIES
from .exceptions import InternalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Get environment-specific pool settings
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "30"))
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
ENABLE_QUERY_LOGGING = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

# SQLSTATE codes for serialization failure and deadlock
RETRYABLE_PGCODES = {"40001", "40P01"}


def build_engine(url: str):
    """Create an engine; pool sizing only applies to server databases"""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,  # Test connections before using
        pool_recycle=POOL_RECYCLE,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        echo=False,  # Don't log all SQL (use slow query logging instead)
    )


try:
    engine = build_engine(DATABASE_URL)
    logger.info("✅ Database engine created successfully")
    logger.info(
        f"📊 Connection pool: size={POOL_SIZE}, max_overflow={MAX_OVERFLOW}, timeout={POOL_TIMEOUT}s"
    )
except Exception as e:
    logger.error(f"❌ Failed to create database engine: {e}")
    raise

# Slow query logging for performance monitoring
if ENABLE_QUERY_LOGGING:

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        total = time.time() - conn.info["query_start_time"].pop(-1)
        if total > SLOW_QUERY_THRESHOLD:
            logger.warning(f"🐌 Slow query ({total:.2f}s): {statement[:200]}...")

    logger.info(f"📊 Slow query logging enabled (threshold: {SLOW_QUERY_THRESHOLD}s)")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_retryable_error(error: DBAPIError) -> bool:
    """True for serialization failures and deadlocks reported by the driver"""
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) in RETRYABLE_PGCODES:
        return True
    return "database is locked" in str(orig).lower()


def run_in_transaction(
    db: Session,
    work: Callable[[Session], T],
    max_retries: int = TRANSACTION_MAX_RETRIES,
) -> T:
    """
    Run `work` inside a single SERIALIZABLE transaction.

    Commits when `work` returns, rolls back on any exception. A serialization
    failure or deadlock is retried up to `max_retries` times before surfacing
    as InternalError. Domain errors raised by `work` propagate unchanged after
    the rollback.
    """
    attempt = 0
    while True:
        # Reads made earlier in the request must not pin a weaker isolation level
        if db.in_transaction():
            db.commit()
        try:
            db.connection(execution_options={"isolation_level": "SERIALIZABLE"})
            result = work(db)
            db.commit()
            return result
        except DBAPIError as e:
            db.rollback()
            if is_retryable_error(e) and attempt < max_retries:
                attempt += 1
                logger.warning(f"🔁 Transaction conflict, retrying ({attempt}/{max_retries}): {e.orig}")
                continue
            logger.error(f"❌ Transaction failed: {e}")
            raise InternalError("Database error, please retry later") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Transaction failed: {e}")
            raise InternalError("Database error, please retry later") from e
        except Exception:
            db.rollback()
            raise
