from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool
from core.config import settings
from core.exceptions import StorageError
from core.logging import logger

DATABASE_URL = settings.database_url


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live as long as their connection, so share one
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs

    kwargs = {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    if url.startswith("postgresql"):
        kwargs["connect_args"] = {
            "sslmode": "require",
            "connect_timeout": 10
        }
    return kwargs


engine = create_engine(DATABASE_URL, echo=settings.debug, **_engine_kwargs(DATABASE_URL))

Base = declarative_base()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    FastAPI dependency: one session per request, closed afterwards.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """
    Run a unit of work as a single transaction.

    Commits when the block exits cleanly. Storage failures are rolled back,
    logged with full detail and re-raised as an opaque StorageError; any
    other exception is rolled back and propagated unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure, transaction rolled back: {e!r}")
        raise StorageError() from e
    except Exception:
        db.rollback()
        raise


def test_connection():
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            logger.info(f"Database reachable at {engine.url.render_as_string(hide_password=True)}")
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")


if __name__ == "__main__":
    test_connection()
