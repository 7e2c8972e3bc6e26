"""Database connection and session management."""
import time
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from storefront.config import settings
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


def _engine_kwargs(database_url: str) -> dict:
    """Pool settings for the configured backend."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases must share one connection to keep their tables
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
    }


# Create database engine
engine = create_engine(
    settings.database_url,
    echo=False,  # Set to True for SQL query logging
    **_engine_kwargs(settings.database_url)
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

# Retry configuration
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 1


def get_db_session():
    """
    Get a database session with retry logic.
    Retries up to 3 times on connection failure.
    """
    last_error = None
    
    for attempt in range(MAX_RETRIES):
        try:
            db = SessionLocal()
            # Test the connection with a simple query
            db.execute(text("SELECT 1"))
            return db
        except OperationalError as e:
            last_error = e
            if attempt < MAX_RETRIES - 1:
                logger.warning(f"Connection attempt {attempt + 1} failed, retrying in {RETRY_DELAY_SECONDS}s...")
                time.sleep(RETRY_DELAY_SECONDS)
            else:
                logger.error(f"All {MAX_RETRIES} connection attempts failed")
    
    raise last_error


def get_db():
    """Dependency for getting database session with retry logic."""
    db = get_db_session()
    try:
        yield db
    finally:
        db.close()
