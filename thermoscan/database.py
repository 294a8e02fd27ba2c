from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

logger = logging.getLogger(__name__)

# Create Base instance
Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """
    Create a SQLAlchemy engine for the configured database URL.

    SQLite connections are shared across threads because FastAPI may run
    dependencies in a worker thread; in-memory SQLite uses a static pool so
    every session sees the same database.
    """
    is_sqlite = database_url.startswith("sqlite:")

    if is_sqlite:
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
        logger.info("Using SQLite database")
    else:
        engine = create_engine(database_url, pool_pre_ping=True)
        logger.info("Using database at configured DATABASE_URL")

    # Test the connection
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        logger.info("Successfully connected to the database")

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine: Engine) -> bool:
    """
    Creates all tables defined in the models.
    Should be called when the application starts.

    Returns:
        bool: True if tables were created successfully, False otherwise
    """
    # Import models so they register with Base.metadata
    from thermoscan import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
        return True
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        return False
