"""Generate database session"""

from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessmatch.db.schema import Base


def create_db_engine(database_url: str) -> Engine:
    """In-memory SQLite must share a single connection across threads, or every connection sees its own empty database."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


