"""Database session management"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from paycycle_ledger.config import settings
from paycycle_ledger.infrastructure.database.models import Base


def create_session_factory(database_url: str | None = None, create_tables: bool = True) -> sessionmaker:
    """Build a session factory for the given URL (defaults to settings.database_url)"""
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}

    engine = create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        connect_args=connect_args,
    )
    if create_tables:
        Base.metadata.create_all(bind=engine)

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Session that commits on success and rolls back on any error"""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
