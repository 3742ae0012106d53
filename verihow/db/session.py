import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from verihow.core.settings import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str | None = None) -> Engine:
    url = (database_url or settings.database_url).strip()
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Creates the key-value table when missing."""
    from verihow.db import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def transaction(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Commits on success, rolls back and re-raises on failure."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error("Transaction failed, rolled back: %s", e)
        raise
    finally:
        session.close()
