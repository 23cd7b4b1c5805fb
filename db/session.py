"""
db/session.py - database engine and session factory.

The updater holds a single session (one connection) for the whole run.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from config import Config
from db.models import Base
from errors import DBConnectionError


def get_engine(cfg: Config) -> Engine:
    return create_engine(
        cfg.database_url(),
        pool_size=1,
        max_overflow=0,
        connect_args={"sslmode": "disable"},
    )


def get_session(engine: Engine) -> Session:
    return sessionmaker(bind=engine)()


def connect(cfg: Config) -> Session:
    """
    Open a session and make sure the server actually answers.
    Any failure (bad port, unreachable host, rejected credentials) becomes
    DBConnectionError.
    """
    try:
        engine = get_engine(cfg)
    except (ValueError, SQLAlchemyError) as exc:
        raise DBConnectionError(f"invalid database settings: {exc}") from exc

    session = get_session(engine)
    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        session.close()
        engine.dispose()
        raise DBConnectionError(
            f"cannot connect to {cfg.postgres_host}:{cfg.postgres_port}/{cfg.postgres_database}: {exc}"
        ) from exc
    return session


def init_db(engine: Engine):
    """Create the token table if it doesn't exist. Safe to call repeatedly."""
    Base.metadata.create_all(engine)
