"""
Tests for opening the database session
"""

import pytest
from sqlalchemy import create_engine

import db.session as db_session
from config import Config
from errors import DBConnectionError


def test_connect_returns_working_session(cfg, engine, monkeypatch):
    monkeypatch.setattr(db_session, "get_engine", lambda c: engine)

    session = db_session.connect(cfg)
    try:
        assert session.get_bind() is engine
    finally:
        session.close()


def test_connect_bad_port(cfg):
    cfg = Config(**{**cfg.__dict__, "postgres_port": "not-a-port"})

    with pytest.raises(DBConnectionError, match="invalid database settings"):
        db_session.connect(cfg)


def test_connect_unreachable_database(cfg, tmp_path, monkeypatch):
    # sqlite can't open a file inside a directory that doesn't exist
    missing = create_engine(f"sqlite:///{tmp_path / 'nope' / 'tokens.db'}")
    monkeypatch.setattr(db_session, "get_engine", lambda c: missing)

    with pytest.raises(DBConnectionError, match="cannot connect to db.internal:5432/tokens"):
        db_session.connect(cfg)
