from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine

from config import Config
from db.models import Token
from db.session import get_session, init_db


ENV = {
    "POSTGRES_HOST": "db.internal",
    "POSTGRES_PORT": "5432",
    "POSTGRES_USER": "updater",
    "POSTGRES_PASSWORD": "secret",
    "POSTGRES_DATABASE": "tokens",
    "PRICE_UPDATER_URL": "http://prices.test",
    "PRICE_UPDATER_API_KEY": "key-123",
}


@pytest.fixture
def cfg():
    return Config(
        postgres_host="db.internal",
        postgres_port="5432",
        postgres_user="updater",
        postgres_password="secret",
        postgres_database="tokens",
        price_updater_url="http://prices.test",
        price_updater_api_key="key-123",
    )


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so the data survives the pipeline closing its session."""
    eng = create_engine(f"sqlite:///{tmp_path / 'tokens.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def seeded_engine(engine):
    session = get_session(engine)
    session.add_all([
        Token(token_id=1, symbol="BTC", usd=100.0),
        Token(token_id=2, symbol="ETH", usd=50.0),
        Token(token_id=3, symbol="XYZ", usd=None),
    ])
    session.commit()
    session.close()
    return engine


@pytest.fixture
def session(seeded_engine):
    s = get_session(seeded_engine)
    yield s
    s.close()


def fake_http(payload=None, status_code=200, json_error=None):
    """Stand-in for the requests module with a canned /v1/tokens response."""
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    http = MagicMock()
    http.get.return_value = response
    return http


def stored(engine, token_id):
    session = get_session(engine)
    try:
        return session.get(Token, token_id)
    finally:
        session.close()
