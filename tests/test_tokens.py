"""
Tests for reading and writing the token table
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from db.models import Token
from errors import QueryError, UpdateError
from ingestion.tokens import format_price, get_tokens, update_token
from conftest import stored


def test_get_tokens_ordered_by_id(engine, session):
    session.add(Token(token_id=0, symbol="AAA", usd=1.0))
    session.commit()

    tokens = get_tokens(session)

    assert [t.token_id for t in tokens] == [0, 1, 2, 3]
    assert [t.symbol for t in tokens] == ["AAA", "BTC", "ETH", "XYZ"]
    assert tokens[3].usd is None


def test_get_tokens_rows_keep_price_after_commit(session):
    tokens = get_tokens(session)

    update_token(session, 1, 999.0)

    assert tokens[0].usd == 100.0


def test_get_tokens_query_failure(session):
    session.execute(text("DROP TABLE token"))
    session.commit()

    with pytest.raises(QueryError):
        get_tokens(session)


def test_update_token_sets_price_and_timestamp(seeded_engine, session):
    update_token(session, 3, 0.25)

    token = stored(seeded_engine, 3)
    assert token.usd == 0.25
    assert token.usd_update is not None
    assert stored(seeded_engine, 1).usd_update is None


def test_update_token_failure_rolls_back():
    session = MagicMock()
    session.execute.side_effect = OperationalError("UPDATE token", {}, Exception("db gone"))

    with pytest.raises(UpdateError) as exc_info:
        update_token(session, 7, 1.0)

    assert exc_info.value.token_id == 7
    session.rollback.assert_called_once()
    session.commit.assert_not_called()


def test_format_price():
    assert format_price(None) == "null"
    assert format_price(101.5) == "101.500000"
