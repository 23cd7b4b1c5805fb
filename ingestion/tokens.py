"""
ingestion/tokens.py

Reads tracked tokens from the token table and writes refreshed USD prices back.
"""

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import Token
from errors import QueryError, UpdateError


def get_tokens(session: Session) -> list[Token]:
    """
    All tracked tokens, ascending by token_id.

    The rows are detached from the session, so later commits / rollbacks
    don't expire them: usd keeps the price read at the start of the run.
    """
    try:
        tokens = list(session.scalars(select(Token).order_by(Token.token_id)))
    except SQLAlchemyError as exc:
        session.rollback()
        raise QueryError(f"token query failed: {exc}") from exc
    for token in tokens:
        session.expunge(token)
    return tokens


def update_token(session: Session, token_id: int, price: float) -> None:
    """
    Set usd and stamp usd_update = now() for one token, committed on its own.
    Raises UpdateError after rolling back, so the session stays usable.
    """
    try:
        session.execute(
            update(Token)
            .where(Token.token_id == token_id)
            .values(usd=price, usd_update=func.now())
            .execution_options(synchronize_session=False)
        )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise UpdateError(token_id, exc) from exc


def format_price(price) -> str:
    return "null" if price is None else f"{price:f}"
