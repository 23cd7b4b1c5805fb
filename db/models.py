"""
db/models.py - SQLAlchemy ORM model for the tracked-token table.
"""

from sqlalchemy import Column, DateTime, Float, Integer, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# token  - one row per tracked asset; only usd / usd_update are written here
# ---------------------------------------------------------------------------
class Token(Base):
    __tablename__ = "token"

    token_id   = Column(Integer, primary_key=True, autoincrement=False)
    symbol     = Column(Text, nullable=False)
    usd        = Column(Float, nullable=True)
    usd_update = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Token(token_id={self.token_id}, symbol='{self.symbol}', usd={self.usd})>"
