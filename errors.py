"""
errors.py - exception hierarchy for the token price updater.

Everything raised before the per-token update loop is fatal and bubbles up to
the CLI, which turns it into a non-zero exit.  UpdateError is the only one
handled inside the loop.
"""

from __future__ import annotations


class PriceUpdaterError(Exception):
    """Base class for all updater failures."""


class ConfigError(PriceUpdaterError):
    """A required setting resolved to an empty value."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"config required: {name}")


class DBConnectionError(PriceUpdaterError):
    """Database unreachable or credentials rejected."""


class QueryError(PriceUpdaterError):
    """Reading the token table failed."""


class FetchError(PriceUpdaterError):
    """Price service unreachable or answered with a non-200 status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DecodeError(PriceUpdaterError):
    """Price service body is not the expected JSON shape."""


class UpdateError(PriceUpdaterError):
    """Writing one token's price failed."""

    def __init__(self, token_id: int, cause: Exception):
        self.token_id = token_id
        self.cause = cause
        super().__init__(f"failed to update token {token_id}: {cause}")
