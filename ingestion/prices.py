"""
ingestion/prices.py

Fetches current USD quotes from the price updater service.

    GET <PRICE_UPDATER_URL>/v1/tokens
    {"tokens": [{"id": 1, "symbol": "BTC", "USD": 101.5}, ...]}

Quotes are joined to stored tokens by numeric id.  Quotes the service sends
without an id are kept in the raw list but can't be matched to a token.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from config import ORIGIN, Config
from errors import DecodeError, FetchError

TOKENS_PATH = "/v1/tokens"


@dataclass(frozen=True)
class PriceQuote:
    id:     Optional[int]
    symbol: str
    usd:    float


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def tokens_url(base_url: str) -> str:
    """Base URL with its path replaced by /v1/tokens (query string kept)."""
    parts = urlsplit(base_url)
    return urlunsplit((parts.scheme, parts.netloc, TOKENS_PATH, parts.query, ""))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_quote(item: Any, position: int) -> PriceQuote:
    if not isinstance(item, dict):
        raise DecodeError(f"tokens[{position}] is not an object: {item!r}")

    symbol = item.get("symbol")
    if not isinstance(symbol, str):
        raise DecodeError(f"tokens[{position}] has no string symbol")

    usd = item.get("USD")
    if not _is_number(usd) or not math.isfinite(usd):
        raise DecodeError(f"tokens[{position}] ({symbol}) has invalid USD: {usd!r}")

    token_id = item.get("id")
    if token_id is not None and (isinstance(token_id, bool) or not isinstance(token_id, int)):
        raise DecodeError(f"tokens[{position}] ({symbol}) has invalid id: {token_id!r}")

    return PriceQuote(id=token_id, symbol=symbol, usd=float(usd))


def decode_quotes(payload: Any) -> list[PriceQuote]:
    """Turn the decoded response body into quotes, in server order."""
    if not isinstance(payload, dict):
        raise DecodeError("response body is not a JSON object")
    items = payload.get("tokens")
    if items is None:
        return []
    if not isinstance(items, list):
        raise DecodeError("'tokens' is not a list")
    return [_parse_quote(item, i) for i, item in enumerate(items)]


def index_quotes(quotes: list[PriceQuote]) -> dict[int, PriceQuote]:
    """Map token id → quote.  Later duplicates overwrite earlier ones."""
    return {q.id: q for q in quotes if q.id is not None}


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------

def fetch_prices(
    cfg: Config,
    http=requests,
) -> tuple[dict[int, PriceQuote], list[PriceQuote]]:
    """
    Call the price service once and return (quotes keyed by id, raw quotes).

    http - anything with a requests-style get(); tests pass a mock
    """
    try:
        url = tokens_url(cfg.price_updater_url)
    except ValueError as exc:
        raise FetchError(f"invalid price updater url {cfg.price_updater_url!r}: {exc}") from exc

    headers = {"Origin": ORIGIN}
    if cfg.price_updater_api_key:
        headers["X-Api-Key"] = cfg.price_updater_api_key

    try:
        response = http.get(url, headers=headers)
    except requests.RequestException as exc:
        raise FetchError(f"request to {url} failed: {exc}") from exc

    if response.status_code != 200:
        raise FetchError(
            f"invalid status code {response.status_code}",
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise DecodeError(f"malformed JSON from {url}: {exc}") from exc

    quotes = decode_quotes(payload)
    return index_quotes(quotes), quotes
