"""
ingestion/pipeline.py

Main entry point for a token price update run:
  1. Read tracked tokens from the DB
  2. Fetch current quotes from the price updater service
  3. Write the new price for every token the service quoted

Also importable for programmatic use:
    from config import load_config
    from ingestion.pipeline import run_update
    run_update(load_config())
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path

import requests
from sqlalchemy.orm import Session

# Ensure project root is on sys.path when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import OPTIONAL_SETTINGS, REQUIRED_SETTINGS, Config, load_config
from db.models import Token
from db.session import connect
from errors import (
    DBConnectionError, DecodeError, FetchError, PriceUpdaterError,
    QueryError, UpdateError,
)
from ingestion.prices import PriceQuote, fetch_prices
from ingestion.tokens import format_price, get_tokens, update_token


@dataclass
class UpdateSummary:
    updated: int = 0
    skipped: int = 0
    failed:  int = 0

    @property
    def total(self) -> int:
        return self.updated + self.skipped + self.failed


def update_prices(
    session: Session,
    tokens: list[Token],
    prices: dict[int, PriceQuote],
    verbose: bool = True,
) -> UpdateSummary:
    """
    Apply quotes to tokens in ascending id order.

    Each write commits on its own; a failed write is reported and the loop
    moves on to the next token.
    """
    summary = UpdateSummary()

    for token in sorted(tokens, key=lambda t: t.token_id):
        quote = prices.get(token.token_id)
        if quote is None:
            summary.skipped += 1
            if verbose:
                print(
                    f"Token {token.token_id} {token.symbol} price not updated because "
                    f"price updater service did not provide the price for this token"
                )
            continue

        try:
            update_token(session, token.token_id, quote.usd)
        except UpdateError as exc:
            summary.failed += 1
            print(
                f"ERROR: failed to update price for token {token.token_id} "
                f"{token.symbol}, err: {exc.cause}"
            )
            continue

        summary.updated += 1
        if verbose:
            print(
                f"Token {token.token_id} {token.symbol} price updated from "
                f"{format_price(token.usd)} to {format_price(quote.usd)}"
            )

    return summary


def run_update(
    cfg: Config,
    session: Session | None = None,
    http=requests,
    verbose: bool = True,
) -> UpdateSummary:
    """
    Execute one full update run and return its summary.

    session - reuse an open session instead of connecting with cfg (tests)
    http    - requests-compatible client for the price service

    Failures before the update loop propagate as PriceUpdaterError subclasses;
    in that case nothing has been written.
    """
    owns_session = session is None
    if owns_session:
        if verbose:
            print("Connecting to DB...")
        session = connect(cfg)

    try:
        if verbose:
            print("Getting tokens from DB...")
        tokens = get_tokens(session)
        if verbose:
            print(f"\nDatabase tokens found: {len(tokens)}")
            for token in tokens:
                print(f"{token.token_id} {token.symbol} {format_price(token.usd)}")
            print()

        if verbose:
            print("Getting tokens prices...")
        prices, quotes = fetch_prices(cfg, http=http)
        if verbose:
            print(f"Token prices found: {len(prices)}")
            for quote in sorted(quotes, key=lambda q: q.symbol):
                qid = "-" if quote.id is None else quote.id
                print(f"{qid} {quote.symbol} {format_price(quote.usd)}")
            print()

        if verbose:
            print("Updating token prices...")
        summary = update_prices(session, tokens, prices, verbose=verbose)
    finally:
        if owns_session:
            bind = session.get_bind()
            session.close()
            bind.dispose()

    print(
        f"\nToken prices update finished: {summary.updated} updated, "
        f"{summary.skipped} skipped, {summary.failed} failed"
    )
    return summary


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Update token USD prices from the price updater service",
        epilog="Every flag falls back to the environment variable of the same name.",
    )
    for name, help_text in {**REQUIRED_SETTINGS, **OPTIONAL_SETTINGS}.items():
        parser.add_argument(f"--{name}", default="", help=help_text)
    parser.add_argument("--quiet", action="store_true",
                        help="Only print errors and the final summary")
    return parser


def main(argv: list[str] | None = None, env=None, http=requests) -> int:
    args = build_parser().parse_args(argv)
    flags = {name: getattr(args, name)
             for name in {**REQUIRED_SETTINGS, **OPTIONAL_SETTINGS}}

    stage = "load config"
    try:
        cfg = load_config(flags=flags, env=env)
        stage = "update token prices"
        run_update(cfg, http=http, verbose=not args.quiet)
    except DBConnectionError as exc:
        print(f"failed to create db connection: {exc}")
        return 1
    except QueryError as exc:
        print(f"failed to get tokens: {exc}")
        return 1
    except (FetchError, DecodeError) as exc:
        print(f"failed to get token prices: {exc}")
        return 1
    except PriceUpdaterError as exc:
        print(f"failed to {stage}: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
