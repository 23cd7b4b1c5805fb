"""
config.py - central configuration for the token price updater.

Every setting can come from an environment variable or a command-line flag of
the same name (e.g. POSTGRES_HOST / --POSTGRES_HOST).  A non-empty flag wins.
A .env file in the working directory is loaded automatically by python-dotenv,
but never overrides variables already present in the process environment.

The resulting Config is built once at startup and handed to whatever needs it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv
from sqlalchemy.engine import URL

from errors import ConfigError

# ---------------------------------------------------------------------------
# Settings  (env var name == flag name)
# ---------------------------------------------------------------------------
REQUIRED_SETTINGS: dict[str, str] = {
    "POSTGRES_HOST":     "postgres server host",
    "POSTGRES_PORT":     "postgres server port",
    "POSTGRES_USER":     "postgres server user",
    "POSTGRES_PASSWORD": "postgres server password",
    "POSTGRES_DATABASE": "postgres server database",
    "PRICE_UPDATER_URL": "price updater service url",
}

OPTIONAL_SETTINGS: dict[str, str] = {
    "PRICE_UPDATER_API_KEY": "price updater service API Key",
}

# Sent as the Origin header so the price service can tell who is calling
ORIGIN: str = "tool-update-token-prices"


@dataclass(frozen=True)
class Config:
    postgres_host:         str
    postgres_port:         str
    postgres_user:         str
    postgres_password:     str = field(repr=False)
    postgres_database:     str
    price_updater_url:     str
    price_updater_api_key: Optional[str] = field(default=None, repr=False)

    def database_url(self) -> URL:
        """SQLAlchemy URL for the configured Postgres server (password escaped)."""
        return URL.create(
            "postgresql+psycopg2",
            username=self.postgres_user,
            password=self.postgres_password,
            host=self.postgres_host,
            port=int(self.postgres_port),
            database=self.postgres_database,
        )


def parse_config_value(
    name: str,
    env_value: Optional[str],
    flag_value: Optional[str],
    required: bool = True,
) -> Optional[str]:
    """
    Resolve one setting: the trimmed flag if non-empty, else the trimmed env value.
    Raises ConfigError when a required setting ends up empty.
    """
    value = (flag_value or "").strip() or (env_value or "").strip()
    if not value:
        if required:
            raise ConfigError(name)
        return None
    return value


def load_config(
    flags: Mapping[str, Optional[str]] | None = None,
    env: Mapping[str, str] | None = None,
) -> Config:
    """
    Build the Config from flag values and the environment.

    flags - name → value as parsed from the command line (missing = not given)
    env   - defaults to os.environ after loading .env; pass a dict in tests
    """
    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ
    flags = flags or {}

    def _get(name: str, required: bool = True) -> Optional[str]:
        return parse_config_value(name, env.get(name), flags.get(name), required)

    return Config(
        postgres_host=_get("POSTGRES_HOST"),
        postgres_port=_get("POSTGRES_PORT"),
        postgres_user=_get("POSTGRES_USER"),
        postgres_password=_get("POSTGRES_PASSWORD"),
        postgres_database=_get("POSTGRES_DATABASE"),
        price_updater_url=_get("PRICE_UPDATER_URL"),
        price_updater_api_key=_get("PRICE_UPDATER_API_KEY", required=False),
    )
