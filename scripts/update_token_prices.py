"""
scripts/update_token_prices.py

Refresh the USD price of every tracked token from the price updater service.
Safe to run at any time - re-running simply re-applies the current quotes.

Usage:
    python scripts/update_token_prices.py
    python scripts/update_token_prices.py --PRICE_UPDATER_URL http://localhost:8080
    python scripts/update_token_prices.py --quiet

Settings come from flags, the environment, or a local .env file.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ingestion.pipeline import main

sys.exit(main())
