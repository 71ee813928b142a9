#!/usr/bin/env python3
"""
Run one prediction cycle against the local database.

Usage: from project root:
  python scripts/run_predictions.py            # configured watchlist
  python scripts/run_predictions.py AAPL TSLA  # explicit symbols
"""

import sys
from pathlib import Path

# Add src/ to path when running from a checkout
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from finsight.app_context import AppContext
from finsight.config.logging_config import setup_logging


def run_predictions(symbols: list[str]) -> int:
    """Generate predictions and print one line per symbol."""
    setup_logging()
    context = AppContext()
    context.initialize()
    try:
        result = context.predictions.generate(symbols or None)
    finally:
        context.close()

    print(f"{'SYMBOL':<8}{'LAST':>10}{'TARGET':>10}  {'CALL':<12}{'CONF':>5}  RISK")
    print("=" * 56)
    for p in result.predictions:
        print(
            f"{p.symbol:<8}{p.features_used.last_price:>10.2f}{p.predicted_price:>10.2f}  "
            f"{p.recommendation.value:<12}{p.confidence_level:>5}  {p.risk_level.value}"
        )
    for skipped in result.skipped:
        print(f"{skipped.symbol:<8}skipped: {skipped.reason}")
    return 0 if result.predictions or not result.skipped else 1


if __name__ == "__main__":
    sys.exit(run_predictions(sys.argv[1:]))
