#!/usr/bin/env python3
"""
Print the WAC financial summary for a window as JSON.

Usage:
  python3 scripts/wac_summary.py --db-url sqlite:///inventory.db \\
    --from 2024-02-01 --to 2024-02-29 [--supplier SUP-1] [--item ITEM-1] \\
    [--config path/to/valuation.yaml] [--log-level INFO]

Exit status: 0 on success, 2 for an invalid window, 1 when a stored event
cannot be valued or the database cannot be read.  Logs go to stderr as
JSON lines; the summary goes to stdout.
"""

from __future__ import annotations

import argparse
import json
import sys

from sqlalchemy.exc import SQLAlchemyError

from inventory_config import get_active_config
from inventory_kernel.db.engine import init_engine_from_url, session_scope
from inventory_kernel.exceptions import ComputationFailedError, ValidationError
from inventory_kernel.logging_config import configure_logging
from inventory_services.financial_summary_service import FinancialSummaryService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute the weighted-average-cost financial summary.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help="SQLAlchemy database URL (default: database.url from the config)",
    )
    parser.add_argument("--from", dest="start", required=True, help="Window start YYYY-MM-DD")
    parser.add_argument("--to", dest="end", required=True, help="Window end YYYY-MM-DD")
    parser.add_argument("--supplier", default=None, help="Restrict to one supplier id")
    parser.add_argument("--item", default=None, help="Restrict to one item id")
    parser.add_argument("--config", default=None, help="Valuation YAML (default: packaged defaults)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override logging.level from the config",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config = get_active_config(args.config)
    configure_logging(level=args.log_level or config.logging.level)

    init_engine_from_url(
        args.db_url or config.database.url,
        echo=config.database.echo,
        pool_size=config.database.pool_size,
        max_overflow=config.database.max_overflow,
    )

    try:
        with session_scope() as session:
            summary = FinancialSummaryService(session, config).compute_financial_summary_wac(
                args.start, args.end, scope=args.supplier, item_id=args.item,
            )
    except ValidationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    except ComputationFailedError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except SQLAlchemyError as exc:
        print(f"ERROR: database read failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
