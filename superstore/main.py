"""
Command Line Entry Point

Loads a raw Superstore export, runs the cleaning pipeline and writes the
cleaned view (and optionally the report tables) as Parquet.

Usage:
    superstore-etl data/raw/superstore.tsv
    superstore-etl data/raw/superstore.csv --delimiter , --reports
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog

from superstore.config import get_settings
from superstore.config.logging import configure_logging
from superstore.exceptions import MalformedInputError
from superstore.ingestion import load_sales_file
from superstore.reporting import SalesAnalytics
from superstore.transformation import SalesPipeline

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="superstore-etl",
        description="Clean and enrich a Superstore sales export",
    )
    parser.add_argument("input", help="Raw sales file (tsv, csv, json, jsonl or parquet)")
    parser.add_argument(
        "--output",
        help="Output directory (default: curated data lake path)",
    )
    parser.add_argument(
        "--delimiter",
        help="Field separator for delimited text (default: tab)",
    )
    parser.add_argument(
        "--remove-duplicates",
        action="store_true",
        help="Drop duplicate candidates, keeping the lowest row id",
    )
    parser.add_argument(
        "--reports",
        action="store_true",
        help="Also write the aggregate report tables",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    configure_logging(args.log_level)

    output_dir = Path(args.output or settings.data_lake.curated_path)
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        raw = load_sales_file(args.input, delimiter=args.delimiter)
        result = SalesPipeline(remove_duplicates=args.remove_duplicates or None).run(raw)
    except FileNotFoundError as e:
        logger.error("Input file not found", error=str(e))
        return 2
    except MalformedInputError as e:
        logger.error("Malformed input, pipeline aborted", error=str(e), column=e.column)
        return 1

    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    output_file = output_dir / f"{result.view.name}_{timestamp}.parquet"
    result.view.to_frame().write_parquet(output_file)
    logger.info("Cleaned view written", file=str(output_file), rows=result.output_rows)

    if args.reports:
        for name, report in SalesAnalytics(result.view).build_all().items():
            report.write_parquet(output_dir / f"{name}_{timestamp}.parquet")

    summary = result.report.summary()
    summary["output_file"] = str(output_file)
    summary["ship_dates_repaired"] = result.cleaning.ship_dates_repaired
    summary["quantities_corrected"] = result.cleaning.quantities_corrected
    summary["outliers_flagged"] = result.cleaning.outliers_flagged
    summary["duplicates_removed"] = result.cleaning.duplicates_removed
    json.dump(summary, sys.stdout, indent=2)
    sys.stdout.write("\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
