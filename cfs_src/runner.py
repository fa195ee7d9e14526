#!/usr/bin/env python3
"""CLI runner for CFS classification of a CSV dataset.

Usage:
    python -m cfs_src.runner --input survey.csv --map map.json --output scored.csv
    python -m cfs_src.runner --input survey.csv --interactive --output scored.csv
    python -m cfs_src.runner --input survey.csv --map map.json --validate --labels
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import pandas as pd

from .classifier import classify_cfs
from .config import Config
from .errors import CFSError
from .labels import GROUP_SCHEMES, add_cfs_labels
from .mapping import prompt_variable_map
from .rules.cfs_criteria import CFS_SCORE_COLUMN
from .rules.schemas import CFSScaleVersion, PhysicalActivityScale
from .validation import NAComparison, validate_cfs

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )
    logging.captureWarnings(True)


def load_variable_map(path: str | Path) -> dict:
    """Read a canonical id -> column name map from a JSON file."""
    with open(path) as f:
        return json.load(f)


def show_summary(df: pd.DataFrame) -> None:
    """Display the score distribution."""
    counts = df[CFS_SCORE_COLUMN].value_counts(dropna=False).sort_index()

    print("\n=== CFS Score Distribution ===")
    for score, count in counts.items():
        label = "missing" if pd.isna(score) else score
        print(f"  {label:>8}: {count}")
    print(f"  {'total':>8}: {len(df)}")
    print()


def show_validation(summary: dict) -> None:
    """Display validation results."""
    print("\n=== Validation Results ===")
    print(f"Pass:          {summary['true']}")
    print(f"Fail:          {summary['false']}")
    print(f"Undetermined:  {summary['na']}")
    if summary["pass_rate"] is not None:
        print(f"Pass rate:     {summary['pass_rate']}%")
    print()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Classify survey subjects on the Clinical Frailty Scale"
    )
    parser.add_argument("--input", required=True, help="CSV file, one row per subject")
    parser.add_argument("--map", dest="map_path", help="JSON file mapping CFS ids to columns")
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Prompt for each column mapping instead of reading --map",
    )
    parser.add_argument("--output", help="Where to write the classified CSV")
    parser.add_argument(
        "--scale",
        choices=[v.value for v in CFSScaleVersion],
        default=None,
        help=f"Decision table (default: {Config.SCALE_VERSION})",
    )
    parser.add_argument(
        "--physical-activity-scale",
        choices=[v.value for v in PhysicalActivityScale],
        default=None,
        help=f"Coding of the physical activity column (default: {Config.PHYSICAL_ACTIVITY_SCALE})",
    )
    parser.add_argument(
        "--min-comorbidities",
        type=int,
        default=None,
        help=f"Comorbidity threshold (default: {Config.MIN_COMORBIDITIES})",
    )
    parser.add_argument("--validate", action="store_true", help="Re-derive and cross-check scores")
    parser.add_argument(
        "--na-mode",
        choices=[v.value for v in NAComparison],
        default=None,
        help=f"Missing-vs-missing comparison (default: {Config.VALIDATION_NA_MODE})",
    )
    parser.add_argument("--labels", action="store_true", help="Add cfs_label and cfs_group")
    parser.add_argument("--scheme", choices=list(GROUP_SCHEMES), default="2group")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.map_path and not args.interactive:
        parser.error("one of --map or --interactive is required")

    data = pd.read_csv(args.input)
    logger.info(f"Loaded {len(data)} rows from {args.input}")

    try:
        if args.interactive:
            variable_map = prompt_variable_map(data.columns)
        else:
            variable_map = load_variable_map(args.map_path)

        result = classify_cfs(
            data,
            variable_map=variable_map,
            min_comorbidities=args.min_comorbidities,
            scale=args.scale,
            physical_activity_scale=args.physical_activity_scale,
        )

        if args.validate:
            report = validate_cfs(
                result,
                min_comorbidities=args.min_comorbidities,
                scale=args.scale,
                na_mode=args.na_mode,
            )
            result = report.table
            show_validation(report.summary)
    except CFSError as e:
        logger.error(f"Classification aborted: {e}")
        return 1

    if args.labels:
        result = add_cfs_labels(result, scheme=args.scheme)

    show_summary(result)

    if args.output:
        result.to_csv(args.output, index=False)
        logger.info(f"Wrote {len(result)} rows to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
