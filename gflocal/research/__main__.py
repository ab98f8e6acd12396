"""
Research new restaurants and append them to the dataset.

The request comes from the environment (REQUEST_TYPE, REQUEST_VALUE,
REQUEST_DETAILS), as set by the automation runner.

Usage:
    python -m gflocal.research            # one restaurant
    python -m gflocal.research --batch    # a batch of ten
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from .config import DEFAULT_RESEARCH_CONFIG, ResearchRequest
from .errors import ResearchError
from .pipeline import run_research

logger = logging.getLogger("gflocal.research")


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Research GF-friendly restaurants with an LLM")
    parser.add_argument(
        "--batch",
        action="store_true",
        help=f"Request a batch of {DEFAULT_RESEARCH_CONFIG.batch_size} restaurants instead of one.",
    )
    parser.add_argument(
        "--count",
        type=positive_int,
        default=None,
        help="Number of restaurants to request (overrides --batch).",
    )
    parser.add_argument(
        "--dataset",
        default=None,
        help="Path to restaurants.json (default: GFLOCAL_DATASET_PATH or the bundled dataset).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    config = DEFAULT_RESEARCH_CONFIG
    if args.dataset:
        config = replace(config, dataset_path=Path(args.dataset))

    if args.count is not None:
        count = args.count
    else:
        count = config.batch_size if args.batch else 1

    try:
        outcome = run_research(ResearchRequest.from_env(), count=count, config=config)
    except ResearchError as exc:
        logger.error("Error researching restaurants: %s", exc)
        return 1

    logger.info("Research finished: %s", outcome.status.value)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
