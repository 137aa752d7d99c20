"""Main entry point for the stale repository finder.

Finds popular repositories without recent pushes and ranks them by how many
packages import them, printing a column-aligned table to standard output.
"""
import argparse
import asyncio
import dataclasses
import logging
import sys
from datetime import date
from typing import List, Optional
from stalefinder.application.finder_service import StaleRepositoryFinder
from stalefinder.application.report import write_report
from stalefinder.config import FinderConfig, load_config, load_env_files
from stalefinder.domain.errors import ConfigError, SearchError
from stalefinder.infrastructure.github_client import GitHubSearchClient
from stalefinder.infrastructure.godoc_scraper import GodocImporterScraper


logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """argparse type accepting only positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stale-finder",
        description="Rank stale GitHub repositories by their godoc importer counts."
    )
    parser.add_argument(
        "-count", "--count",
        type=positive_int,
        default=25,
        help="How many (Github) projects to lookup (default: 25)"
    )
    parser.add_argument(
        "--stable-ties",
        action="store_true",
        help="Keep search order among rows with equal importer counts"
    )
    parser.add_argument("--min-stars", type=positive_int, help="Override STALE_MIN_STARS")
    parser.add_argument("--pushed-before", type=iso_date, help="Override STALE_PUSHED_BEFORE")
    parser.add_argument("--language", help="Override STALE_LANGUAGE")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def apply_overrides(config: FinderConfig, args: argparse.Namespace) -> FinderConfig:
    """Return a config with command line criteria overrides applied."""
    overrides = {}
    if args.min_stars is not None:
        overrides["min_stars"] = args.min_stars
    if args.pushed_before is not None:
        overrides["pushed_before"] = args.pushed_before
    if args.language:
        overrides["language"] = args.language
    if not overrides:
        return config
    criteria = dataclasses.replace(config.criteria, **overrides)
    return dataclasses.replace(config, criteria=criteria)


def build_finder(config: FinderConfig) -> StaleRepositoryFinder:
    """Wire the infrastructure adapters into the application service."""
    search_client = GitHubSearchClient(config.github_token, timeout=config.http_timeout)
    importer_source = GodocImporterScraper(
        base_url=config.godoc_base_url,
        user_agent=config.user_agent,
        timeout=config.http_timeout
    )
    return StaleRepositoryFinder(
        search_client=search_client,
        importer_source=importer_source,
        concurrency=config.scrape_concurrency
    )


async def main(args: argparse.Namespace, config: FinderConfig) -> int:
    """Execute one run and return the process exit code."""
    finder = build_finder(config)

    try:
        result = await finder.find(config.criteria, args.count)
    except SearchError as e:
        logger.error(f"Search failed: {e}")
        return 1
    finally:
        await finder.close()

    write_report(result.rows, sys.stdout, stable_ties=args.stable_ties)

    logger.info("=" * 50)
    logger.info("Run Summary:")
    logger.info(f"  Repositories listed: {len(result.rows)}")
    logger.info(f"  Failed importer lookups: {result.lookup_failures}")
    logger.info(f"  Duration: {result.duration_seconds:.2f} seconds")
    logger.info("=" * 50)
    return 0


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, load configuration and run the finder."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    load_env_files()
    try:
        config = apply_overrides(load_config(), args)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    return asyncio.run(main(args, config))


if __name__ == "__main__":
    sys.exit(run())
