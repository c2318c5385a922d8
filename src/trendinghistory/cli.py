"""Command line entry point for a single trending fetch run."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Sequence

from trendinghistory.config import TrendingConfig, validate_types
from trendinghistory.errors import ConfigError
from trendinghistory.services.runner import TrendingRunner

__all__ = ["build_parser", "load_config", "main"]

logger = logging.getLogger("trendinghistory")


def build_parser(defaults: TrendingConfig | None = None) -> argparse.ArgumentParser:
    base = defaults or TrendingConfig()
    parser = argparse.ArgumentParser(
        prog="trending-history",
        description="Fetch trending listings from catalog instances and archive them.",
    )
    parser.add_argument("--config", type=Path, help="optional JSON configuration file")
    parser.add_argument(
        "--instances",
        type=Path,
        default=None,
        help=f"path to the instance list, one host per line (default: {base.instances_file})",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help=f"output root directory (default: {base.output_root})",
    )
    parser.add_argument(
        "--types",
        default=None,
        help=f"comma-separated trending types (default: {','.join(base.types)})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=f"HTTP timeout in seconds (default: {base.http_timeout:g})",
    )
    parser.add_argument(
        "--ua",
        default=None,
        help=f"HTTP User-Agent header (default: {base.user_agent})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def load_config(args: argparse.Namespace) -> TrendingConfig:
    """Combine defaults, the optional config file, ``TRENDING_*`` variables and flags."""

    base = TrendingConfig.from_file(args.config) if args.config else TrendingConfig()
    config = TrendingConfig.from_env(base=base)

    overrides: dict[str, object] = {}
    if args.instances is not None:
        overrides["instances_file"] = args.instances
    if args.out is not None:
        overrides["output_root"] = args.out
    if args.types is not None:
        overrides["types"] = validate_types(args.types)
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ConfigError("--timeout must be positive")
        overrides["http_timeout"] = args.timeout
    if args.ua is not None:
        overrides["user_agent"] = args.ua
    return config.model_copy(update=overrides)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the fetcher; returns a non-zero exit status only for configuration errors."""

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stdout,
    )

    started = time.monotonic()
    try:
        config = load_config(args)
        report = TrendingRunner(config).run()
    except ConfigError as exc:
        print(f"fetch failed: {exc}", file=sys.stderr)
        return 1

    logger.info(
        "done in %.3fs (%d ok, %d warnings, %d errors)",
        time.monotonic() - started,
        report.ok_count,
        report.warn_count,
        report.error_count,
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
