"""Service layer entry points for the trending history fetcher."""

from __future__ import annotations

from .extractor import extract_entries  # noqa: F401
from .fetcher import TrendingFetcher  # noqa: F401
from .hosts import dashify_host, read_instances, sanitize_host  # noqa: F401
from .readme import append_readme, render_section  # noqa: F401
from .runner import TrendingRunner, run  # noqa: F401
from .snapshots import write_category_snapshot, write_summary  # noqa: F401

__all__ = [
    "TrendingFetcher",
    "TrendingRunner",
    "append_readme",
    "dashify_host",
    "extract_entries",
    "read_instances",
    "render_section",
    "run",
    "sanitize_host",
    "write_category_snapshot",
    "write_summary",
]
