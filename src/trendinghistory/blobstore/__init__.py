"""Directory layout helpers for the snapshot output tree."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from trendinghistory.errors import PersistenceError
from trendinghistory.models import RunTimestamp

#: Default location where snapshots and README logs are written.
DEFAULT_OUTPUT_ROOT = Path(".")

README_FILENAME = "README.md"

_Pathish = Union[str, Path]


def resolve_output_root(output_root: _Pathish | None = None) -> Path:
    """Return a :class:`Path` pointing at the output root.

    ``output_root`` may be either a string or :class:`Path`.  When ``None`` is
    provided, :data:`DEFAULT_OUTPUT_ROOT` is returned.  Nothing is created on
    disk; see :func:`ensure_dir`.
    """

    if output_root is None:
        return DEFAULT_OUTPUT_ROOT
    if isinstance(output_root, Path):
        return output_root
    return Path(output_root)


def day_dir(output_root: _Pathish | None, slug: str, timestamp: RunTimestamp) -> Path:
    """``{root}/{slug}/{yyyy}/{mm}/{dd}`` for ``timestamp``."""

    root = resolve_output_root(output_root)
    return root / slug / timestamp.year / timestamp.month / timestamp.day


def run_dir(output_root: _Pathish | None, slug: str, timestamp: RunTimestamp) -> Path:
    """``{root}/{slug}/{yyyy}/{mm}/{dd}/{time}`` for ``timestamp``."""

    return day_dir(output_root, slug, timestamp) / timestamp.time_folder


def readme_path(output_root: _Pathish | None, slug: str, timestamp: RunTimestamp) -> Path:
    return day_dir(output_root, slug, timestamp) / README_FILENAME


def ensure_dir(path: Path) -> Path:
    """Create ``path`` and its parents if needed and return it."""

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"mkdir {path}: {exc}") from exc
    return path


__all__ = [
    "DEFAULT_OUTPUT_ROOT",
    "README_FILENAME",
    "day_dir",
    "ensure_dir",
    "readme_path",
    "resolve_output_root",
    "run_dir",
]
