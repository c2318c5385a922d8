"""Markdown rendering for the per-host, per-day trending README."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Sequence, Tuple

from trendinghistory.blobstore import ensure_dir, readme_path
from trendinghistory.config import DEFAULT_CATEGORIES, CategorySpec
from trendinghistory.errors import PersistenceError
from trendinghistory.models import RunTimestamp, TrendingEntry

__all__ = [
    "ITEM_COLUMNS",
    "append_readme",
    "escape_pipes",
    "ordered_rows",
    "readme_title",
    "render_cell",
    "render_cells",
    "render_section",
]

logger = logging.getLogger(__name__)

#: Item slots per table row, next to the label column.
ITEM_COLUMNS = 19


def escape_pipes(text: str) -> str:
    return text.replace("|", "\\|")


def readme_title(host: str) -> str:
    return f"# NeoDB Trending History for [{host}](https://{host})\n\n"


def render_cell(entry: TrendingEntry, host: str) -> str:
    """Render one entry as a table cell.

    The image and title share a single link when both a link and an image are
    present, so either one is clickable.
    """

    title = escape_pipes(entry.title.strip())
    image = entry.image
    if image.startswith("/"):
        image = f"https://{host}{image}"
    link = entry.link

    if link:
        if image:
            return f"[![]({image})<br/>{title}]({link})"
        return f"[{title}]({link})"
    if image:
        return f"![]({image})<br/>{title}"
    return title


def render_cells(
    entries: Sequence[TrendingEntry], host: str, columns: int = ITEM_COLUMNS
) -> List[str]:
    cells = [render_cell(entry, host) for entry in entries[:columns]]
    cells.extend("" for _ in range(columns - len(cells)))
    return cells


def ordered_rows(
    entries_by_category: Mapping[str, Sequence[TrendingEntry]],
    categories: Iterable[CategorySpec] = DEFAULT_CATEGORIES,
) -> List[Tuple[str, str]]:
    """Return ``(category, label)`` pairs for the rows to render, in row order.

    Known categories follow the table order; categories missing from the
    table come last, labelled with their own name. Empty categories are left
    out entirely.
    """

    table = list(categories)
    known = {spec.name for spec in table}
    rows = [(spec.name, spec.label) for spec in table if entries_by_category.get(spec.name)]
    rows.extend(
        (name, name)
        for name, entries in entries_by_category.items()
        if name not in known and entries
    )
    return rows


def render_section(
    host: str,
    timestamp: RunTimestamp,
    entries_by_category: Mapping[str, Sequence[TrendingEntry]],
    categories: Iterable[CategorySpec] = DEFAULT_CATEGORIES,
    *,
    include_title: bool = False,
) -> str:
    """Build the Markdown appended for one run: heading plus table."""

    total_columns = 1 + ITEM_COLUMNS
    lines: List[str] = []
    if include_title:
        lines.append(readme_title(host).rstrip("\n"))
        lines.append("")
    lines.append(f"## {timestamp.value}")
    lines.append("|" + "      |" * total_columns)
    lines.append("|" + " ---- |" * total_columns)

    for category, label in ordered_rows(entries_by_category, categories):
        cells = render_cells(entries_by_category[category], host)
        row = "| " + escape_pipes(label) + " |" + "".join(f" {cell} |" for cell in cells)
        lines.append(row)

    lines.append("")
    return "\n".join(lines) + "\n"


def append_readme(
    output_root: Path | str,
    slug: str,
    host: str,
    timestamp: RunTimestamp,
    entries_by_category: Mapping[str, Sequence[TrendingEntry]],
    categories: Iterable[CategorySpec] = DEFAULT_CATEGORIES,
) -> Path:
    """Append this run's section to the day's README, creating it if needed."""

    path = readme_path(output_root, slug, timestamp)
    ensure_dir(path.parent)
    text = render_section(
        host,
        timestamp,
        entries_by_category,
        categories,
        include_title=not path.exists(),
    )
    try:
        with path.open("a", encoding="utf-8") as file:
            file.write(text)
    except OSError as exc:
        raise PersistenceError(f"append {path}: {exc}") from exc
    logger.debug("Appended %d bytes to %s", len(text), path)
    return path
