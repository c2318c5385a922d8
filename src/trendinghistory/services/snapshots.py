"""Persist raw trending payloads and the per-run summary document."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from trendinghistory.blobstore import ensure_dir, run_dir
from trendinghistory.errors import PersistenceError
from trendinghistory.models import RawPayload, RunTimestamp
from trendinghistory.services.extractor import NOT_JSON, parse_payload

__all__ = [
    "category_snapshot_path",
    "summary_path",
    "summary_document",
    "write_category_snapshot",
    "write_summary",
]

logger = logging.getLogger(__name__)


def category_snapshot_path(
    output_root: Path | str, slug: str, timestamp: RunTimestamp, category: str
) -> Path:
    filename = f"{timestamp.file_token}-{slug}-trending-{category}.json"
    return run_dir(output_root, slug, timestamp) / filename


def summary_path(output_root: Path | str, slug: str, timestamp: RunTimestamp) -> Path:
    filename = f"{timestamp.file_token}-{slug}-trending.json"
    return run_dir(output_root, slug, timestamp) / filename


def write_category_snapshot(
    output_root: Path | str, slug: str, timestamp: RunTimestamp, payload: RawPayload
) -> Path:
    """Write the verbatim body of ``payload`` and return the file path."""

    path = category_snapshot_path(output_root, slug, timestamp, payload.category)
    ensure_dir(path.parent)
    try:
        path.write_bytes(payload.data)
    except OSError as exc:
        raise PersistenceError(f"write {path}: {exc}") from exc
    return path


def _embedded(payload: RawPayload) -> Any:
    document = parse_payload(payload.data)
    if document is NOT_JSON:
        # truncated or otherwise broken bodies are kept as text
        return payload.data.decode("utf-8", errors="replace")
    return document


def summary_document(
    host: str, timestamp: RunTimestamp, payloads: Mapping[str, RawPayload]
) -> dict[str, Any]:
    """Build ``{timestamp, host, types}`` with categories in insertion order."""

    return {
        "timestamp": timestamp.value,
        "host": host,
        "types": {category: _embedded(payload) for category, payload in payloads.items()},
    }


def write_summary(
    output_root: Path | str,
    slug: str,
    host: str,
    timestamp: RunTimestamp,
    payloads: Mapping[str, RawPayload],
) -> Path:
    """Write the combined summary for one host pass and return the file path."""

    path = summary_path(output_root, slug, timestamp)
    ensure_dir(path.parent)
    document = summary_document(host, timestamp, payloads)
    try:
        with path.open("w", encoding="utf-8") as file:
            json.dump(document, file, ensure_ascii=False, indent=2)
    except OSError as exc:
        raise PersistenceError(f"write {path}: {exc}") from exc
    logger.debug("Summary for %s covers %d categories", host, len(payloads))
    return path
