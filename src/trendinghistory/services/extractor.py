"""Best-effort extraction of ``{title, image, link}`` entries from trending payloads.

Instances do not share a strict schema, so the payload is treated as the plain
JSON tree produced by :func:`json.loads` and searched for a list of listing
objects. Nothing here raises on bad input: an unparseable document simply
produces no entries.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Sequence

from trendinghistory.models import TrendingEntry

__all__ = ["ARRAY_KEYS", "NOT_JSON", "extract_entries", "find_listing_array", "parse_payload"]

#: Wrapper keys tried, in order, before falling back to any list-valued key.
ARRAY_KEYS = ("results", "items", "data", "objects", "list")
TITLE_KEYS = ("title", "name", "text", "caption")
SUBJECT_TITLE_KEYS = ("title", "name")
IMAGE_KEYS = ("cover_image_url", "cover", "image")

#: Returned by :func:`parse_payload` for bodies that are not valid JSON.
NOT_JSON = object()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_payload(payload: bytes | str) -> Any:
    """Decode ``payload`` as strict JSON, returning :data:`NOT_JSON` otherwise.

    Besides syntax errors this covers invalid UTF-8, ``NaN``/``Infinity``
    literals, integers beyond the interpreter's digit limit and nesting too
    deep to parse.
    """

    try:
        if isinstance(payload, (bytes, bytearray)):
            payload = bytes(payload).decode("utf-8")
        return json.loads(payload, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return NOT_JSON


def find_listing_array(document: Any) -> List[Any] | None:
    """Locate the list of listing objects inside ``document``."""

    if isinstance(document, list):
        return document
    if not isinstance(document, dict):
        return None

    for key in ARRAY_KEYS:
        value = document.get(key)
        if isinstance(value, list):
            return value

    for key in sorted(document):
        value = document[key]
        if isinstance(value, list):
            return value
    return None


def extract_entries(payload: bytes | str, host: str, category: str) -> List[TrendingEntry]:
    """Return the entries found in ``payload`` for ``category`` on ``host``."""

    document = parse_payload(payload)
    if document is NOT_JSON:
        return []
    items = find_listing_array(document)
    if not items:
        return []

    entries: List[TrendingEntry] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        entry = TrendingEntry(
            title=_pick_title(item),
            image=_pick_image(item),
            link=_pick_link(item, host, category),
        )
        if entry.is_empty():
            continue
        entries.append(entry)
    return entries


def _subject(item: Mapping[str, Any]) -> Mapping[str, Any]:
    subject = item.get("subject")
    return subject if isinstance(subject, dict) else {}


def _first_string(mapping: Mapping[str, Any], keys: Sequence[str]) -> str:
    for key in keys:
        value = mapping.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _pick_title(item: Mapping[str, Any]) -> str:
    return _first_string(item, TITLE_KEYS) or _first_string(_subject(item), SUBJECT_TITLE_KEYS)


def _pick_image(item: Mapping[str, Any]) -> str:
    return _first_string(item, IMAGE_KEYS) or _first_string(_subject(item), IMAGE_KEYS)


def _is_absolute(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def _url_link(value: str, host: str) -> str:
    if _is_absolute(value):
        return value
    if value.startswith("/"):
        return f"https://{host}{value}"
    return f"https://{host}/{value}"


def _id_value(value: Any) -> str:
    # bool is an int subclass; a boolean id is never meaningful
    if isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return ""


def _id_link(value: str, host: str, category: str) -> str:
    if _is_absolute(value):
        return value
    if value.startswith("/"):
        return f"https://{host}{value}"
    return f"https://{host}/{category}/{value}"


def _pick_link(item: Mapping[str, Any], host: str, category: str) -> str:
    subject = _subject(item)
    for mapping in (item, subject):
        url = mapping.get("url")
        if isinstance(url, str) and url:
            return _url_link(url, host)
    for mapping in (item, subject):
        identifier = _id_value(mapping.get("id"))
        if identifier:
            return _id_link(identifier, host, category)
    return ""
