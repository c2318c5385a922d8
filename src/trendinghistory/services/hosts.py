"""Host validation and filesystem slugs for catalog instances."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List

from trendinghistory.errors import ConfigError, InvalidHost

__all__ = ["dashify_host", "ensure_unique_slugs", "read_instances", "sanitize_host"]

logger = logging.getLogger(__name__)

_HOST_PATTERN = re.compile(r"[a-z0-9.-]+(:[0-9]+)?")
_SLUG_DISALLOWED = re.compile(r"[^a-z0-9-]")
_DASH_RUNS = re.compile(r"-{2,}")


def sanitize_host(raw: str) -> str:
    """Return ``raw`` as a lowercase host, or raise :class:`InvalidHost`.

    Only a bare domain with an optional ``:port`` is accepted. Anything that
    looks like a URL (a ``/``, a space or the substring ``http``) is refused so
    a scheme or path pasted into the instance list is caught early.
    """

    host = raw.strip().lower()
    if not host:
        raise InvalidHost("empty host")
    if "/" in host or " " in host or "http" in host:
        raise InvalidHost(f"invalid host (use domain only): {raw!r}")
    if not _HOST_PATTERN.fullmatch(host):
        raise InvalidHost(f"invalid characters in host: {raw!r}")
    return host


def dashify_host(host: str) -> str:
    """Turn ``host`` into a directory name made of ``[a-z0-9-]`` only."""

    slug = _SLUG_DISALLOWED.sub("-", host.lower())
    slug = _DASH_RUNS.sub("-", slug)
    return slug.strip("-")


def ensure_unique_slugs(hosts: Iterable[str]) -> Dict[str, str]:
    """Return a slug -> host mapping, raising if two hosts share a slug."""

    slugs: Dict[str, str] = {}
    for host in hosts:
        slug = dashify_host(host)
        other = slugs.get(slug)
        if other is not None and other != host:
            raise ConfigError(f"Instances {other!r} and {host!r} both map to directory {slug!r}")
        slugs[slug] = host
    return slugs


def read_instances(path: Path | str) -> List[str]:
    """Read the instance list, one host per line.

    Blank lines and ``#`` comments are skipped. Every other line must pass
    :func:`~trendinghistory.services.hosts.sanitize_host`; the first bad line
    raises :class:`~trendinghistory.errors.InvalidHost`. Hosts whose slugs
    collide raise :class:`~trendinghistory.errors.ConfigError` so data from
    two instances never ends up in the same directory. A missing file
    propagates as :class:`FileNotFoundError`; other read failures become
    :class:`~trendinghistory.errors.ConfigError`.
    """

    list_path = Path(path)
    try:
        text = list_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Could not read instance list {list_path}: {exc}") from exc

    hosts: List[str] = []
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            host = sanitize_host(line)
        except ConfigError as exc:
            raise type(exc)(f"{exc} ({list_path}:{lineno})") from exc
        if host in hosts:
            logger.debug("Skipping duplicate instance %s on line %d", host, lineno)
            continue
        hosts.append(host)

    ensure_unique_slugs(hosts)
    return hosts
