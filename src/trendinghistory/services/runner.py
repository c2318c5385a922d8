"""Drive fetch, snapshot, extraction and README rendering across all hosts."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Iterable, Sequence

from trendinghistory.config import DEFAULT_CATEGORIES, CategorySpec, TrendingConfig
from trendinghistory.errors import FetchError, HTTPStatusError, PersistenceError
from trendinghistory.models import (
    HostAccumulator,
    ItemOutcome,
    OutcomeStatus,
    RunReport,
    RunTimestamp,
)
from trendinghistory.services.extractor import extract_entries
from trendinghistory.services.fetcher import TrendingFetcher
from trendinghistory.services.hosts import dashify_host, ensure_unique_slugs, read_instances
from trendinghistory.services.readme import append_readme
from trendinghistory.services.snapshots import write_category_snapshot, write_summary

__all__ = ["TrendingRunner", "run"]

logger = logging.getLogger(__name__)

_LEVELS = {"OK": logging.INFO, "WARN": logging.WARNING, "ERR": logging.ERROR}
_PREFIXES = {"OK": "OK  ", "WARN": "WARN ", "ERR": "ERR "}

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TrendingRunner:
    """Run one pass over the (host x category) matrix.

    Failures are contained per (host, category) pair or per written artefact;
    only configuration problems raised by :meth:`run` escape.
    """

    def __init__(
        self,
        config: TrendingConfig | None = None,
        *,
        fetcher: TrendingFetcher | None = None,
        log: logging.Logger | None = None,
        clock: Clock | None = None,
        categories: Sequence[CategorySpec] = DEFAULT_CATEGORIES,
    ) -> None:
        self.config = config or TrendingConfig()
        self.fetcher = fetcher or TrendingFetcher(
            timeout=self.config.http_timeout,
            user_agent=self.config.user_agent,
        )
        self.log = log or logger
        self.clock = clock or _utcnow
        self.categories = tuple(categories)

    @property
    def output_root(self) -> Path:
        return self.config.output_root

    def run(self) -> RunReport:
        """Read the configured instance list and process every host in it."""

        instances_file = self.config.instances_file
        try:
            hosts = read_instances(instances_file)
        except FileNotFoundError:
            self.log.warning("WARN instance list %s not found; nothing to do", instances_file)
            return self._empty_report()

        if not hosts:
            self.log.info("no instances configured in %s", instances_file)
            return self._empty_report()
        return self.run_hosts(hosts)

    def run_hosts(self, hosts: Iterable[str]) -> RunReport:
        """Process already validated ``hosts`` for the configured categories."""

        host_list = list(hosts)
        ensure_unique_slugs(host_list)
        categories = list(self.config.types)

        report = RunReport(started_at=self.clock(), hosts=host_list)
        for host in host_list:
            accumulator = self._collect_host(host, categories, report)
            self._finish_host(accumulator, report)
        report.finished_at = self.clock()
        return report

    def _empty_report(self) -> RunReport:
        now = self.clock()
        return RunReport(started_at=now, finished_at=now)

    def _collect_host(
        self, host: str, categories: Sequence[str], report: RunReport
    ) -> HostAccumulator:
        accumulator = HostAccumulator(
            host=host,
            slug=dashify_host(host),
            timestamp=RunTimestamp.capture(self.clock()),
        )
        for category in categories:
            self._collect_category(accumulator, category, report)
        return accumulator

    def _collect_category(
        self, accumulator: HostAccumulator, category: str, report: RunReport
    ) -> None:
        host = accumulator.host
        try:
            payload = self.fetcher.fetch(host, category)
        except HTTPStatusError as exc:
            reason = f"non-200 {host} {category}: {exc}"
            self._record(report, "WARN", "fetch", host, category, reason)
            return
        except FetchError as exc:
            self._record(report, "ERR", "fetch", host, category, f"{host} {category}: {exc}")
            return

        if payload.truncated:
            self._record(
                report,
                "WARN",
                "fetch",
                host,
                category,
                f"body for {host} {category} truncated at {len(payload.data)} bytes",
            )

        try:
            path = write_category_snapshot(
                self.output_root, accumulator.slug, accumulator.timestamp, payload
            )
        except PersistenceError as exc:
            self._record(report, "ERR", "snapshot", host, category, str(exc))
        else:
            self._record(report, "OK", "snapshot", host, category, f"saved {path}", path=path)

        accumulator.payloads[category] = payload
        entries = extract_entries(payload.data, host, category)
        if entries:
            accumulator.entries[category] = entries
        else:
            self.log.debug("no entries extracted for %s %s", host, category)

    def _finish_host(self, accumulator: HostAccumulator, report: RunReport) -> None:
        host = accumulator.host
        if accumulator.payloads:
            try:
                path = write_summary(
                    self.output_root,
                    accumulator.slug,
                    host,
                    accumulator.timestamp,
                    accumulator.payloads,
                )
            except PersistenceError as exc:
                self._record(report, "ERR", "summary", host, None, f"summary for {host}: {exc}")
            else:
                self._record(report, "OK", "summary", host, None, f"saved {path}", path=path)

        if accumulator.entries:
            try:
                path = append_readme(
                    self.output_root,
                    accumulator.slug,
                    host,
                    accumulator.timestamp,
                    accumulator.entries,
                    self.categories,
                )
            except PersistenceError as exc:
                self._record(report, "ERR", "readme", host, None, f"README for {host}: {exc}")
            else:
                self._record(report, "OK", "readme", host, None, f"updated {path}", path=path)

    def _record(
        self,
        report: RunReport,
        status: OutcomeStatus,
        operation: str,
        host: str,
        category: str | None,
        reason: str,
        *,
        path: Path | None = None,
    ) -> None:
        outcome = ItemOutcome(
            host=host,
            category=category,
            operation=operation,
            status=status,
            reason=reason,
            path=str(path) if path is not None else None,
        )
        report.outcomes.append(outcome)
        self.log.log(
            _LEVELS[status],
            "%s%s",
            _PREFIXES[status],
            reason,
            extra={"host": host, "category": category, "operation": operation},
        )


def run(config: TrendingConfig | None = None, *, log: logging.Logger | None = None) -> RunReport:
    """Convenience wrapper: build a :class:`TrendingRunner` and run it."""

    return TrendingRunner(config, log=log).run()
