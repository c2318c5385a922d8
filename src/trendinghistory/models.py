"""Domain models used across the application."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

OutcomeStatus = Literal["OK", "WARN", "ERR"]


class RunTimestamp(BaseModel):
    """A single UTC instant shared by every artefact written for one host pass."""

    model_config = ConfigDict(frozen=True)

    instant: datetime

    @classmethod
    def capture(cls, now: datetime | None = None) -> "RunTimestamp":
        moment = now if now is not None else datetime.now(UTC)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        return cls(instant=moment.astimezone(UTC))

    @property
    def value(self) -> str:
        """Sortable RFC 3339 text, e.g. ``2024-05-01T06:07:08.123456Z``."""

        return self.instant.strftime("%Y-%m-%dT%H:%M:%S.%fZ")

    @property
    def file_token(self) -> str:
        """``value`` with colons replaced so it can be used in filenames."""

        return self.value.replace(":", "-")

    @property
    def time_folder(self) -> str:
        return self.file_token.split("T", 1)[1]

    @property
    def year(self) -> str:
        return f"{self.instant.year:04d}"

    @property
    def month(self) -> str:
        return f"{self.instant.month:02d}"

    @property
    def day(self) -> str:
        return f"{self.instant.day:02d}"


class RawPayload(BaseModel):
    """Unparsed response body for one (host, category) fetch."""

    model_config = ConfigDict(frozen=True)

    host: str
    category: str
    data: bytes
    truncated: bool = False
    status_code: int = 200


class TrendingEntry(BaseModel):
    """Normalised view of one trending item, used only for README rendering."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    image: str = ""
    link: str = ""

    def is_empty(self) -> bool:
        return not (self.title or self.image or self.link)


class ItemOutcome(BaseModel):
    """Result of one operation performed during a run."""

    host: str
    category: Optional[str] = None
    operation: Literal["fetch", "snapshot", "summary", "readme"]
    status: OutcomeStatus
    reason: str = ""
    path: Optional[str] = None


class HostAccumulator(BaseModel):
    """Per-host results collected while iterating over the categories."""

    host: str
    slug: str
    timestamp: RunTimestamp
    payloads: Dict[str, RawPayload] = Field(default_factory=dict)
    entries: Dict[str, List[TrendingEntry]] = Field(default_factory=dict)


class RunReport(BaseModel):
    """Summary of a full run across the configured hosts."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    hosts: List[str] = Field(default_factory=list)
    outcomes: List[ItemOutcome] = Field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def ok_count(self) -> int:
        return self.count("OK")

    @property
    def warn_count(self) -> int:
        return self.count("WARN")

    @property
    def error_count(self) -> int:
        return self.count("ERR")


__all__ = [
    "HostAccumulator",
    "ItemOutcome",
    "OutcomeStatus",
    "RawPayload",
    "RunReport",
    "RunTimestamp",
    "TrendingEntry",
]
