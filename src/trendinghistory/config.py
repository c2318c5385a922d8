"""Configuration models and helpers for the trending history fetcher."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from trendinghistory.errors import ConfigError

__all__ = [
    "CategorySpec",
    "DEFAULT_CATEGORIES",
    "DEFAULT_INSTANCES_PATH",
    "DEFAULT_USER_AGENT",
    "ENV_PREFIX",
    "TrendingConfig",
    "parse_types",
    "validate_types",
]


DEFAULT_INSTANCES_PATH = Path("_config") / "instance.txt"
DEFAULT_USER_AGENT = "neodb-trending-history-bot"
DEFAULT_HTTP_TIMEOUT = 20.0
ENV_PREFIX = "TRENDING_"

#: Category names end up in request paths and filenames.
TYPE_PATTERN = re.compile(r"[a-z0-9_-]+")


@dataclass(frozen=True)
class CategorySpec:
    """A trending category and the label used for its README row."""

    name: str
    label: str


DEFAULT_CATEGORIES: Tuple[CategorySpec, ...] = (
    CategorySpec("book", "books"),
    CategorySpec("movie", "movies"),
    CategorySpec("tv", "tv"),
    CategorySpec("music", "music"),
    CategorySpec("game", "games"),
    CategorySpec("podcast", "podcasts"),
    CategorySpec("collection", "collections"),
)


def parse_types(value: str | Iterable[str]) -> List[str]:
    """Split a comma-separated category list, dropping blanks."""

    parts = value.split(",") if isinstance(value, str) else list(value)
    return [part.strip() for part in parts if part and part.strip()]


def validate_types(value: str | Iterable[str]) -> List[str]:
    """Parse ``value`` and reject empty lists or names unsafe for paths."""

    types = parse_types(value)
    if not types:
        raise ConfigError("at least one trending type is required")
    for name in types:
        if not TYPE_PATTERN.fullmatch(name):
            raise ConfigError(
                f"invalid trending type {name!r}: use lowercase letters, digits, '-' or '_'"
            )
    return types


class TrendingConfig(BaseModel):
    """Runtime parameters for a fetch run."""

    instances_file: Path = Field(
        default=DEFAULT_INSTANCES_PATH,
        description="Text file listing one instance host per line",
    )
    output_root: Path = Field(default=Path("."), description="Directory receiving snapshots")
    types: List[str] = Field(
        default_factory=lambda: [spec.name for spec in DEFAULT_CATEGORIES],
        description="Trending categories to query, in order",
    )
    http_timeout: float = Field(
        default=DEFAULT_HTTP_TIMEOUT,
        gt=0,
        description="Overall timeout in seconds for each request",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent with each request; empty to omit",
    )

    @field_validator("types", mode="before")
    @classmethod
    def _split_types(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_types(value)
        return value

    @field_validator("types")
    @classmethod
    def _require_types(cls, value: List[str]) -> List[str]:
        return validate_types(value)

    @classmethod
    def from_file(cls, path: Path | str) -> "TrendingConfig":
        """Load configuration data from a JSON file."""

        config_path = Path(path)
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigError(f"Configuration file not found: {config_path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in configuration file: {config_path}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Configuration file is invalid: {config_path}\n{exc}") from exc

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        base: "TrendingConfig | None" = None,
    ) -> "TrendingConfig":
        """Overlay ``TRENDING_*`` environment variables on top of ``base``."""

        env = os.environ if environ is None else environ
        data: Dict[str, object] = (base or cls()).model_dump()
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in env and env[key].strip():
                data[name] = env[key].strip()

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid {ENV_PREFIX}* environment configuration\n{exc}") from exc

    def dump(self, path: Path | str) -> None:
        """Persist the configuration to disk as JSON."""

        config_path = Path(path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")

