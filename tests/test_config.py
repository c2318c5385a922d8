from pathlib import Path

import pytest

pytest.importorskip("pydantic")

from trendinghistory.config import (
    DEFAULT_CATEGORIES,
    TrendingConfig,
    parse_types,
    validate_types,
)
from trendinghistory.errors import ConfigError


def test_defaults() -> None:
    config = TrendingConfig()

    assert config.instances_file == Path("_config") / "instance.txt"
    assert config.output_root == Path(".")
    assert config.types == ["book", "movie", "tv", "music", "game", "podcast", "collection"]
    assert config.http_timeout == 20.0
    assert config.user_agent == "neodb-trending-history-bot"


def test_round_trip(tmp_path: Path) -> None:
    """Configuration written with dump can be loaded back."""
    config_path = tmp_path / "trending.json"
    config = TrendingConfig(output_root=tmp_path / "out", types=["book", "tv"], http_timeout=5)
    config.dump(config_path)

    loaded = TrendingConfig.from_file(config_path)
    assert loaded.output_root == tmp_path / "out"
    assert loaded.types == ["book", "tv"]
    assert loaded.http_timeout == 5.0


def test_from_file_reports_invalid_json(tmp_path: Path) -> None:
    """Broken JSON in the config file raises ConfigError."""
    config_path = tmp_path / "trending.json"
    config_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError):
        TrendingConfig.from_file(config_path)


def test_from_file_reports_missing_file(tmp_path: Path) -> None:
    """A missing config file raises ConfigError."""
    with pytest.raises(ConfigError):
        TrendingConfig.from_file(tmp_path / "nope.json")


def test_from_file_reports_invalid_values(tmp_path: Path) -> None:
    """Out of range values in the config file raise ConfigError."""
    config_path = tmp_path / "trending.json"
    config_path.write_text('{"http_timeout": -1}', encoding="utf-8")

    with pytest.raises(ConfigError):
        TrendingConfig.from_file(config_path)


def test_from_env_overlays_variables(tmp_path: Path) -> None:
    """Environment variables override the matching fields."""
    env = {
        "TRENDING_OUTPUT_ROOT": str(tmp_path),
        "TRENDING_TYPES": "book, game ,",
        "TRENDING_HTTP_TIMEOUT": "7.5",
        "TRENDING_USER_AGENT": "archiver/1.0",
        "UNRELATED": "ignored",
    }

    config = TrendingConfig.from_env(env)

    assert config.output_root == tmp_path
    assert config.types == ["book", "game"]
    assert config.http_timeout == 7.5
    assert config.user_agent == "archiver/1.0"
    assert config.instances_file == Path("_config") / "instance.txt"


def test_from_env_keeps_base_values() -> None:
    """Fields without a variable keep the base configuration."""
    base = TrendingConfig(types=["music"])

    config = TrendingConfig.from_env({}, base=base)

    assert config.types == ["music"]


def test_from_env_rejects_bad_timeout() -> None:
    """A non-numeric timeout variable raises ConfigError."""
    with pytest.raises(ConfigError):
        TrendingConfig.from_env({"TRENDING_HTTP_TIMEOUT": "soon"})


def test_empty_types_rejected() -> None:
    """At least one category must remain after trimming."""
    with pytest.raises(ValueError):
        TrendingConfig(types=[" ", ""])


def test_parse_types() -> None:
    assert parse_types("book,movie, tv ,,") == ["book", "movie", "tv"]
    assert parse_types(["game", " "]) == ["game"]


def test_category_table_order_and_labels() -> None:
    """README labels follow the fixed table order."""
    assert [spec.label for spec in DEFAULT_CATEGORIES] == [
        "books",
        "movies",
        "tv",
        "music",
        "games",
        "podcasts",
        "collections",
    ]


@pytest.mark.parametrize("name", ["../x", "a/b", "Book", "tv shows"])
def test_unsafe_type_names_rejected(name: str) -> None:
    """Only lowercase letters, digits, dashes and underscores are accepted."""
    with pytest.raises(ConfigError):
        validate_types(["book", name])
    with pytest.raises(ValueError):
        TrendingConfig(types=["book", name])


def test_env_with_unsafe_types_is_a_config_error() -> None:
    with pytest.raises(ConfigError):
        TrendingConfig.from_env({"TRENDING_TYPES": "book,../etc"})
