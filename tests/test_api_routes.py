"""Tests for the HTTP routes in :mod:`trendinghistory.api.routes`."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from trendinghistory.api import routes
from trendinghistory.api.app import create_app
from trendinghistory.config import TrendingConfig
from trendinghistory.models import ItemOutcome, RunReport


def _config(tmp_path: Path) -> TrendingConfig:
    return TrendingConfig(instances_file=tmp_path / "instance.txt", output_root=tmp_path / "out")


def test_index_page_is_served() -> None:
    """The root path serves the HTML landing page."""
    client = TestClient(create_app())

    response = client.get("/")

    assert response.status_code == 200
    assert "NeoDB Trending History" in response.text


def test_list_instances_returns_hosts_and_slugs(tmp_path: Path) -> None:
    """Configured hosts are listed together with their directory slugs."""
    (tmp_path / "instance.txt").write_text("NeoDB.Social\nlocalhost:8000\n", encoding="utf-8")
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.get("/api/instances")

    assert response.status_code == 200
    assert response.json()["instances"] == [
        {"host": "neodb.social", "slug": "neodb-social"},
        {"host": "localhost:8000", "slug": "localhost-8000"},
    ]


def test_list_instances_without_list_file_is_empty(tmp_path: Path) -> None:
    """A missing instance list yields an empty listing rather than an error."""
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.get("/api/instances")

    assert response.status_code == 200
    assert response.json() == {"instances": []}


def test_list_instances_reports_malformed_list(tmp_path: Path) -> None:
    """A malformed instance list surfaces as a client error."""
    (tmp_path / "instance.txt").write_text("http://bad\n", encoding="utf-8")
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.get("/api/instances")

    assert response.status_code == 500


def test_list_categories() -> None:
    """The fixed category table is exposed in order."""
    client = TestClient(create_app())

    response = client.get("/api/categories")

    assert response.status_code == 200
    names = [entry["name"] for entry in response.json()["categories"]]
    assert names == ["book", "movie", "tv", "music", "game", "podcast", "collection"]


def test_read_readme_returns_markdown(tmp_path: Path) -> None:
    """A stored daily README is returned as Markdown."""
    day = tmp_path / "out" / "neodb-social" / "2024" / "05" / "01"
    day.mkdir(parents=True)
    (day / "README.md").write_text("# NeoDB Trending History for x\n", encoding="utf-8")
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.get("/api/instances/neodb-social/readme/2024/5/1")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/markdown")
    assert response.text.startswith("# NeoDB Trending History")


def test_read_readme_missing_day_is_404(tmp_path: Path) -> None:
    """Days without a README return a 404."""
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.get("/api/instances/neodb-social/readme/2024/05/02")

    assert response.status_code == 404


def test_read_readme_rejects_bad_slug(tmp_path: Path) -> None:
    """Slugs outside the tokenizer alphabet are refused."""
    client = TestClient(create_app())

    response = client.get("/api/instances/Not_A_Slug/readme/2024/05/02")

    assert response.status_code == 400


def test_trigger_run_rejects_bad_host(tmp_path: Path) -> None:
    """Hosts that fail sanitizing are reported as a 400."""
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.post("/api/runs", json={"hosts": ["https://neodb.social"]})

    assert response.status_code == 400


def test_trigger_run_requires_a_host_when_list_is_empty(tmp_path: Path) -> None:
    """An explicit empty host list is a validation error."""
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.post("/api/runs", json={"hosts": []})

    assert response.status_code == 400


def test_trigger_run_rejects_unsafe_types(tmp_path: Path) -> None:
    """Category names that are not path-safe get a 400."""
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.post("/api/runs", json={"hosts": ["neodb.social"], "types": ["../x"]})

    assert response.status_code == 400
    assert "invalid trending type" in response.json()["detail"]


def test_trigger_run_passes_hosts_and_types_to_runner(tmp_path: Path) -> None:
    """Sanitized hosts and requested types reach the runner."""
    client = TestClient(create_app())
    captured: dict[str, object] = {}
    report = RunReport(
        started_at=datetime(2024, 5, 1, tzinfo=UTC),
        finished_at=datetime(2024, 5, 1, tzinfo=UTC),
        hosts=["neodb.social"],
        outcomes=[
            ItemOutcome(host="neodb.social", category="book", operation="snapshot", status="OK")
        ],
    )

    async def fake_run_in_threadpool(func, *args, **kwargs):  # type: ignore[override]
        captured["runner"] = func.__self__
        captured["args"] = args
        return report

    with patch(
        "trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)
    ), patch("trendinghistory.api.routes.run_in_threadpool", side_effect=fake_run_in_threadpool):
        response = client.post("/api/runs", json={"hosts": ["NeoDB.Social"], "types": ["book"]})

    assert response.status_code == 200
    assert response.json()["hosts"] == ["neodb.social"]
    assert captured["args"] == (["neodb.social"],)
    assert captured["runner"].config.types == ["book"]


def test_trigger_run_refuses_concurrent_runs(tmp_path: Path) -> None:
    """A second run while one is active is answered with 409."""
    client = TestClient(create_app())

    assert routes._run_lock.acquire(blocking=False)
    try:
        with patch(
            "trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)
        ):
            response = client.post("/api/runs")
    finally:
        routes._run_lock.release()

    assert response.status_code == 409


def test_trigger_run_without_instance_list_returns_empty_report(tmp_path: Path) -> None:
    """Without an instance list the run completes with no outcomes."""
    client = TestClient(create_app())

    with patch("trendinghistory.api.routes.TrendingConfig.from_env", return_value=_config(tmp_path)):
        response = client.post("/api/runs")

    assert response.status_code == 200
    assert response.json()["outcomes"] == []
