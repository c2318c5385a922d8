"""API routes exposing the trending archive and run trigger."""

from __future__ import annotations

import logging
import re
import threading
from typing import List

from fastapi import APIRouter, Body, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from trendinghistory.blobstore import README_FILENAME, resolve_output_root
from trendinghistory.config import DEFAULT_CATEGORIES, TrendingConfig, validate_types
from trendinghistory.errors import ConfigError
from trendinghistory.models import RunReport
from trendinghistory.services.hosts import dashify_host, read_instances, sanitize_host
from trendinghistory.services.runner import TrendingRunner

logger = logging.getLogger(__name__)

router = APIRouter()

_SLUG_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")

# README appends are not transactional, so only one run may touch the output root at a time.
_run_lock = threading.Lock()


class InstanceEntry(BaseModel):
    host: str
    slug: str


class InstancesResponse(BaseModel):
    instances: List[InstanceEntry] = Field(default_factory=list)


class CategoryEntry(BaseModel):
    name: str
    label: str


class CategoriesResponse(BaseModel):
    categories: List[CategoryEntry] = Field(default_factory=list)


class RunRequest(BaseModel):
    hosts: List[str] | None = None
    types: List[str] | None = None


def _load_config() -> TrendingConfig:
    try:
        return TrendingConfig.from_env()
    except ConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/instances", response_model=InstancesResponse)
async def list_instances() -> InstancesResponse:
    """Return the configured instances and their directory slugs."""

    config = _load_config()
    try:
        hosts = read_instances(config.instances_file)
    except FileNotFoundError:
        logger.warning("Instance list %s not found", config.instances_file)
        hosts = []
    except ConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return InstancesResponse(
        instances=[InstanceEntry(host=host, slug=dashify_host(host)) for host in hosts]
    )


@router.get("/categories", response_model=CategoriesResponse)
async def list_categories() -> CategoriesResponse:
    """Return the trending categories in README row order."""

    return CategoriesResponse(
        categories=[CategoryEntry(name=spec.name, label=spec.label) for spec in DEFAULT_CATEGORIES]
    )


@router.get("/instances/{slug}/readme/{year}/{month}/{day}", response_class=PlainTextResponse)
async def read_readme(slug: str, year: int, month: int, day: int) -> PlainTextResponse:
    """Return the Markdown log for ``slug`` on the given day."""

    if not _SLUG_PATTERN.fullmatch(slug):
        raise HTTPException(status_code=400, detail=f"Invalid instance slug: {slug}")
    if not (1 <= month <= 12 and 1 <= day <= 31 and 1 <= year <= 9999):
        raise HTTPException(status_code=400, detail="Invalid date")

    config = _load_config()
    root = resolve_output_root(config.output_root)
    path = root / slug / f"{year:04d}" / f"{month:02d}" / f"{day:02d}" / README_FILENAME
    if not path.is_file():
        raise HTTPException(
            status_code=404,
            detail=f"No trending history for {slug} on {year:04d}-{month:02d}-{day:02d}",
        )

    return PlainTextResponse(path.read_text(encoding="utf-8"), media_type="text/markdown")


@router.post("/runs", response_model=RunReport)
async def trigger_run(payload: RunRequest | None = Body(default=None)) -> RunReport:
    """Run one fetch pass, either over the instance list or the hosts in the body."""

    request_payload = payload or RunRequest()
    config = _load_config()

    hosts: List[str] | None = None
    if request_payload.hosts is not None:
        try:
            hosts = [sanitize_host(raw) for raw in request_payload.hosts]
        except ConfigError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if not hosts:
            raise HTTPException(status_code=400, detail="Provide at least one instance host.")

    if request_payload.types is not None:
        try:
            types = validate_types(request_payload.types)
        except ConfigError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        config = config.model_copy(update={"types": types})

    if not _run_lock.acquire(blocking=False):
        raise HTTPException(status_code=409, detail="A run is already in progress.")
    try:
        runner = TrendingRunner(config)
        if hosts is None:
            report = await run_in_threadpool(runner.run)
        else:
            report = await run_in_threadpool(runner.run_hosts, hosts)
    except ConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    finally:
        _run_lock.release()

    return report
