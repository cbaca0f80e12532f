"""FastAPI application exposing the release synchronization trigger.

GET requests come from the scheduler and are recorded in the run log. POST
requests are manual runs that may target one mapping or be dry runs; they
are not recorded.
"""

import secrets
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import Body, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gitspot_sync.configuration.env import Settings
from gitspot_sync.synchronize.driver import SyncServices, build_services, run_release_sync_workflow
from gitspot_sync.utils.constants import TRUSTED_SCHEDULER_HEADER

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

SYNC_RELEASES_PATH = "/api/gitspot/sync-releases"
SYNC_COMPLETED_MESSAGE = "GitSpot release sync completed"
SYNC_FAILED_MESSAGE = "Failed to sync GitSpot releases"


class SyncReleasesRequest(BaseModel):
    """Body of a manual synchronization request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    mapping_id: int | None = None
    dry_run: bool = False


def _has_valid_bearer(request: Request, cron_secret: str) -> bool:
    authorization = request.headers.get("authorization", "")
    return secrets.compare_digest(authorization.encode(), f"Bearer {cron_secret}".encode())


def is_scheduler_authorized(request: Request, cron_secret: str | None) -> bool:
    """A scheduled call is authorized without a secret, from the trusted scheduler, or with the bearer secret."""
    if not cron_secret:
        return True
    if request.headers.get(TRUSTED_SCHEDULER_HEADER) == "1":
        return True
    return _has_valid_bearer(request, cron_secret)


def is_manual_authorized(request: Request, cron_secret: str | None) -> bool:
    """A manual call is authorized without a secret or with the bearer secret."""
    if not cron_secret:
        return True
    return _has_valid_bearer(request, cron_secret)


def get_services(request: Request) -> SyncServices:
    return request.app.state.services


def _unauthorized() -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": "Unauthorized"})


async def _run_sync(services: SyncServices, mapping_id: int | None, dry_run: bool, record: bool) -> JSONResponse:
    try:
        summary, run_id = await run_release_sync_workflow(services, mapping_id=mapping_id, dry_run=dry_run, record=record)
    except Exception as exc:
        logger.exception("Release sync error", mapping_id=mapping_id, dry_run=dry_run)
        return JSONResponse(status_code=500, content={"error": str(exc) or SYNC_FAILED_MESSAGE})
    content: dict[str, Any] = {"message": SYNC_COMPLETED_MESSAGE, "cronLogId": run_id, "results": summary.to_response()}
    return JSONResponse(status_code=200, content=content)


def create_app(settings: Settings | None = None, services: SyncServices | None = None) -> FastAPI:
    """Create the application.

    When ``services`` is not given they are built from ``settings`` (or the
    environment) at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if services is not None:
            app.state.services = services
            yield
            return
        built_services = await build_services(settings or Settings())
        app.state.services = built_services
        try:
            yield
        finally:
            await built_services.close()

    app = FastAPI(title="GitSpot Sync", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    @app.get(SYNC_RELEASES_PATH)
    async def scheduled_sync_releases(request: Request, sync_services: SyncServices = Depends(get_services)) -> JSONResponse:
        if not is_scheduler_authorized(request, sync_services.config.cron_secret):
            logger.error("Unauthorized scheduled sync request: missing or invalid CRON_SECRET")
            return _unauthorized()
        return await _run_sync(sync_services, mapping_id=None, dry_run=False, record=True)

    @app.post(SYNC_RELEASES_PATH)
    async def manual_sync_releases(
        request: Request,
        payload: SyncReleasesRequest | None = Body(default=None),
        sync_services: SyncServices = Depends(get_services),
    ) -> JSONResponse:
        if not is_manual_authorized(request, sync_services.config.cron_secret):
            logger.error("Unauthorized manual sync request")
            return _unauthorized()
        payload = payload or SyncReleasesRequest()
        return await _run_sync(sync_services, mapping_id=payload.mapping_id, dry_run=payload.dry_run, record=False)

    return app
