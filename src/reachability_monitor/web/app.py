"""
HTTP API of the reachability monitor, built on aiohttp.web.

The application receives its collaborators explicitly (probe, repositories and
a scheduler status provider) through application keys. Request data is
validated against the pydantic schemas before anything else runs.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict

from aiohttp import web
from pydantic import BaseModel, ValidationError

from reachability_monitor.contracts import ReachabilityProbe
from reachability_monitor.domain import SchedulerStatus
from reachability_monitor.repository.application_repository import ApplicationRepository
from reachability_monitor.repository.history_repository import HistoryRepository
from reachability_monitor.web.schemas import (
    ApplicationOut,
    HistoryEntryOut,
    HistoryQuery,
    SchedulerStatusOut,
    ServerCheckRequest,
    ServerCheckResponse,
)

# Module logger
logger = logging.getLogger(__name__)

StatusProvider = Callable[[], SchedulerStatus]
Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

PROBE_KEY = web.AppKey("probe", ReachabilityProbe)
HISTORY_REPOSITORY_KEY = web.AppKey("history_repository", HistoryRepository)
APPLICATION_REPOSITORY_KEY = web.AppKey("application_repository", ApplicationRepository)
STATUS_PROVIDER_KEY = web.AppKey("status_provider", StatusProvider)


def _json_error(status: int, message: str) -> web.Response:
    return web.json_response({"message": message}, status=status)


def _validation_message(error: ValidationError) -> str:
    details = []
    for item in error.errors(include_url=False):
        location = ".".join(str(part) for part in item["loc"])
        details.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(details)


class _BadRequest(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _validate(model: type, data: Any) -> BaseModel:
    try:
        return model.model_validate(data)
    except ValidationError as err:
        raise _BadRequest(_validation_message(err)) from err


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """
    Turns validation failures into 400 responses and unexpected errors into 500s.
    """
    try:
        return await handler(request)
    except _BadRequest as err:
        return _json_error(400, err.message)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception(f"Unhandled error while serving {request.method} {request.path}")
        return _json_error(500, "internal server error")


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def server_check(request: web.Request) -> web.Response:
    """
    Probes a URL from the server and returns the result. Nothing is persisted.
    """
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise _BadRequest("Request body must be valid JSON.")
    if not isinstance(body, dict):
        raise _BadRequest("Request body must be a JSON object.")
    if not str(body.get("url") or "").strip():
        raise _BadRequest("url is required.")

    check_request: ServerCheckRequest = _validate(ServerCheckRequest, body)
    result = await request.app[PROBE_KEY].probe(check_request.to_target())
    return web.json_response(ServerCheckResponse.from_result(result).to_json(exclude_none=True))


async def history(request: web.Request) -> web.Response:
    query: HistoryQuery = _validate(HistoryQuery, dict(request.query))
    entries = await request.app[HISTORY_REPOSITORY_KEY].query(
        application_id=query.application_id,
        endpoint_id=query.endpoint_id,
        limit=query.limit,
    )
    return web.json_response(
        {"history": [HistoryEntryOut.from_entry(entry).to_json() for entry in entries]}
    )


async def history_summary(request: web.Request) -> web.Response:
    status = request.app[STATUS_PROVIDER_KEY]()
    return web.json_response(SchedulerStatusOut.from_status(status).to_json())


async def list_apps(request: web.Request) -> web.Response:
    applications = await request.app[APPLICATION_REPOSITORY_KEY].list_applications()
    return web.json_response(
        {"apps": [ApplicationOut.from_application(a).to_json() for a in applications]}
    )


async def get_app(request: web.Request) -> web.Response:
    raw_id = request.match_info["id"]
    if not raw_id.isdigit() or int(raw_id) < 1:
        raise _BadRequest("Invalid application id.")

    application = await request.app[APPLICATION_REPOSITORY_KEY].get_application(int(raw_id))
    if application is None:
        return _json_error(404, "Application not found.")
    return web.json_response({"app": ApplicationOut.from_application(application).to_json()})


def create_app(
    probe: ReachabilityProbe,
    history_repository: HistoryRepository,
    application_repository: ApplicationRepository,
    status_provider: StatusProvider,
) -> web.Application:
    """
    Builds the aiohttp web application.

    Args:
        probe: The probe used for ad hoc server-side checks.
        history_repository: Source of the probe history.
        application_repository: Source of the applications and endpoints.
        status_provider: Returns the scheduler's last run and interval.

    Returns:
        web.Application: The configured application, ready to be run.
    """
    app = web.Application(middlewares=[error_middleware])
    app[PROBE_KEY] = probe
    app[HISTORY_REPOSITORY_KEY] = history_repository
    app[APPLICATION_REPOSITORY_KEY] = application_repository
    app[STATUS_PROVIDER_KEY] = status_provider

    routes: Dict[str, Any] = {
        "/": health,
        "/health": health,
        "/history": history,
        "/history/summary": history_summary,
        "/apps": list_apps,
        "/apps/{id}": get_app,
    }
    app.add_routes([web.get(path, handler) for path, handler in routes.items()])
    app.add_routes([web.post("/server-check", server_check)])
    return app
