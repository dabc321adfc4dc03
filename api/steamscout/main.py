"""FastAPI application entrypoint, error rendering, and health reporting."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from steamscout.api.router import api_router
from steamscout.core.config import settings
from steamscout.core.errors import ScoutError
from steamscout.ingestion.observability import fetch_monitor
from steamscout.utils.redaction import redact_secrets

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
# httpx logs full request URLs, query keys included.
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger("steamscout.api")

REPEATED_FAILURE_THRESHOLD = 3

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_prefix)


@app.exception_handler(ScoutError)
async def _scout_error_handler(request: Request, exc: ScoutError) -> JSONResponse:
    """Render domain errors as ``{"ok": false, "error": {...}}``."""
    payload = exc.to_payload()
    payload["message"] = redact_secrets(payload["message"])
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s (%s)", request.method, request.url.path, payload["message"], exc.kind)
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": payload})


def _summarize_fetches(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Condense fetch monitor state into health-friendly telemetry.

    Implementation notes:
    - A last error or repeated failures on any operation degrade the source.
    - Per-operation errors are kept to aid troubleshooting.
    """
    issues: list[dict[str, Any]] = []
    sources: dict[str, Any] = {}
    for source, payload in snapshot.items():
        operations = payload.get("operations", {})
        failure_total = 0
        repeated_failure: dict[str, Any] | None = None
        last_error: str | None = None
        for operation, metrics in operations.items():
            operation_error = metrics.get("last_error")
            if operation_error:
                last_error = operation_error
                issues.append(
                    {
                        "source": source,
                        "operation": operation,
                        "reason": "last_error",
                        "error": operation_error,
                    }
                )
            failed_count = int(metrics.get("failed") or 0)
            failure_total += failed_count
            if failed_count >= REPEATED_FAILURE_THRESHOLD:
                repeated_failure = {"operation": operation, "failed": failed_count}
        if repeated_failure:
            issues.append(
                {
                    "source": source,
                    "reason": "repeated_failures",
                    "operation": repeated_failure["operation"],
                    "failed": repeated_failure["failed"],
                }
            )
        sources[source] = {
            "state": "degraded" if repeated_failure or last_error else "ok",
            "operations": operations,
            "failure_total": failure_total,
            "last_error": last_error,
            "repeated_failure": repeated_failure,
        }
    return {"sources": sources, "issues": issues}


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health() -> dict[str, Any]:
    """Return health status with upstream fetch telemetry."""
    snapshot = await fetch_monitor.snapshot()
    telemetry = _summarize_fetches(snapshot)
    status = "ok" if not telemetry["issues"] else "degraded"
    return {"status": status, "fetches": telemetry}
