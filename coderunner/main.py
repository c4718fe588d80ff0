"""FastAPI app exposing the Judge0 submission client."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from coderunner.core.config import get_settings
from coderunner.features.judge0.endpoints import router as judge0_router

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=_settings.app_name)
_START_TIME = datetime.now(timezone.utc)


# ------------------------
# CORS Setup
# ------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------
# Custom Middlewares
# ------------------------
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    incoming = request.headers.get("X-Request-Id") or request.headers.get("X-Request-ID")
    req_id = incoming or str(uuid.uuid4())
    request.state.request_id = req_id
    logger = logging.getLogger("request")
    logger.info("request.start", extra={"request_id": req_id, "path": request.url.path, "method": request.method})
    response = await call_next(request)
    response.headers["X-Request-Id"] = req_id
    logger.info("request.end", extra={"request_id": req_id, "path": request.url.path, "status_code": response.status_code})
    return response


@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    t0 = perf_counter()
    resp = await call_next(request)
    dt = int((perf_counter() - t0) * 1000)
    logging.getLogger("timing").info("%s %s %dms %s", request.method, request.url.path, dt, resp.status_code)
    return resp


# ------------------------
# Routers
# ------------------------
app.include_router(judge0_router)


# ------------------------
# Meta endpoints
# ------------------------
@app.get("/", tags=["meta"], summary="API Root")
async def root():
    return {
        "name": _settings.app_name,
        "status": "ok",
        "docs": "/docs",
        "health": "/healthz",
    }


@app.get("/healthz", tags=["meta"], summary="Liveness probe")
async def healthz() -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "status": "ok",
        "uptime_seconds": round((now - _START_TIME).total_seconds(), 1),
        "judge0_configured": bool(_settings.judge0_api_url),
        "timestamp": now.isoformat(),
    }
