"""
relay/main.py -- FastAPI relay that the dashboard calls on the hardened host.

Run with:  uvicorn relay.main:app --host 0.0.0.0 --port 3001

Routes:
  GET  /inventory       -- serve the inventory JSON written by the script
  POST /hardening/run   -- run the hardening script in audit or enforce mode

Every response uses the relay envelope, success and failure alike:
  {"status": "ok", ...}  or  {"status": "error", "message": "..."}
so the dashboard can parse one shape regardless of status code.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Literal

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.config import get_settings
from relay.runner import ScriptError, build_command, run_script

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("flapper.relay")


class RunRequest(BaseModel):
    mode: Literal["audit", "enforce"]


def _error(status_code: int, message: str, **extra: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message, **extra})


app = FastAPI(title="Flapper Hardening Relay", version="1.2.0", docs_url=None, redoc_url=None)

# The dashboard may be served from any LAN address, so the relay accepts all
# origins. It should only ever listen on a trusted interface.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(422, "Request body must be {\"mode\": \"audit\"} or {\"mode\": \"enforce\"}.")


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# GET /inventory
# ---------------------------------------------------------------------------


@app.get("/inventory")
def get_inventory() -> JSONResponse:
    """Return the inventory file parsed as JSON."""
    path = get_settings().inventory_path
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return _error(404, "Inventory file not found")
    except OSError as e:
        logger.warning("Could not read inventory file %s: %s", path, e)
        return _error(500, "Failed to read inventory file")

    try:
        parsed = json.loads(raw)
    except ValueError:
        return _error(500, "Inventory file is not valid JSON")

    return JSONResponse({"status": "ok", "inventory": parsed})


# ---------------------------------------------------------------------------
# POST /hardening/run
# ---------------------------------------------------------------------------


@app.post("/hardening/run")
def run_hardening(body: RunRequest) -> JSONResponse:
    """Run the hardening script once and report its output.

    Sync handler on purpose: FastAPI runs it in the threadpool, so a long
    script run does not block the event loop.
    """
    settings = get_settings()
    script = settings.hardening_script
    if not script.is_file():
        logger.error("Hardening script missing: %s", script)
        return _error(500, "Hardening script not found")

    command = build_command(settings.powershell_executable, script, body.mode)
    try:
        result = run_script(command, timeout=settings.script_timeout)
    except ScriptError as e:
        return _error(500, e.message, stdout=e.stdout, stderr=e.stderr)

    return JSONResponse(
        {
            "status": "ok",
            "mode": body.mode,
            "stdout": result.stdout,
            "stderr": result.stderr,
        }
    )
