"""
web/routes.py -- Jinja2 template routes for the Flapper web UI.

These routes serve server-rendered HTML. They share the DashboardSession on
app.state with the API routes but return HTML instead of JSON. Every state
change is a POST form that redirects (303) back to the page it came from, so
a browser refresh never repeats an apply or a run.

Routes:
  GET  /                               -- Security Hub: stats, attack surface, activity
  GET  /hardening                      -- defense console: run buttons, mitigation cards
  POST /hardening/run                  -- audit/enforce run, redirect /hardening
  POST /hardening/{mitigation_id}/apply -- start apply workflow, redirect /hardening
  GET  /academy                        -- topic library, or one explanation with ?topic=
  GET  /logs                           -- audit trail, newest first
  POST /logs/clear                     -- clear the activity log, redirect /logs
  POST /dry-run                        -- toggle dry-run mode, redirect back
  POST /alert/dismiss                  -- dismiss the alert banner, redirect back
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from core.education import ACADEMY_TOPICS
from core.models import RunMode
from core.session import DashboardSession

logger = logging.getLogger("flapper.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()

_PAGES = {"/", "/hardening", "/academy", "/logs"}


def _session(request: Request) -> DashboardSession:
    return request.app.state.session


def _back(request: Request, default: str = "/") -> RedirectResponse:
    """Redirect to the referring dashboard page, or `default`.

    Only the known page paths are accepted so a crafted Referer can never
    turn this into an open redirect.
    """
    path = urlsplit(request.headers.get("referer", "")).path
    return RedirectResponse(path if path in _PAGES else default, status_code=303)


def _context(request: Request, tab: str, **extra) -> dict:
    session = _session(request)
    return {
        "request": request,
        "tab": tab,
        "summary": session.summary(),
        "alert": session.alerts.current,
        **extra,
    }


# ---------------------------------------------------------------------------
# GET / -- Security Hub
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
async def hub(request: Request) -> HTMLResponse:
    session = _session(request)
    return templates.TemplateResponse(
        request,
        "hub.html",
        _context(
            request,
            "dashboard",
            services=session.inventory.snapshot.services,
            inventory_source=session.inventory.snapshot.source,
            logs=session.log.all(),
        ),
    )


# ---------------------------------------------------------------------------
# Hardening console
# ---------------------------------------------------------------------------


@router.get("/hardening", response_class=HTMLResponse)
async def hardening(request: Request) -> HTMLResponse:
    session = _session(request)
    return templates.TemplateResponse(
        request,
        "hardening.html",
        _context(
            request,
            "hardening",
            mitigations=session.registry.list(),
            current_id=session.controller.current_id,
        ),
    )


@router.post("/hardening/run")
async def hardening_run(request: Request, mode: str = Form(...)) -> RedirectResponse:
    try:
        run_mode = RunMode(mode)
    except ValueError:
        _session(request).alerts.error(f"Unknown run mode: {mode[:20]}")
        return RedirectResponse("/hardening", status_code=303)
    await _session(request).orchestrator.run(run_mode)
    return RedirectResponse("/hardening", status_code=303)


@router.post("/hardening/{mitigation_id}/apply")
async def hardening_apply(request: Request, mitigation_id: str) -> RedirectResponse:
    result = _session(request).controller.submit(mitigation_id)
    logger.debug("Web apply %s -> %s", mitigation_id, result.status.value)
    return RedirectResponse("/hardening", status_code=303)


# ---------------------------------------------------------------------------
# Academy
# ---------------------------------------------------------------------------


@router.get("/academy", response_class=HTMLResponse)
async def academy(request: Request, topic: Optional[str] = None) -> HTMLResponse:
    content = None
    if topic and topic.strip():
        content = await _session(request).explain(topic[:200])
    return templates.TemplateResponse(
        request,
        "academy.html",
        _context(request, "academy", topics=ACADEMY_TOPICS, content=content),
    )


# ---------------------------------------------------------------------------
# Activity logs
# ---------------------------------------------------------------------------


@router.get("/logs", response_class=HTMLResponse)
async def logs(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "logs.html",
        _context(request, "logs", logs=_session(request).log.newest_first()),
    )


@router.post("/logs/clear")
async def logs_clear(request: Request) -> RedirectResponse:
    _session(request).log.clear()
    return RedirectResponse("/logs", status_code=303)


# ---------------------------------------------------------------------------
# Sidebar controls
# ---------------------------------------------------------------------------


@router.post("/dry-run")
async def dry_run_toggle(request: Request) -> RedirectResponse:
    enabled = _session(request).controller.toggle_dry_run()
    logger.info("Dry-run mode %s", "enabled" if enabled else "disabled")
    return _back(request)


@router.post("/alert/dismiss")
async def alert_dismiss(request: Request) -> RedirectResponse:
    _session(request).alerts.dismiss()
    return _back(request)
