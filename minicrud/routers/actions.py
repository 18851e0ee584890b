"""
Single endpoint that dispatches on ``?action=``.

Wire compatible with the legacy ``api.php`` client: the action comes from the
query string (or a form/JSON ``action`` field), the body is a JSON object or
regular form fields, and ``list`` is assumed when no action is given.
"""
from __future__ import annotations

from typing import Any, Dict
import json

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from minicrud.core.rate_limiter import rate_limit_auth
from minicrud.routers.deps import get_action_service
from minicrud.routers.envelope import render_outcome
from minicrud.services.session_service import context_from_request

router = APIRouter(tags=["actions"])

_THROTTLED = {"login", "register"}


async def _read_payload(request: Request) -> Dict[str, Any]:
    if request.method == "GET":
        return {}
    content_type = (request.headers.get("content-type") or "").lower()
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


@router.api_route("/api", methods=["GET", "POST"])
@router.api_route("/api.php", methods=["GET", "POST"], include_in_schema=False)
async def dispatch_action(request: Request, action: str = ""):
    payload = await _read_payload(request)
    name = (action or str(payload.get("action") or "")).strip().lower()
    if name in _THROTTLED:
        rate_limit_auth(request, f"auth:{name}")
    svc = get_action_service(request)
    outcome = await run_in_threadpool(svc.dispatch, name, context_from_request(request), payload)
    return render_outcome(outcome)
