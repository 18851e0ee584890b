from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Request

from minicrud.core.rate_limiter import rate_limit_auth
from minicrud.routers.deps import get_action_service
from minicrud.routers.envelope import render_outcome
from minicrud.services.session_service import context_from_request

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
def register(request: Request, payload: Optional[dict] = Body(default=None)):
    rate_limit_auth(request, "auth:register")
    svc = get_action_service(request)
    return render_outcome(svc.register(context_from_request(request), payload or {}))


@router.post("/login")
def login(request: Request, payload: Optional[dict] = Body(default=None)):
    rate_limit_auth(request, "auth:login")
    svc = get_action_service(request)
    return render_outcome(svc.login(context_from_request(request), payload or {}))


@router.post("/logout")
def logout(request: Request):
    svc = get_action_service(request)
    return render_outcome(svc.logout(context_from_request(request), {}))


@router.get("/me")
def who_am_i(request: Request):
    svc = get_action_service(request)
    return render_outcome(svc.who_am_i(context_from_request(request), {}))
