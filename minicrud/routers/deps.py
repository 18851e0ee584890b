"""Accessors for the services the app factory stores on ``app.state``."""
from __future__ import annotations

from fastapi import Request

from minicrud.services.action_service import ActionService


def get_action_service(request: Request) -> ActionService:
    svc = getattr(getattr(request.app, "state", None), "action_service", None)
    if not svc:
        raise RuntimeError("ActionService not configured")
    return svc
