"""
REST-style routes over the record collection.

``/records/{index}`` addresses a record by position (re-list after a delete,
positions shift); ``/records/id/{record_id}`` addresses it by its stable id.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Request

from minicrud.routers.deps import get_action_service
from minicrud.routers.envelope import render_outcome
from minicrud.services.session_service import context_from_request

router = APIRouter(prefix="/records", tags=["records"])


@router.get("")
def list_records(request: Request):
    svc = get_action_service(request)
    return render_outcome(svc.list(context_from_request(request), {}))


@router.post("")
def create_record(request: Request, payload: Optional[dict] = Body(default=None)):
    svc = get_action_service(request)
    return render_outcome(svc.create(context_from_request(request), payload or {}))


@router.put("/id/{record_id}")
def update_record_by_id(record_id: str, request: Request, payload: Optional[dict] = Body(default=None)):
    svc = get_action_service(request)
    body = {key: value for key, value in (payload or {}).items() if key != "index"}
    body["id"] = record_id
    return render_outcome(svc.update(context_from_request(request), body))


@router.delete("/id/{record_id}")
def delete_record_by_id(record_id: str, request: Request):
    svc = get_action_service(request)
    return render_outcome(svc.delete(context_from_request(request), {"id": record_id}))


@router.put("/{index}")
def update_record(index: str, request: Request, payload: Optional[dict] = Body(default=None)):
    svc = get_action_service(request)
    body = dict(payload or {})
    body["index"] = index
    return render_outcome(svc.update(context_from_request(request), body))


@router.delete("/{index}")
def delete_record(index: str, request: Request):
    svc = get_action_service(request)
    return render_outcome(svc.delete(context_from_request(request), {"index": index}))
