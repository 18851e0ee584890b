"""
One operation per client action, shared by every transport.

Each operation takes the caller's ``SessionContext`` plus the decoded request
payload and returns an ``Outcome`` (payload for the envelope plus any session
change the transport must apply to its cookie). Failures are raised as
``ServiceError`` subclasses and rendered by the router layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional
import logging

from minicrud.core.errors import UnsupportedAction
from minicrud.services.auth_service import AuthService
from minicrud.services.record_service import RecordService
from minicrud.services.session_service import SessionContext, SessionManager

logger = logging.getLogger("minicrud.api")

DEFAULT_ACTION = "list"


@dataclass
class Outcome:
    data: Any
    session_token: Optional[str] = None
    clear_session: bool = False


def _field(payload: Mapping[str, Any], *names: str) -> Any:
    """First non-missing value among ``names``; legacy clients send ``nombre``.

    Values pass through untouched; the stores reject anything that is not a
    string instead of saving its repr.
    """
    for name in names:
        value = payload.get(name)
        if value is not None:
            return value
    return ""


def _records_payload(records) -> list:
    return [record.to_entry() for record in records]


class ActionService:
    def __init__(self, auth: AuthService, records: RecordService, sessions: SessionManager) -> None:
        self.auth = auth
        self.records = records
        self.sessions = sessions
        self._actions: Dict[str, Callable[[SessionContext, Mapping[str, Any]], Outcome]] = {
            "register": self.register,
            "login": self.login,
            "logout": self.logout,
            "auth": self.who_am_i,
            "whoami": self.who_am_i,
            "list": self.list,
            "create": self.create,
            "update": self.update,
            "delete": self.delete,
        }

    def dispatch(self, action: str | None, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        name = (action or DEFAULT_ACTION).strip().lower() or DEFAULT_ACTION
        handler = self._actions.get(name)
        if handler is None:
            logger.info("Unsupported action %r", name)
            raise UnsupportedAction()
        return handler(context, payload)

    # -------------------------------------- auth family --------------------------------------
    def register(self, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        user = self.auth.register(
            _field(payload, "display_name", "displayName", "name", "nombre"),
            _field(payload, "email"),
            _field(payload, "password"),
        )
        self.sessions.destroy(context)
        token = self.sessions.establish(user)
        return Outcome(data=user.public(), session_token=token)

    def login(self, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        user = self.auth.authenticate(_field(payload, "email"), _field(payload, "password"))
        self.sessions.destroy(context)
        token = self.sessions.establish(user)
        return Outcome(data=user.public(), session_token=token)

    def logout(self, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        self.sessions.destroy(context)
        return Outcome(data=[], clear_session=True)

    def who_am_i(self, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        return Outcome(data=self.sessions.require(context).as_dict())

    # -------------------------------------- records family --------------------------------------
    def list(self, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        self.sessions.require(context)
        return Outcome(data=_records_payload(self.records.list()))

    def create(self, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        self.sessions.require(context)
        records = self.records.create(_field(payload, "name", "nombre"), _field(payload, "email"))
        return Outcome(data=_records_payload(records))

    def update(self, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        self.sessions.require(context)
        name = _field(payload, "name", "nombre")
        email = _field(payload, "email")
        if payload.get("index") is None and payload.get("id"):
            records = self.records.update_by_id(str(payload["id"]), name, email)
        else:
            records = self.records.update(payload.get("index"), name, email)
        return Outcome(data=_records_payload(records))

    def delete(self, context: SessionContext, payload: Mapping[str, Any]) -> Outcome:
        self.sessions.require(context)
        if payload.get("index") is None and payload.get("id"):
            records = self.records.delete_by_id(str(payload["id"]))
        else:
            records = self.records.delete(payload.get("index"))
        return Outcome(data=_records_payload(records))
