"""
CRUD over the position-addressed record collection.

Records are addressed by their 0-based index in the file. Indexes are only
stable between reads: ``delete`` re-compacts the list, so every record after
the removed one moves down by one. Each record created here also gets an
opaque ``id`` and the ``*_by_id`` variants resolve it to the current index
inside the same transaction.

All checks that depend on the stored collection (index range, duplicate
email) run inside ``JsonCollection.transact`` against the freshly loaded
list, never against a snapshot the caller may hold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional
import logging
import secrets

from minicrud.core.config import get_settings
from minicrud.core.errors import ConflictError, NotFoundError, ValidationError
from minicrud.domain.validation import canonical_email, clean_email, clean_name, parse_index
from minicrud.repositories.json_storage import JsonCollection

logger = logging.getLogger("minicrud.records")


@dataclass(frozen=True)
class Record:
    name: str
    email: str
    id: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: dict) -> "Record":
        record_id = entry.get("id")
        return cls(
            name=str(entry.get("name") or entry.get("nombre") or ""),
            email=str(entry.get("email") or ""),
            id=str(record_id) if record_id else None,
        )

    def to_entry(self) -> dict:
        entry: dict = {"name": self.name, "email": self.email}
        if self.id:
            entry["id"] = self.id
        return entry


def _new_id() -> str:
    return secrets.token_hex(8)


def _records(items: list) -> List[Record]:
    # non-object entries keep their slot so positions match the file
    return [Record.from_entry(entry if isinstance(entry, dict) else {}) for entry in items]


def _check_index(items: list, index: int) -> None:
    if index < 0 or index >= len(items):
        raise NotFoundError()


def _check_unique(items: list, email: str, *, skip: int | None = None) -> None:
    for position, entry in enumerate(items):
        if position == skip or not isinstance(entry, dict):
            continue
        if canonical_email(entry.get("email")) == email:
            raise ConflictError("That email already exists")


def _index_of(items: list, record_id: str) -> int:
    wanted = (record_id or "").strip()
    if wanted:
        for position, entry in enumerate(items):
            if isinstance(entry, dict) and entry.get("id") == wanted:
                return position
    raise NotFoundError("Record does not exist")


class RecordService:
    """List/create/update/delete for the records file."""

    def __init__(self, records: JsonCollection | None = None) -> None:
        if records is None:
            records = JsonCollection(get_settings().records_file)
        self.records = records

    def list(self) -> List[Record]:
        return _records(self.records.load())

    def create(self, name: Any, email: Any) -> List[Record]:
        record = Record(name=clean_name(name), email=clean_email(email), id=_new_id())

        def _append(items: list) -> list:
            _check_unique(items, record.email)
            items.append(record.to_entry())
            return items

        committed = self._commit("create", _append)
        logger.info("Created record at index %d", len(committed) - 1)
        return _records(committed)

    def update(self, index: Any, name: Any, email: Any) -> List[Record]:
        position = parse_index(index)

        def _replace(items: list) -> list:
            _check_index(items, position)
            self._replace_at(items, position, name, email)
            return items

        committed = self._commit("update", _replace)
        logger.info("Updated record at index %d", position)
        return _records(committed)

    def delete(self, index: Any) -> List[Record]:
        position = parse_index(index)

        def _remove(items: list) -> list:
            _check_index(items, position)
            del items[position]
            return items

        committed = self._commit("delete", _remove)
        logger.info("Deleted record at index %d", position)
        return _records(committed)

    def update_by_id(self, record_id: str, name: Any, email: Any) -> List[Record]:
        def _replace(items: list) -> list:
            self._replace_at(items, _index_of(items, record_id), name, email)
            return items

        return _records(self._commit("update", _replace))

    def delete_by_id(self, record_id: str) -> List[Record]:
        def _remove(items: list) -> list:
            del items[_index_of(items, record_id)]
            return items

        return _records(self._commit("delete", _remove))

    # -------------------------------------- helpers --------------------------------------
    def _replace_at(self, items: list, position: int, name: Any, email: Any) -> None:
        clean = Record(name=clean_name(name), email=clean_email(email))
        _check_unique(items, clean.email, skip=position)
        current = items[position]
        record_id = current.get("id") if isinstance(current, dict) else None
        items[position] = Record(name=clean.name, email=clean.email, id=record_id).to_entry()

    def _commit(self, operation: str, mutator) -> list:
        try:
            return self.records.transact(mutator)
        except (ConflictError, NotFoundError, ValidationError) as exc:
            logger.info("Record %s rejected: %s", operation, exc.message)
            raise
