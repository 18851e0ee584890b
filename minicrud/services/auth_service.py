"""
Registration and credential verification against the users collection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
import logging

from minicrud.core.config import get_settings
from minicrud.core.errors import Busy, ConflictError, InvalidCredentials, ValidationError
from minicrud.core.security import hash_password, needs_rehash, verify_password
from minicrud.domain.validation import canonical_email, is_valid_email
from minicrud.repositories.json_storage import JsonCollection

logger = logging.getLogger("minicrud.auth")


@dataclass(frozen=True)
class User:
    display_name: str
    email: str
    password_hash: str = field(repr=False, default="")

    @classmethod
    def from_entry(cls, entry: dict) -> "User":
        return cls(
            display_name=str(entry.get("display_name") or entry.get("nombre") or ""),
            email=canonical_email(entry.get("email")),
            password_hash=str(entry.get("password_hash") or entry.get("password") or ""),
        )

    def to_entry(self) -> dict:
        return {"display_name": self.display_name, "email": self.email, "password_hash": self.password_hash}

    def public(self) -> dict:
        return {"display_name": self.display_name, "email": self.email}


@dataclass
class AuthService:
    """Handles registration and login for the users file."""

    users: Optional[JsonCollection] = None

    def __post_init__(self):
        self.settings = get_settings()
        if self.users is None:
            self.users = JsonCollection(self.settings.users_file)

    # -------------------------------------- helpers --------------------------------------
    def _find(self, email: str) -> Optional[User]:
        for entry in self.users.load():
            if isinstance(entry, dict) and canonical_email(entry.get("email")) == email:
                return User.from_entry(entry)
        return None

    def _upgrade_hash(self, email: str, password: str) -> None:
        new_hash = hash_password(password)

        def _replace(items: list) -> list:
            for entry in items:
                if isinstance(entry, dict) and canonical_email(entry.get("email")) == email:
                    entry["password_hash"] = new_hash
                    break
            return items

        try:
            self.users.transact(_replace)
        except Busy:
            logger.warning("Users file busy; password hash upgrade for a user postponed")
        else:
            logger.info("Upgraded password hash parameters for a user")

    # -------------------------------------- registration --------------------------------------
    def register(self, display_name: str, email: str, password: str) -> User:
        if not all(isinstance(value, str) for value in (display_name or "", email or "", password or "")):
            raise ValidationError("Fields must be text")
        name = (display_name or "").strip()
        raw_email = canonical_email(email)
        password = password or ""
        if not name or not raw_email or not password:
            raise ValidationError("Fill in every field")
        if not is_valid_email(raw_email):
            raise ValidationError("Invalid email")
        if len(password) < self.settings.min_password_length:
            raise ValidationError(
                f"Password too short. Use at least {self.settings.min_password_length} characters"
            )

        user = User(display_name=name, email=raw_email, password_hash=hash_password(password))

        def _append(items: list) -> list:
            for entry in items:
                if isinstance(entry, dict) and canonical_email(entry.get("email")) == raw_email:
                    raise ConflictError("That email already exists")
            items.append(user.to_entry())
            return items

        try:
            committed = self.users.transact(_append)
        except ConflictError:
            logger.info("Registration rejected: email already registered")
            raise
        logger.info("Registered a new user (%d users total)", len(committed))
        return user

    # -------------------------------------- login --------------------------------------
    def authenticate(self, email: str, password: str) -> User:
        raw_email = canonical_email(email) if isinstance(email, str) else ""
        password = password if isinstance(password, str) else ""
        user = self._find(raw_email) if raw_email else None
        # verify_password runs against a dummy hash when user is None
        valid = verify_password(password, user.password_hash if user else None)
        if not user or not password or not valid:
            raise InvalidCredentials()
        if needs_rehash(user.password_hash):
            self._upgrade_hash(raw_email, password)
        return user
