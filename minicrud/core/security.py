"""Security helpers (hashing and verification)."""

from __future__ import annotations

from functools import lru_cache

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Create a salted Argon2id hash (salt and parameters are encoded in the result)."""
    return _ph.hash(password)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return _ph.hash("minicrud-dummy-password")


def verify_password(password: str, stored_hash: str | None) -> bool:
    """Return True when ``password`` matches ``stored_hash``.

    A missing hash is still checked against a dummy one so that unknown
    accounts cost the same time as known ones.
    """
    stored = stored_hash or ""
    if not stored:
        try:
            _ph.verify(_dummy_hash(), password)
        except argon_exc.VerificationError:
            pass
        return False
    try:
        return _ph.verify(stored, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def needs_rehash(stored_hash: str) -> bool:
    """True when the hash was produced with weaker parameters than the current ones."""
    try:
        return _ph.check_needs_rehash(stored_hash)
    except argon_exc.InvalidHashError:
        return True
