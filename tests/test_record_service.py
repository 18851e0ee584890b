"""
RecordService: positional CRUD, duplicate checks and concurrent appends.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from minicrud.core.errors import ConflictError, NotFoundError, ValidationError
from minicrud.domain.validation import canonical_email
from minicrud.services.record_service import RecordService


@pytest.fixture()
def svc(data_env):
    return RecordService()


def _pairs(records):
    return [(r.name, r.email) for r in records]


def test_list_on_fresh_store_is_empty(svc):
    assert svc.list() == []


def test_walkthrough_create_delete_update_recreate(svc):
    assert _pairs(svc.create("Ana", "ana@x.com")) == [("Ana", "ana@x.com")]
    assert _pairs(svc.create("Bea", "bea@x.com")) == [("Ana", "ana@x.com"), ("Bea", "bea@x.com")]
    assert _pairs(svc.delete(0)) == [("Bea", "bea@x.com")]
    assert _pairs(svc.update(0, "Bea L.", "beal@x.com")) == [("Bea L.", "beal@x.com")]
    assert _pairs(svc.create("Ana", "ANA@X.COM")) == [("Bea L.", "beal@x.com"), ("Ana", "ana@x.com")]
    assert _pairs(svc.list()) == [("Bea L.", "beal@x.com"), ("Ana", "ana@x.com")]


def test_create_appends_at_previous_length(svc):
    for i in range(3):
        before = len(svc.list())
        records = svc.create(f"User {i}", f"user{i}@x.com")
        assert records[before].email == f"user{i}@x.com"
        assert len(records) == before + 1


def test_delete_shifts_following_records_down(svc):
    for i in range(5):
        svc.create(f"User {i}", f"user{i}@x.com")
    before = svc.list()

    after = svc.delete(1)

    assert len(after) == len(before) - 1
    assert after[0] == before[0]
    for j in range(2, len(before)):
        assert after[j - 1] == before[j]


def test_update_keeps_other_positions_and_id(svc):
    svc.create("Ana", "ana@x.com")
    svc.create("Bea", "bea@x.com")
    svc.create("Cid", "cid@x.com")
    before = svc.list()

    after = svc.update(1, "Beatriz", "beatriz@x.com")

    assert after[0] == before[0]
    assert after[2] == before[2]
    assert (after[1].name, after[1].email) == ("Beatriz", "beatriz@x.com")
    assert after[1].id == before[1].id


def test_create_duplicate_email_conflicts_case_insensitively(svc):
    svc.create("Ana", "ana@x.com")
    with pytest.raises(ConflictError):
        svc.create("Other Ana", " ANA@x.com ")
    assert len(svc.list()) == 1


def test_update_may_keep_own_email_but_not_take_another(svc):
    svc.create("Ana", "ana@x.com")
    svc.create("Bea", "bea@x.com")

    assert svc.update(0, "Ana Maria", "ANA@x.com")[0].name == "Ana Maria"
    with pytest.raises(ConflictError):
        svc.update(0, "Ana", "bea@x.com")
    assert _pairs(svc.list()) == [("Ana Maria", "ana@x.com"), ("Bea", "bea@x.com")]


@pytest.mark.parametrize("index", [-1, 2, 99, "5", "abc", None, 1.5, True])
def test_out_of_range_or_malformed_index_is_not_found(svc, index):
    svc.create("Ana", "ana@x.com")
    svc.create("Bea", "bea@x.com")
    with pytest.raises(NotFoundError):
        svc.update(index, "X", "x@x.com")
    with pytest.raises(NotFoundError):
        svc.delete(index)
    assert len(svc.list()) == 2


def test_index_given_as_numeric_string_is_accepted(svc):
    svc.create("Ana", "ana@x.com")
    assert svc.delete("0") == []


def test_update_checks_index_before_fields(svc):
    with pytest.raises(NotFoundError):
        svc.update(0, "", "")


@pytest.mark.parametrize(
    "name,email",
    [
        ("", "ana@x.com"),
        ("   ", "ana@x.com"),
        ("Ana", ""),
        ("Ana", "nope"),
        ("A" * 61, "ana@x.com"),
        ("Ana", "a" * 115 + "@x.com"),
    ],
)
def test_invalid_fields_are_rejected(svc, name, email):
    with pytest.raises(ValidationError):
        svc.create(name, email)
    svc.create("Bea", "bea@x.com")
    with pytest.raises(ValidationError):
        svc.update(0, name, email)
    assert _pairs(svc.list()) == [("Bea", "bea@x.com")]


@pytest.mark.parametrize("name,email", [({"x": 1}, "c@x.com"), (["Ana"], "c@x.com"), (42, "c@x.com"), ("Ana", 7)])
def test_non_text_fields_are_rejected(svc, name, email):
    with pytest.raises(ValidationError):
        svc.create(name, email)
    assert svc.list() == []


def test_field_limits_are_inclusive(svc):
    email = "a" * 114 + "@x.com"
    assert len(email) == 120
    records = svc.create("A" * 60, email)
    assert records[0].name == "A" * 60


def test_stable_ids_survive_reindexing(svc):
    svc.create("Ana", "ana@x.com")
    svc.create("Bea", "bea@x.com")
    svc.create("Cid", "cid@x.com")
    cid = svc.list()[2].id
    assert cid

    svc.delete(0)
    records = svc.update_by_id(cid, "Cid R.", "cidr@x.com")

    assert _pairs(records) == [("Bea", "bea@x.com"), ("Cid R.", "cidr@x.com")]
    assert _pairs(svc.delete_by_id(cid)) == [("Bea", "bea@x.com")]
    with pytest.raises(NotFoundError):
        svc.delete_by_id(cid)


def test_legacy_entries_without_id_remain_index_addressable(svc):
    svc.records.transact(lambda items: [{"nombre": "Old", "email": "old@x.com"}])
    records = svc.list()
    assert (records[0].name, records[0].email, records[0].id) == ("Old", "old@x.com", None)
    assert svc.update(0, "New", "new@x.com")[0].id is None
    with pytest.raises(NotFoundError):
        svc.delete_by_id("")


def test_concurrent_creates_keep_every_record(svc):
    total = 20

    def _create(i):
        return svc.create(f"User {i}", f"user{i}@x.com")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(_create, range(total)))

    records = svc.list()
    assert len(records) == total
    emails = [canonical_email(r.email) for r in records]
    assert len(set(emails)) == total


def test_concurrent_duplicate_creates_admit_exactly_one(svc):
    def _create(_):
        try:
            svc.create("Ana", "ana@x.com")
            return True
        except ConflictError:
            return False

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(_create, range(10)))

    assert outcomes.count(True) == 1
    assert len(svc.list()) == 1
