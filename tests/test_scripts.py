from __future__ import annotations

import json
import sys
from pathlib import Path

# scripts/ is not a package; make its modules importable for the tests
SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPTS) not in sys.path:
    sys.path.insert(0, str(SCRIPTS))

import add_user  # noqa: E402
import check_store  # noqa: E402

from minicrud.services.auth_service import AuthService  # noqa: E402


def test_add_user_registers_and_rejects_duplicates(data_env, capsys):
    assert add_user.main(["--email", "Ana@Example.com", "--name", "Ana", "--password", "pw"]) == 0
    assert "ana@example.com" in capsys.readouterr().out
    assert AuthService().authenticate("ana@example.com", "pw").display_name == "Ana"

    assert add_user.main(["--email", "ana@example.com", "--name", "Other", "--password", "pw"]) == 1
    assert "already exists" in capsys.readouterr().err


def test_check_store_reports_problems(tmp_path):
    users = tmp_path / "users.json"
    records = tmp_path / "data.json"
    users.write_text("{broken", encoding="utf-8")
    records.write_text(
        json.dumps([{"name": "A", "email": "a@x.com"}, {"name": "B", "email": "A@X.COM"}, "junk"]),
        encoding="utf-8",
    )

    problems = check_store.check_file(users, "users") + check_store.check_file(records, "records")

    assert any("not valid JSON" in line for line in problems)
    assert any("a@x.com appears 2 times" in line for line in problems)
    assert any("records[2]: not an object" in line for line in problems)


def test_check_store_clean_files(tmp_path, capsys):
    users = tmp_path / "users.json"
    records = tmp_path / "data.json"
    users.write_text("[]\n", encoding="utf-8")
    records.write_text('[{"name": "A", "email": "a@x.com"}]\n', encoding="utf-8")

    assert check_store.main(["--users", str(users), "--records", str(records)]) == 0
    assert "OK" in capsys.readouterr().out
