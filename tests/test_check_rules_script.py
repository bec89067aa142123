"""Tests for the command line rule checker."""

from __future__ import annotations

import json
import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import importlib.util

import pytest

_SCRIPT = importlib.util.spec_from_file_location(
    "check_rules", PROJECT_ROOT / "scripts" / "check_rules.py"
)
check_rules = importlib.util.module_from_spec(_SCRIPT)
_SCRIPT.loader.exec_module(check_rules)
main = check_rules.main


@pytest.fixture
def files(tmp_path):
    validations = tmp_path / "validations.json"
    validations.write_text(json.dumps({"actor": {"role": [{"eq": "admin"}]}}))

    def write_data(payload: dict) -> str:
        data = tmp_path / "data.json"
        data.write_text(json.dumps(payload))
        return str(data)

    return str(validations), write_data


def test_failing_data_exits_with_one(files, capsys) -> None:
    validations, write_data = files

    code = main([validations, write_data({"actor": {"role": "user"}}), "--operation", "create", "--entity", "test"])

    assert code == 1
    output = json.loads(capsys.readouterr().out)
    assert output["pass"] is False
    assert "validation.entity.test.actor.role.eq.admin" in output["errors"]["actor"]["role"][0]["messageIds"]


def test_passing_data_exits_with_zero(files, capsys) -> None:
    validations, write_data = files

    code = main([validations, write_data({"actor": {"role": "admin"}}), "--operation", "create", "--entity", "test"])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"pass": True, "errors": {}}


def test_unreadable_file_aborts(tmp_path) -> None:
    with pytest.raises(SystemExit, match="Could not read"):
        main([str(tmp_path / "missing.json"), str(tmp_path / "missing.json"), "--operation", "x", "--entity", "y"])
