"""Tests for the predicates behind the ``datatype`` check."""

from __future__ import annotations

import pathlib
import sys
from datetime import date

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from rulebook.application.use_cases.validation.datatypes import (
    is_date_string,
    is_email,
    is_http_url,
    is_json_string,
    is_uuid,
    matches_datatype,
    to_number,
    type_name,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (5, 5.0),
        ("12.5", 12.5),
        (" 7 ", 7.0),
        (True, 1.0),
        ("", None),
        ("abc", None),
        (float("nan"), None),
        ([1], None),
        (None, None),
    ],
)
def test_to_number(value, expected) -> None:
    assert to_number(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "null"),
        (True, "boolean"),
        (3, "number"),
        (2.5, "number"),
        ("x", "string"),
        ([1, 2], "array"),
        ({"a": 1}, "object"),
    ],
)
def test_type_name(value, expected) -> None:
    assert type_name(value) == expected


def test_email_and_url_predicates() -> None:
    assert is_email("someone@example.com")
    assert not is_email("someone@")
    assert not is_email(42)
    assert is_http_url("https://example.com/path?q=1")
    assert not is_http_url("ftp://example.com")
    assert not is_http_url("example.com")


def test_uuid_and_json_predicates() -> None:
    assert is_uuid("123e4567-e89b-12d3-a456-426614174000")
    assert not is_uuid("123e4567-e89b-62d3-a456-426614174000")
    assert is_json_string('{"a": [1, 2]}')
    assert not is_json_string("{not json}")
    assert not is_json_string({"a": 1})


def test_date_predicate_uses_calendar_parsing() -> None:
    assert is_date_string("2024-01-15")
    assert is_date_string(date(2024, 1, 15))
    assert not is_date_string("not a date")
    assert not is_date_string(True)
    assert not is_date_string(None)


def test_matches_datatype_families_and_plain_types() -> None:
    assert matches_datatype("ipv4", "10.0.0.1")
    assert not matches_datatype("ipv4", "::1")
    assert matches_datatype("ipv6", "::1")
    assert matches_datatype("ip", "::1")
    assert matches_datatype("number", "42")
    assert matches_datatype("string", "42")
    assert not matches_datatype("boolean", "true")
    assert matches_datatype("array", [1])
    assert not matches_datatype("string", None)
