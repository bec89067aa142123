"""Tests for validating HTTP request sections."""

from __future__ import annotations

import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from rulebook.application.use_cases.validation import Validator
from rulebook.domain.entities import RequestContext

pytestmark = pytest.mark.anyio


async def test_body_age_must_be_greater_than_forty() -> None:
    result = await Validator().validate_http_request(
        request_context=RequestContext(body={"age": 30}),
        validations={"body": {"age": {"gt": 40, "required": True}}},
        collect_errors=True,
    )

    assert result.passed is False
    errors = result.errors["body"]["age"]
    assert len(errors) == 1
    assert errors[0].path == ["body", "age"]
    assert errors[0].message_ids[-1] == "validation.http.body.age.gt.40"
    assert errors[0].message == "Value for 'age' should be greater than '40'"


async def test_every_section_maps_to_its_request_bag() -> None:
    context = RequestContext(
        body={"name": "Ann"},
        path_parameters={"id": "abc"},
        query_string_parameters={"limit": 500},
        headers={"x-api-key": None},
    )
    validations = {
        "body": {"name": {"minLength": 2}},
        "param": {"id": {"pattern": r"^\d+$"}},
        "query": {"limit": {"lte": 100}},
        "header": {"x-api-key": {"required": True}},
    }

    result = await Validator().validate_http_request(
        request_context=context, validations=validations
    )

    assert not result.passed
    assert set(result.errors) == {"param", "query", "header"}
    assert result.errors["param"]["id"][0].path == ["param", "id"]
    assert result.errors["query"]["limit"][0].message_ids[-1] == "validation.http.query.limit.lte.100"


async def test_absent_sections_are_skipped() -> None:
    result = await Validator().validate_http_request(
        request_context=RequestContext(body={"age": 50}),
        validations={"body": {"age": {"gt": 40}}, "query": {}},
    )

    assert result.passed
    assert result.errors == {}


async def test_missing_bag_reads_values_as_none() -> None:
    result = await Validator().validate_http_request(
        request_context=RequestContext(),
        validations={"query": {"page": {"required": True}}},
    )

    assert not result.passed
    assert result.errors["query"]["page"][0].message == "Value for 'page' is required"


async def test_collect_errors_false_keeps_only_pass() -> None:
    result = await Validator().validate_http_request(
        request_context=RequestContext(body={"age": 30}),
        validations={"body": {"age": {"gt": 40}}},
        collect_errors=False,
    )

    assert result.passed is False
    assert result.errors == {}


async def test_overridden_http_messages() -> None:
    result = await Validator().validate_http_request(
        request_context=RequestContext(body={"age": 30}),
        validations={"body": {"age": {"gt": 40}}},
        overridden_error_messages={"validation.http.body.age.gt": "Too young ({path})"},
    )

    assert result.errors["body"]["age"][0].message == "Too young (body.age)"


async def test_to_dict_uses_wire_names() -> None:
    result = await Validator(verbose_errors=True).validate_http_request(
        request_context=RequestContext(body={"age": 30}),
        validations={"body": {"age": {"gt": 40}}},
    )

    payload = result.to_dict()

    assert payload["pass"] is False
    error = payload["errors"]["body"]["age"][0]
    assert error["path"] == ["body", "age"]
    assert error["expected"] == ["gt", 40]
    assert error["received"] == [30]
    assert "validation.gt" in error["messageIds"]
