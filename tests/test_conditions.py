"""Tests for named conditions and their quantifiers."""

from __future__ import annotations

import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import itertools

import pytest

from rulebook.application.use_cases.validation import Validator
from rulebook.application.use_cases.validation.conditions import (
    condition_applies,
    evaluate_conditions,
    is_conditions_and_scope_tuple,
    normalize_conditions,
)
from rulebook.domain.entities import InputValidationResult
from rulebook.domain.errors import ValidationConfigurationError

pytestmark = pytest.mark.anyio

ACTOR = {"id": 7, "role": "admin"}
RECORD = {"ownerId": 7, "status": "draft"}
INPUT = {"name": "abc"}

CONDITIONS = {
    "isAdmin": {"actor": {"role": {"eq": "admin"}}},
    "isGuest": {"actor": {"role": {"eq": "guest"}}},
    "isDraft": {"record": {"status": {"eq": "draft"}}},
    "isPublished": {"record": {"status": {"eq": "published"}}},
}


@pytest.fixture
def validate_input():
    return Validator()._validate_flat


async def test_condition_applies_checks_every_declared_scope(validate_input) -> None:
    condition = {
        "actor": {"role": {"eq": "admin"}},
        "input": {"name": {"eq": "abc"}},
        "record": {"status": {"eq": "draft"}},
    }

    assert await condition_applies(condition, INPUT, RECORD, ACTOR, validate_input=validate_input)
    assert not await condition_applies(
        condition, {"name": "xyz"}, RECORD, ACTOR, validate_input=validate_input
    )


async def test_condition_short_circuits_after_a_failing_scope() -> None:
    calls = []

    async def validate(obj, rules, collect_errors):
        calls.append(obj)
        return InputValidationResult(passed=False)

    condition = {"actor": {"role": {"eq": "admin"}}, "record": {"status": {"eq": "draft"}}}

    assert not await condition_applies(condition, INPUT, RECORD, ACTOR, validate_input=validate)
    assert calls == [ACTOR]


async def test_condition_validation_does_not_collect_errors() -> None:
    flags = []

    async def validate(obj, rules, collect_errors):
        flags.append(collect_errors)
        return await Validator()._validate_flat(obj, rules, collect_errors)

    await condition_applies(CONDITIONS["isAdmin"], INPUT, RECORD, ACTOR, validate_input=validate)

    assert flags == [False]


@pytest.mark.parametrize(
    ("first", "second"),
    list(itertools.product(["isAdmin", "isGuest"], ["isDraft", "isPublished"])),
)
async def test_quantifier_laws(validate_input, first: str, second: str) -> None:
    names = [first, second]
    first_holds = first == "isAdmin"
    second_holds = second == "isDraft"

    async def evaluate(quantifier: str) -> bool:
        return await evaluate_conditions(
            names, quantifier, INPUT, RECORD, ACTOR, CONDITIONS, validate_input=validate_input
        )

    all_result = await evaluate("all")
    any_result = await evaluate("any")
    none_result = await evaluate("none")

    assert all_result == (first_holds and second_holds)
    assert any_result == (first_holds or second_holds)
    assert none_result == (not first_holds and not second_holds)
    assert none_result == (not any_result)


async def test_no_condition_names_always_apply(validate_input) -> None:
    assert await evaluate_conditions([], "none", None, None, None, {}, validate_input=validate_input)


async def test_unknown_condition_is_a_configuration_error(validate_input) -> None:
    with pytest.raises(ValidationConfigurationError, match="'isOwner' is not defined"):
        await evaluate_conditions(
            ["isOwner"], "all", INPUT, RECORD, ACTOR, CONDITIONS, validate_input=validate_input
        )


async def test_invalid_quantifier_is_a_configuration_error(validate_input) -> None:
    with pytest.raises(ValidationConfigurationError, match="Invalid conditions scope"):
        await evaluate_conditions(
            ["isAdmin"], "most", INPUT, RECORD, ACTOR, CONDITIONS, validate_input=validate_input
        )


def test_normalize_conditions() -> None:
    assert normalize_conditions(None) == ([], "all")
    assert normalize_conditions([["a", "b"], "any"]) == (["a", "b"], "any")
    assert normalize_conditions(["a", "b"]) == (["a", "b"], "all")
    assert is_conditions_and_scope_tuple((["a"], "none"))
    assert not is_conditions_and_scope_tuple(["a", "b"])

    with pytest.raises(ValidationConfigurationError):
        normalize_conditions("isOwner")
