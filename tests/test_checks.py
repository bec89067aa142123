"""Tests for the primitive check vocabulary."""

from __future__ import annotations

import pathlib
import re
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from rulebook.application.use_cases.validation.checks import (
    _SYNC_CHECKS,
    CheckEvaluator,
    strict_equal,
)
from rulebook.domain.entities import (
    Check,
    CheckContext,
    CheckOutcome,
    ValueWithMessage,
    ValueWithValidator,
)
from rulebook.domain.errors import (
    UniquenessOracleNotConfiguredError,
    ValidationConfigurationError,
)

pytestmark = pytest.mark.anyio


async def _passes(name, configured, value, evaluator: CheckEvaluator | None = None) -> bool:
    outcome = await (evaluator or CheckEvaluator()).evaluate(name, configured, value)
    return outcome.passed


@pytest.mark.parametrize("value", [0, "", False, [], "x"])
async def test_required_treats_falsy_values_as_present(value) -> None:
    assert await _passes("required", True, value)


async def test_required_fails_for_missing_value() -> None:
    outcome = await CheckEvaluator().evaluate(Check.REQUIRED, True, None)

    assert not outcome.passed
    assert outcome.expected == ("required", True)
    assert outcome.received == (None,)


@pytest.mark.parametrize("configured", [True, False, "yes", 0])
async def test_required_ignores_the_configured_value(configured) -> None:
    assert not await _passes("required", configured, None)
    assert await _passes("required", configured, "x")


def test_every_check_has_an_evaluator() -> None:
    assert set(Check) - set(_SYNC_CHECKS) == {Check.UNIQUE, Check.CUSTOM}


@pytest.mark.parametrize("value", [0, "", False, None])
async def test_length_checks_skip_falsy_values(value) -> None:
    assert await _passes("minLength", 8, value)
    assert await _passes("maxLength", 1, value)


async def test_length_checks_report_refined_length() -> None:
    outcome = await CheckEvaluator().evaluate("minLength", 8, "sort")

    assert not outcome.passed
    assert outcome.received == ("sort", 4)
    assert await _passes("maxLength", 3, [1, 2, 3])
    assert not await _passes("maxLength", 2, [1, 2, 3])


async def test_pattern_accepts_strings_and_compiled_patterns() -> None:
    assert await _passes("pattern", r"^\d+$", "123")
    assert not await _passes("pattern", re.compile(r"^\d+$"), "12a")
    assert await _passes("pattern", r"^\d+$", "")


async def test_pattern_with_invalid_expression_is_a_configuration_error() -> None:
    with pytest.raises(ValidationConfigurationError):
        await CheckEvaluator().evaluate("pattern", "(", "abc")


async def test_equality_is_strict() -> None:
    assert await _passes("eq", "admin", "admin")
    assert not await _passes("eq", 1, "1")
    assert not await _passes("eq", 1, True)
    assert await _passes("eq", 1, 1.0)
    assert await _passes("neq", "admin", "user")
    assert not await _passes("neq", 3, 3)


async def test_numeric_comparisons_coerce_numbers() -> None:
    assert await _passes("gt", 40, 41)
    assert not await _passes("gt", 40, 30)
    assert await _passes("gte", 40, "40")
    assert await _passes("lt", 10, 9.5)
    assert await _passes("lte", 10, 10)
    assert not await _passes("lte", 10, "abc")


async def test_list_membership() -> None:
    assert await _passes("inList", ["a", "b"], "a")
    assert not await _passes("inList", ["a", "b"], "c")
    assert not await _passes("inList", "ab", "a")
    assert await _passes("notInList", ["a", "b"], "c")
    assert not await _passes("notInList", [1, 2], 2)


async def test_datatype_check() -> None:
    assert await _passes("datatype", "email", "someone@example.com")
    assert not await _passes("datatype", "number", "twelve")


async def test_unknown_check_is_a_configuration_error() -> None:
    with pytest.raises(ValidationConfigurationError, match="Unknown validation check"):
        await CheckEvaluator().evaluate("isFancy", True, "x")


async def test_custom_check_supports_sync_and_async_predicates() -> None:
    async def is_even(value):
        return value % 2 == 0

    assert await _passes("custom", lambda value: value == "ok", "ok")
    assert await _passes("custom", is_even, 4)
    assert not await _passes("custom", is_even, 3)


async def test_custom_check_with_non_callable_fails_and_warns(caplog) -> None:
    with caplog.at_level("WARNING"):
        assert not await _passes("custom", "nope", "x")

    assert "Invalid custom validation rule" in caplog.text


async def test_custom_predicate_exceptions_propagate() -> None:
    def explode(_value):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        await CheckEvaluator().evaluate("custom", explode, "x")


async def test_value_with_message_keeps_builtin_semantics() -> None:
    outcome = await CheckEvaluator().evaluate(
        "minLength",
        ValueWithMessage(value=5, message="Too short", message_id="name.short"),
        "abc",
    )

    assert not outcome.passed
    assert outcome.custom_message == "Too short"
    assert outcome.custom_message_id == "name.short"


async def test_dict_form_of_value_with_message() -> None:
    outcome = await CheckEvaluator().evaluate(
        "eq", {"value": "admin", "message": "Admins only"}, "user"
    )

    assert not outcome.passed
    assert outcome.expected == ("eq", "admin")
    assert outcome.custom_message == "Admins only"


async def test_value_with_validator_replaces_builtin_semantics() -> None:
    evaluator = CheckEvaluator()

    passing = await evaluator.evaluate(
        "minLength", ValueWithValidator(validator=lambda value: True), ""
    )
    failing = await evaluator.evaluate(
        "required", {"validator": lambda value: False, "messageId": "custom.id"}, "x"
    )

    assert passing.passed
    assert not failing.passed
    assert failing.expected == ("required", "validator")
    assert failing.custom_message_id == "custom.id"


async def test_value_with_validator_may_return_its_own_outcome() -> None:
    def validator(value):
        return CheckOutcome(passed=False, custom_message="Nope")

    outcome = await CheckEvaluator().evaluate(
        "eq", ValueWithValidator(validator=validator, message="Wrapper"), "x"
    )

    assert outcome.custom_message == "Nope"
    assert outcome.received == ("x",)


async def test_unique_requires_an_oracle() -> None:
    with pytest.raises(UniquenessOracleNotConfiguredError):
        await CheckEvaluator().evaluate("unique", True, "taken@example.com")


async def test_unique_false_always_passes() -> None:
    assert await _passes("unique", False, "anything")


async def test_unique_consults_the_oracle_with_context() -> None:
    seen = []

    async def oracle(value, context):
        seen.append((value, context))
        return value != "taken"

    evaluator = CheckEvaluator(uniqueness_oracle=oracle)
    context = CheckContext(property_name="email", scope="input", entity_name="user")

    assert (await evaluator.evaluate("unique", True, "free", context)).passed
    assert not (await evaluator.evaluate("unique", True, "taken", context)).passed
    assert seen[0] == ("free", context)


def test_strict_equal_does_not_mix_types() -> None:
    assert strict_equal("a", "a")
    assert not strict_equal(0, False)
    assert not strict_equal(None, 0)
    assert strict_equal(None, None)
    assert strict_equal([1, 2], [1, 2])
