"""Primitive checks applied to a single property value."""

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Union

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

from .datatypes import matches_datatype, to_number

logger = logging.getLogger(__name__)

UniquenessOracle = Callable[[Any, CheckContext], Union[bool, Awaitable[bool]]]

_LIST_TYPES = (list, tuple, set, frozenset)


async def resolve_maybe_awaitable(result: Any) -> Any:
    """Await ``result`` when a predicate handed back a coroutine."""

    if inspect.isawaitable(result):
        return await result
    return result


def coerce_check_value(raw: Any) -> Any:
    """Turn the dict form of a wrapped value into its wrapper dataclass."""

    if not isinstance(raw, Mapping):
        return raw
    if "validator" in raw:
        return ValueWithValidator(
            validator=raw["validator"],
            message=raw.get("message"),
            message_id=raw.get("messageId"),
        )
    if "value" in raw and ("message" in raw or "messageId" in raw):
        return ValueWithMessage(
            value=raw["value"],
            message=raw.get("message"),
            message_id=raw.get("messageId"),
        )
    return raw


def resolve_check(name: str | Check) -> Check:
    try:
        return Check(name)
    except ValueError as exc:
        raise ValidationConfigurationError(f"Unknown validation check '{name}'") from exc


def strict_equal(left: Any, right: Any) -> bool:
    """Compare without letting ``True`` pass for ``1`` or ``"1"`` for ``1``."""

    if isinstance(left, bool) != isinstance(right, bool):
        return False
    left_numeric = isinstance(left, (int, float)) and not isinstance(left, bool)
    right_numeric = isinstance(right, (int, float)) and not isinstance(right, bool)
    if left_numeric and right_numeric:
        return left == right
    if type(left) is not type(right) and not (
        isinstance(left, type(right)) or isinstance(right, type(left))
    ):
        return False
    return left == right


def _outcome(check: Check, configured: Any, value: Any, passed: bool) -> CheckOutcome:
    return CheckOutcome(
        passed=bool(passed),
        expected=(check.value, configured),
        received=(value,),
    )


def _check_required(configured: Any, value: Any) -> CheckOutcome:
    return _outcome(Check.REQUIRED, configured, value, value is not None)


def _length_of(value: Any) -> int | None:
    try:
        return len(value)
    except TypeError:
        return None


def _check_length(check: Check, configured: Any, value: Any) -> CheckOutcome:
    if not value:
        outcome = _outcome(check, configured, value, True)
        outcome.received = (value, 0)
        return outcome

    length = _length_of(value)
    bound = to_number(configured)
    if length is None or bound is None:
        passed = False
    elif check is Check.MIN_LENGTH:
        passed = length >= bound
    else:
        passed = length <= bound
    outcome = _outcome(check, configured, value, passed)
    outcome.received = (value, length or 0)
    return outcome


def _check_min_length(configured: Any, value: Any) -> CheckOutcome:
    return _check_length(Check.MIN_LENGTH, configured, value)


def _check_max_length(configured: Any, value: Any) -> CheckOutcome:
    return _check_length(Check.MAX_LENGTH, configured, value)


def _check_pattern(configured: Any, value: Any) -> CheckOutcome:
    if not value:
        return _outcome(Check.PATTERN, configured, value, True)
    if isinstance(configured, re.Pattern):
        pattern = configured
    elif isinstance(configured, str):
        try:
            pattern = re.compile(configured)
        except re.error as exc:
            raise ValidationConfigurationError(
                f"Invalid pattern '{configured}': {exc}"
            ) from exc
    else:
        raise ValidationConfigurationError(
            f"The 'pattern' check expects a regular expression, got {configured!r}"
        )
    return _outcome(Check.PATTERN, configured, value, pattern.search(str(value)) is not None)


def _check_datatype(configured: Any, value: Any) -> CheckOutcome:
    return _outcome(Check.DATATYPE, configured, value, matches_datatype(str(configured), value))


def _check_eq(configured: Any, value: Any) -> CheckOutcome:
    return _outcome(Check.EQ, configured, value, strict_equal(value, configured))


def _check_neq(configured: Any, value: Any) -> CheckOutcome:
    return _outcome(Check.NEQ, configured, value, not strict_equal(value, configured))


def _compare(check: Check, configured: Any, value: Any) -> CheckOutcome:
    actual = to_number(value)
    bound = to_number(configured)
    if actual is None or bound is None:
        return _outcome(check, configured, value, False)
    if check is Check.GT:
        passed = actual > bound
    elif check is Check.GTE:
        passed = actual >= bound
    elif check is Check.LT:
        passed = actual < bound
    else:
        passed = actual <= bound
    return _outcome(check, configured, value, passed)


def _check_gt(configured: Any, value: Any) -> CheckOutcome:
    return _compare(Check.GT, configured, value)


def _check_gte(configured: Any, value: Any) -> CheckOutcome:
    return _compare(Check.GTE, configured, value)


def _check_lt(configured: Any, value: Any) -> CheckOutcome:
    return _compare(Check.LT, configured, value)


def _check_lte(configured: Any, value: Any) -> CheckOutcome:
    return _compare(Check.LTE, configured, value)


def _contains(collection: Any, value: Any) -> bool:
    return any(strict_equal(item, value) for item in collection)


def _check_in_list(configured: Any, value: Any) -> CheckOutcome:
    passed = isinstance(configured, _LIST_TYPES) and _contains(configured, value)
    return _outcome(Check.IN_LIST, configured, value, passed)


def _check_not_in_list(configured: Any, value: Any) -> CheckOutcome:
    passed = isinstance(configured, _LIST_TYPES) and not _contains(configured, value)
    return _outcome(Check.NOT_IN_LIST, configured, value, passed)


_SyncCheck = Callable[[Any, Any], CheckOutcome]

_SYNC_CHECKS: dict[Check, _SyncCheck] = {
    Check.REQUIRED: _check_required,
    Check.MIN_LENGTH: _check_min_length,
    Check.MAX_LENGTH: _check_max_length,
    Check.PATTERN: _check_pattern,
    Check.DATATYPE: _check_datatype,
    Check.EQ: _check_eq,
    Check.NEQ: _check_neq,
    Check.GT: _check_gt,
    Check.GTE: _check_gte,
    Check.LT: _check_lt,
    Check.LTE: _check_lte,
    Check.IN_LIST: _check_in_list,
    Check.NOT_IN_LIST: _check_not_in_list,
}


class CheckEvaluator:
    """Evaluate one configured check against one value."""

    def __init__(self, uniqueness_oracle: UniquenessOracle | None = None) -> None:
        self.uniqueness_oracle = uniqueness_oracle

    async def evaluate(
        self,
        name: str | Check,
        configured: Any,
        value: Any,
        context: CheckContext | None = None,
    ) -> CheckOutcome:
        check = resolve_check(name)
        configured = coerce_check_value(configured)
        context = context or CheckContext()

        if isinstance(configured, ValueWithValidator):
            return await self._evaluate_with_validator(check, configured, value)

        if isinstance(configured, ValueWithMessage):
            outcome = await self._evaluate_builtin(check, configured.value, value, context)
            outcome.custom_message = outcome.custom_message or configured.message
            outcome.custom_message_id = outcome.custom_message_id or configured.message_id
            return outcome

        return await self._evaluate_builtin(check, configured, value, context)

    async def _evaluate_builtin(
        self, check: Check, configured: Any, value: Any, context: CheckContext
    ) -> CheckOutcome:
        sync_check = _SYNC_CHECKS.get(check)
        if sync_check is not None:
            return sync_check(configured, value)
        if check is Check.CUSTOM:
            return await self._evaluate_custom(configured, value)
        return await self._evaluate_unique(configured, value, context)

    async def _evaluate_custom(self, configured: Any, value: Any) -> CheckOutcome:
        if not callable(configured):
            logger.warning("Invalid custom validation rule: %r", configured)
            return _outcome(Check.CUSTOM, configured, value, False)
        passed = await resolve_maybe_awaitable(configured(value))
        return _outcome(Check.CUSTOM, configured, value, bool(passed))

    async def _evaluate_unique(
        self, configured: Any, value: Any, context: CheckContext
    ) -> CheckOutcome:
        if not configured:
            return _outcome(Check.UNIQUE, configured, value, True)
        if self.uniqueness_oracle is None:
            raise UniquenessOracleNotConfiguredError(
                "The 'unique' check requires a uniqueness oracle; pass one to the Validator"
            )
        passed = await resolve_maybe_awaitable(self.uniqueness_oracle(value, context))
        return _outcome(Check.UNIQUE, configured, value, bool(passed))

    async def _evaluate_with_validator(
        self, check: Check, configured: ValueWithValidator, value: Any
    ) -> CheckOutcome:
        if not callable(configured.validator):
            raise ValidationConfigurationError(
                f"The validator configured for '{check.value}' is not callable"
            )
        result = await resolve_maybe_awaitable(configured.validator(value))
        if isinstance(result, CheckOutcome):
            outcome = result
            if outcome.expected is None:
                outcome.expected = (check.value, "validator")
            if outcome.received is None:
                outcome.received = (value,)
        else:
            outcome = _outcome(check, "validator", value, bool(result))
        outcome.custom_message = outcome.custom_message or configured.message
        outcome.custom_message_id = outcome.custom_message_id or configured.message_id
        return outcome


__all__ = [
    "CheckEvaluator",
    "UniquenessOracle",
    "coerce_check_value",
    "resolve_check",
    "resolve_maybe_awaitable",
    "strict_equal",
]
