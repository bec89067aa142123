"""Evaluate the named conditions that gate a rule."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from rulebook.domain.entities import QUANTIFIERS, InputValidationResult
from rulebook.domain.errors import ValidationConfigurationError

FlatValidator = Callable[..., Awaitable[InputValidationResult]]


def is_conditions_and_scope_tuple(conditions: Any) -> bool:
    """Return ``True`` for ``[['a', 'b'], 'any']`` shaped conditions."""

    return (
        isinstance(conditions, Sequence)
        and not isinstance(conditions, (str, bytes))
        and len(conditions) == 2
        and isinstance(conditions[0], Sequence)
        and not isinstance(conditions[0], (str, bytes))
        and conditions[1] in QUANTIFIERS
    )


def normalize_conditions(conditions: Any) -> tuple[list[str], str]:
    """Return ``(names, quantifier)`` for the ``conditions`` entry of a rule."""

    if not conditions:
        return [], "all"
    if is_conditions_and_scope_tuple(conditions):
        names, quantifier = conditions
        return list(names), quantifier
    if isinstance(conditions, Sequence) and not isinstance(conditions, (str, bytes)):
        if all(isinstance(name, str) for name in conditions):
            return list(conditions), "all"
    raise ValidationConfigurationError(f"Invalid rule conditions {conditions!r}")


async def condition_applies(
    condition: Mapping[str, Any],
    input: Mapping[str, Any] | None,
    record: Mapping[str, Any] | None,
    actor: Mapping[str, Any] | None,
    *,
    validate_input: FlatValidator,
) -> bool:
    """Return ``True`` when every scope the condition declares passes."""

    applicable = True

    actor_rules = condition.get("actor")
    if actor_rules:
        result = await validate_input(actor, actor_rules, False)
        applicable = applicable and result.passed

    input_rules = condition.get("input")
    if applicable and input_rules:
        result = await validate_input(input, input_rules, False)
        applicable = applicable and result.passed

    record_rules = condition.get("record")
    if applicable and record_rules:
        result = await validate_input(record, record_rules, False)
        applicable = applicable and result.passed

    return applicable


def _get_condition(condition_set: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    condition = condition_set.get(name) if condition_set else None
    if condition is None:
        raise ValidationConfigurationError(f"Condition '{name}' is not defined")
    if not isinstance(condition, Mapping):
        raise ValidationConfigurationError(f"Condition '{name}' must be a mapping of scopes")
    return condition


async def evaluate_conditions(
    names: Sequence[str],
    quantifier: str,
    input: Mapping[str, Any] | None,
    record: Mapping[str, Any] | None,
    actor: Mapping[str, Any] | None,
    condition_set: Mapping[str, Any],
    *,
    validate_input: FlatValidator,
) -> bool:
    """Combine the named conditions with the ``all``/``any``/``none`` quantifier."""

    if not names:
        return True

    quantifier = quantifier or "all"
    if quantifier not in QUANTIFIERS:
        raise ValidationConfigurationError(
            f"Invalid conditions scope '{quantifier}'; expected one of {', '.join(QUANTIFIERS)}"
        )

    for name in names:
        applicable = await condition_applies(
            _get_condition(condition_set, name),
            input,
            record,
            actor,
            validate_input=validate_input,
        )
        if quantifier == "any" and applicable:
            return True
        if quantifier == "none" and applicable:
            return False
        if quantifier == "all" and not applicable:
            return False

    return quantifier != "any"


__all__ = [
    "FlatValidator",
    "evaluate_conditions",
    "is_conditions_and_scope_tuple",
    "normalize_conditions",
    "condition_applies",
]
