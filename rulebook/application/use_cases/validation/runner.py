"""Run rules, gated or not, against a single property value."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from rulebook.domain.entities import (
    RULE_META_KEYS,
    CheckContext,
    CheckOutcome,
    InputValidationResult,
    ValidationError,
)
from rulebook.domain.errors import ValidationConfigurationError

from .checks import CheckEvaluator, resolve_maybe_awaitable
from .conditions import FlatValidator, evaluate_conditions, normalize_conditions
from .messages import make_validation_error_message_ids

_VALIDATOR_MESSAGE_IDS = ("validator",)


@dataclass
class RuleOutcome:
    """Pass/fail of one or more rules for one property, with their errors."""

    passed: bool = True
    errors: list[ValidationError] = field(default_factory=list)


def _error_from_outcome(message_ids: Sequence[str], outcome: CheckOutcome) -> ValidationError:
    return ValidationError(
        message_ids=list(message_ids),
        expected=outcome.expected,
        received=outcome.received,
        custom_message=outcome.custom_message,
        custom_message_id=outcome.custom_message_id,
    )


def _apply_rule_messages(
    errors: list[ValidationError], message: str | None, message_id: str | None
) -> None:
    if not message and not message_id:
        return
    for error in errors:
        if message and not error.custom_message:
            error.custom_message = message
        if message_id and not error.custom_message_id:
            error.custom_message_id = message_id


class RuleRunner:
    """Evaluate rules with :class:`CheckEvaluator`, honouring their conditions."""

    def __init__(self, evaluator: CheckEvaluator, validate_input: FlatValidator) -> None:
        self.evaluator = evaluator
        self.validate_input = validate_input

    async def evaluate_rule(
        self,
        rule: Mapping[str, Any],
        value: Any,
        context: CheckContext | None = None,
        collect_errors: bool = True,
    ) -> RuleOutcome:
        """Run every check of ``rule`` (or its rule-level validator) against ``value``."""

        if not isinstance(rule, Mapping):
            raise ValidationConfigurationError(f"Invalid validation rule {rule!r}")

        custom_validator = rule.get("validator")
        if custom_validator is not None:
            outcome = await self._run_rule_validator(custom_validator, value, collect_errors)
        else:
            outcome = RuleOutcome()
            checks = {key: val for key, val in rule.items() if key not in RULE_META_KEYS}
            for check_name, configured in checks.items():
                check_outcome = await self.evaluator.evaluate(check_name, configured, value, context)
                outcome.passed = outcome.passed and check_outcome.passed
                if collect_errors and not check_outcome.passed:
                    outcome.errors.append(
                        _error_from_outcome(
                            make_validation_error_message_ids(check_name, configured),
                            check_outcome,
                        )
                    )

        if collect_errors:
            _apply_rule_messages(outcome.errors, rule.get("message"), rule.get("messageId"))
        else:
            outcome.errors = []
        return outcome

    async def _run_rule_validator(
        self, custom_validator: Any, value: Any, collect_errors: bool
    ) -> RuleOutcome:
        if not callable(custom_validator):
            raise ValidationConfigurationError("The rule-level 'validator' must be callable")

        result = await resolve_maybe_awaitable(custom_validator(value, collect_errors))

        if isinstance(result, RuleOutcome):
            return result
        if isinstance(result, InputValidationResult):
            return RuleOutcome(
                passed=result.passed,
                errors=[error for errors in result.errors.values() for error in errors],
            )
        if isinstance(result, CheckOutcome):
            check_outcome = result
        else:
            check_outcome = CheckOutcome(passed=bool(result))
        if check_outcome.expected is None:
            check_outcome.expected = ("validator", None)
        if check_outcome.received is None:
            check_outcome.received = (value,)

        outcome = RuleOutcome(passed=check_outcome.passed)
        if not check_outcome.passed:
            outcome.errors.append(_error_from_outcome(_VALIDATOR_MESSAGE_IDS, check_outcome))
        return outcome

    async def run_conditional_rule(
        self,
        rule: Mapping[str, Any],
        all_conditions: Mapping[str, Any],
        input_val: Any = None,
        input: Mapping[str, Any] | None = None,
        record: Mapping[str, Any] | None = None,
        actor: Mapping[str, Any] | None = None,
        context: CheckContext | None = None,
        collect_errors: bool = True,
    ) -> RuleOutcome:
        """Run ``rule`` when its conditions hold; a skipped rule passes."""

        checks = {key: value for key, value in rule.items() if key != "conditions"}
        names, quantifier = normalize_conditions(rule.get("conditions"))

        applies = await evaluate_conditions(
            names,
            quantifier,
            input,
            record,
            actor,
            all_conditions,
            validate_input=self.validate_input,
        )
        if not applies:
            return RuleOutcome()

        return await self.evaluate_rule(checks, input_val, context, collect_errors)

    async def run_conditional_rules(
        self,
        rules: Sequence[Mapping[str, Any]],
        all_conditions: Mapping[str, Any],
        input_val: Any = None,
        input: Mapping[str, Any] | None = None,
        record: Mapping[str, Any] | None = None,
        actor: Mapping[str, Any] | None = None,
        context: CheckContext | None = None,
        collect_errors: bool = True,
    ) -> RuleOutcome:
        """Run all rules of one property concurrently and merge their outcomes."""

        outcomes = await asyncio.gather(
            *(
                self.run_conditional_rule(
                    rule,
                    all_conditions,
                    input_val=input_val,
                    input=input,
                    record=record,
                    actor=actor,
                    context=context,
                    collect_errors=collect_errors,
                )
                for rule in rules
            )
        )

        merged = RuleOutcome()
        for outcome in outcomes:
            merged.passed = merged.passed and outcome.passed
            merged.errors.extend(outcome.errors)
        return merged


__all__ = ["RuleOutcome", "RuleRunner"]
