"""Validate entity operations, flat inputs and HTTP requests against rules."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rulebook.domain.entities import (
    HTTP_SECTIONS,
    SCOPES,
    CheckContext,
    InputValidationResult,
    RequestContext,
    ValidationError,
    ValidationResult,
)
from rulebook.domain.errors import ValidationConfigurationError

from .checks import CheckEvaluator, UniquenessOracle
from .extraction import extract_operation_rules
from .messages import (
    ARRAY_TOO_LONG_MESSAGE_ID,
    STRING_TOO_LONG_MESSAGE_ID,
    make_entity_validation_message_ids,
    make_http_validation_message_ids,
    make_input_validation_message_ids,
    make_validation_error_message,
)
from .runner import RuleRunner

if TYPE_CHECKING:
    from rulebook.config import Settings

DEFAULT_MAX_STRING_LENGTH = 1_000_000
DEFAULT_MAX_ARRAY_LENGTH = 10_000


def _value_of(source: Mapping[str, Any] | None, key: str) -> Any:
    if source is None:
        return None
    if not isinstance(source, Mapping):
        raise ValidationConfigurationError(
            f"Expected a mapping to validate, got {type(source).__name__}"
        )
    return source.get(key)


class Validator:
    """Evaluate validation rules over actor/input/record data and HTTP requests.

    A validator holds no per-call state; the same instance can serve concurrent
    calls. ``uniqueness_oracle`` backs the ``unique`` check and receives the
    value plus a :class:`~rulebook.domain.entities.CheckContext`.
    """

    def __init__(
        self,
        *,
        uniqueness_oracle: UniquenessOracle | None = None,
        max_string_length: int = DEFAULT_MAX_STRING_LENGTH,
        max_array_length: int = DEFAULT_MAX_ARRAY_LENGTH,
        verbose_errors: bool = False,
    ) -> None:
        self.evaluator = CheckEvaluator(uniqueness_oracle)
        self.runner = RuleRunner(self.evaluator, self._validate_flat)
        self.max_string_length = max_string_length
        self.max_array_length = max_array_length
        self.verbose_errors = verbose_errors

    @classmethod
    def from_settings(
        cls, settings: "Settings", *, uniqueness_oracle: UniquenessOracle | None = None
    ) -> "Validator":
        return cls(
            uniqueness_oracle=uniqueness_oracle,
            max_string_length=settings.max_string_length,
            max_array_length=settings.max_array_length,
            verbose_errors=settings.verbose_errors,
        )

    async def validate_entity(
        self,
        *,
        operation_name: str,
        entity_name: str,
        entity_validations: Mapping[str, Any] | None,
        input: Mapping[str, Any] | None = None,
        actor: Mapping[str, Any] | None = None,
        record: Mapping[str, Any] | None = None,
        collect_errors: bool = True,
        verbose_errors: bool | None = None,
        overridden_error_messages: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """Validate the actor, input and record of an entity operation."""

        result = ValidationResult()
        if not entity_validations:
            return result

        verbose = self.verbose_errors if verbose_errors is None else verbose_errors
        operation_rules = extract_operation_rules(operation_name, entity_validations)
        sources = {"actor": actor, "input": input, "record": record}

        for scope in SCOPES:
            for property_name, rules in operation_rules.scope(scope).items():
                outcome = await self.runner.run_conditional_rules(
                    rules,
                    operation_rules.conditions,
                    input_val=_value_of(sources[scope], property_name),
                    input=input,
                    record=record,
                    actor=actor,
                    context=CheckContext(
                        property_name=property_name,
                        scope=scope,
                        entity_name=entity_name,
                    ),
                    collect_errors=collect_errors,
                )
                result.passed = result.passed and outcome.passed

                if not collect_errors:
                    continue

                for error in outcome.errors:
                    error.message_ids = make_entity_validation_message_ids(
                        entity_name, scope, property_name, error.message_ids
                    )
                    error.path = [scope, property_name]
                    error.message = make_validation_error_message(error, overridden_error_messages)
                result.add_errors(scope, property_name, self._present(outcome.errors, verbose))

        return result

    async def validate_input(
        self,
        input: Mapping[str, Any] | None,
        rules: Mapping[str, Mapping[str, Any]] | None,
        collect_errors: bool = True,
        *,
        overridden_error_messages: Mapping[str, str] | None = None,
    ) -> InputValidationResult:
        """Validate a flat object against a ``property -> rule`` map."""

        result = await self._validate_flat(input, rules, collect_errors)
        for errors in result.errors.values():
            for error in errors:
                error.message_ids = make_input_validation_message_ids(error.message_ids)
                error.message = make_validation_error_message(error, overridden_error_messages)
        return result

    async def validate_http_request(
        self,
        *,
        request_context: RequestContext,
        validations: Mapping[str, Mapping[str, Mapping[str, Any]]],
        collect_errors: bool = True,
        verbose_errors: bool | None = None,
        overridden_error_messages: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """Validate the body, path, query and header sections of a request."""

        result = ValidationResult()
        verbose = self.verbose_errors if verbose_errors is None else verbose_errors

        for section in HTTP_SECTIONS:
            section_rules = validations.get(section)
            if not section_rules:
                continue

            section_result = await self._validate_flat(
                request_context.section(section), section_rules, collect_errors
            )
            result.passed = result.passed and section_result.passed

            if not collect_errors:
                continue

            for property_name, errors in section_result.errors.items():
                for error in errors:
                    error.path = [section, *error.path]
                    error.message_ids = make_http_validation_message_ids(
                        section, error.message_ids, property_name
                    )
                    error.message = make_validation_error_message(error, overridden_error_messages)
                result.add_errors(section, property_name, self._present(errors, verbose))

        return result

    async def _validate_flat(
        self,
        input: Mapping[str, Any] | None,
        rules: Mapping[str, Mapping[str, Any]] | None,
        collect_errors: bool = True,
    ) -> InputValidationResult:
        result = InputValidationResult()
        if not rules:
            return result

        for property_name, rule in rules.items():
            if not rule:
                continue

            value = _value_of(input, property_name)

            size_error = self._check_size(value)
            if size_error is not None:
                result.passed = False
                if collect_errors:
                    size_error.path = [property_name]
                    result.errors[property_name] = [size_error]
                continue

            outcome = await self.runner.evaluate_rule(
                rule,
                value,
                CheckContext(property_name=property_name),
                collect_errors,
            )
            result.passed = result.passed and outcome.passed

            if collect_errors and outcome.errors:
                for error in outcome.errors:
                    error.path = [property_name, *error.path]
                result.errors[property_name] = outcome.errors

        return result

    def _check_size(self, value: Any) -> ValidationError | None:
        if isinstance(value, str) and len(value) > self.max_string_length:
            return ValidationError(
                message_ids=[STRING_TOO_LONG_MESSAGE_ID],
                expected=("maxLength", self.max_string_length),
                received=(None, len(value)),
            )
        if isinstance(value, (list, tuple)) and len(value) > self.max_array_length:
            return ValidationError(
                message_ids=[ARRAY_TOO_LONG_MESSAGE_ID],
                expected=("maxLength", self.max_array_length),
                received=(None, len(value)),
            )
        return None

    @staticmethod
    def _present(errors: list[ValidationError], verbose: bool) -> list[ValidationError]:
        if verbose:
            return errors
        return [error.minimal() for error in errors]


__all__ = ["DEFAULT_MAX_ARRAY_LENGTH", "DEFAULT_MAX_STRING_LENGTH", "Validator"]
