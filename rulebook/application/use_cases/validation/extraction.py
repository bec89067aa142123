"""Extract the rules that apply to one entity operation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from rulebook.domain.entities import (
    QUANTIFIERS,
    RULE_META_KEYS,
    SCOPES,
    WILDCARD_OPERATION,
    Check,
    OperationRules,
)
from rulebook.domain.errors import ValidationConfigurationError

logger = logging.getLogger(__name__)

_ENTITY_VALIDATION_KEYS = frozenset(SCOPES) | {"conditions"}
_RULE_KEYS = frozenset(Check.names()) | RULE_META_KEYS


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def is_validation_rule(rule: Any) -> bool:
    return isinstance(rule, Mapping) and all(key in _RULE_KEYS for key in rule)


def is_rule_list(rules: Any) -> bool:
    return _is_sequence(rules) and all(rule is None or is_validation_rule(rule) for rule in rules)


def is_entity_validations(validations: Any) -> bool:
    if not isinstance(validations, Mapping):
        return False
    for key, scope_rules in validations.items():
        if key not in _ENTITY_VALIDATION_KEYS:
            return False
        if key == "conditions" or not scope_rules:
            continue
        if not isinstance(scope_rules, Mapping):
            return False
        if not all(is_rule_list(rules) for rules in scope_rules.values() if rules):
            return False
    return True


def is_entity_input_validations(validations: Any) -> bool:
    """Return ``True`` for a bare ``property -> [rule, ...]`` mapping."""

    return (
        isinstance(validations, Mapping)
        and bool(validations)
        and not any(key in _ENTITY_VALIDATION_KEYS for key in validations)
        and all(is_rule_list(rules) for rules in validations.values() if rules)
    )


def _normalize_entity_validations(validations: Any) -> Mapping[str, Any]:
    if validations is None:
        return {}
    if is_entity_input_validations(validations):
        return {"input": validations}
    if not is_entity_validations(validations):
        raise ValidationConfigurationError(f"Invalid entity validations {validations!r}")
    return validations


def _make_conditional_rule(
    checks: Mapping[str, Any], condition_names: Any, scope: Any
) -> dict[str, Any]:
    rule = dict(checks)
    if condition_names:
        if not _is_sequence(condition_names):
            raise ValidationConfigurationError(
                f"Rule conditions must be a list of condition names, got {condition_names!r}"
            )
        quantifier = scope or "all"
        if quantifier not in QUANTIFIERS:
            raise ValidationConfigurationError(
                f"Invalid conditions scope '{quantifier}'; expected one of {', '.join(QUANTIFIERS)}"
            )
        rule["conditions"] = [list(condition_names), quantifier]
    return rule


def _rules_from_operation_list(
    operation_name: str, operations: Sequence[Any], checks: Mapping[str, Any]
) -> list[dict[str, Any]]:
    """Resolve ``['create', '*', ['update', ['isOwner'], 'any']]`` style entries."""

    rules: list[dict[str, Any]] = []
    for entry in operations:
        if _is_sequence(entry):
            if not entry or entry[0] != operation_name:
                continue
            if len(entry) > 3:
                raise ValidationConfigurationError(
                    f"Invalid operations definition {list(entry)!r}; expected [operation, conditions?, scope?]"
                )
            condition_names = entry[1] if len(entry) > 1 else None
            scope = entry[2] if len(entry) > 2 else "all"
            rules.append(_make_conditional_rule(checks, condition_names, scope))
        elif entry == WILDCARD_OPERATION or entry == operation_name:
            rules.append(dict(checks))
    return rules


def _rules_from_operation_map(
    operation_name: str, operations: Mapping[str, Any], checks: Mapping[str, Any]
) -> list[dict[str, Any]]:
    """Resolve ``{'update': [{'conditions': [...], 'scope': 'any'}]}`` style entries."""

    if operation_name not in operations:
        return []
    descriptors = operations[operation_name]
    if not _is_sequence(descriptors):
        raise ValidationConfigurationError(
            f"Invalid operations definition for {operation_name} in {dict(operations)!r}"
        )

    rules: list[dict[str, Any]] = []
    for descriptor in descriptors:
        if not isinstance(descriptor, Mapping):
            raise ValidationConfigurationError(
                f"Invalid operations definition for {operation_name}: {descriptor!r}"
            )
        rules.append(
            _make_conditional_rule(
                checks, descriptor.get("conditions"), descriptor.get("scope") or "all"
            )
        )
    return rules


def extract_rules_for_operation(operation_name: str, rule: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Return the conditional rules one authored rule contributes to ``operation_name``."""

    checks = {key: value for key, value in rule.items() if key != "operations"}
    operations = rule.get("operations")
    if operations is None:
        operations = [WILDCARD_OPERATION]

    if isinstance(operations, Mapping):
        return _rules_from_operation_map(operation_name, operations, checks)
    if _is_sequence(operations):
        return _rules_from_operation_list(operation_name, operations, checks)
    raise ValidationConfigurationError(f"Invalid operations definition {operations!r}")


def extract_operation_rules(operation_name: str, entity_validations: Any) -> OperationRules:
    """Return the rules of ``entity_validations`` that apply to ``operation_name``."""

    validations = _normalize_entity_validations(entity_validations)
    scoped: dict[str, dict[str, list[dict[str, Any]]]] = {scope: {} for scope in SCOPES}

    for scope in SCOPES:
        scope_rules = validations.get(scope)
        if not scope_rules:
            continue

        for property_name, property_rules in scope_rules.items():
            if not property_rules:
                continue

            applicable: list[dict[str, Any]] = []
            for rule in property_rules:
                if not rule:
                    continue
                extracted = extract_rules_for_operation(operation_name, rule)
                if not extracted:
                    logger.debug(
                        "No applicable rule for operation %s, property %s.%s: %r",
                        operation_name,
                        scope,
                        property_name,
                        rule,
                    )
                applicable.extend(extracted)

            if applicable:
                scoped[scope][property_name] = applicable

    return OperationRules(
        actor=scoped["actor"],
        input=scoped["input"],
        record=scoped["record"],
        conditions=validations.get("conditions") or {},
    )


__all__ = [
    "extract_operation_rules",
    "extract_rules_for_operation",
    "is_entity_input_validations",
    "is_entity_validations",
    "is_rule_list",
    "is_validation_rule",
]
