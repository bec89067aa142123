"""Fluent builders turning shorthand field rules into engine rules.

Shorthand rules are mappings such as ``{"required": True, "min": 18,
"email": "Invalid email"}``. A ``(value, message)`` tuple attaches a message
to a single check, e.g. ``{"minLength": (8, "Too short")}``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from rulebook.domain.entities import HTTP_SECTIONS, SCOPES
from rulebook.domain.errors import ValidationConfigurationError

ShorthandRule = Mapping[str, Any]

_RENAMED_CHECKS = {
    "min": "gte",
    "max": "lte",
    "type": "datatype",
    "in": "inList",
    "notIn": "notInList",
}
_DATATYPE_FLAGS = {"email": "email", "url": "httpUrl", "date": "date"}
_FLAG_CHECKS = frozenset({"required", "unique"})
_PASSTHROUGH_CHECKS = frozenset(
    {
        "minLength",
        "maxLength",
        "pattern",
        "eq",
        "neq",
        "gt",
        "gte",
        "lt",
        "lte",
        "custom",
    }
)


def _split_message(value: Any) -> tuple[Any, str | None]:
    if isinstance(value, tuple) and len(value) == 2 and isinstance(value[1], (str, type(None))):
        return value[0], value[1]
    return value, None


def _copy_operations(operations: Any) -> Any:
    if isinstance(operations, Mapping):
        return dict(operations)
    return list(operations)


def parse_rule(rule: ShorthandRule) -> list[dict[str, Any]]:
    """Expand one shorthand rule into engine rules, one per check."""

    if not isinstance(rule, Mapping):
        raise ValidationConfigurationError(f"Invalid shorthand rule {rule!r}")

    operations = rule.get("operations")
    rule_message = rule.get("message")
    parsed: list[dict[str, Any]] = []

    for key, raw in rule.items():
        if key in {"operations", "message"}:
            continue

        if key in _DATATYPE_FLAGS:
            if not raw:
                continue
            engine_rule = {"datatype": _DATATYPE_FLAGS[key]}
            message = raw if isinstance(raw, str) else None
        elif key in _FLAG_CHECKS:
            if isinstance(raw, str):
                engine_rule, message = {key: True}, raw
            else:
                value, message = _split_message(raw)
                engine_rule = {key: value}
        elif key in _RENAMED_CHECKS:
            value, message = _split_message(raw)
            engine_rule = {_RENAMED_CHECKS[key]: value}
        elif key in _PASSTHROUGH_CHECKS:
            value, message = _split_message(raw)
            engine_rule = {key: value}
        else:
            raise ValidationConfigurationError(f"Unknown shorthand rule '{key}'")

        message = message or rule_message
        if message:
            engine_rule["message"] = message
        if operations is not None:
            engine_rule["operations"] = _copy_operations(operations)
        parsed.append(engine_rule)

    return parsed


def password_rule(
    *,
    min_length: int = 8,
    require_upper: bool = False,
    require_digit: bool = False,
    require_special: bool = False,
    message: str | None = None,
    operations: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Shorthand rule for a password with optional complexity requirements."""

    rule: dict[str, Any] = {"required": True, "minLength": min_length}
    if operations is not None:
        rule["operations"] = list(operations)

    lookaheads: list[str] = []
    requirements: list[str] = []
    if require_upper:
        lookaheads.append(r"(?=.*[A-Z])")
        requirements.append("uppercase letter")
    if require_digit:
        lookaheads.append(r"(?=.*\d)")
        requirements.append("digit")
    if require_special:
        lookaheads.append(r"(?=.*[!@#$%^&*])")
        requirements.append("special character")

    if lookaheads:
        rule["pattern"] = re.compile("".join(lookaheads) + ".+")
        message = message or f"Password must contain at least one {', '.join(requirements)}"
    if message:
        rule["message"] = message
    return rule


def name_rule(
    *,
    min_length: int | None = None,
    max_length: int | None = None,
    message: str | None = None,
    operations: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Shorthand rule for a required human name."""

    rule: dict[str, Any] = {"required": True}
    if operations is not None:
        rule["operations"] = list(operations)
    if message:
        rule["message"] = message
    if min_length:
        rule["minLength"] = min_length
    if max_length:
        rule["maxLength"] = max_length
    return rule


class EntityValidationBuilder:
    """Build entity validations: ``scope -> property -> [rule, ...]``."""

    def __init__(self) -> None:
        self._validations: dict[str, dict[str, list[dict[str, Any]]]] = {}

    def add(self, scope: str, field: str, rule: ShorthandRule) -> "EntityValidationBuilder":
        if scope not in SCOPES:
            raise ValidationConfigurationError(
                f"Invalid scope '{scope}'; expected one of {', '.join(SCOPES)}"
            )
        field_rules = self._validations.setdefault(scope, {}).setdefault(field, [])
        field_rules.extend(parse_rule(rule))
        return self

    def add_password(self, scope: str, field: str, **options: Any) -> "EntityValidationBuilder":
        return self.add(scope, field, password_rule(**options))

    def add_name(self, scope: str, field: str, **options: Any) -> "EntityValidationBuilder":
        return self.add(scope, field, name_rule(**options))

    def inputs(self, fields: Mapping[str, ShorthandRule]) -> "EntityValidationBuilder":
        return self._add_fields("input", fields)

    def actors(self, fields: Mapping[str, ShorthandRule]) -> "EntityValidationBuilder":
        return self._add_fields("actor", fields)

    def records(self, fields: Mapping[str, ShorthandRule]) -> "EntityValidationBuilder":
        return self._add_fields("record", fields)

    def conditions(self, conditions: Mapping[str, Mapping[str, Any]]) -> "EntityValidationBuilder":
        """Register named conditions referenced from rule ``operations``."""

        self._validations.setdefault("conditions", {}).update(conditions)
        return self

    def _add_fields(self, scope: str, fields: Mapping[str, ShorthandRule]) -> "EntityValidationBuilder":
        for field, rule in fields.items():
            self.add(scope, field, rule)
        return self

    def build(self) -> dict[str, Any]:
        return self._validations


class HttpValidationBuilder:
    """Build HTTP validations: ``section -> property -> rule``.

    Checks added for the same field are merged into a single rule; the first
    message seen wins.
    """

    def __init__(self) -> None:
        self._validations: dict[str, dict[str, dict[str, Any]]] = {}

    def add(self, section: str, field: str, rule: ShorthandRule) -> "HttpValidationBuilder":
        if section not in HTTP_SECTIONS:
            raise ValidationConfigurationError(
                f"Invalid request section '{section}'; expected one of {', '.join(HTTP_SECTIONS)}"
            )
        merged = self._validations.setdefault(section, {}).setdefault(field, {})
        for parsed in parse_rule(rule):
            for key, value in parsed.items():
                if key == "operations":
                    continue
                if key == "message":
                    merged.setdefault("message", value)
                else:
                    merged[key] = value
        return self

    def add_password(self, section: str, field: str, **options: Any) -> "HttpValidationBuilder":
        return self.add(section, field, password_rule(**options))

    def body(self, fields: Mapping[str, ShorthandRule]) -> "HttpValidationBuilder":
        return self._add_fields("body", fields)

    def query(self, fields: Mapping[str, ShorthandRule]) -> "HttpValidationBuilder":
        return self._add_fields("query", fields)

    def param(self, fields: Mapping[str, ShorthandRule]) -> "HttpValidationBuilder":
        return self._add_fields("param", fields)

    def header(self, fields: Mapping[str, ShorthandRule]) -> "HttpValidationBuilder":
        return self._add_fields("header", fields)

    def _add_fields(self, section: str, fields: Mapping[str, ShorthandRule]) -> "HttpValidationBuilder":
        for field, rule in fields.items():
            self.add(section, field, rule)
        return self

    def build(self) -> dict[str, dict[str, dict[str, Any]]]:
        return self._validations


def entity() -> EntityValidationBuilder:
    return EntityValidationBuilder()


def http() -> HttpValidationBuilder:
    return HttpValidationBuilder()


__all__ = [
    "EntityValidationBuilder",
    "HttpValidationBuilder",
    "entity",
    "http",
    "name_rule",
    "parse_rule",
    "password_rule",
]
