"""Domain entities describing validation rules and their outcomes."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Union

SCOPES: tuple[str, ...] = ("actor", "input", "record")
HTTP_SECTIONS: tuple[str, ...] = ("body", "param", "query", "header")
QUANTIFIERS: tuple[str, ...] = ("all", "any", "none")
WILDCARD_OPERATION = "*"

# Keys a rule may carry next to its checks.
RULE_META_KEYS: frozenset[str] = frozenset(
    {"message", "messageId", "validator", "operations", "conditions"}
)


class Check(str, Enum):
    """Closed vocabulary of primitive checks."""

    REQUIRED = "required"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"
    DATATYPE = "datatype"
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN_LIST = "inList"
    NOT_IN_LIST = "notInList"
    UNIQUE = "unique"
    CUSTOM = "custom"

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass
class CheckOutcome:
    """Result of evaluating one check against one value."""

    passed: bool
    expected: tuple[str, Any] | None = None
    received: tuple[Any, ...] | None = None
    custom_message: str | None = None
    custom_message_id: str | None = None


CheckPredicate = Callable[..., Union[bool, CheckOutcome, Awaitable[Union[bool, CheckOutcome]]]]


@dataclass(frozen=True)
class ValueWithMessage:
    """Configured check value carrying its own message or message id."""

    value: Any
    message: str | None = None
    message_id: str | None = None


@dataclass(frozen=True)
class ValueWithValidator:
    """Configured check value whose validator replaces the built-in check."""

    validator: CheckPredicate
    message: str | None = None
    message_id: str | None = None


@dataclass(frozen=True)
class CheckContext:
    """Where a check is being evaluated; handed to the uniqueness oracle."""

    property_name: str | None = None
    scope: str | None = None
    entity_name: str | None = None


@dataclass
class ValidationError:
    """A single failed check, ready to be rendered for a client."""

    message_ids: list[str] = field(default_factory=list)
    path: list[str] = field(default_factory=list)
    message: str | None = None
    expected: tuple[str, Any] | None = None
    received: tuple[Any, ...] | None = None
    custom_message: str | None = None
    custom_message_id: str | None = None

    def minimal(self) -> "ValidationError":
        """Return a copy without the raw expected/received values."""

        return replace(
            self,
            expected=None,
            received=None,
            custom_message=None,
            custom_message_id=None,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": self.message,
            "messageIds": list(self.message_ids),
            "path": list(self.path),
        }
        if self.expected is not None:
            payload["expected"] = _jsonable(self.expected)
        if self.received is not None:
            payload["received"] = _jsonable(self.received)
        if self.custom_message is not None:
            payload["customMessage"] = self.custom_message
        if self.custom_message_id is not None:
            payload["customMessageId"] = self.custom_message_id
        return payload


PropertyErrors = dict[str, list[ValidationError]]


@dataclass
class InputValidationResult:
    """Outcome of validating one flat object against a property -> rule map."""

    passed: bool = True
    errors: PropertyErrors = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pass": self.passed,
            "errors": {
                prop: [error.to_dict() for error in errors]
                for prop, errors in self.errors.items()
            },
        }


@dataclass
class ValidationResult:
    """Outcome of validating an entity operation or an HTTP request."""

    passed: bool = True
    errors: dict[str, PropertyErrors] = field(default_factory=dict)

    def add_errors(self, scope: str, prop: str, errors: list[ValidationError]) -> None:
        if not errors:
            return
        self.errors.setdefault(scope, {}).setdefault(prop, []).extend(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pass": self.passed,
            "errors": {
                scope: {
                    prop: [error.to_dict() for error in errors]
                    for prop, errors in scope_errors.items()
                }
                for scope, scope_errors in self.errors.items()
            },
        }


@dataclass(frozen=True)
class RequestContext:
    """Already parsed sections of an HTTP request."""

    body: Mapping[str, Any] | None = None
    path_parameters: Mapping[str, Any] | None = None
    query_string_parameters: Mapping[str, Any] | None = None
    headers: Mapping[str, Any] | None = None

    def section(self, name: str) -> Mapping[str, Any] | None:
        if name == "body":
            return self.body
        if name == "param":
            return self.path_parameters
        if name == "query":
            return self.query_string_parameters
        if name == "header":
            return self.headers
        raise ValueError(f"Unknown request section '{name}'")


@dataclass(frozen=True)
class OperationRules:
    """Rules applicable to one operation, grouped by scope."""

    actor: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    input: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    record: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    conditions: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def scope(self, name: str) -> dict[str, list[dict[str, Any]]]:
        return getattr(self, name)


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (ValueWithMessage, ValueWithValidator)):
        return _jsonable(getattr(value, "value", "validator"))
    if callable(value):
        return getattr(value, "__name__", "validator")
    return str(value)


__all__ = [
    "Check",
    "CheckContext",
    "CheckOutcome",
    "CheckPredicate",
    "HTTP_SECTIONS",
    "InputValidationResult",
    "OperationRules",
    "PropertyErrors",
    "QUANTIFIERS",
    "RULE_META_KEYS",
    "RequestContext",
    "SCOPES",
    "ValidationError",
    "ValidationResult",
    "ValueWithMessage",
    "ValueWithValidator",
    "WILDCARD_OPERATION",
]
