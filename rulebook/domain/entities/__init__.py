"""Domain entities exposed by the application."""

from .validation import (
    HTTP_SECTIONS,
    QUANTIFIERS,
    RULE_META_KEYS,
    SCOPES,
    WILDCARD_OPERATION,
    Check,
    CheckContext,
    CheckOutcome,
    CheckPredicate,
    InputValidationResult,
    OperationRules,
    PropertyErrors,
    RequestContext,
    ValidationError,
    ValidationResult,
    ValueWithMessage,
    ValueWithValidator,
)

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
