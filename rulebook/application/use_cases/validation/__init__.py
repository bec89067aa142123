"""Evaluate validation rules against actor, input, record and HTTP data."""

from .builder import EntityValidationBuilder, HttpValidationBuilder, entity, http
from .checks import CheckEvaluator, UniquenessOracle
from .conditions import evaluate_conditions
from .extraction import extract_operation_rules, extract_rules_for_operation
from .messages import (
    GENERIC_ERROR_MESSAGES,
    make_entity_validation_message_ids,
    make_http_validation_message_ids,
    make_validation_error_message,
    make_validation_error_message_ids,
)
from .runner import RuleOutcome, RuleRunner
from .validator import Validator

__all__ = [
    "CheckEvaluator",
    "EntityValidationBuilder",
    "GENERIC_ERROR_MESSAGES",
    "HttpValidationBuilder",
    "RuleOutcome",
    "RuleRunner",
    "UniquenessOracle",
    "Validator",
    "entity",
    "evaluate_conditions",
    "extract_operation_rules",
    "extract_rules_for_operation",
    "http",
    "make_entity_validation_message_ids",
    "make_http_validation_message_ids",
    "make_validation_error_message",
    "make_validation_error_message_ids",
]
