"""Message identifiers and human readable text for validation errors.

Every failing check gets an ordered list of message ids, from the most
generic (``validation.minlength``) to the most specific
(``validation.entity.user.input.name.minlength.8`` or a custom id). The final
text is looked up walking that list backwards, first in the caller supplied
overrides and then in :data:`GENERIC_ERROR_MESSAGES`.

Templates may use these placeholders:

- ``{key}``: the property being validated, e.g. ``name``
- ``{path}``: the dotted path of the property, e.g. ``body.name``
- ``{validationName}``: the check name, e.g. ``minLength``
- ``{validationValue}``: the configured value, e.g. ``8``
- ``{received}``: the value that was validated
- ``{refinedReceived}``: the derived value the check used, e.g. a length
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from rulebook.domain.entities import ValidationError, ValueWithMessage, ValueWithValidator

from .checks import coerce_check_value

MESSAGE_ID_PREFIX = "validation"
STRING_TOO_LONG_MESSAGE_ID = "error.string.toolong"
ARRAY_TOO_LONG_MESSAGE_ID = "error.array.toolong"

DEFAULT_ERROR_MESSAGE = (
    "Validation failed for '{key}'; expected '{validationName}/{validationValue}', "
    "received '{received}/{refinedReceived}'."
)

GENERIC_ERROR_MESSAGES: dict[str, str] = {
    "validation.eq": "Value for '{key}' should be equal to '{validationValue}'",
    "validation.gt": "Value for '{key}' should be greater than '{validationValue}'",
    "validation.lt": "Value for '{key}' should be less than '{validationValue}'",
    "validation.gte": "Value for '{key}' should be greater than or equal to '{validationValue}'",
    "validation.lte": "Value for '{key}' should be less than or equal to '{validationValue}'",
    "validation.neq": "Value for '{key}' should not be equal to '{validationValue}'",
    "validation.custom": "Value for '{key}' is invalid",
    "validation.inlist": "Value for '{key}' should be one of '{validationValue}'",
    "validation.unique": "Value for '{key}' should be unique",
    "validation.pattern": "Value for '{key}' should match '{validationValue}' pattern",
    "validation.datatype": "Value for '{key}' should be '{validationValue}'",
    "validation.required": "Value for '{key}' is required",
    "validation.maxlength": (
        "Value for '{key}' should have maximum length of '{validationValue}'; "
        "instead of '{refinedReceived}'"
    ),
    "validation.minlength": (
        "Value for '{key}' should have minimum length of '{validationValue}'; "
        "instead of '{refinedReceived}'"
    ),
    "validation.notinlist": "Value for '{key}' should not be one of '{validationValue}'",
    "validation.validator": "Value for '{key}' is invalid",
    "validation.error.string.toolong": (
        "Value for '{key}' exceeds the maximum length of '{validationValue}' characters"
    ),
    "validation.error.array.toolong": (
        "Value for '{key}' exceeds the maximum length of '{validationValue}' items"
    ),
}

_PLACEHOLDER_PATTERN = re.compile(
    r"\{(key|path|validationName|validationValue|received|refinedReceived)\}"
)


def stringify(value: Any) -> str:
    """Render a configured or received value the way messages and ids show it."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(stringify(item) for item in value)
    if callable(value):
        return getattr(value, "__name__", "validator")
    return str(value)


def make_validation_error_message_ids(check_name: str, check_value: Any) -> list[str]:
    """Return ``[check, check.value]`` plus the custom id of a wrapped value."""

    check_value = coerce_check_value(check_value)
    name = check_name.lower()

    if isinstance(check_value, ValueWithMessage):
        tag = stringify(check_value.value)
    elif isinstance(check_value, ValueWithValidator):
        tag = "validator"
    else:
        tag = stringify(check_value)

    ids = [name, f"{name}.{tag.lower()}"]

    custom_id = getattr(check_value, "message_id", None)
    if custom_id:
        ids.append(custom_id)
    return ids


def make_validation_message_ids_for_prefix(prefix: str, message_ids: Sequence[str]) -> list[str]:
    return [f"{prefix.lower()}.{message_id}" for message_id in message_ids]


def make_entity_validation_message_ids(
    entity_name: str,
    scope: str,
    property_name: str,
    message_ids: Sequence[str],
) -> list[str]:
    """Qualify check ids with property, scope and entity prefixes."""

    base_ids = list(message_ids)
    property_ids = make_validation_message_ids_for_prefix(property_name, base_ids)
    scope_ids = make_validation_message_ids_for_prefix(scope, property_ids)
    entity_ids = make_validation_message_ids_for_prefix(
        f"entity.{entity_name}", base_ids + property_ids + scope_ids
    )
    return [f"{MESSAGE_ID_PREFIX}.{message_id}" for message_id in base_ids + entity_ids]


def make_http_validation_message_ids(
    section: str,
    message_ids: Sequence[str],
    property_name: str | None = None,
) -> list[str]:
    """Qualify check ids with the ``http.<section>.<property>`` prefix."""

    keys = ["http", section]
    if property_name:
        keys.append(property_name.lower())
    base_ids = list(message_ids)
    section_ids = make_validation_message_ids_for_prefix(".".join(keys), base_ids)
    return [f"{MESSAGE_ID_PREFIX}.{message_id}" for message_id in base_ids + section_ids]


def make_input_validation_message_ids(message_ids: Sequence[str]) -> list[str]:
    return [f"{MESSAGE_ID_PREFIX}.{message_id}" for message_id in message_ids]


def _lookup(message_id: str, overrides: Mapping[str, str] | None) -> str | None:
    if overrides and message_id in overrides:
        return overrides[message_id]
    return GENERIC_ERROR_MESSAGES.get(message_id)


def resolve_message_template(
    error: ValidationError, overrides: Mapping[str, str] | None = None
) -> str:
    """Pick the template for ``error`` following the override chain."""

    if error.custom_message_id:
        template = _lookup(error.custom_message_id, overrides)
        if template is not None:
            return template

    specific_first = list(reversed(error.message_ids))
    if overrides:
        for message_id in specific_first:
            if message_id in overrides:
                return overrides[message_id]
    for message_id in specific_first:
        template = GENERIC_ERROR_MESSAGES.get(message_id)
        if template is not None:
            return template
    return DEFAULT_ERROR_MESSAGE


def make_validation_error_message(
    error: ValidationError, overrides: Mapping[str, str] | None = None
) -> str:
    """Return the human readable message for ``error``."""

    if error.custom_message:
        return error.custom_message

    template = resolve_message_template(error, overrides)

    path = list(error.path) or [""]
    validation_name, validation_value = error.expected or (None, None)
    received = error.received or ()
    replacements = {
        "key": path[-1],
        "path": ".".join(path),
        "validationName": stringify(validation_name),
        "validationValue": stringify(validation_value),
        "received": stringify(received[0]) if len(received) > 0 else "",
        "refinedReceived": stringify(received[1]) if len(received) > 1 else "",
    }
    return _PLACEHOLDER_PATTERN.sub(lambda match: replacements[match.group(1)], template)


__all__ = [
    "ARRAY_TOO_LONG_MESSAGE_ID",
    "DEFAULT_ERROR_MESSAGE",
    "GENERIC_ERROR_MESSAGES",
    "MESSAGE_ID_PREFIX",
    "STRING_TOO_LONG_MESSAGE_ID",
    "make_entity_validation_message_ids",
    "make_http_validation_message_ids",
    "make_input_validation_message_ids",
    "make_validation_error_message",
    "make_validation_error_message_ids",
    "make_validation_message_ids_for_prefix",
    "resolve_message_template",
    "stringify",
]
