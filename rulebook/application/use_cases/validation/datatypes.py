"""Predicates backing the ``datatype`` check."""

from __future__ import annotations

import importlib
import ipaddress
import json
import math
import re
from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any
from urllib.parse import urlsplit

_EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_HTTP_SCHEMES = {"http", "https"}


@lru_cache(maxsize=1)
def _get_pandas_module() -> Any:
    """Load :mod:`pandas` lazily; only date parsing needs it."""

    return importlib.import_module("pandas")


def to_number(value: Any) -> float | None:
    """Return ``value`` as a float, or ``None`` when it is not numeric."""

    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def is_numeric(value: Any) -> bool:
    return to_number(value) is not None


def is_email(value: Any) -> bool:
    return isinstance(value, str) and _EMAIL_PATTERN.match(value) is not None


def _ip_version(value: Any) -> int | None:
    if not isinstance(value, str):
        return None
    try:
        return ipaddress.ip_address(value).version
    except ValueError:
        return None


def is_ip(value: Any) -> bool:
    return _ip_version(value) is not None


def is_ipv4(value: Any) -> bool:
    return _ip_version(value) == 4


def is_ipv6(value: Any) -> bool:
    return _ip_version(value) == 6


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and _UUID_PATTERN.match(value) is not None


def is_json_string(value: Any) -> bool:
    if not isinstance(value, (str, bytes)):
        return False
    try:
        json.loads(value)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return False
    return True


def is_date_string(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return False
    pd = _get_pandas_module()
    try:
        parsed = pd.to_datetime(value, errors="raise")
    except (ValueError, TypeError, OverflowError):
        return False
    return not pd.isna(parsed)


def is_http_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme.lower() in _HTTP_SCHEMES and bool(parts.netloc)


def type_name(value: Any) -> str:
    """Return the JSON-flavoured type name of ``value``."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    if callable(value):
        return "function"
    return "object"


DATATYPE_PREDICATES: dict[str, Callable[[Any], bool]] = {
    "number": is_numeric,
    "email": is_email,
    "ip": is_ip,
    "ipv4": is_ipv4,
    "ipv6": is_ipv6,
    "uuid": is_uuid,
    "json": is_json_string,
    "date": is_date_string,
    "httpUrl": is_http_url,
}


def matches_datatype(kind: str, value: Any) -> bool:
    """Return ``True`` when ``value`` belongs to the ``kind`` datatype family."""

    if value is None:
        return False
    predicate = DATATYPE_PREDICATES.get(kind)
    if predicate is None:
        return type_name(value) == kind
    return predicate(value)


__all__ = [
    "DATATYPE_PREDICATES",
    "is_date_string",
    "is_email",
    "is_http_url",
    "is_ip",
    "is_ipv4",
    "is_ipv6",
    "is_json_string",
    "is_numeric",
    "is_uuid",
    "matches_datatype",
    "to_number",
    "type_name",
]
