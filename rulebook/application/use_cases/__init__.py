"""Aggregate application use cases."""

from .validation import Validator

__all__ = [
    "Validator",
]
