from .validation import (
    EntityValidationRequest,
    HttpValidationRequest,
    InputValidationRequest,
    RequestSnapshot,
    ValidationResultRead,
)

__all__ = [
    "EntityValidationRequest",
    "HttpValidationRequest",
    "InputValidationRequest",
    "RequestSnapshot",
    "ValidationResultRead",
]
