"""Exceptions raised when a validation rule set itself is broken."""


class ValidationConfigurationError(ValueError):
    """Raised when rules, operations or conditions are declared incorrectly."""


class UniquenessOracleNotConfiguredError(ValidationConfigurationError):
    """Raised when a ``unique`` check runs without a uniqueness oracle."""


__all__ = ["UniquenessOracleNotConfiguredError", "ValidationConfigurationError"]
