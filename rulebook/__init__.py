"""Conditional validation rule engine.

The package exposes the :class:`~rulebook.application.use_cases.validation.Validator`
through :mod:`rulebook.application.use_cases.validation` and a FastAPI surface
through :mod:`rulebook.interfaces.api`.
"""
