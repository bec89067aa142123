"""Routes exposing the validation engine."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from rulebook.application.use_cases.validation import Validator
from rulebook.domain.entities import RequestContext
from rulebook.domain.errors import ValidationConfigurationError
from rulebook.interfaces.api.dependencies import get_validator
from rulebook.interfaces.api.schemas import (
    EntityValidationRequest,
    HttpValidationRequest,
    InputValidationRequest,
    ValidationResultRead,
)

router = APIRouter(prefix="/validation", tags=["validation"])


def _configuration_error(exc: ValidationConfigurationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.post("/input", response_model=ValidationResultRead)
async def validate_input(
    payload: InputValidationRequest,
    validator: Validator = Depends(get_validator),
) -> ValidationResultRead:
    """Validate a flat object against a ``property -> rule`` map."""

    try:
        result = await validator.validate_input(
            payload.input,
            payload.rules,
            payload.collect_errors,
            overridden_error_messages=payload.overridden_error_messages,
        )
    except ValidationConfigurationError as exc:
        raise _configuration_error(exc) from exc
    return ValidationResultRead.model_validate(result.to_dict())


@router.post("/entity", response_model=ValidationResultRead)
async def validate_entity(
    payload: EntityValidationRequest,
    validator: Validator = Depends(get_validator),
) -> ValidationResultRead:
    """Validate the actor, input and record of an entity operation."""

    try:
        result = await validator.validate_entity(
            operation_name=payload.operation_name,
            entity_name=payload.entity_name,
            entity_validations=payload.entity_validations,
            input=payload.input,
            actor=payload.actor,
            record=payload.record,
            collect_errors=payload.collect_errors,
            verbose_errors=payload.verbose_errors,
            overridden_error_messages=payload.overridden_error_messages,
        )
    except ValidationConfigurationError as exc:
        raise _configuration_error(exc) from exc
    return ValidationResultRead.model_validate(result.to_dict())


@router.post("/http", response_model=ValidationResultRead)
async def validate_http_request(
    payload: HttpValidationRequest,
    validator: Validator = Depends(get_validator),
) -> ValidationResultRead:
    """Validate a request snapshot section by section."""

    snapshot = payload.request
    try:
        result = await validator.validate_http_request(
            request_context=RequestContext(
                body=snapshot.body,
                path_parameters=snapshot.path_parameters,
                query_string_parameters=snapshot.query_string_parameters,
                headers=snapshot.headers,
            ),
            validations=payload.validations,
            collect_errors=payload.collect_errors,
            verbose_errors=payload.verbose_errors,
            overridden_error_messages=payload.overridden_error_messages,
        )
    except ValidationConfigurationError as exc:
        raise _configuration_error(exc) from exc
    return ValidationResultRead.model_validate(result.to_dict())
