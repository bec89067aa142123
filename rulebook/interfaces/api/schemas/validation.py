"""Schemas for validation endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

JSONObject = dict[str, Any]


class InputValidationRequest(BaseModel):
    """Flat object and ``property -> rule`` map to validate it against."""

    input: JSONObject | None = None
    rules: dict[str, JSONObject] = Field(default_factory=dict)
    collect_errors: bool = Field(default=True, alias="collectErrors")
    overridden_error_messages: dict[str, str] | None = Field(
        default=None, alias="overriddenErrorMessages"
    )

    model_config = ConfigDict(populate_by_name=True)


class EntityValidationRequest(BaseModel):
    """Arguments of one entity operation validation."""

    operation_name: str = Field(..., alias="operationName", min_length=1)
    entity_name: str = Field(..., alias="entityName", min_length=1)
    entity_validations: JSONObject | None = Field(default=None, alias="entityValidations")
    input: JSONObject | None = None
    actor: JSONObject | None = None
    record: JSONObject | None = None
    collect_errors: bool = Field(default=True, alias="collectErrors")
    verbose_errors: bool | None = Field(default=None, alias="verboseErrors")
    overridden_error_messages: dict[str, str] | None = Field(
        default=None, alias="overriddenErrorMessages"
    )

    model_config = ConfigDict(populate_by_name=True)


class RequestSnapshot(BaseModel):
    """Already parsed sections of the request to validate."""

    body: JSONObject | None = None
    path_parameters: JSONObject | None = Field(default=None, alias="pathParameters")
    query_string_parameters: JSONObject | None = Field(
        default=None, alias="queryStringParameters"
    )
    headers: JSONObject | None = None

    model_config = ConfigDict(populate_by_name=True)


class HttpValidationRequest(BaseModel):
    """Request snapshot plus ``section -> property -> rule`` validations."""

    request: RequestSnapshot = Field(default_factory=RequestSnapshot)
    validations: dict[str, dict[str, JSONObject]] = Field(default_factory=dict)
    collect_errors: bool = Field(default=True, alias="collectErrors")
    verbose_errors: bool | None = Field(default=None, alias="verboseErrors")
    overridden_error_messages: dict[str, str] | None = Field(
        default=None, alias="overriddenErrorMessages"
    )

    model_config = ConfigDict(populate_by_name=True)


class ValidationResultRead(BaseModel):
    """Wire form of a validation result."""

    passed: bool = Field(..., alias="pass")
    errors: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)
