"""
Coleta Backend — Shared Schema Building Blocks
================================================

What:  Base model with camelCase aliases, plus error and health responses.
Why:   One alias policy for every contract; one error envelope for every failure.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for all API schemas.

    alias_generator=to_camel: `weight_grams` is `weightGrams` in JSON.
    populate_by_name=True: services can still construct models with snake_case names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    """
    Standardized error envelope for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "Material não encontrado.",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(
        default=None,
        serialization_alias="request_id",
        description="Request correlation ID",
    )


class HealthResponse(CamelModel):
    status: str = Field(default="ok", description="Always 'ok' while the process serves requests")
