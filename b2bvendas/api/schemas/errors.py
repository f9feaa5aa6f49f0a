"""Error envelope returned by every failing API request.

``{"error": "<message>", "code": "<ErrorCode>"}`` with an optional
``details`` object (field level validation messages, debug information in
development). Keys that are not set are omitted from the JSON body.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standardized error response model for API errors."""

    error: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Tipo de usuário inválido", "Produto não encontrado"],
    )

    code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "UNAUTHORIZED"],
    )

    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details, e.g. field validation errors",
        examples=[{"validation_errors": {"email": ["Email inválido"]}}],
    )

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
