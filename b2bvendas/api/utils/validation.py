"""Validating request bodies whose schema is picked at runtime."""

from typing import Any

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError


def validate_body[M: BaseModel](
    model: type[M], data: dict[str, Any], body: Any  # noqa: ANN401 - raw body
) -> M:
    """Validate ``data`` as ``model`` the way FastAPI validates a body.

    Errors are re-raised as ``RequestValidationError`` with ``body`` locations
    so they get the same 400 response as declared body parameters.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = [{**error, "loc": ("body", *error["loc"])} for error in e.errors()]
        raise RequestValidationError(errors, body=body) from e
