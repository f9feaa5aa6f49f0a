"""orjson-backed JSON responses and the success envelope helpers.

Every successful API response has the shape ``{"success": true, "data": ...}``;
paginated lists add ``meta`` with ``pagina``, ``limite``, ``total`` and
``totalPaginas``.
"""

from decimal import Decimal
from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from b2bvendas.infrastructure.database import Page


def _default(value: Any) -> Any:  # noqa: ANN401 - orjson fallback hook
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    raise TypeError


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization.

    Handles datetime objects natively and money values stored as ``Decimal``
    through the fallback hook.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - any JSON content
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", by_alias=True)
        return orjson.dumps(content, default=_default)


def success(data: Any) -> dict[str, Any]:  # noqa: ANN401 - any payload
    return {"success": True, "data": data}


def paginated(page: Page[Any], items: list[Any]) -> dict[str, Any]:
    """Envelope for one page; ``items`` are the serialized ``page.items``."""
    return {
        "success": True,
        "data": items,
        "meta": {
            "pagina": page.pagina,
            "limite": page.limite,
            "total": page.total,
            "totalPaginas": page.total_paginas,
        },
    }
