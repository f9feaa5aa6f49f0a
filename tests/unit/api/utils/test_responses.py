"""Unit tests for the response envelopes and ORJSONResponse."""

from datetime import UTC, datetime
from decimal import Decimal

import orjson
import pytest

from b2bvendas.api.schemas.categorias import CategoriaResponse
from b2bvendas.api.utils.responses import ORJSONResponse, paginated, success
from b2bvendas.infrastructure.database import Page


@pytest.mark.unit
class TestEnvelopes:
    """Test success and paginated envelopes."""

    def test_success(self) -> None:
        assert success({"id": 1}) == {"success": True, "data": {"id": 1}}

    @pytest.mark.parametrize(
        ("total", "limite", "total_paginas"),
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (45, 20, 3)],
    )
    def test_paginated_meta(self, total: int, limite: int, total_paginas: int) -> None:
        page: Page[int] = Page(items=[], total=total, pagina=1, limite=limite)

        body = paginated(page, [])

        assert body["meta"] == {
            "pagina": 1,
            "limite": limite,
            "total": total,
            "totalPaginas": total_paginas,
        }


@pytest.mark.unit
class TestORJSONResponse:
    """Test JSON rendering of values FastAPI hands to the response."""

    def test_decimal_as_number(self) -> None:
        response = ORJSONResponse(success({"preco": Decimal("25.90")}))

        assert orjson.loads(response.body) == {
            "success": True,
            "data": {"preco": 25.9},
        }

    def test_pydantic_models_use_camel_case(self) -> None:
        categoria = CategoriaResponse(
            id=1,
            fornecedor_id=3,
            categoria_pai_id=None,
            nome="Bebidas",
            slug="bebidas",
            descricao=None,
            imagem=None,
            ordem=0,
            ativo=True,
            created_at=datetime(2026, 1, 10, tzinfo=UTC),
            updated_at=datetime(2026, 1, 10, tzinfo=UTC),
        )

        data = orjson.loads(ORJSONResponse(success(categoria)).body)["data"]

        assert data["categoriaPaiId"] is None
        assert data["fornecedorId"] == 3
        assert data["createdAt"].startswith("2026-01-10T00:00:00")
