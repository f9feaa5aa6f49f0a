"""Unit tests for the category tree functions."""

import pytest

from b2bvendas.domain.categorias.models import Categoria
from b2bvendas.domain.categorias.service import (
    build_tree,
    category_path,
    descendant_ids,
    would_create_cycle,
)


def _categoria(categoria_id: int, pai: int | None = None) -> Categoria:
    return Categoria(
        id=categoria_id,
        fornecedor_id=1,
        nome=f"Categoria {categoria_id}",
        slug=f"categoria-{categoria_id}",
        categoria_pai_id=pai,
    )


@pytest.fixture
def categorias() -> list[Categoria]:
    """Two roots: 1 -> (2 -> 4, 3) and 5."""
    return [
        _categoria(1),
        _categoria(2, pai=1),
        _categoria(3, pai=1),
        _categoria(4, pai=2),
        _categoria(5),
    ]


@pytest.mark.unit
class TestBuildTree:
    """Test arranging a flat list into a forest."""

    def test_roots_and_children(self, categorias: list[Categoria]) -> None:
        tree = build_tree(categorias, {2: 3, 4: 1})

        assert [node.categoria.id for node in tree] == [1, 5]
        raiz = tree[0]
        assert [node.categoria.id for node in raiz.filhos] == [2, 3]
        assert raiz.total_subcategorias == 2
        assert raiz.filhos[0].total_produtos == 3
        assert raiz.filhos[0].filhos[0].total_produtos == 1
        assert raiz.total_produtos == 0

    def test_orphans_become_roots(self) -> None:
        tree = build_tree([_categoria(10, pai=99)])

        assert [node.categoria.id for node in tree] == [10]

    def test_empty(self) -> None:
        assert build_tree([]) == []


@pytest.mark.unit
class TestCategoryPath:
    """Test breadcrumbs."""

    def test_path_from_root(self, categorias: list[Categoria]) -> None:
        assert [c.id for c in category_path(4, categorias)] == [1, 2, 4]

    def test_unknown_category(self, categorias: list[Categoria]) -> None:
        assert category_path(42, categorias) == []

    def test_stops_on_cycles(self) -> None:
        looped = [_categoria(1, pai=2), _categoria(2, pai=1)]

        assert [c.id for c in category_path(1, looped)] == [2, 1]


@pytest.mark.unit
class TestDescendants:
    """Test descendant lookup and cycle detection."""

    def test_descendant_ids(self, categorias: list[Categoria]) -> None:
        assert descendant_ids(1, categorias) == [2, 3, 4]
        assert descendant_ids(4, categorias) == []

    @pytest.mark.parametrize(
        ("categoria_id", "new_parent_id", "expected"),
        [
            (1, 4, True),
            (2, 4, True),
            (2, 2, True),
            (4, 3, False),
            (2, None, False),
            (5, 1, False),
        ],
    )
    def test_would_create_cycle(
        self,
        categorias: list[Categoria],
        categoria_id: int,
        new_parent_id: int | None,
        expected: bool,
    ) -> None:
        assert would_create_cycle(categoria_id, new_parent_id, categorias) is expected
