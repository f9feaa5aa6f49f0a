"""Unit tests for the text helpers (slugs, digits, order numbers, discounts)."""

import re
from decimal import Decimal

import pytest

from b2bvendas.core.text import (
    apply_discount,
    generate_order_number,
    only_digits,
    slugify,
)


@pytest.mark.unit
class TestSlugify:
    """Test slug generation."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Bebidas", "bebidas"),
            ("  Café & Açúcar Ltda. ", "cafe-acucar-ltda"),
            ("Material de Construção", "material-de-construcao"),
            ("foo__bar--baz", "foo-bar-baz"),
            ("---", ""),
        ],
    )
    def test_slugify(self, text: str, expected: str) -> None:
        """Accents are removed and separators collapse into single dashes."""
        assert slugify(text) == expected


@pytest.mark.unit
class TestOnlyDigits:
    """Test mask removal."""

    def test_removes_cnpj_mask(self) -> None:
        assert only_digits("11.222.333/0001-81") == "11222333000181"

    def test_empty_string(self) -> None:
        assert only_digits("") == ""


@pytest.mark.unit
class TestGenerateOrderNumber:
    """Test order number generation."""

    def test_format(self) -> None:
        """Order numbers are PED, a base36 timestamp and a random suffix."""
        assert re.fullmatch(r"PED-[0-9A-Z]+-[0-9A-Z]{4}", generate_order_number())

    def test_numbers_differ(self) -> None:
        numbers = {generate_order_number() for _ in range(50)}
        assert len(numbers) > 1


@pytest.mark.unit
class TestApplyDiscount:
    """Test price list discounts."""

    def test_percentual(self) -> None:
        assert apply_discount(Decimal("100.00"), "percentual", Decimal(10)) == Decimal(
            "90.00"
        )

    def test_fixo(self) -> None:
        assert apply_discount(Decimal("50.00"), "fixo", Decimal("7.50")) == Decimal(
            "42.50"
        )

    def test_never_below_zero(self) -> None:
        assert apply_discount(Decimal("5.00"), "fixo", Decimal(10)) == Decimal("0.00")

    def test_rounds_half_up_to_cents(self) -> None:
        assert apply_discount(Decimal("10.05"), "percentual", Decimal(50)) == Decimal(
            "5.03"
        )
