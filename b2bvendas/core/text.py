"""Text helpers shared by services: slugs, document digits, order numbers."""

import re
import secrets
import string
import time
import unicodedata
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from b2bvendas.core.constants import ORDER_NUMBER_PREFIX

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")
_NON_DIGIT = re.compile(r"\D")
_BASE36 = string.digits + string.ascii_uppercase
_CENTS = Decimal("0.01")

type DiscountKind = Literal["percentual", "fixo"]


def slugify(text: str) -> str:
    """Build a URL slug: lowercase, accents removed, words joined by ``-``.

    >>> slugify("  Café & Açúcar Ltda. ")
    'cafe-acucar-ltda'
    """
    normalized = unicodedata.normalize("NFD", text.lower().strip())
    without_accents = "".join(
        char for char in normalized if unicodedata.category(char) != "Mn"
    )
    cleaned = _NON_WORD.sub("", without_accents)
    return _SEPARATORS.sub("-", cleaned).strip("-")


def only_digits(value: str) -> str:
    """Strip every non digit character (CNPJ, CEP and phone masks)."""
    return _NON_DIGIT.sub("", value)


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_order_number() -> str:
    """Generate an order number such as ``PED-LXQ2K8ZC-4F7A``."""
    timestamp = _to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{ORDER_NUMBER_PREFIX}-{timestamp}-{suffix}"


def apply_discount(base: Decimal, kind: DiscountKind, value: Decimal) -> Decimal:
    """Apply a price list discount to ``base``, never going below zero."""
    if kind == "percentual":
        discounted = base * (Decimal(100) - value) / Decimal(100)
    else:
        discounted = base - value
    return max(discounted, Decimal(0)).quantize(_CENTS, rounding=ROUND_HALF_UP)
