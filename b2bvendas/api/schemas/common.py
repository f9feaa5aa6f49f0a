"""Shared request/response building blocks.

``ApiModel`` gives every schema camelCase JSON names (``razaoSocial``,
``fornecedorId``...) while Python code keeps snake_case. The annotated field
types normalize Brazilian document formats and raise ``PydanticCustomError``
with the Portuguese message returned to the client.
"""

import re
from decimal import Decimal
from typing import Annotated, Literal

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from b2bvendas.core.constants import CEP_LENGTH, CNPJ_LENGTH, UF_LENGTH
from b2bvendas.core.text import only_digits

SENHA_MIN_LENGTH = 8
CNPJ_PATTERN = re.compile(r"^(\d{2}\.?\d{3}\.?\d{3}/?\d{4}-?\d{2}|\d{14})$")
SENHA_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[A-Z]"), "Senha deve conter pelo menos uma letra maiúscula"),
    (re.compile(r"[a-z]"), "Senha deve conter pelo menos uma letra minúscula"),
    (re.compile(r"[0-9]"), "Senha deve conter pelo menos um número"),
)


class ApiModel(BaseModel):
    """Base for API schemas: camelCase aliases, ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


def _email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise PydanticCustomError("email_invalido", "Email inválido") from e
    return value.lower()


def _senha(value: str) -> str:
    if len(value) < SENHA_MIN_LENGTH:
        raise PydanticCustomError(
            "senha_curta", "Senha deve ter no mínimo 8 caracteres"
        )
    for pattern, message in SENHA_RULES:
        if not pattern.search(value):
            raise PydanticCustomError("senha_fraca", message)
    return value


def _cnpj(value: str) -> str:
    if not CNPJ_PATTERN.match(value):
        raise PydanticCustomError("cnpj_invalido", "CNPJ deve conter 14 dígitos")
    digits = only_digits(value)
    if len(digits) != CNPJ_LENGTH:
        raise PydanticCustomError("cnpj_invalido", "CNPJ deve conter 14 dígitos")
    return digits


def _telefone(value: str) -> str:
    digits = only_digits(value)
    if not 10 <= len(digits) <= 11:  # noqa: PLR2004 - landline or mobile
        raise PydanticCustomError("telefone_invalido", "Telefone inválido")
    return digits


def _cep(value: str) -> str:
    digits = only_digits(value)
    if len(digits) != CEP_LENGTH:
        raise PydanticCustomError("cep_invalido", "CEP deve conter 8 dígitos")
    return digits


def _estado(value: str) -> str:
    if len(value) != UF_LENGTH or not value.isalpha():
        raise PydanticCustomError(
            "estado_invalido", "Estado deve ter 2 caracteres (UF)"
        )
    return value.upper()


def _url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise PydanticCustomError("url_invalida", "URL inválida")
    return value


Email = Annotated[str, AfterValidator(_email)]
Senha = Annotated[str, AfterValidator(_senha)]
Cnpj = Annotated[str, AfterValidator(_cnpj)]
Telefone = Annotated[str, AfterValidator(_telefone)]
Cep = Annotated[str, AfterValidator(_cep)]
Estado = Annotated[str, AfterValidator(_estado)]
Url = Annotated[str, AfterValidator(_url)]

# Money is stored as Decimal and sent to clients as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float)]


class Paginacao(ApiModel):
    """Query parameters shared by paginated listings."""

    pagina: int = Field(default=1, ge=1, description="Page number, from 1")
    limite: int = Field(default=10, ge=1, le=100, description="Items per page")


class Ordenacao(Paginacao):
    ordenar_por: str | None = Field(default=None, description="Sort column")
    ordem: Literal["asc", "desc"] = Field(default="desc", description="Direction")
