"""Registration, sign-in and session schemas."""

from pydantic import Field

from b2bvendas.api.schemas.common import (
    ApiModel,
    Cep,
    Cnpj,
    Email,
    Estado,
    Senha,
    Telefone,
)
from b2bvendas.core.security import UserRole


class RegistroBase(ApiModel):
    email: Email
    senha: Senha
    nome: str = Field(min_length=3, max_length=200)
    telefone: Telefone | None = None
    razao_social: str = Field(min_length=3, max_length=200)
    nome_fantasia: str | None = Field(default=None, max_length=200)
    cnpj: Cnpj
    endereco: str | None = Field(default=None, max_length=255)
    cidade: str | None = Field(default=None, max_length=100)
    estado: Estado | None = None
    cep: Cep | None = None


class RegistroClienteRequest(RegistroBase):
    inscricao_estadual: str | None = Field(default=None, max_length=20)


class RegistroFornecedorRequest(RegistroBase):
    descricao: str | None = None


class LoginRequest(ApiModel):
    email: Email
    senha: str = Field(min_length=1)


class AlterarSenhaRequest(ApiModel):
    senha_atual: str = Field(min_length=1)
    nova_senha: Senha


class UsuarioResponse(ApiModel):
    id: int
    email: str
    nome: str
    tipo: UserRole


class SessionUserResponse(UsuarioResponse):
    fornecedor_id: int | None = None
    cliente_id: int | None = None
