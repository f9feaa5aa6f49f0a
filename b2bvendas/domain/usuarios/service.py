"""Account registration, sign-in and password changes."""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.core.config import Settings, get_settings
from b2bvendas.core.exceptions import ConflictError, UnauthorizedError, ValidationError
from b2bvendas.core.security import (
    SessionUser,
    UserRole,
    hash_password,
    verify_password,
)
from b2bvendas.domain.clientes.models import Cliente
from b2bvendas.domain.clientes.repository import ClienteRepository
from b2bvendas.domain.fornecedores.models import Fornecedor
from b2bvendas.domain.fornecedores.repository import FornecedorRepository
from b2bvendas.domain.usuarios.models import Usuario
from b2bvendas.domain.usuarios.repository import UsuarioRepository

EMAIL_JA_CADASTRADO = "Email já cadastrado"
CNPJ_JA_CADASTRADO = "CNPJ já cadastrado"
CREDENCIAIS_INVALIDAS = "Credenciais inválidas"

PERFIL_FIELDS = frozenset(
    {
        "razao_social",
        "nome_fantasia",
        "cnpj",
        "endereco",
        "cidade",
        "estado",
        "cep",
        "telefone",
    }
)


class AuthService:
    """Creates user accounts with their customer or supplier profile."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self.session = session
        self.settings = settings or get_settings()
        self.usuarios = UsuarioRepository(session)
        self.clientes = ClienteRepository(session)
        self.fornecedores = FornecedorRepository(session)

    async def register_cliente(self, data: Mapping[str, Any]) -> Usuario:
        """Register a customer account.

        A customer record a supplier created earlier under the same CNPJ, and
        that no account owns yet, is claimed instead of duplicated.
        """
        await self._ensure_email_available(data["email"])

        cliente = await self.clientes.get_by_cnpj(data["cnpj"])
        if cliente is not None and cliente.usuario_id is not None:
            raise ConflictError(CNPJ_JA_CADASTRADO)

        usuario = await self._create_usuario(data, UserRole.CLIENTE)
        profile = {k: v for k, v in data.items() if k in PERFIL_FIELDS}
        profile["inscricao_estadual"] = data.get("inscricao_estadual")
        profile["email"] = usuario.email

        if cliente is None:
            cliente = await self.clientes.create(
                Cliente(usuario_id=usuario.id, **profile)
            )
        else:
            claimed = {k: v for k, v in profile.items() if v is not None}
            await self.clientes.update(cliente, {**claimed, "usuario_id": usuario.id})
            logger.info("Existing cliente {} claimed by new account", cliente.id)

        logger.info(
            "Cliente account registered",
            usuario_id=usuario.id,
            cliente_id=cliente.id,
        )
        return usuario

    async def register_fornecedor(self, data: Mapping[str, Any]) -> Usuario:
        """Register a supplier account with a unique public slug."""
        await self._ensure_email_available(data["email"])
        if await self.fornecedores.get_by_cnpj(data["cnpj"]) is not None:
            raise ConflictError(CNPJ_JA_CADASTRADO)

        usuario = await self._create_usuario(data, UserRole.FORNECEDOR)
        slug = await self.fornecedores.unique_slug(
            data.get("nome_fantasia") or data["razao_social"]
        )
        fornecedor = await self.fornecedores.create(
            Fornecedor(
                usuario_id=usuario.id,
                slug=slug,
                descricao=data.get("descricao"),
                **{k: v for k, v in data.items() if k in PERFIL_FIELDS},
            )
        )
        logger.info(
            "Fornecedor account registered",
            usuario_id=usuario.id,
            fornecedor_id=fornecedor.id,
            slug=slug,
        )
        return usuario

    async def authenticate(self, email: str, senha: str) -> SessionUser:
        """Check credentials and build the identity stored in the session."""
        usuario = await self.usuarios.get_by_email(email)
        if (
            usuario is None
            or not usuario.ativo
            or not verify_password(senha, usuario.senha_hash, self.settings)
        ):
            logger.warning("Failed sign-in attempt")
            raise UnauthorizedError(CREDENCIAIS_INVALIDAS)

        return await self.session_user(usuario)

    async def session_user(self, usuario: Usuario) -> SessionUser:
        fornecedor = await self.fornecedores.get_by_usuario_id(usuario.id)
        cliente = await self.clientes.get_by_usuario_id(usuario.id)
        return SessionUser(
            id=usuario.id,
            email=usuario.email,
            nome=usuario.nome,
            tipo=usuario.tipo,
            fornecedor_id=fornecedor.id if fornecedor else None,
            cliente_id=cliente.id if cliente else None,
        )

    async def change_password(
        self, usuario_id: int, senha_atual: str, nova_senha: str
    ) -> None:
        usuario = await self.usuarios.get_by_id(usuario_id)
        if usuario is None:
            raise ValidationError("Usuário não encontrado")
        if not verify_password(senha_atual, usuario.senha_hash, self.settings):
            raise ValidationError("Senha atual incorreta")

        await self.usuarios.update(
            usuario, {"senha_hash": hash_password(nova_senha, self.settings)}
        )
        logger.info("Password changed", usuario_id=usuario_id)

    async def _ensure_email_available(self, email: str) -> None:
        if await self.usuarios.email_exists(email):
            raise ConflictError(EMAIL_JA_CADASTRADO)

    async def _create_usuario(self, data: Mapping[str, Any], tipo: UserRole) -> Usuario:
        return await self.usuarios.create(
            Usuario(
                email=data["email"],
                senha_hash=hash_password(data["senha"], self.settings),
                nome=data["nome"],
                telefone=data.get("telefone"),
                tipo=tipo,
            )
        )
