"""Account registration, sign-in and session routes (public prefix)."""

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Response, status
from loguru import logger

from b2bvendas.api.dependencies import (
    AuditServiceDep,
    ClientInfoDep,
    CurrentUser,
    EmailServiceDep,
    get_session_user,
)
from b2bvendas.api.schemas.auth import (
    AlterarSenhaRequest,
    LoginRequest,
    RegistroClienteRequest,
    RegistroFornecedorRequest,
    SessionUserResponse,
    UsuarioResponse,
)
from b2bvendas.api.schemas.common import ApiModel
from b2bvendas.api.utils.responses import success
from b2bvendas.api.utils.validation import validate_body
from b2bvendas.core.config import Settings, get_settings
from b2bvendas.core.error_context import sanitize_for_log
from b2bvendas.core.exceptions import UnauthorizedError, ValidationError
from b2bvendas.core.security import SessionUser, UserRole, create_session_token
from b2bvendas.domain.auditoria.models import AuditAction
from b2bvendas.domain.usuarios.service import AuthService
from b2bvendas.infrastructure.database import DatabaseSession

TIPO_INVALIDO = "Tipo de usuário inválido"
type RegistroRequest = RegistroClienteRequest | RegistroFornecedorRequest

REGISTRATION_SCHEMAS: dict[UserRole, type[RegistroRequest]] = {
    UserRole.CLIENTE: RegistroClienteRequest,
    UserRole.FORNECEDOR: RegistroFornecedorRequest,
}

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginResponse(ApiModel):
    usuario: SessionUserResponse
    token: str
    expira_em: datetime


def _parse_registro(body: dict[str, Any]) -> RegistroRequest:
    tipo = body.get("tipo")
    if not isinstance(tipo, str) or tipo not in REGISTRATION_SCHEMAS:
        logger.warning(
            "Registration rejected: invalid tipo", body=sanitize_for_log(body)
        )
        raise ValidationError(TIPO_INVALIDO, context={"tipo": tipo})

    dados = {key: value for key, value in body.items() if key != "tipo"}
    return validate_body(REGISTRATION_SCHEMAS[UserRole(tipo)], dados, body)


@router.post("/registro", status_code=status.HTTP_201_CREATED)
async def registro(
    body: Annotated[dict[str, Any], Body()],
    db: DatabaseSession,
    emails: EmailServiceDep,
    audit: AuditServiceDep,
    client: ClientInfoDep,
) -> dict[str, Any]:
    """Register a cliente or fornecedor account, chosen by ``tipo``."""
    payload = _parse_registro(body)
    service = AuthService(db)
    dados = payload.model_dump()
    if isinstance(payload, RegistroClienteRequest):
        usuario = await service.register_cliente(dados)
    else:
        usuario = await service.register_fornecedor(dados)
    await audit.log_user_created(usuario.id, client)

    await emails.send_welcome(
        usuario.email, usuario.nome, payload.nome_fantasia or payload.razao_social
    )
    return success(UsuarioResponse.model_validate(usuario))


router.add_api_route(
    "/register",
    registro,
    methods=["POST"],
    status_code=status.HTTP_201_CREATED,
    summary="Registro (alias)",
)


@router.post("/login")
async def login(
    payload: LoginRequest,
    response: Response,
    db: DatabaseSession,
    settings: Annotated[Settings, Depends(get_settings)],
    audit: AuditServiceDep,
    client: ClientInfoDep,
) -> dict[str, Any]:
    try:
        user = await AuthService(db, settings).authenticate(
            payload.email, payload.senha
        )
    except UnauthorizedError:
        await audit.log_auth_event(
            AuditAction.LOGIN_FAILED, None, client, {"email": payload.email}
        )
        # get_db rolls back when the route raises
        await db.commit()
        raise

    await audit.log_auth_event(AuditAction.LOGIN, user.id, client)
    auth = settings.auth_config
    now = datetime.now(UTC)
    token = create_session_token(user, settings, now=now)
    response.set_cookie(
        auth.cookie_name,
        token,
        max_age=auth.session_max_age_seconds,
        httponly=True,
        secure=auth.cookie_secure,
        samesite="lax",
    )
    logger.info("User signed in", user_id=user.id, tipo=user.tipo.value)
    return success(
        LoginResponse(
            usuario=SessionUserResponse.model_validate(user),
            token=token,
            expira_em=now + timedelta(seconds=auth.session_max_age_seconds),
        )
    )


@router.post("/logout")
async def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
    user: Annotated[SessionUser | None, Depends(get_session_user)],
    audit: AuditServiceDep,
    client: ClientInfoDep,
) -> dict[str, Any]:
    response.delete_cookie(settings.auth_config.cookie_name)
    if user is not None:
        await audit.log_auth_event(AuditAction.LOGOUT, user.id, client)
    return success(None)


@router.get("/session")
async def session(user: CurrentUser) -> dict[str, Any]:
    return success(SessionUserResponse.model_validate(user))


@router.post("/alterar-senha")
async def alterar_senha(
    payload: AlterarSenhaRequest,
    user: CurrentUser,
    db: DatabaseSession,
    audit: AuditServiceDep,
    client: ClientInfoDep,
) -> dict[str, Any]:
    await AuthService(db).change_password(
        user.id, payload.senha_atual, payload.nova_senha
    )
    await audit.log_password_changed(user.id, client)
    return success({"message": "Senha alterada com sucesso"})
