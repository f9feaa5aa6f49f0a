"""Password hashing and signed session tokens.

Passwords are hashed with bcrypt through passlib. Sessions are HS256 JWTs
carrying the claims the authorization layer needs (user id, role and the
optional supplier/customer profile ids), so no database lookup is required
to authorize a request.
"""

from datetime import UTC, datetime, timedelta
from enum import StrEnum
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from b2bvendas.core.config import Settings, get_settings


class UserRole(StrEnum):
    """Access tier of a user account."""

    CLIENTE = "cliente"
    FORNECEDOR = "fornecedor"
    ADMIN = "admin"


class SessionUser(BaseModel):
    """Identity decoded from a session token."""

    id: int
    email: str
    nome: str
    tipo: UserRole
    fornecedor_id: int | None = None
    cliente_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.tipo is UserRole.ADMIN

    def has_role(self, *roles: UserRole) -> bool:
        """Whether the user holds one of ``roles``; admins hold every role."""
        return self.is_admin or self.tipo in roles


@lru_cache(maxsize=4)
def _password_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(raw: str, settings: Settings | None = None) -> str:
    """Hash a plain text password with the configured bcrypt cost."""
    settings = settings or get_settings()
    return _password_context(settings.auth_config.bcrypt_rounds).hash(raw)


def verify_password(
    raw: str, hashed: str | None, settings: Settings | None = None
) -> bool:
    """Check a plain text password against a stored hash.

    Accounts created without a password (``hashed`` empty) never verify.
    """
    if not hashed:
        return False
    settings = settings or get_settings()
    try:
        return _password_context(settings.auth_config.bcrypt_rounds).verify(raw, hashed)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def create_session_token(
    user: SessionUser,
    settings: Settings | None = None,
    *,
    now: datetime | None = None,
) -> str:
    """Encode ``user`` into a signed session token."""
    settings = settings or get_settings()
    auth = settings.auth_config
    issued_at = now or datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
        "nome": user.nome,
        "tipo": user.tipo.value,
        "fornecedor_id": user.fornecedor_id,
        "cliente_id": user.cliente_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=auth.session_max_age_seconds),
    }
    return jwt.encode(payload, auth.secret_key, algorithm=auth.algorithm)


def decode_session_token(
    token: str | None, settings: Settings | None = None
) -> SessionUser | None:
    """Decode a session token.

    Any failure (bad signature, expired token, missing or malformed claims)
    yields ``None``; callers treat that as an anonymous request.
    """
    if not token:
        return None

    settings = settings or get_settings()
    auth = settings.auth_config
    try:
        payload = jwt.decode(token, auth.secret_key, algorithms=[auth.algorithm])
        return SessionUser(
            id=int(payload["sub"]),
            email=payload["email"],
            nome=payload.get("nome", ""),
            tipo=payload["tipo"],
            fornecedor_id=payload.get("fornecedor_id"),
            cliente_id=payload.get("cliente_id"),
        )
    except (JWTError, PydanticValidationError, KeyError, TypeError, ValueError) as e:
        logger.debug("Session token rejected: {}", type(e).__name__)
        return None
