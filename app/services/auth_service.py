"""
Authentication and access control for the Controle de Obras API.

Provides:
- ``authenticate_user``: credential verification against the DB.
- ``get_current_user``: FastAPI dependency that resolves the Bearer JWT.
  A missing header raises ``Unauthenticated``; a malformed, expired or
  orphaned token raises ``InvalidCredential``.
- ``get_optional_user``: same, but anonymous requests resolve to ``None``.
- ``require_role``: dependency factory enforcing role-based access.
- ``obras_permitidas_do_usuario``: project scope of the caller, ``None``
  for Admins (no restriction), otherwise the set of allowed obra ids.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import Forbidden, InvalidCredential, Unauthenticated
from app.models.usuario import Usuario
from app.utils.constants import ROLE_ADMIN
from app.utils.security import verify_password, verify_token

logger = logging.getLogger(__name__)

# ``auto_error=False`` so a missing header reaches us as ``None`` and can be
# reported as Unauthenticated instead of FastAPI's generic 401.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ---------------------------------------------------------------------------
# Core authentication function
# ---------------------------------------------------------------------------


def authenticate_user(db: Session, email: str, password: str) -> Usuario | None:
    """Verify e-mail/password credentials against the database.

    Approval is not checked here; the login endpoint reports unapproved
    accounts with its own message.

    Args:
        db: An active SQLAlchemy session (injected via ``get_db``).
        email: The login e-mail submitted by the client.
        password: The plain-text password submitted by the client.

    Returns:
        The ``Usuario`` ORM instance on success, or ``None`` on failure
        (unknown e-mail or wrong password).
    """
    user: Usuario | None = (
        db.query(Usuario).filter(Usuario.email == email.strip().lower()).first()
    )

    if user is None:
        logger.debug("authenticate_user: unknown e-mail '%s'", email)
        return None

    if not verify_password(password, user.senha_hash):
        logger.debug("authenticate_user: wrong password for '%s'", email)
        return None

    return user


def registrar_acesso(db: Session, user: Usuario) -> None:
    user.ultimo_acesso = datetime.now(timezone.utc).replace(tzinfo=None)
    db.commit()


# ---------------------------------------------------------------------------
# FastAPI dependencies: current authenticated user
# ---------------------------------------------------------------------------


def _resolver_usuario(token: str, db: Session) -> Usuario:
    try:
        payload = verify_token(token)
    except ValueError as exc:
        raise InvalidCredential(str(exc)) from exc

    # The ``sub`` claim stores the user's primary key as a string.
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError) as exc:
        raise InvalidCredential("Token inválido") from exc

    user = db.get(Usuario, user_id)
    if user is None or not user.aprovado:
        logger.debug("Token for unknown or unapproved user_id=%s rejected", user_id)
        raise InvalidCredential("Usuário não encontrado ou não aprovado")
    return user


def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> Usuario:
    """FastAPI dependency that resolves the caller's identity from a JWT.

    Args:
        token: Raw JWT string supplied by ``oauth2_scheme`` (``None`` when
               the ``Authorization`` header is absent).
        db: SQLAlchemy session supplied by ``get_db``.

    Returns:
        The authenticated, approved ``Usuario`` ORM instance.

    Raises:
        Unauthenticated: No bearer token was sent.
        InvalidCredential: The token is malformed or expired, or its user
                           no longer exists or is not approved.
    """
    if not token:
        raise Unauthenticated("Token de acesso não informado")
    return _resolver_usuario(token, db)


def get_optional_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> Usuario | None:
    """Like ``get_current_user`` but anonymous callers resolve to ``None``."""
    if not token:
        return None
    return _resolver_usuario(token, db)


# ---------------------------------------------------------------------------
# Role enforcement dependency factory
# ---------------------------------------------------------------------------


def require_role(*roles: str):
    """Return a FastAPI dependency that restricts access to the given roles.

    .. code-block:: python

        @router.get("/usuarios")
        def listar(current_user: Usuario = Depends(require_role("Admin"))):
            ...

    Raises:
        Forbidden: If the authenticated user's role is not in *roles*.
    """
    allowed = frozenset(roles)

    def _check_role(
        current_user: Annotated[Usuario, Depends(get_current_user)],
    ) -> Usuario:
        if current_user.role not in allowed:
            raise Forbidden(
                f"Acesso negado. Requer um dos perfis: {sorted(allowed)}"
            )
        return current_user

    return _check_role


# ---------------------------------------------------------------------------
# Project scope
# ---------------------------------------------------------------------------


def escopo_obras(user: Usuario) -> set[int] | None:
    """Allowed obra ids for *user*; ``None`` means unrestricted (Admin)."""
    if user.role == ROLE_ADMIN:
        return None
    return {obra.id for obra in user.obras_permitidas}


def obras_permitidas_do_usuario(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> set[int] | None:
    return escopo_obras(current_user)
