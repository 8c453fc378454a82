"""
Authentication router for the Controle de Obras API.

Mounts under ``/auth`` (prefix set in ``main.py``).

Endpoints:
    POST /login     Authenticate with e-mail + password, receive JWT.
    POST /refresh   Exchange a valid token for a new one (extend session).
    GET  /me        Return the currently authenticated user's profile.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import Forbidden, InvalidCredential
from app.models.usuario import Usuario
from app.schemas.auth import TokenResponse
from app.schemas.usuario import UsuarioResponse
from app.services.auth_service import authenticate_user, get_current_user, registrar_acesso
from app.utils.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _emitir_token(user: Usuario) -> TokenResponse:
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return TokenResponse(access_token=token)


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Entrar",
    description=(
        "Autentica o usuário (o campo ``username`` do formulário OAuth2 é o "
        "e-mail) e retorna um JWT válido por ``JWT_EXPIRATION_MINUTES``."
    ),
    responses={
        200: {"description": "Autenticação bem-sucedida; o token JWT é retornado."},
        401: {"description": "E-mail ou senha incorretos."},
        403: {"description": "Cadastro aguardando aprovação de um Admin."},
    },
)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """Authenticate a user and issue a JWT access token.

    Args:
        form_data: E-mail (as ``username``) and password, form-encoded.
        db: Database session injected by ``get_db``.

    Raises:
        InvalidCredential: Unknown e-mail or wrong password.
        Forbidden: The account exists but has not been approved yet.
    """
    user = authenticate_user(db, form_data.username, form_data.password)

    if user is None:
        logger.warning("Failed login attempt for email='%s'", form_data.username)
        raise InvalidCredential("E-mail ou senha incorretos")

    if not user.aprovado:
        logger.info("Login refused for unapproved account email='%s'", user.email)
        raise Forbidden("Cadastro aguardando aprovação")

    registrar_acesso(db, user)
    logger.info("Successful login for email='%s' role='%s'", user.email, user.role)
    return _emitir_token(user)


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Renovar token",
    description="Emite um novo JWT a partir de um token ainda válido.",
    responses={401: {"description": "Token ausente, inválido ou expirado."}},
)
def refresh_token(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> TokenResponse:
    logger.info("Token refreshed for email='%s'", current_user.email)
    return _emitir_token(current_user)


# ---------------------------------------------------------------------------
# GET /me
# ---------------------------------------------------------------------------


@router.get(
    "/me",
    response_model=UsuarioResponse,
    summary="Perfil do usuário autenticado",
    responses={401: {"description": "Token ausente, inválido ou expirado."}},
)
def get_me(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> UsuarioResponse:
    return UsuarioResponse.model_validate(current_user)
