"""
User management router.

Mounts under ``/usuarios`` (prefix set in ``main.py``).

Endpoints:
    POST   /                        Sign up (anonymous sign-ups await approval).
    GET    /                        List users (Admin).
    GET    /pendentes               Users awaiting approval (Admin).
    PUT    /me                      Update own name, e-mail or password.
    DELETE /me                      Delete own account.
    GET    /{id}                    Fetch one user (Admin).
    PUT    /{id}                    Update any user, role and approval (Admin).
    DELETE /{id}                    Delete a user (Admin).
    PUT    /{id}/obras-permitidas   Replace a user's project allow-list (Admin).
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.routers._crud import pagina
from app.schemas.common import MessageResponse, Pagina
from app.schemas.usuario import (
    ObrasPermitidasUpdate,
    UsuarioCreate,
    UsuarioResponse,
    UsuarioSelfUpdate,
    UsuarioUpdate,
)
from app.services import usuario_service
from app.services.auth_service import get_current_user, get_optional_user, require_role
from app.utils.constants import ROLE_ADMIN

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Usuários"])

_Admin = Annotated[Usuario, Depends(require_role(ROLE_ADMIN))]
_Db = Annotated[Session, Depends(get_db)]


# ---------------------------------------------------------------------------
# Sign-up and listings
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=UsuarioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Cadastrar usuário",
    description=(
        "Cadastro público: a conta nasce como ``PreAprovacao`` e só entra após "
        "aprovação. Criar ``User`` ou ``Admin`` diretamente exige um Admin."
    ),
    responses={
        403: {"description": "Perfil solicitado exige um Admin autenticado."},
        409: {"description": "E-mail já cadastrado."},
    },
)
def cadastrar(
    payload: UsuarioCreate,
    db: _Db,
    autor: Annotated[Usuario | None, Depends(get_optional_user)],
) -> UsuarioResponse:
    usuario = usuario_service.criar(db, payload, autor)
    return UsuarioResponse.model_validate(usuario)


@router.get("", response_model=Pagina[UsuarioResponse], summary="Listar usuários")
def listar(
    db: _Db,
    current_user: _Admin,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> dict[str, Any]:
    return pagina(usuario_service.listar(db, page, limit), UsuarioResponse)


@router.get(
    "/pendentes",
    response_model=Pagina[UsuarioResponse],
    summary="Usuários aguardando aprovação",
)
def listar_pendentes(
    db: _Db,
    current_user: _Admin,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> dict[str, Any]:
    return pagina(usuario_service.listar(db, page, limit, pendentes=True), UsuarioResponse)


# ---------------------------------------------------------------------------
# Own account (declared before /{usuario_id})
# ---------------------------------------------------------------------------


@router.put("/me", response_model=UsuarioResponse, summary="Atualizar meus dados")
def atualizar_me(
    payload: UsuarioSelfUpdate,
    db: _Db,
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> UsuarioResponse:
    usuario = usuario_service.atualizar_proprio(db, current_user, payload)
    return UsuarioResponse.model_validate(usuario)


@router.delete("/me", response_model=MessageResponse, summary="Excluir minha conta")
def remover_me(
    db: _Db,
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> MessageResponse:
    usuario_service.remover(db, current_user.id)
    return MessageResponse(message="Conta excluída com sucesso")


# ---------------------------------------------------------------------------
# Admin operations on any account
# ---------------------------------------------------------------------------


@router.get("/{usuario_id}", response_model=UsuarioResponse, summary="Obter usuário")
def obter(usuario_id: int, db: _Db, current_user: _Admin) -> UsuarioResponse:
    return UsuarioResponse.model_validate(usuario_service.obter(db, usuario_id))


@router.put(
    "/{usuario_id}",
    response_model=UsuarioResponse,
    summary="Atualizar usuário",
    description="Definir ``role`` também define ``aprovado`` (``PreAprovacao`` = não aprovado).",
)
def atualizar(
    usuario_id: int, payload: UsuarioUpdate, db: _Db, current_user: _Admin
) -> UsuarioResponse:
    usuario = usuario_service.atualizar(db, usuario_id, payload)
    logger.info("Usuario id=%d updated by admin '%s'", usuario_id, current_user.email)
    return UsuarioResponse.model_validate(usuario)


@router.delete("/{usuario_id}", response_model=MessageResponse, summary="Excluir usuário")
def remover(usuario_id: int, db: _Db, current_user: _Admin) -> MessageResponse:
    usuario_service.remover(db, usuario_id)
    logger.info("Usuario id=%d deleted by admin '%s'", usuario_id, current_user.email)
    return MessageResponse(message="Usuário excluído com sucesso")


@router.put(
    "/{usuario_id}/obras-permitidas",
    response_model=UsuarioResponse,
    summary="Definir obras permitidas",
)
def definir_obras_permitidas(
    usuario_id: int, payload: ObrasPermitidasUpdate, db: _Db, current_user: _Admin
) -> UsuarioResponse:
    usuario = usuario_service.definir_obras_permitidas(db, usuario_id, payload.obra_ids)
    return UsuarioResponse.model_validate(usuario)
