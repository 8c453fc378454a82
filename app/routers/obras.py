"""
Obras (construction projects) router.

Mounts under ``/obras`` (prefix set in ``main.py``).

Endpoints:
    POST   /                             Create a project.
    GET    /                             List (filters: status, cliente, nome).
    GET    /{id}                         Fetch one project.
    PUT    /{id}                         Partial update.
    DELETE /{id}                         Delete; 409 while records reference it.
    PUT    /{id}/planilha                Bind a Google spreadsheet.
    GET    /planilha/{spreadsheet_id}    Find the project bound to a spreadsheet.

Every route except create is narrowed to the caller's allowed projects
unless the caller is an Admin.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.routers._crud import crud_router
from app.schemas.obra import ObraCreate, ObraResponse, ObraUpdate, PlanilhaAssociar
from app.services import obra_service
from app.services.auth_service import obras_permitidas_do_usuario, require_role
from app.utils.constants import ROLES_OPERACAO

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Obras"])


# ---------------------------------------------------------------------------
# Spreadsheet binding
# ---------------------------------------------------------------------------


@router.get(
    "/planilha/{spreadsheet_id}",
    response_model=ObraResponse,
    summary="Obra associada a uma planilha",
    responses={
        403: {"description": "Obra fora das obras permitidas do usuário."},
        404: {"description": "Nenhuma obra associada à planilha."},
    },
)
def obter_por_planilha(
    spreadsheet_id: str,
    db: Annotated[Session, Depends(get_db)],
    obras_permitidas: Annotated[set[int] | None, Depends(obras_permitidas_do_usuario)],
) -> ObraResponse:
    obra = obra_service.obter_por_planilha(db, spreadsheet_id, obras_permitidas)
    return ObraResponse.model_validate(obra)


@router.put(
    "/{obra_id}/planilha",
    response_model=ObraResponse,
    summary="Associar planilha à obra",
    description="Substitui qualquer planilha associada anteriormente.",
)
def associar_planilha(
    obra_id: int,
    payload: PlanilhaAssociar,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))],
    obras_permitidas: Annotated[set[int] | None, Depends(obras_permitidas_do_usuario)],
) -> ObraResponse:
    obra = obra_service.associar_planilha(
        db, obra_id, payload.spreadsheet_id, obras_permitidas
    )
    logger.info("Obra id=%d spreadsheet bound by '%s'", obra_id, current_user.email)
    return ObraResponse.model_validate(obra)


crud_router(
    obra_service.OBRAS,
    create_schema=ObraCreate,
    update_schema=ObraUpdate,
    response_schema=ObraResponse,
    tag="Obras",
    escopado=True,
    router=router,
)
