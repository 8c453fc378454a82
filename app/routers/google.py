"""
Google Drive / Sheets router.

Mounts under ``/google`` (prefix set in ``main.py``).

Endpoints:
    GET    /drive/folders            List Drive folders.
    GET    /drive/{folder_id}        List files inside a folder.
    DELETE /drive/files/{file_id}    Delete a Drive file (Admin).
    POST   /sheets                   Create a spreadsheet from the default model (Admin).
    POST   /sheets/copy              Copy a template spreadsheet (Admin).
    POST   /sheets/values            Read a range.
    PUT    /sheets/values            Write a range.
    POST   /sheets/{id}/abas         Add a sheet (tab).

The client comes from ``app.state.google`` through ``get_google_client``;
upstream failures answer 502.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from app.models.usuario import Usuario
from app.schemas.common import MessageResponse
from app.schemas.google import (
    AbaCreate,
    AbaCriadaResponse,
    ArquivoDrive,
    IntervaloLeitura,
    PlanilhaCopia,
    PlanilhaCreate,
    PlanilhaCriadaResponse,
    ValoresAtualizadosResponse,
    ValoresUpdate,
)
from app.services.auth_service import get_current_user, require_role
from app.services.google_workspace import GoogleWorkspaceClient, get_google_client
from app.utils.constants import ROLE_ADMIN, ROLES_OPERACAO

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Google"])

_Google = Annotated[GoogleWorkspaceClient, Depends(get_google_client)]
_Leitor = Annotated[Usuario, Depends(get_current_user)]
_Operador = Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))]
_Admin = Annotated[Usuario, Depends(require_role(ROLE_ADMIN))]

_ERROS = {502: {"description": "Falha na comunicação com o Google."}}


# ---------------------------------------------------------------------------
# Drive
# ---------------------------------------------------------------------------


@router.get(
    "/drive/folders",
    response_model=list[ArquivoDrive],
    summary="Listar pastas",
    responses=_ERROS,
)
def listar_pastas(google: _Google, current_user: _Leitor) -> list[dict[str, Any]]:
    return google.listar_pastas()


@router.get(
    "/drive/{folder_id}",
    response_model=list[ArquivoDrive],
    summary="Listar arquivos de uma pasta",
    responses=_ERROS,
)
def listar_arquivos(
    folder_id: str, google: _Google, current_user: _Leitor
) -> list[dict[str, Any]]:
    return google.listar_arquivos(folder_id)


@router.delete(
    "/drive/files/{file_id}",
    response_model=MessageResponse,
    summary="Excluir arquivo",
    responses=_ERROS,
)
def excluir_arquivo(file_id: str, google: _Google, current_user: _Admin) -> MessageResponse:
    google.excluir_arquivo(file_id)
    logger.info("Drive file %s deleted by '%s'", file_id, current_user.email)
    return MessageResponse(message="Arquivo excluído com sucesso")


# ---------------------------------------------------------------------------
# Sheets
# ---------------------------------------------------------------------------


@router.post(
    "/sheets",
    response_model=PlanilhaCriadaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Criar planilha",
    responses=_ERROS,
)
def criar_planilha(
    payload: PlanilhaCreate, google: _Google, current_user: _Admin
) -> PlanilhaCriadaResponse:
    spreadsheet_id = google.criar_planilha(payload.titulo)
    return PlanilhaCriadaResponse(
        message="Planilha criada com sucesso", spreadsheet_id=spreadsheet_id
    )


@router.post(
    "/sheets/copy",
    response_model=PlanilhaCriadaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Copiar planilha modelo",
    responses=_ERROS,
)
def copiar_planilha(
    payload: PlanilhaCopia, google: _Google, current_user: _Admin
) -> PlanilhaCriadaResponse:
    spreadsheet_id = google.copiar_planilha(
        payload.template_id, payload.novo_titulo, payload.folder_id
    )
    return PlanilhaCriadaResponse(
        message="Planilha criada com sucesso", spreadsheet_id=spreadsheet_id
    )


@router.post("/sheets/values", summary="Ler intervalo da planilha", responses=_ERROS)
def obter_valores(
    payload: IntervaloLeitura, google: _Google, current_user: _Leitor
) -> dict[str, Any]:
    return google.obter_valores(payload.spreadsheet_id, payload.intervalo)


@router.put(
    "/sheets/values",
    response_model=ValoresAtualizadosResponse,
    summary="Atualizar intervalo da planilha",
    responses=_ERROS,
)
def atualizar_valores(
    payload: ValoresUpdate, google: _Google, current_user: _Operador
) -> ValoresAtualizadosResponse:
    resultado = google.atualizar_valores(
        payload.spreadsheet_id, payload.intervalo, payload.valores
    )
    logger.info(
        "Spreadsheet %s range %s updated by '%s'",
        payload.spreadsheet_id, payload.intervalo, current_user.email,
    )
    return ValoresAtualizadosResponse(
        message="Dados da planilha atualizados com sucesso",
        updated_cells=resultado["updatedCells"],
        updated_range=resultado["updatedRange"],
    )


@router.post(
    "/sheets/{spreadsheet_id}/abas",
    response_model=AbaCriadaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Adicionar aba",
    responses=_ERROS,
)
def adicionar_aba(
    spreadsheet_id: str, payload: AbaCreate, google: _Google, current_user: _Operador
) -> AbaCriadaResponse:
    sheet_id = google.adicionar_aba(spreadsheet_id, payload.titulo)
    return AbaCriadaResponse(
        message=f"Aba '{payload.titulo}' adicionada com sucesso", sheet_id=sheet_id
    )
