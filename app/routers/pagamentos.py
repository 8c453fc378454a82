"""
Painel financeiro router ("pagamentos").

Mounts under ``/pagamentos`` (prefix set in ``main.py``).

Endpoints:
    GET    /semanais/pendentes                     Weekly payments still "pagar", all paineis.
    GET    /relatorio-semanais                     Weekly payments by semana/ano/status + sum.
    POST   /                                       Create a painel (children optional).
    GET    /                                       List (filters: status, nome).
    GET    /{id}                                   Painel with children and derived figures.
    PUT    /{id}                                   Update the embedded project summary.
    DELETE /{id}                                   Delete the painel and all children.
    PUT    /{id}/obra                              Partial update of the project summary.
    POST   /{id}/{colecao}                         Add an element to a collection.
    PUT    /{id}/{colecao}/{eid}                   Update one element.
    DELETE /{id}/{colecao}/{eid}                   Remove one element.
    PATCH  /{id}/pagamentos-semanais/{eid}/efetuado   Mark a weekly payment as paid.
    GET    /{id}/relatorio-financeiro              Financial report.
    GET    /{id}/relatorio-financeiro/excel        Same report as an .xlsx download.

``colecao`` is one of ``gastos``, ``contratos``, ``cronograma`` and
``pagamentos-semanais``.  Every write returns the whole painel.
"""

import io
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.exporters.excel_exporter import exportar_relatorio_financeiro
from app.models.usuario import Usuario
from app.schemas.common import MessageResponse, Pagina, Paginacao
from app.schemas.painel import (
    ContratoPainelCreate,
    ContratoPainelUpdate,
    EtapaCreate,
    EtapaUpdate,
    GastoCreate,
    GastoUpdate,
    ObraPainelUpdate,
    PainelCreate,
    PainelResponse,
    PainelUpdate,
    PendentesResponse,
    RelatorioFinanceiro,
    RelatorioSemanaisResponse,
    SemanalCreate,
    SemanalUpdate,
)
from app.services import crud_service, painel_service
from app.services.auth_service import get_current_user, require_role
from app.utils.constants import ROLES_OPERACAO

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pagamentos"])

_Leitor = Annotated[Usuario, Depends(get_current_user)]
_Operador = Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))]
_Db = Annotated[Session, Depends(get_db)]


# ---------------------------------------------------------------------------
# Cross-painel reports (declared before /{painel_id})
# ---------------------------------------------------------------------------


@router.get(
    "/semanais/pendentes",
    response_model=PendentesResponse,
    summary="Pagamentos semanais pendentes",
)
def listar_pendentes(db: _Db, current_user: _Leitor) -> dict[str, Any]:
    return painel_service.listar_pendentes(db)


@router.get(
    "/relatorio-semanais",
    response_model=RelatorioSemanaisResponse,
    summary="Relatório de pagamentos semanais",
    description="Filtra por ``semana``, ``ano`` e ``status``; traz quantidade e soma.",
)
def relatorio_semanais(
    db: _Db,
    current_user: _Leitor,
    semana: Annotated[int | None, Query(ge=1, le=53)] = None,
    ano: Annotated[int | None, Query()] = None,
    status_pagamento: Annotated[str | None, Query(alias="status")] = None,
) -> dict[str, Any]:
    return painel_service.relatorio_semanais(db, semana, ano, status_pagamento)


# ---------------------------------------------------------------------------
# Painel CRUD
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=PainelResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Criar painel financeiro",
)
def criar(payload: PainelCreate, db: _Db, current_user: _Operador) -> PainelResponse:
    painel = painel_service.criar(db, payload, current_user.id)
    logger.info("POST pagamentos id=%d by '%s'", painel.id, current_user.email)
    return painel_service.build_response(painel)


@router.get("", response_model=Pagina[PainelResponse], summary="Listar paineis")
def listar(
    request: Request,
    db: _Db,
    current_user: _Leitor,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> dict[str, Any]:
    params = dict(request.query_params)
    resultado = crud_service.listar(db, painel_service.PAINEIS, params, page, limit)
    return {
        "records": [painel_service.build_response(p) for p in resultado["records"]],
        "pagination": Paginacao(**resultado["pagination"]),
    }


@router.get("/{painel_id}", response_model=PainelResponse, summary="Obter painel")
def obter(painel_id: int, db: _Db, current_user: _Leitor) -> PainelResponse:
    painel = crud_service.obter(db, painel_service.PAINEIS, painel_id)
    return painel_service.build_response(painel)


@router.put(
    "/{painel_id}",
    response_model=PainelResponse,
    summary="Atualizar painel",
    description=(
        "Atualiza o resumo da obra. As coleções são alteradas pelos "
        "endpoints específicos de cada uma."
    ),
)
def atualizar(
    painel_id: int, payload: PainelUpdate, db: _Db, current_user: _Operador
) -> PainelResponse:
    if payload.obra is not None:
        painel = painel_service.atualizar_obra(db, painel_id, payload.obra)
    else:
        painel = crud_service.obter(db, painel_service.PAINEIS, painel_id)
    return painel_service.build_response(painel)


@router.delete("/{painel_id}", response_model=MessageResponse, summary="Excluir painel")
def remover(painel_id: int, db: _Db, current_user: _Operador) -> MessageResponse:
    crud_service.remover(db, painel_service.PAINEIS, painel_id)
    logger.info("DELETE pagamentos id=%d by '%s'", painel_id, current_user.email)
    return MessageResponse(message="Pagamento excluído com sucesso")


@router.put("/{painel_id}/obra", response_model=PainelResponse, summary="Atualizar dados da obra")
def atualizar_obra(
    painel_id: int, payload: ObraPainelUpdate, db: _Db, current_user: _Operador
) -> PainelResponse:
    painel = painel_service.atualizar_obra(db, painel_id, payload)
    return painel_service.build_response(painel)


# ---------------------------------------------------------------------------
# Child collections
# ---------------------------------------------------------------------------


def _registrar_colecao(segmento: str, create_schema: type, update_schema: type) -> None:
    """Register POST / PUT / DELETE for one painel collection."""

    def adicionar(
        painel_id: int, payload: create_schema, db: _Db, current_user: _Operador
    ) -> PainelResponse:
        painel = painel_service.adicionar(db, painel_id, segmento, payload)
        logger.info(
            "POST pagamentos id=%d %s by '%s'", painel_id, segmento, current_user.email
        )
        return painel_service.build_response(painel)

    def atualizar_item(
        painel_id: int, item_id: int, payload: update_schema, db: _Db, current_user: _Operador
    ) -> PainelResponse:
        painel = painel_service.atualizar_item(db, painel_id, segmento, item_id, payload)
        return painel_service.build_response(painel)

    def remover_item(
        painel_id: int, item_id: int, db: _Db, current_user: _Operador
    ) -> PainelResponse:
        painel = painel_service.remover_item(db, painel_id, segmento, item_id)
        return painel_service.build_response(painel)

    router.add_api_route(
        f"/{{painel_id}}/{segmento}",
        adicionar,
        methods=["POST"],
        response_model=PainelResponse,
        status_code=status.HTTP_201_CREATED,
        summary=f"Adicionar item em {segmento}",
        name=f"adicionar_{segmento}",
    )
    router.add_api_route(
        f"/{{painel_id}}/{segmento}/{{item_id}}",
        atualizar_item,
        methods=["PUT"],
        response_model=PainelResponse,
        summary=f"Atualizar item de {segmento}",
        name=f"atualizar_{segmento}",
    )
    router.add_api_route(
        f"/{{painel_id}}/{segmento}/{{item_id}}",
        remover_item,
        methods=["DELETE"],
        response_model=PainelResponse,
        summary=f"Remover item de {segmento}",
        name=f"remover_{segmento}",
    )


for _segmento, _esquemas in {
    "gastos": (GastoCreate, GastoUpdate),
    "contratos": (ContratoPainelCreate, ContratoPainelUpdate),
    "cronograma": (EtapaCreate, EtapaUpdate),
    "pagamentos-semanais": (SemanalCreate, SemanalUpdate),
}.items():
    _registrar_colecao(_segmento, *_esquemas)


@router.patch(
    "/{painel_id}/pagamentos-semanais/{item_id}/efetuado",
    response_model=PainelResponse,
    summary="Marcar pagamento semanal como efetuado",
    description=(
        "Idempotente: a data do pagamento é registrada na primeira chamada "
        "e mantida nas seguintes."
    ),
)
def marcar_efetuado(
    painel_id: int, item_id: int, db: _Db, current_user: _Operador
) -> PainelResponse:
    painel = painel_service.marcar_pagamento_efetuado(db, painel_id, item_id)
    logger.info(
        "Weekly payment id=%d of painel id=%d marked paid by '%s'",
        item_id, painel_id, current_user.email,
    )
    return painel_service.build_response(painel)


# ---------------------------------------------------------------------------
# Reports of one painel
# ---------------------------------------------------------------------------


@router.get(
    "/{painel_id}/relatorio-financeiro",
    response_model=RelatorioFinanceiro,
    summary="Relatório financeiro",
)
def relatorio_financeiro(painel_id: int, db: _Db, current_user: _Leitor) -> dict[str, Any]:
    return painel_service.relatorio_financeiro(db, painel_id)


@router.get(
    "/{painel_id}/relatorio-financeiro/excel",
    response_class=StreamingResponse,
    summary="Relatório financeiro em Excel",
    responses={
        200: {
            "description": "Arquivo .xlsx gerado.",
            "content": {
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": {}
            },
        },
    },
)
def relatorio_financeiro_excel(
    painel_id: int, db: _Db, current_user: _Leitor
) -> StreamingResponse:
    relatorio = painel_service.relatorio_financeiro(db, painel_id)
    painel = painel_service.carregar(db, painel_id)
    conteudo = exportar_relatorio_financeiro(painel, relatorio)

    filename = f"relatorio_financeiro_{painel_id}.xlsx"
    logger.info("Excel report of painel id=%d exported by '%s'", painel_id, current_user.email)
    return StreamingResponse(
        io.BytesIO(conteudo),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(conteudo)),
        },
    )
