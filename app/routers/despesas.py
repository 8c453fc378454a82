"""
Expense routers: materiais, mão de obra, equipamentos, contratos and outros
gastos.  Each module-level router is mounted with its own prefix in
``main.py``; every route follows the caller's allowed projects.

Equipamentos, contratos and outros gastos also expose their installment list
under ``/{id}/pagamentos[/{pid}]``.  Outros gastos add the per-category
report ``GET /relatorio/categorias``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers._crud import crud_router, parcelas_router
from app.schemas.despesas import (
    CategoriaTotal,
    ContratoCreate,
    ContratoResponse,
    ContratoUpdate,
    EquipamentoCreate,
    EquipamentoResponse,
    EquipamentoUpdate,
    MaoObraCreate,
    MaoObraResponse,
    MaoObraUpdate,
    MaterialCreate,
    MaterialResponse,
    MaterialUpdate,
    OutroGastoCreate,
    OutroGastoResponse,
    OutroGastoUpdate,
)
from app.services import despesa_service
from app.services.auth_service import obras_permitidas_do_usuario

logger = logging.getLogger(__name__)


materiais_router = crud_router(
    despesa_service.MATERIAIS,
    create_schema=MaterialCreate,
    update_schema=MaterialUpdate,
    response_schema=MaterialResponse,
    tag="Materiais",
    escopado=True,
)

mao_obra_router = crud_router(
    despesa_service.MAO_OBRA,
    create_schema=MaoObraCreate,
    update_schema=MaoObraUpdate,
    response_schema=MaoObraResponse,
    tag="Mão de obra",
    escopado=True,
)


def _com_parcelas(recurso, create_schema, update_schema, response_schema, tag, router=None):
    router = parcelas_router(recurso, response_schema, tag, escopado=True, router=router)
    return crud_router(
        recurso,
        create_schema=create_schema,
        update_schema=update_schema,
        response_schema=response_schema,
        tag=tag,
        escopado=True,
        router=router,
    )


equipamentos_router = _com_parcelas(
    despesa_service.EQUIPAMENTOS,
    EquipamentoCreate, EquipamentoUpdate, EquipamentoResponse, "Equipamentos",
)

contratos_router = _com_parcelas(
    despesa_service.CONTRATOS,
    ContratoCreate, ContratoUpdate, ContratoResponse, "Contratos",
)


# ---------------------------------------------------------------------------
# GET /outros-gastos/relatorio/categorias
# ---------------------------------------------------------------------------

outros_gastos_router = APIRouter(tags=["Outros gastos"])


@outros_gastos_router.get(
    "/relatorio/categorias",
    response_model=list[CategoriaTotal],
    summary="Totais por categoria",
    description=(
        "Soma e quantidade de outros gastos agrupadas por ``categoria_livre``, "
        "da maior para a menor soma."
    ),
)
def relatorio_categorias(
    db: Annotated[Session, Depends(get_db)],
    obras_permitidas: Annotated[set[int] | None, Depends(obras_permitidas_do_usuario)],
    obra_id: Annotated[str | None, Query()] = None,
    data_inicio: Annotated[str | None, Query()] = None,
    data_fim: Annotated[str | None, Query()] = None,
) -> list[CategoriaTotal]:
    params = {"obra_id": obra_id, "data_inicio": data_inicio, "data_fim": data_fim}
    logger.debug("GET outros-gastos/relatorio/categorias params=%s", params)
    linhas = despesa_service.relatorio_categorias(db, params, obras_permitidas)
    return [CategoriaTotal(**linha) for linha in linhas]


_com_parcelas(
    despesa_service.OUTROS_GASTOS,
    OutroGastoCreate, OutroGastoUpdate, OutroGastoResponse, "Outros gastos",
    router=outros_gastos_router,
)
