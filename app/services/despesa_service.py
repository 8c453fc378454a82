"""
Expense and entrada resources.

Declares the ``Recurso`` of every expense type plus entradas for the generic
CRUD store, the ``CONT-{ano}-{seq:04d}`` contract code generator and the
category report of outros gastos.

Records linked to a project follow the caller's allowed projects;
company-level records (no ``obra_id``) are visible to every user.

The three expense types with installment lists expose them as the
``pagamentos`` child collection, handled by ``app.services.subdocumentos``.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.contrato import Contrato
from app.models.entrada import Entrada
from app.models.equipamento import Equipamento
from app.models.mao_obra import MaoObra
from app.models.material import Material
from app.models.outro_gasto import OutroGasto
from app.models.parcela import ContratoPagamento, EquipamentoPagamento, OutroGastoPagamento
from app.schemas.despesas import (
    ContratoCreate,
    EntradaCreate,
    EquipamentoCreate,
    MaoObraCreate,
    MaterialCreate,
    OutroGastoCreate,
)
from app.services.crud_service import Recurso, filtro_escopo
from app.services.filtros import ATE, CONTEM, DESDE, EXATO, CampoFiltro, aplicar_filtros

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Contract code
# ---------------------------------------------------------------------------


def _next_sequence(db: Session, ano: int) -> int:
    """Return the next sequence number for ``CONT-{ano}-`` codes (1-based)."""
    prefix = f"CONT-{ano}-"
    rows = db.query(Contrato.codigo).filter(Contrato.codigo.like(f"{prefix}%")).all()

    max_seq = 0
    for (codigo,) in rows:
        tail = codigo[len(prefix):] if codigo else ""
        if tail.isdigit():
            max_seq = max(max_seq, int(tail))
    return max_seq + 1


def _gerar_codigo(db: Session, dados: dict[str, Any]) -> dict[str, Any]:
    if not dados.get("codigo"):
        ano = datetime.date.today().year
        dados["codigo"] = f"CONT-{ano}-{_next_sequence(db, ano):04d}"
        logger.debug("Generated contract code %s", dados["codigo"])
    return dados


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


def _periodo(coluna: Any) -> tuple[CampoFiltro, CampoFiltro]:
    return (
        CampoFiltro("data_inicio", coluna, DESDE),
        CampoFiltro("data_fim", coluna, ATE),
    )


MATERIAIS = Recurso(
    nome="Material",
    modelo=Material,
    esquema=MaterialCreate,
    filtros=(
        CampoFiltro("obra_id", Material.obra_id, EXATO, int),
        CampoFiltro("forma_pagamento", Material.forma_pagamento, EXATO),
        CampoFiltro("status_pagamento", Material.status_pagamento, EXATO),
        CampoFiltro("solicitante", Material.solicitante, CONTEM),
        CampoFiltro("local_compra", Material.local_compra, CONTEM),
        *_periodo(Material.data),
    ),
    ordem=(Material.data.desc(), Material.id.desc()),
    coluna_escopo=Material.obra_id,
    sem_obra_visivel=True,
)

MAO_OBRA = Recurso(
    nome="Mão de obra",
    modelo=MaoObra,
    esquema=MaoObraCreate,
    filtros=(
        CampoFiltro("obra_id", MaoObra.obra_id, EXATO, int),
        CampoFiltro("status", MaoObra.status, EXATO),
        CampoFiltro("status_pagamento", MaoObra.status_pagamento, EXATO),
        CampoFiltro("tipo_contratacao", MaoObra.tipo_contratacao, EXATO),
        CampoFiltro("nome", MaoObra.nome, CONTEM),
        CampoFiltro("funcao", MaoObra.funcao, CONTEM),
    ),
    ordem=(MaoObra.created_at.desc(), MaoObra.id.desc()),
    coluna_escopo=MaoObra.obra_id,
    sem_obra_visivel=True,
)

EQUIPAMENTOS = Recurso(
    nome="Equipamento",
    modelo=Equipamento,
    esquema=EquipamentoCreate,
    filtros=(
        CampoFiltro("obra_id", Equipamento.obra_id, EXATO, int),
        CampoFiltro("tipo_contratacao", Equipamento.tipo_contratacao, EXATO),
        CampoFiltro("item", Equipamento.item, CONTEM),
        CampoFiltro("solicitante", Equipamento.solicitante, CONTEM),
        *_periodo(Equipamento.data),
    ),
    ordem=(Equipamento.data.desc(), Equipamento.id.desc()),
    coluna_escopo=Equipamento.obra_id,
    sem_obra_visivel=True,
    filhos={"pagamentos": EquipamentoPagamento},
)

CONTRATOS = Recurso(
    nome="Contrato",
    modelo=Contrato,
    esquema=ContratoCreate,
    filtros=(
        CampoFiltro("obra_id", Contrato.obra_id, EXATO, int),
        CampoFiltro("status", Contrato.status, EXATO),
        CampoFiltro("loja", Contrato.loja, CONTEM),
    ),
    ordem=(Contrato.created_at.desc(), Contrato.id.desc()),
    coluna_escopo=Contrato.obra_id,
    sem_obra_visivel=True,
    filhos={"pagamentos": ContratoPagamento},
    preparar=_gerar_codigo,
)

OUTROS_GASTOS = Recurso(
    nome="Outro gasto",
    modelo=OutroGasto,
    esquema=OutroGastoCreate,
    filtros=(
        CampoFiltro("obra_id", OutroGasto.obra_id, EXATO, int),
        CampoFiltro("categoria_livre", OutroGasto.categoria_livre, CONTEM),
        CampoFiltro("fornecedor", OutroGasto.fornecedor, CONTEM),
        *_periodo(OutroGasto.data),
    ),
    ordem=(OutroGasto.data.desc(), OutroGasto.id.desc()),
    coluna_escopo=OutroGasto.obra_id,
    sem_obra_visivel=True,
    filhos={"pagamentos": OutroGastoPagamento},
)

ENTRADAS = Recurso(
    nome="Entrada",
    modelo=Entrada,
    esquema=EntradaCreate,
    filtros=(
        CampoFiltro("obra_id", Entrada.obra_id, EXATO, int),
        CampoFiltro("status_recebimento", Entrada.status_recebimento, EXATO),
        CampoFiltro("nome", Entrada.nome, CONTEM),
        *_periodo(Entrada.data),
    ),
    ordem=(Entrada.data.desc(), Entrada.id.desc()),
    coluna_escopo=Entrada.obra_id,
    sem_obra_visivel=True,
)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def relatorio_categorias(
    db: Session, params: dict[str, Any], obras_permitidas: set[int] | None = None
) -> list[dict[str, Any]]:
    """Totals of outros gastos per ``categoria_livre``, largest first.

    Accepts the ``obra_id``, ``data_inicio`` and ``data_fim`` filters of the
    outros gastos list and counts only the gastos the caller may see.

    Returns:
        ``[{"categoria", "total", "quantidade"}, ...]`` sorted by total desc.
    """
    filtros = tuple(
        campo for campo in OUTROS_GASTOS.filtros
        if campo.param in ("obra_id", "data_inicio", "data_fim")
    )
    query = db.query(
        OutroGasto.categoria_livre,
        func.coalesce(func.sum(OutroGasto.valor), 0),
        func.count(OutroGasto.id),
    )
    query = filtro_escopo(query, OUTROS_GASTOS, obras_permitidas)
    query = aplicar_filtros(query, filtros, params)
    rows = (
        query.group_by(OutroGasto.categoria_livre)
        .order_by(func.sum(OutroGasto.valor).desc(), OutroGasto.categoria_livre)
        .all()
    )
    return [
        {"categoria": categoria, "total": float(total), "quantidade": quantidade}
        for categoria, total, quantidade in rows
    ]
