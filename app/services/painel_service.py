"""
Painel financeiro service layer (``/pagamentos`` endpoints).

A painel is one project's full financial picture: an embedded project
summary plus the ``gastos``, ``contratos``, ``cronograma`` and
``pagamentos_semanais`` collections.  List / get / delete go through the
generic CRUD store; create and the summary update flatten the nested
``obra`` object into the ``obra_*`` columns.  Child collections are managed
by ``app.services.subdocumentos``.

Derived figures in responses and reports come from
``app.services.metricas`` and are recomputed on every read.

Weekly payments
---------------
- ``valor_va_vt = valor_va + valor_vt`` and
  ``total_receber = valor_pagar + valor_va + valor_vt`` are recomputed on
  every write; the client never sets them.
- Moving to "pagamento efetuado" stamps ``data_pagamento_efetuado`` once;
  later writes never overwrite an existing date.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from app.models.painel_financeiro import PagamentoSemanal, PainelFinanceiro
from app.schemas.painel import (
    ContratoPainelCreate,
    ContratoPainelResponse,
    EtapaCreate,
    EtapaResponse,
    GastoCreate,
    GastoResponse,
    ObraPainel,
    ObraPainelResponse,
    ObraPainelUpdate,
    PainelCreate,
    PainelResponse,
    SemanalCreate,
    SemanalResponse,
)
from app.services import crud_service, metricas, subdocumentos
from app.services.crud_service import Recurso
from app.services.filtros import CONTEM, EXATO, CampoFiltro
from app.utils.constants import SEMANAL_A_PAGAR, SEMANAL_EFETUADO

logger = logging.getLogger(__name__)

PAINEIS = Recurso(
    nome="Pagamento",
    modelo=PainelFinanceiro,
    esquema=PainelCreate,
    filtros=(
        CampoFiltro("status", PainelFinanceiro.obra_status, EXATO),
        CampoFiltro("nome", PainelFinanceiro.obra_nome, CONTEM),
    ),
    ordem=(PainelFinanceiro.created_at.desc(), PainelFinanceiro.id.desc()),
)

# URL segment -> (relationship name, create schema)
COLECOES: dict[str, tuple[str, type]] = {
    "gastos": ("gastos", GastoCreate),
    "contratos": ("contratos", ContratoPainelCreate),
    "cronograma": ("cronograma", EtapaCreate),
    "pagamentos-semanais": ("pagamentos_semanais", SemanalCreate),
}

_CAMPOS_OBRA = tuple(ObraPainel.model_fields)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _agora() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def recalcular_semanal(pagamento: PagamentoSemanal) -> None:
    """Recompute derived totals and stamp the paid date on first payment."""
    va = Decimal(str(pagamento.valor_va or 0))
    vt = Decimal(str(pagamento.valor_vt or 0))
    pagamento.valor_va_vt = va + vt
    pagamento.total_receber = Decimal(str(pagamento.valor_pagar or 0)) + va + vt
    if pagamento.status == SEMANAL_EFETUADO and pagamento.data_pagamento_efetuado is None:
        pagamento.data_pagamento_efetuado = _agora()


def _ao_gravar(campo: str):
    return recalcular_semanal if campo == "pagamentos_semanais" else None


def _obra_dict(painel: PainelFinanceiro) -> dict[str, Any]:
    return {campo: getattr(painel, f"obra_{campo}") for campo in _CAMPOS_OBRA}


def build_response(painel: PainelFinanceiro, agora: datetime | None = None) -> PainelResponse:
    """Construct a ``PainelResponse`` with children and derived figures."""
    snapshot = metricas.PainelSnapshot.de_painel(painel)
    return PainelResponse(
        id=painel.id,
        obra=ObraPainelResponse(**_obra_dict(painel)),
        gastos=[GastoResponse.model_validate(g) for g in painel.gastos],
        contratos=[ContratoPainelResponse.model_validate(c) for c in painel.contratos],
        cronograma=[EtapaResponse.model_validate(e) for e in painel.cronograma],
        pagamentos_semanais=[
            SemanalResponse.model_validate(p) for p in painel.pagamentos_semanais
        ],
        valor_total_gasto=metricas.total_gasto(snapshot),
        saldo_restante=metricas.saldo_restante(snapshot),
        status_orcamento=metricas.status_orcamento(snapshot),
        percentual_concluido=metricas.percentual_concluido(snapshot),
        dias_restantes=metricas.dias_restantes(snapshot, agora),
        created_at=painel.created_at,
        updated_at=painel.updated_at,
    )


def carregar(db: Session, painel_id: int) -> PainelFinanceiro:
    """Load a painel as the parent of a nested operation."""
    return subdocumentos.carregar_pai(db, PainelFinanceiro, painel_id, "Pagamento")


# ---------------------------------------------------------------------------
# Painel CRUD
# ---------------------------------------------------------------------------


def criar(db: Session, payload: PainelCreate, usuario_id: int | None) -> PainelFinanceiro:
    """Create a painel with its (optional) initial children."""
    painel = PainelFinanceiro(
        **{f"obra_{campo}": valor for campo, valor in payload.obra.model_dump().items()},
        criado_por_id=usuario_id,
    )
    for relacao, _esquema in COLECOES.values():
        modelo = type(painel).__mapper__.relationships[relacao].mapper.class_
        for elemento in getattr(payload, relacao):
            filho = modelo(**elemento.model_dump())
            if relacao == "pagamentos_semanais":
                recalcular_semanal(filho)
            getattr(painel, relacao).append(filho)

    db.add(painel)
    db.commit()
    db.refresh(painel)
    logger.info("Painel created: id=%d obra='%s'", painel.id, painel.obra_nome)
    return painel


def atualizar_obra(db: Session, painel_id: int, payload: ObraPainelUpdate) -> PainelFinanceiro:
    """Partial update of the embedded project summary, re-validated as a whole."""
    painel = crud_service.obter(db, PAINEIS, painel_id)
    alteracoes = payload.model_dump(exclude_unset=True)
    if not alteracoes:
        return painel

    validado = crud_service.validar(ObraPainel, {**_obra_dict(painel), **alteracoes})
    for campo in alteracoes:
        setattr(painel, f"obra_{campo}", validado[campo])

    db.commit()
    db.refresh(painel)
    logger.info("Painel id=%d summary updated: fields=%s", painel_id, sorted(alteracoes))
    return painel


# ---------------------------------------------------------------------------
# Child collections
# ---------------------------------------------------------------------------


def adicionar(db: Session, painel_id: int, segmento: str, dados: Any) -> PainelFinanceiro:
    relacao, _esquema = COLECOES[segmento]
    painel = carregar(db, painel_id)
    return subdocumentos.append(db, painel, relacao, dados, ao_gravar=_ao_gravar(relacao))


def atualizar_item(
    db: Session, painel_id: int, segmento: str, item_id: int, dados: Any
) -> PainelFinanceiro:
    relacao, esquema = COLECOES[segmento]
    painel = carregar(db, painel_id)
    return subdocumentos.update_by_id(
        db, painel, relacao, item_id, dados, esquema=esquema, ao_gravar=_ao_gravar(relacao)
    )


def remover_item(db: Session, painel_id: int, segmento: str, item_id: int) -> PainelFinanceiro:
    relacao, _esquema = COLECOES[segmento]
    painel = carregar(db, painel_id)
    return subdocumentos.remove_by_id(db, painel, relacao, item_id)


def marcar_pagamento_efetuado(db: Session, painel_id: int, item_id: int) -> PainelFinanceiro:
    """Force a weekly payment to "pagamento efetuado".

    Idempotent: the first call stamps ``data_pagamento_efetuado``; later
    calls keep the original date.
    """
    painel = carregar(db, painel_id)
    return subdocumentos.update_by_id(
        db,
        painel,
        "pagamentos_semanais",
        item_id,
        {"status": SEMANAL_EFETUADO},
        ao_gravar=recalcular_semanal,
    )


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def _com_obra(pagamento: PagamentoSemanal) -> dict[str, Any]:
    return {
        "obra_id": pagamento.painel_id,
        "obra_nome": pagamento.painel.obra_nome,
        "pagamento_semanal": SemanalResponse.model_validate(pagamento),
    }


def listar_pendentes(db: Session) -> dict[str, Any]:
    """All weekly payments still "pagar", across every painel."""
    pendentes = (
        db.query(PagamentoSemanal)
        .filter(PagamentoSemanal.status == SEMANAL_A_PAGAR)
        .order_by(PagamentoSemanal.painel_id, PagamentoSemanal.id)
        .all()
    )
    itens = [_com_obra(p) for p in pendentes]
    return {"pagamentos_pendentes": itens, "total": len(itens)}


def relatorio_semanais(
    db: Session,
    semana: int | None = None,
    ano: int | None = None,
    status: str | None = None,
) -> dict[str, Any]:
    """Weekly payments filtered by week, year and status, with count and sum."""
    query = db.query(PagamentoSemanal)
    if semana is not None:
        query = query.filter(PagamentoSemanal.semana == semana)
    if ano is not None:
        query = query.filter(PagamentoSemanal.ano == ano)
    if status:
        query = query.filter(PagamentoSemanal.status == status)
    pagamentos = query.order_by(PagamentoSemanal.painel_id, PagamentoSemanal.id).all()

    total = metricas.valor_total_pagamentos(p.total_receber for p in pagamentos)
    return {
        "relatorio": [_com_obra(p) for p in pagamentos],
        "resumo": {
            "total_pagamentos": len(pagamentos),
            "valor_total": float(total),
            "filtros": {"semana": semana, "ano": ano, "status": status},
        },
    }


def relatorio_financeiro(
    db: Session, painel_id: int, agora: datetime | None = None
) -> dict[str, Any]:
    """Financial report of one painel (summary, breakdown, schedule)."""
    painel = crud_service.obter(db, PAINEIS, painel_id)
    relatorio = metricas.relatorio_financeiro(metricas.PainelSnapshot.de_painel(painel), agora)
    relatorio["obra"] = _obra_dict(painel)
    logger.debug("relatorio_financeiro: painel id=%d", painel_id)
    return relatorio
