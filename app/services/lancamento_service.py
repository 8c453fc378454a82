"""
Lancamentos (payment entries) resource.

Entries are stored in one table keyed by ``tipo``; validation goes through
the tagged union ``app.schemas.lancamento.LancamentoCreate``.  On every
write ``_derivar`` clears columns that do not belong to the current
``tipo`` and recomputes the weekly-payment totals.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from app.models.lancamento import Lancamento
from app.schemas.lancamento import CAMPOS_POR_TIPO, LancamentoCreate
from app.services.crud_service import Recurso
from app.services.filtros import CONTEM, EXATO, CampoFiltro
from app.utils.constants import SEMANAL_EFETUADO

logger = logging.getLogger(__name__)

_DERIVADOS = frozenset({"valor_va_vt", "total_receber", "data_pagamento_efetuado"})
_COMUNS = frozenset({"id", "tipo", "criado_por_id", "created_at", "updated_at"})


def _dec(valor) -> Decimal:
    return Decimal(str(valor)) if valor is not None else Decimal("0")


def _derivar(lancamento: Lancamento) -> None:
    proprios = CAMPOS_POR_TIPO[lancamento.tipo] | _COMUNS
    if lancamento.tipo == "pagamento_semanal":
        proprios = proprios | _DERIVADOS

    for coluna in Lancamento.__table__.columns.keys():
        if coluna not in proprios and getattr(lancamento, coluna) is not None:
            setattr(lancamento, coluna, None)

    if lancamento.tipo != "pagamento_semanal":
        return

    va = _dec(lancamento.valor_va)
    vt = _dec(lancamento.valor_vt)
    lancamento.valor_va_vt = va + vt
    lancamento.total_receber = _dec(lancamento.valor_pagar) + va + vt
    if lancamento.status_semanal == SEMANAL_EFETUADO and lancamento.data_pagamento_efetuado is None:
        lancamento.data_pagamento_efetuado = datetime.now(timezone.utc).replace(tzinfo=None)


LANCAMENTOS = Recurso(
    nome="Lançamento",
    modelo=Lancamento,
    esquema=LancamentoCreate,
    filtros=(
        CampoFiltro("tipo", Lancamento.tipo, EXATO),
        CampoFiltro("obra_id", Lancamento.obra_id, EXATO, int),
        CampoFiltro("status", Lancamento.status, EXATO),
        CampoFiltro("nome", Lancamento.nome, CONTEM),
    ),
    ordem=(Lancamento.created_at.desc(), Lancamento.id.desc()),
    coluna_escopo=Lancamento.obra_id,
    sem_obra_visivel=True,
    ao_gravar=_derivar,
)
