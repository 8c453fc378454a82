"""
Derived financial metrics for painéis and expense records.

Every function here is pure: it receives values (or an immutable
``PainelSnapshot``) and returns a new value.  Nothing is cached or written
back to the database, so the figures always reflect the current child rows.

Amounts are handled as ``Decimal`` so that budget boundaries such as
``700.00 / 1000.00`` classify exactly.

Budget status (``status_orcamento``), with p = total_gasto / orcamento * 100:

    p <= 70           "dentro do orçamento"
    70 < p <= 90      "atenção"
    90 < p <= 100     "próximo do limite"
    p > 100           "acima do orçamento"
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from app.utils.constants import (
    ETAPA_CONCLUIDA,
    LIMITE_ATENCAO,
    LIMITE_DENTRO_ORCAMENTO,
    LIMITE_PROXIMO,
    ORCAMENTO_ACIMA,
    ORCAMENTO_ATENCAO,
    ORCAMENTO_DENTRO,
    ORCAMENTO_PROXIMO_LIMITE,
    SEMANAL_A_PAGAR,
    SEMANAL_EFETUADO,
    STATUS_GERAL_COM_ATRASO,
    STATUS_GERAL_EM_PROCESSAMENTO,
    STATUS_GERAL_PENDENTE,
    STATUS_GERAL_SEM_PAGAMENTOS,
    STATUS_GERAL_TODOS_PAGOS,
)

_ZERO = Decimal("0")
_CEM = Decimal("100")
_CENTAVO = Decimal("0.01")
_SEGUNDOS_DIA = 86400


def _dec(valor: Any) -> Decimal:
    """Convert ORM / JSON amounts to ``Decimal`` without float artefacts."""
    if valor is None:
        return _ZERO
    if isinstance(valor, Decimal):
        return valor
    if isinstance(valor, float):
        return Decimal(str(valor))
    return Decimal(valor)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SemanalSnapshot:
    total_receber: Decimal
    status: str


@dataclass(frozen=True)
class PainelSnapshot:
    """Immutable view of a painel and its children, as read from the store.

    Attributes:
        orcamento: Project budget.
        data_final_entrega: Planned delivery date.
        gastos: Amount of each generic expense.
        contratos: ``valor_total`` of each contract.
        semanais: Total and status of each weekly payment.
        etapas: Status of each schedule milestone.
    """

    orcamento: Decimal
    data_final_entrega: date
    gastos: tuple[Decimal, ...] = ()
    contratos: tuple[Decimal, ...] = ()
    semanais: tuple[SemanalSnapshot, ...] = ()
    etapas: tuple[str, ...] = ()

    @classmethod
    def de_painel(cls, painel: Any) -> "PainelSnapshot":
        """Build a snapshot from a ``PainelFinanceiro`` ORM instance."""
        return cls(
            orcamento=_dec(painel.obra_orcamento),
            data_final_entrega=painel.obra_data_final_entrega,
            gastos=tuple(_dec(g.valor) for g in painel.gastos),
            contratos=tuple(_dec(c.valor_total) for c in painel.contratos),
            semanais=tuple(
                SemanalSnapshot(total_receber=_dec(p.total_receber), status=p.status)
                for p in painel.pagamentos_semanais
            ),
            etapas=tuple(e.status for e in painel.cronograma),
        )


# ---------------------------------------------------------------------------
# Painel metrics
# ---------------------------------------------------------------------------


def total_gasto(snapshot: PainelSnapshot) -> Decimal:
    return (
        sum(snapshot.gastos, _ZERO)
        + sum(snapshot.contratos, _ZERO)
        + sum((s.total_receber for s in snapshot.semanais), _ZERO)
    )


def saldo_restante(snapshot: PainelSnapshot) -> Decimal:
    return snapshot.orcamento - total_gasto(snapshot)


def status_orcamento(snapshot: PainelSnapshot) -> str:
    """Classify spending against the budget (inclusive upper bounds).

    A zero budget is "dentro do orçamento" while nothing was spent and
    "acima do orçamento" as soon as anything was.
    """
    total = total_gasto(snapshot)
    orcamento = snapshot.orcamento

    if orcamento <= _ZERO:
        return ORCAMENTO_DENTRO if total <= _ZERO else ORCAMENTO_ACIMA

    # total/orcamento*100 <= limite  <=>  total*100 <= orcamento*limite
    escalado = total * _CEM
    if escalado <= orcamento * LIMITE_DENTRO_ORCAMENTO:
        return ORCAMENTO_DENTRO
    if escalado <= orcamento * LIMITE_ATENCAO:
        return ORCAMENTO_ATENCAO
    if escalado <= orcamento * LIMITE_PROXIMO:
        return ORCAMENTO_PROXIMO_LIMITE
    return ORCAMENTO_ACIMA


def percentual_gasto(snapshot: PainelSnapshot) -> Decimal | None:
    """Spent share of the budget with two decimals; ``None`` for a zero budget."""
    if snapshot.orcamento <= _ZERO:
        return None
    percentual = total_gasto(snapshot) * _CEM / snapshot.orcamento
    return percentual.quantize(_CENTAVO, rounding=ROUND_HALF_UP)


def percentual_concluido(snapshot: PainelSnapshot) -> int:
    if not snapshot.etapas:
        return 0
    concluidas = sum(1 for status in snapshot.etapas if status == ETAPA_CONCLUIDA)
    percentual = Decimal(100 * concluidas) / Decimal(len(snapshot.etapas))
    return int(percentual.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def dias_restantes(snapshot: PainelSnapshot, agora: datetime | None = None) -> int:
    """Days until the delivery date, rounded up; negative when overdue.

    The delivery date is taken as midnight UTC of that day.
    """
    agora = agora or datetime.now(timezone.utc)
    if agora.tzinfo is None:
        agora = agora.replace(tzinfo=timezone.utc)
    fim = datetime.combine(snapshot.data_final_entrega, time.min, tzinfo=timezone.utc)
    return math.ceil((fim - agora).total_seconds() / _SEGUNDOS_DIA)


def relatorio_financeiro(snapshot: PainelSnapshot, agora: datetime | None = None) -> dict[str, Any]:
    """Full financial report: summary, per-collection breakdown and schedule.

    Returns:
        Dict with ``resumo_financeiro``, ``detalhamento_gastos``,
        ``cronograma`` and ``dias_restantes`` keys.  Amounts are ``Decimal``.
    """
    total = total_gasto(snapshot)
    semanais_total = sum((s.total_receber for s in snapshot.semanais), _ZERO)
    semanais_efetuados = sum(
        (s.total_receber for s in snapshot.semanais if s.status == SEMANAL_EFETUADO), _ZERO
    )
    semanais_pendentes = sum(
        (s.total_receber for s in snapshot.semanais if s.status == SEMANAL_A_PAGAR), _ZERO
    )

    return {
        "resumo_financeiro": {
            "orcamento_total": snapshot.orcamento,
            "total_gasto": total,
            "saldo_restante": snapshot.orcamento - total,
            "status_orcamento": status_orcamento(snapshot),
            "percentual_gasto": percentual_gasto(snapshot),
        },
        "detalhamento_gastos": {
            "gastos": {"total": sum(snapshot.gastos, _ZERO), "quantidade": len(snapshot.gastos)},
            "contratos": {
                "total": sum(snapshot.contratos, _ZERO),
                "quantidade": len(snapshot.contratos),
            },
            "pagamentos_semanais": {
                "total": semanais_total,
                "efetuados": semanais_efetuados,
                "pendentes": semanais_pendentes,
                "quantidade": len(snapshot.semanais),
            },
        },
        "cronograma": {
            "total_etapas": len(snapshot.etapas),
            "concluidas": snapshot.etapas.count(ETAPA_CONCLUIDA),
            "em_andamento": snapshot.etapas.count("em andamento"),
            "previstas": snapshot.etapas.count("previsto"),
            "atrasadas": snapshot.etapas.count("atrasada"),
            "percentual_concluido": percentual_concluido(snapshot),
        },
        "dias_restantes": dias_restantes(snapshot, agora),
    }


# ---------------------------------------------------------------------------
# Nested payment lists (equipamentos, contratos, outros gastos)
# ---------------------------------------------------------------------------


def valor_total_pagamentos(valores: Iterable[Any]) -> Decimal:
    return sum((_dec(v) for v in valores), _ZERO)


def status_geral_pagamentos(statuses: Iterable[str]) -> str:
    """Aggregate status of a payment list.

    Precedence: empty list, all paid, any overdue, any pending, otherwise
    processing.
    """
    statuses = list(statuses)
    if not statuses:
        return STATUS_GERAL_SEM_PAGAMENTOS
    if all(s == "efetuado" for s in statuses):
        return STATUS_GERAL_TODOS_PAGOS
    if "atrasado" in statuses:
        return STATUS_GERAL_COM_ATRASO
    if "pendente" in statuses:
        return STATUS_GERAL_PENDENTE
    return STATUS_GERAL_EM_PROCESSAMENTO


# ---------------------------------------------------------------------------
# Labor contracts
# ---------------------------------------------------------------------------


def duracao_contrato_dias(inicio: date | None, fim: date | None) -> int:
    if not inicio or not fim:
        return 0
    return abs((fim - inicio).days)


def contrato_ativo(inicio: date, fim: date, status: str, hoje: date | None = None) -> bool:
    hoje = hoje or date.today()
    return inicio <= hoje <= fim and status == "ativo"


def pagamento_atrasado(dia_pagamento: int, status_pagamento: str, hoje: date | None = None) -> bool:
    """True when this month's payment day has passed and it is still pending."""
    hoje = hoje or date.today()
    return status_pagamento == "pendente" and hoje.day > dia_pagamento
