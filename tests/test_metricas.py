"""
Testes das métricas derivadas do painel financeiro e dos pagamentos.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from app.services import metricas
from app.services.metricas import PainelSnapshot, SemanalSnapshot
from app.utils.constants import (
    ORCAMENTO_ACIMA,
    ORCAMENTO_ATENCAO,
    ORCAMENTO_DENTRO,
    ORCAMENTO_PROXIMO_LIMITE,
    SEMANAL_A_PAGAR,
    SEMANAL_EFETUADO,
)

ENTREGA = date(2025, 6, 30)


def _snapshot(orcamento="1000", gastos=(), contratos=(), semanais=(), etapas=()):
    return PainelSnapshot(
        orcamento=Decimal(orcamento),
        data_final_entrega=ENTREGA,
        gastos=tuple(Decimal(g) for g in gastos),
        contratos=tuple(Decimal(c) for c in contratos),
        semanais=tuple(semanais),
        etapas=tuple(etapas),
    )


class TestStatusOrcamento:
    """Classificação do gasto frente ao orçamento (limites inclusivos)."""

    @pytest.mark.parametrize(
        "gasto, esperado",
        [
            ("0", ORCAMENTO_DENTRO),
            ("700", ORCAMENTO_DENTRO),
            ("700.01", ORCAMENTO_ATENCAO),
            ("900", ORCAMENTO_ATENCAO),
            ("900.01", ORCAMENTO_PROXIMO_LIMITE),
            ("1000", ORCAMENTO_PROXIMO_LIMITE),
            ("1000.01", ORCAMENTO_ACIMA),
        ],
    )
    def test_limites(self, gasto, esperado):
        assert metricas.status_orcamento(_snapshot(gastos=[gasto])) == esperado

    def test_soma_todas_as_colecoes(self):
        snapshot = _snapshot(
            gastos=["300"],
            contratos=["300"],
            semanais=[SemanalSnapshot(total_receber=Decimal("150"), status=SEMANAL_A_PAGAR)],
        )
        assert metricas.total_gasto(snapshot) == Decimal("750")
        assert metricas.saldo_restante(snapshot) == Decimal("250")
        assert metricas.status_orcamento(snapshot) == ORCAMENTO_ATENCAO

    def test_orcamento_zero(self):
        assert metricas.status_orcamento(_snapshot(orcamento="0")) == ORCAMENTO_DENTRO
        assert metricas.status_orcamento(_snapshot(orcamento="0", gastos=["1"])) == ORCAMENTO_ACIMA
        assert metricas.percentual_gasto(_snapshot(orcamento="0")) is None


class TestCronograma:
    def test_sem_etapas(self):
        assert metricas.percentual_concluido(_snapshot()) == 0

    def test_percentual_arredondado(self):
        snapshot = _snapshot(etapas=["concluida", "concluida", "previsto"])
        assert metricas.percentual_concluido(snapshot) == 67

    def test_todas_concluidas(self):
        assert metricas.percentual_concluido(_snapshot(etapas=["concluida"] * 4)) == 100


class TestDiasRestantes:
    """Dias até a entrega, arredondados para cima."""

    def test_fracao_de_dia_conta_inteira(self):
        agora = datetime(2025, 6, 28, 12, 0, tzinfo=timezone.utc)
        assert metricas.dias_restantes(_snapshot(), agora) == 2

    def test_no_dia_da_entrega(self):
        agora = datetime(2025, 6, 30, 0, 0, tzinfo=timezone.utc)
        assert metricas.dias_restantes(_snapshot(), agora) == 0

    def test_atrasado_negativo(self):
        agora = datetime(2025, 7, 3, 0, 0, tzinfo=timezone.utc)
        assert metricas.dias_restantes(_snapshot(), agora) == -3

    def test_datetime_sem_fuso_assume_utc(self):
        assert metricas.dias_restantes(_snapshot(), datetime(2025, 6, 29)) == 1


class TestRelatorioFinanceiro:
    def test_estrutura(self):
        snapshot = _snapshot(
            gastos=["100", "50"],
            contratos=["200"],
            semanais=[
                SemanalSnapshot(total_receber=Decimal("80"), status=SEMANAL_EFETUADO),
                SemanalSnapshot(total_receber=Decimal("20"), status=SEMANAL_A_PAGAR),
            ],
            etapas=["concluida", "em andamento", "atrasada", "previsto"],
        )
        relatorio = metricas.relatorio_financeiro(
            snapshot, datetime(2025, 6, 20, tzinfo=timezone.utc)
        )

        resumo = relatorio["resumo_financeiro"]
        assert resumo["total_gasto"] == Decimal("450")
        assert resumo["saldo_restante"] == Decimal("550")
        assert resumo["percentual_gasto"] == Decimal("45.00")
        assert resumo["status_orcamento"] == ORCAMENTO_DENTRO

        detalhe = relatorio["detalhamento_gastos"]
        assert detalhe["gastos"] == {"total": Decimal("150"), "quantidade": 2}
        assert detalhe["pagamentos_semanais"]["efetuados"] == Decimal("80")
        assert detalhe["pagamentos_semanais"]["pendentes"] == Decimal("20")

        cronograma = relatorio["cronograma"]
        assert cronograma["total_etapas"] == 4
        assert cronograma["concluidas"] == 1
        assert cronograma["atrasadas"] == 1
        assert cronograma["percentual_concluido"] == 25
        assert relatorio["dias_restantes"] == 10


class TestPagamentosAninhados:
    def test_valor_total(self):
        assert metricas.valor_total_pagamentos([]) == Decimal("0")
        assert metricas.valor_total_pagamentos([Decimal("10.50"), 0.1, 4]) == Decimal("14.60")

    @pytest.mark.parametrize(
        "statuses, esperado",
        [
            ([], "sem_pagamentos"),
            (["efetuado", "efetuado"], "todos_pagos"),
            (["efetuado", "atrasado", "pendente"], "com_atraso"),
            (["efetuado", "pendente"], "pendente"),
            (["efetuado", "em_processamento"], "em_processamento"),
            (["cancelado"], "em_processamento"),
        ],
    )
    def test_status_geral(self, statuses, esperado):
        assert metricas.status_geral_pagamentos(statuses) == esperado


class TestMaoObra:
    def test_duracao(self):
        assert metricas.duracao_contrato_dias(date(2025, 1, 1), date(2025, 1, 31)) == 30
        assert metricas.duracao_contrato_dias(None, date(2025, 1, 31)) == 0

    def test_contrato_ativo(self):
        hoje = date(2025, 3, 1)
        inicio, fim = date(2025, 1, 1), date(2025, 12, 31)
        assert metricas.contrato_ativo(inicio, fim, "ativo", hoje)
        assert not metricas.contrato_ativo(inicio, fim, "inativo", hoje)
        assert not metricas.contrato_ativo(inicio, date(2025, 2, 1), "ativo", hoje)

    def test_pagamento_atrasado(self):
        hoje = date(2025, 3, 15)
        assert metricas.pagamento_atrasado(10, "pendente", hoje)
        assert not metricas.pagamento_atrasado(20, "pendente", hoje)
        assert not metricas.pagamento_atrasado(10, "efetuado", hoje)
