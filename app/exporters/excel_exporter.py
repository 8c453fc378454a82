"""
Excel export of a painel's financial report, built with xlsxwriter.

``RelatorioExcel`` is a small stateful builder writing one worksheet per
section into an in-memory workbook; ``exportar_relatorio_financeiro``
assembles the full report and returns the ``.xlsx`` bytes for a
``StreamingResponse``.

Layout
------
- "Resumo": title block, budget KPIs and schedule counters.
- "Gastos", "Contratos", "Cronograma", "Pagamentos semanais": one styled
  table each, with a total row where the section has amounts.

Amounts use the Brazilian money format ``R$ #,##0.00``; dates are written
as real Excel dates (``dd/mm/yyyy``).
"""

from __future__ import annotations

import io
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

import xlsxwriter

_COR_PRIMARIA = "#1F4E79"
_COR_CABECALHO = "#2E75B6"
_COR_ALTERNADA = "#F2F2F2"
_COR_BORDA = "#D9D9D9"

_FORMATO_MOEDA = '"R$" #,##0.00'
_FORMATO_DATA = "dd/mm/yyyy"

_LARGURA_MAX = 50
_LARGURA_MIN = 10


class RelatorioExcel:
    """In-memory workbook builder.

    Args:
        titulo: Title written at the top of the summary sheet.
    """

    def __init__(self, titulo: str) -> None:
        self._titulo = titulo
        self._buffer = io.BytesIO()
        self._workbook = xlsxwriter.Workbook(self._buffer, {"in_memory": True})
        self._f = self._formatos()

    def _formatos(self) -> dict[str, Any]:
        wb = self._workbook
        base = {"font_size": 10, "valign": "vcenter", "border": 1, "border_color": _COR_BORDA}
        return {
            "titulo": wb.add_format({
                "bold": True, "font_size": 16, "font_color": "#FFFFFF",
                "bg_color": _COR_PRIMARIA, "align": "center", "valign": "vcenter",
            }),
            "subtitulo": wb.add_format({"italic": True, "font_size": 9, "align": "center"}),
            "rotulo": wb.add_format({**base, "bold": True, "bg_color": "#DDEBF7"}),
            "cabecalho": wb.add_format({
                **base, "bold": True, "font_color": "#FFFFFF",
                "bg_color": _COR_CABECALHO, "align": "center", "text_wrap": True,
            }),
            "texto": wb.add_format(base),
            "texto_alt": wb.add_format({**base, "bg_color": _COR_ALTERNADA}),
            "moeda": wb.add_format({**base, "num_format": _FORMATO_MOEDA}),
            "moeda_alt": wb.add_format({**base, "num_format": _FORMATO_MOEDA, "bg_color": _COR_ALTERNADA}),
            "data": wb.add_format({**base, "num_format": _FORMATO_DATA, "align": "center"}),
            "data_alt": wb.add_format({
                **base, "num_format": _FORMATO_DATA, "align": "center", "bg_color": _COR_ALTERNADA,
            }),
            "total": wb.add_format({**base, "bold": True, "bg_color": "#FFF2CC"}),
            "total_moeda": wb.add_format({
                **base, "bold": True, "bg_color": "#FFF2CC", "num_format": _FORMATO_MOEDA,
            }),
        }

    def _escrever(self, ws: Any, linha: int, coluna: int, valor: Any, alt: bool) -> None:
        sufixo = "_alt" if alt else ""
        if isinstance(valor, (Decimal, float)):
            ws.write_number(linha, coluna, float(valor), self._f["moeda" + sufixo])
        elif isinstance(valor, (date, datetime)):
            if isinstance(valor, date) and not isinstance(valor, datetime):
                valor = datetime(valor.year, valor.month, valor.day)
            ws.write_datetime(linha, coluna, valor, self._f["data" + sufixo])
        elif valor is None:
            ws.write_blank(linha, coluna, None, self._f["texto" + sufixo])
        else:
            ws.write(linha, coluna, valor, self._f["texto" + sufixo])

    def resumo(self, blocos: Sequence[tuple[str, dict[str, Any]]]) -> "RelatorioExcel":
        """Summary sheet: title, generation stamp and label/value blocks."""
        ws = self._workbook.add_worksheet("Resumo")
        ws.set_column(0, 0, 32)
        ws.set_column(1, 1, 24)
        ws.set_row(0, 30)
        ws.merge_range(0, 0, 0, 1, self._titulo, self._f["titulo"])
        gerado = datetime.now(timezone.utc).strftime("%d/%m/%Y %H:%M UTC")
        ws.merge_range(1, 0, 1, 1, f"Gerado em {gerado}", self._f["subtitulo"])

        linha = 3
        for nome_bloco, valores in blocos:
            ws.merge_range(linha, 0, linha, 1, nome_bloco, self._f["cabecalho"])
            linha += 1
            for rotulo, valor in valores.items():
                ws.write(linha, 0, rotulo, self._f["rotulo"])
                self._escrever(ws, linha, 1, valor, alt=False)
                linha += 1
            linha += 1
        return self

    def tabela(
        self,
        nome_aba: str,
        cabecalhos: Sequence[str],
        linhas: Sequence[Sequence[Any]],
        colunas_total: Sequence[int] = (),
    ) -> "RelatorioExcel":
        """Sheet with a styled table and, optionally, a total row.

        Args:
            nome_aba: Worksheet name.
            cabecalhos: Column headers.
            linhas: Data rows, same length as ``cabecalhos``.
            colunas_total: Zero-based columns summed in the final row.
        """
        ws = self._workbook.add_worksheet(nome_aba)
        larguras = [len(c) for c in cabecalhos]

        ws.set_row(0, 20)
        for ci, cabecalho in enumerate(cabecalhos):
            ws.write(0, ci, cabecalho, self._f["cabecalho"])

        for ri, linha in enumerate(linhas, start=1):
            for ci, valor in enumerate(linha):
                self._escrever(ws, ri, ci, valor, alt=ri % 2 == 0)
                larguras[ci] = min(_LARGURA_MAX, max(larguras[ci], len(str(valor or ""))))

        if colunas_total and linhas:
            ultima = len(linhas) + 1
            ws.write(ultima, 0, "Total", self._f["total"])
            for ci in colunas_total:
                soma = sum((Decimal(str(linha[ci] or 0)) for linha in linhas), Decimal("0"))
                ws.write_number(ultima, ci, float(soma), self._f["total_moeda"])

        for ci, largura in enumerate(larguras):
            ws.set_column(ci, ci, max(largura + 2, _LARGURA_MIN))
        ws.freeze_panes(1, 0)
        return self

    def finalizar(self) -> bytes:
        """Close the workbook and return the file bytes."""
        self._workbook.close()
        self._buffer.seek(0)
        return self._buffer.read()


def exportar_relatorio_financeiro(painel: Any, relatorio: dict[str, Any]) -> bytes:
    """Build the full financial report workbook of one painel.

    Args:
        painel: ``PainelFinanceiro`` ORM instance (children loaded lazily).
        relatorio: Output of ``painel_service.relatorio_financeiro``.
    """
    resumo = relatorio["resumo_financeiro"]
    cronograma = relatorio["cronograma"]
    percentual = resumo["percentual_gasto"]

    builder = RelatorioExcel(f"Relatório financeiro - {painel.obra_nome}")
    builder.resumo([
        ("Obra", {
            "Nome": painel.obra_nome,
            "Responsável": painel.obra_responsavel or "",
            "Status": painel.obra_status,
            "Início": painel.obra_data_inicio,
            "Entrega prevista": painel.obra_data_final_entrega,
            "Dias restantes": relatorio["dias_restantes"],
        }),
        ("Orçamento", {
            "Orçamento total": resumo["orcamento_total"],
            "Total gasto": resumo["total_gasto"],
            "Saldo restante": resumo["saldo_restante"],
            "Situação": resumo["status_orcamento"],
            "% gasto": "-" if percentual is None else f"{percentual}%",
        }),
        ("Cronograma", {
            "Etapas": cronograma["total_etapas"],
            "Concluídas": cronograma["concluidas"],
            "Em andamento": cronograma["em_andamento"],
            "Previstas": cronograma["previstas"],
            "Atrasadas": cronograma["atrasadas"],
            "% concluído": f"{cronograma['percentual_concluido']}%",
        }),
    ])

    builder.tabela(
        "Gastos",
        ["Descrição", "Categoria", "Valor", "Data", "Fornecedor", "Observações"],
        [
            [g.descricao, g.categoria, g.valor, g.data, g.fornecedor, g.observacoes]
            for g in painel.gastos
        ],
        colunas_total=[2],
    )
    builder.tabela(
        "Contratos",
        ["Contratado", "Serviço", "Valor total", "Início", "Fim", "Status"],
        [
            [c.nome_contratado, c.servico, c.valor_total, c.data_inicio, c.data_fim, c.status]
            for c in painel.contratos
        ],
        colunas_total=[2],
    )
    builder.tabela(
        "Cronograma",
        ["Etapa", "Descrição", "Início", "Fim", "Status", "Responsável", "% concluído"],
        [
            [e.etapa, e.descricao, e.data_inicio, e.data_fim, e.status, e.responsavel,
             e.percentual_concluido]
            for e in painel.cronograma
        ],
    )
    builder.tabela(
        "Pagamentos semanais",
        ["Nome", "Função", "Semana", "Ano", "A pagar", "VA", "VT", "Total a receber",
         "Status", "Pago em"],
        [
            [p.nome, p.funcao, p.semana, p.ano, p.valor_pagar, p.valor_va, p.valor_vt,
             p.total_receber, p.status, p.data_pagamento_efetuado]
            for p in painel.pagamentos_semanais
        ],
        colunas_total=[4, 5, 6, 7],
    )
    return builder.finalizar()
