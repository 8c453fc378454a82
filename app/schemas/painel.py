"""
Pydantic v2 schemas for the painel financeiro (``/pagamentos``) module.

A painel holds an embedded project summary plus four child collections:
gastos, contratos, cronograma and pagamentos semanais.  Weekly payments
never accept ``valor_va_vt`` or ``total_receber`` from the client; both are
recomputed by the service on every write, and unknown keys are ignored.
"""

from __future__ import annotations

import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.schemas.common import TextoObrigatorio, TextoOpcional, Valor, opcoes
from app.utils.constants import (
    ANO_SEMANAL_MAXIMO,
    ANO_SEMANAL_MINIMO,
    STATUS_CONTRATO_PAINEL,
    STATUS_ETAPA,
    STATUS_OBRA_PAINEL,
    STATUS_PAGAMENTO_SEMANAL,
)


def _fim_nao_antes_do_inicio(valor: datetime.date | None, info: ValidationInfo):
    inicio = info.data.get("data_inicio")
    if valor is not None and inicio is not None and valor < inicio:
        raise ValueError("Data de fim não pode ser anterior à data de início")
    return valor


# ---------------------------------------------------------------------------
# Embedded project summary
# ---------------------------------------------------------------------------


class ObraPainel(BaseModel):
    """Project summary embedded in a painel.

    Attributes:
        nome: Project name.
        orcamento: Budget (>= 0) used by the budget status classification.
        data_inicio: Start date.
        data_final_entrega: Planned delivery date (drives ``dias_restantes``).
        status: One of ``constants.STATUS_OBRA_PAINEL``.
    """

    nome: TextoObrigatorio = Field(..., max_length=200)
    orcamento: Valor
    data_inicio: datetime.date
    data_final_entrega: datetime.date
    descricao: TextoOpcional = ""
    endereco: TextoOpcional = Field(default="", max_length=300)
    responsavel: TextoOpcional = Field(default="", max_length=200)
    status: Annotated[str, opcoes(STATUS_OBRA_PAINEL)] = "planejamento"

    @field_validator("data_final_entrega")
    @classmethod
    def _entrega_apos_inicio(cls, valor: datetime.date, info: ValidationInfo) -> datetime.date:
        inicio = info.data.get("data_inicio")
        if inicio is not None and valor < inicio:
            raise ValueError("Data final de entrega não pode ser anterior à data de início")
        return valor


class ObraPainelUpdate(BaseModel):
    nome: str | None = None
    orcamento: float | None = None
    data_inicio: datetime.date | None = None
    data_final_entrega: datetime.date | None = None
    descricao: str | None = None
    endereco: str | None = None
    responsavel: str | None = None
    status: str | None = None


class ObraPainelResponse(BaseModel):
    nome: str
    orcamento: float
    data_inicio: datetime.date
    data_final_entrega: datetime.date
    descricao: str
    endereco: str
    responsavel: str
    status: str


# ---------------------------------------------------------------------------
# Gastos
# ---------------------------------------------------------------------------


class GastoCreate(BaseModel):
    descricao: TextoObrigatorio = Field(..., max_length=500)
    categoria: TextoObrigatorio = Field(..., max_length=100)
    valor: Valor
    data: datetime.date = Field(default_factory=datetime.date.today)
    fornecedor: TextoOpcional = ""
    observacoes: TextoOpcional = ""


class GastoUpdate(BaseModel):
    descricao: str | None = None
    categoria: str | None = None
    valor: float | None = None
    data: datetime.date | None = None
    fornecedor: str | None = None
    observacoes: str | None = None


class GastoResponse(BaseModel):
    id: int
    descricao: str
    categoria: str
    valor: float
    data: datetime.date
    fornecedor: str
    observacoes: str

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Contratos
# ---------------------------------------------------------------------------


class ContratoPainelCreate(BaseModel):
    nome_contratado: TextoObrigatorio = Field(..., max_length=200)
    servico: TextoObrigatorio = Field(..., max_length=300)
    valor_total: Valor
    data_inicio: datetime.date | None = None
    data_fim: datetime.date | None = None
    status: Annotated[str, opcoes(STATUS_CONTRATO_PAINEL)] = "ativo"
    observacoes: TextoOpcional = ""

    @field_validator("data_fim")
    @classmethod
    def _fim_apos_inicio(cls, valor: datetime.date | None, info: ValidationInfo):
        return _fim_nao_antes_do_inicio(valor, info)


class ContratoPainelUpdate(BaseModel):
    nome_contratado: str | None = None
    servico: str | None = None
    valor_total: float | None = None
    data_inicio: datetime.date | None = None
    data_fim: datetime.date | None = None
    status: str | None = None
    observacoes: str | None = None


class ContratoPainelResponse(BaseModel):
    id: int
    nome_contratado: str
    servico: str
    valor_total: float
    data_inicio: datetime.date | None
    data_fim: datetime.date | None
    status: str
    observacoes: str

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Cronograma
# ---------------------------------------------------------------------------


class EtapaCreate(BaseModel):
    etapa: TextoObrigatorio = Field(..., max_length=200)
    descricao: TextoOpcional = ""
    data_inicio: datetime.date | None = None
    data_fim: datetime.date | None = None
    status: Annotated[str, opcoes(STATUS_ETAPA)] = "previsto"
    responsavel: TextoOpcional = ""
    percentual_concluido: int = Field(default=0, ge=0, le=100)

    @field_validator("data_fim")
    @classmethod
    def _fim_apos_inicio(cls, valor: datetime.date | None, info: ValidationInfo):
        return _fim_nao_antes_do_inicio(valor, info)


class EtapaUpdate(BaseModel):
    etapa: str | None = None
    descricao: str | None = None
    data_inicio: datetime.date | None = None
    data_fim: datetime.date | None = None
    status: str | None = None
    responsavel: str | None = None
    percentual_concluido: int | None = None


class EtapaResponse(BaseModel):
    id: int
    etapa: str
    descricao: str
    data_inicio: datetime.date | None
    data_fim: datetime.date | None
    status: str
    responsavel: str
    percentual_concluido: int

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Pagamentos semanais
# ---------------------------------------------------------------------------


class SemanalCreate(BaseModel):
    """Weekly payment payload.  ``total_receber`` is always derived."""

    nome: TextoObrigatorio = Field(..., max_length=200)
    funcao: TextoOpcional = Field(default="", max_length=100)
    semana: int = Field(..., ge=1, le=53)
    ano: int = Field(..., ge=ANO_SEMANAL_MINIMO, le=ANO_SEMANAL_MAXIMO)
    valor_pagar: Valor
    valor_va: Valor = 0
    valor_vt: Valor = 0
    data_vencimento: datetime.date | None = None
    status: Annotated[str, opcoes(STATUS_PAGAMENTO_SEMANAL)] = "pagar"
    observacoes: TextoOpcional = ""


class SemanalUpdate(BaseModel):
    nome: str | None = None
    funcao: str | None = None
    semana: int | None = None
    ano: int | None = None
    valor_pagar: float | None = None
    valor_va: float | None = None
    valor_vt: float | None = None
    data_vencimento: datetime.date | None = None
    status: str | None = None
    observacoes: str | None = None


class SemanalResponse(BaseModel):
    id: int
    nome: str
    funcao: str
    semana: int
    ano: int
    valor_pagar: float
    valor_va: float
    valor_vt: float
    valor_va_vt: float
    total_receber: float
    data_vencimento: datetime.date | None
    status: str
    data_pagamento_efetuado: datetime.datetime | None
    observacoes: str

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Painel
# ---------------------------------------------------------------------------


class PainelCreate(BaseModel):
    """Payload for ``POST /pagamentos``; children are optional."""

    obra: ObraPainel
    gastos: list[GastoCreate] = []
    contratos: list[ContratoPainelCreate] = []
    cronograma: list[EtapaCreate] = []
    pagamentos_semanais: list[SemanalCreate] = []


class PainelUpdate(BaseModel):
    """Payload for ``PUT /pagamentos/{id}``; only the project summary is editable here."""

    obra: ObraPainelUpdate | None = None


class PainelResponse(BaseModel):
    """Painel with children and the derived figures of ``app.services.metricas``."""

    id: int
    obra: ObraPainelResponse
    gastos: list[GastoResponse]
    contratos: list[ContratoPainelResponse]
    cronograma: list[EtapaResponse]
    pagamentos_semanais: list[SemanalResponse]
    valor_total_gasto: float
    saldo_restante: float
    status_orcamento: str
    percentual_concluido: int
    dias_restantes: int
    created_at: datetime.datetime
    updated_at: datetime.datetime


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class SemanalComObra(BaseModel):
    """Weekly payment annotated with the painel it belongs to."""

    obra_id: int
    obra_nome: str
    pagamento_semanal: SemanalResponse


class PendentesResponse(BaseModel):
    pagamentos_pendentes: list[SemanalComObra]
    total: int


class ResumoSemanais(BaseModel):
    total_pagamentos: int
    valor_total: float
    filtros: dict[str, int | str | None]


class RelatorioSemanaisResponse(BaseModel):
    relatorio: list[SemanalComObra]
    resumo: ResumoSemanais


class ResumoFinanceiro(BaseModel):
    orcamento_total: float
    total_gasto: float
    saldo_restante: float
    status_orcamento: str
    percentual_gasto: float | None


class TotalQuantidade(BaseModel):
    total: float
    quantidade: int


class TotalSemanais(TotalQuantidade):
    efetuados: float
    pendentes: float


class DetalhamentoGastos(BaseModel):
    gastos: TotalQuantidade
    contratos: TotalQuantidade
    pagamentos_semanais: TotalSemanais


class ResumoCronograma(BaseModel):
    total_etapas: int
    concluidas: int
    em_andamento: int
    previstas: int
    atrasadas: int
    percentual_concluido: int


class RelatorioFinanceiro(BaseModel):
    obra: ObraPainelResponse
    resumo_financeiro: ResumoFinanceiro
    detalhamento_gastos: DetalhamentoGastos
    cronograma: ResumoCronograma
    dias_restantes: int
