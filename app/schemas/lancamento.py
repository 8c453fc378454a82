"""
Pydantic v2 schemas for lancamentos (payment entries).

A lancamento is a tagged union keyed by ``tipo``; each variant declares its
own required fields instead of one record with conditionally-required ones:

- ``material``          nr_nota, descricao, data, valor
- ``mao_obra``          nome, funcao, data_inicio, data_fim, conta_bancaria,
                        valor_total, data_pagamento
- ``pagamento_semanal`` nome, funcao, data_inicio, data_fim_contrato,
                        tipo_contratacao, valor_pagar, chave_pix,
                        nome_chave_pix, qualificacao_tecnica, semana, ano

Derived fields (``valor_parcela``, ``valor_va_vt``, ``total_receber``,
``data_pagamento_efetuado``) are set by the service, never by the client.
"""

from __future__ import annotations

import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, computed_field

from app.schemas.common import TextoObrigatorio, TextoOpcional, Valor, opcoes
from app.utils.constants import (
    ANO_SEMANAL_MAXIMO,
    ANO_SEMANAL_MINIMO,
    FORMAS_PAGAMENTO_LANCAMENTO,
    STATUS_LANCAMENTO,
    STATUS_PAGAMENTO_MAO_OBRA,
    STATUS_PAGAMENTO_SEMANAL,
)


class _LancamentoBase(BaseModel):
    obra_id: int | None = None
    status: Annotated[str, opcoes(STATUS_LANCAMENTO)] = "pendente_associacao"
    observacoes: TextoOpcional = ""


class LancamentoMaterial(_LancamentoBase):
    tipo: Literal["material"]
    nr_nota: TextoObrigatorio = Field(..., max_length=100)
    descricao: TextoObrigatorio
    data: datetime.date
    valor: Valor
    local_compra: TextoOpcional = ""
    solicitante: TextoOpcional = ""
    forma_pagamento: Annotated[str, opcoes(FORMAS_PAGAMENTO_LANCAMENTO)] = "pix"


class LancamentoMaoObra(_LancamentoBase):
    tipo: Literal["mao_obra"]
    nome: TextoObrigatorio = Field(..., max_length=200)
    funcao: TextoObrigatorio = Field(..., max_length=100)
    data_inicio: datetime.date
    data_fim: datetime.date
    conta_bancaria: TextoObrigatorio = Field(..., max_length=200)
    valor_total: Valor
    numero_parcelas: int = Field(default=1, ge=1)
    data_pagamento: datetime.date
    status_pagamento: Annotated[str, opcoes(STATUS_PAGAMENTO_MAO_OBRA)] = "previsto"


class LancamentoSemanal(_LancamentoBase):
    tipo: Literal["pagamento_semanal"]
    nome: TextoObrigatorio = Field(..., max_length=200)
    funcao: TextoObrigatorio = Field(..., max_length=100)
    data_inicio: datetime.date
    data_fim_contrato: datetime.date
    tipo_contratacao: TextoObrigatorio = Field(..., max_length=20)
    valor_pagar: Valor
    chave_pix: TextoObrigatorio = Field(..., max_length=200)
    nome_chave_pix: TextoObrigatorio = Field(..., max_length=200)
    qualificacao_tecnica: TextoObrigatorio = Field(..., max_length=200)
    valor_va: Valor = 0
    valor_vt: Valor = 0
    semana: int = Field(..., ge=1, le=53)
    ano: int = Field(..., ge=ANO_SEMANAL_MINIMO, le=ANO_SEMANAL_MAXIMO)
    status_semanal: Annotated[str, opcoes(STATUS_PAGAMENTO_SEMANAL)] = "pagar"


LancamentoCreate = Annotated[
    Union[LancamentoMaterial, LancamentoMaoObra, LancamentoSemanal],
    Field(discriminator="tipo"),
]


class LancamentoPayload(RootModel[LancamentoCreate]):
    """Request body of ``POST /lancamentos`` (the union as a single model)."""


# Columns each variant owns; everything else is cleared when ``tipo`` changes
CAMPOS_POR_TIPO: dict[str, frozenset[str]] = {
    "material": frozenset(LancamentoMaterial.model_fields),
    "mao_obra": frozenset(LancamentoMaoObra.model_fields),
    "pagamento_semanal": frozenset(LancamentoSemanal.model_fields),
}


class LancamentoUpdate(BaseModel):
    """Partial update; the merged record is re-validated against its variant."""

    tipo: str | None = None
    obra_id: int | None = None
    status: str | None = None
    observacoes: str | None = None
    nome: str | None = None
    funcao: str | None = None
    data_inicio: datetime.date | None = None
    nr_nota: str | None = None
    descricao: str | None = None
    data: datetime.date | None = None
    valor: float | None = None
    local_compra: str | None = None
    solicitante: str | None = None
    forma_pagamento: str | None = None
    data_fim: datetime.date | None = None
    conta_bancaria: str | None = None
    valor_total: float | None = None
    numero_parcelas: int | None = None
    data_pagamento: datetime.date | None = None
    status_pagamento: str | None = None
    data_fim_contrato: datetime.date | None = None
    tipo_contratacao: str | None = None
    valor_pagar: float | None = None
    chave_pix: str | None = None
    nome_chave_pix: str | None = None
    qualificacao_tecnica: str | None = None
    valor_va: float | None = None
    valor_vt: float | None = None
    semana: int | None = None
    ano: int | None = None
    status_semanal: str | None = None


class LancamentoResponse(BaseModel):
    id: int
    tipo: str
    obra_id: int | None
    status: str
    observacoes: str
    nome: str | None = None
    funcao: str | None = None
    data_inicio: datetime.date | None = None
    nr_nota: str | None = None
    descricao: str | None = None
    data: datetime.date | None = None
    valor: float | None = None
    local_compra: str | None = None
    solicitante: str | None = None
    forma_pagamento: str | None = None
    data_fim: datetime.date | None = None
    conta_bancaria: str | None = None
    valor_total: float | None = None
    numero_parcelas: int | None = None
    data_pagamento: datetime.date | None = None
    status_pagamento: str | None = None
    data_fim_contrato: datetime.date | None = None
    tipo_contratacao: str | None = None
    valor_pagar: float | None = None
    chave_pix: str | None = None
    nome_chave_pix: str | None = None
    qualificacao_tecnica: str | None = None
    valor_va: float | None = None
    valor_vt: float | None = None
    valor_va_vt: float | None = None
    total_receber: float | None = None
    semana: int | None = None
    ano: int | None = None
    status_semanal: str | None = None
    data_pagamento_efetuado: datetime.datetime | None = None
    criado_por_id: int | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def valor_parcela(self) -> float | None:
        if self.tipo != "mao_obra" or not self.valor_total or not self.numero_parcelas:
            return None
        return round(self.valor_total / self.numero_parcelas, 2)
