"""
Pydantic v2 schemas for expense records, their payment sub-records and
incoming payments (entradas).

Domain context
--------------
Every expense may point to an Obra through ``obra_id``; ``None`` marks a
company-level expense.  Equipamentos, contratos and outros gastos carry a
``pagamentos`` list of installment sub-records.  Their responses expose two
derived fields computed on every read by ``app.services.metricas``:

- ``valor_total_pagamentos``  sum of the sub-record amounts.
- ``status_geral_pagamentos`` aggregated status of the list.

As in ``app.schemas.obra``, the ``*Update`` schemas only declare types.  The
merged record is re-validated against the matching ``*Create`` schema.
"""

from __future__ import annotations

import datetime
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    computed_field,
    field_validator,
)

from app.schemas.common import DiaMes, TextoObrigatorio, TextoOpcional, Valor, exigir_chave, opcoes
from app.services import metricas
from app.utils.constants import (
    FORMAS_COM_CHAVE,
    FORMAS_OUTROS_GASTOS,
    FORMAS_PAGAMENTO,
    STATUS_CONTRATO,
    STATUS_MAO_OBRA,
    STATUS_PAGAMENTO,
    STATUS_RECEBIMENTO,
    TIPOS_CONTRATACAO_EQUIPAMENTO,
    TIPOS_CONTRATACAO_MAO_OBRA,
    TIPOS_PAGAMENTO_PARCELA,
)

FormaPagamento = Annotated[str, opcoes(FORMAS_PAGAMENTO)]
StatusPagamento = Annotated[str, opcoes(STATUS_PAGAMENTO)]


class _ChavePixBoleto(BaseModel):
    """Requires ``chave_pix_boleto`` when ``forma_pagamento`` is pix or boleto.

    Subclasses must declare ``forma_pagamento`` before ``chave_pix_boleto``.
    """

    @field_validator("chave_pix_boleto", check_fields=False)
    @classmethod
    def _chave_obrigatoria(cls, valor: str, info: ValidationInfo) -> str:
        return exigir_chave(info.data.get("forma_pagamento"), valor, FORMAS_COM_CHAVE)


# ---------------------------------------------------------------------------
# Parcelas (payment sub-records)
# ---------------------------------------------------------------------------


class ParcelaCreate(BaseModel):
    valor: Valor
    tipo_pagamento: Annotated[str, opcoes(TIPOS_PAGAMENTO_PARCELA)]
    data_pagamento: datetime.date
    status_pagamento: StatusPagamento = "pendente"
    observacoes: TextoOpcional = ""


class ParcelaUpdate(BaseModel):
    valor: float | None = None
    tipo_pagamento: str | None = None
    data_pagamento: datetime.date | None = None
    status_pagamento: str | None = None
    observacoes: str | None = None


class ParcelaResponse(BaseModel):
    id: int
    valor: float
    tipo_pagamento: str
    data_pagamento: datetime.date
    status_pagamento: str
    observacoes: str

    model_config = ConfigDict(from_attributes=True)


class _ComPagamentos(BaseModel):
    pagamentos: list[ParcelaResponse] = []

    @computed_field
    @property
    def valor_total_pagamentos(self) -> float:
        return float(metricas.valor_total_pagamentos(p.valor for p in self.pagamentos))

    @computed_field
    @property
    def status_geral_pagamentos(self) -> str:
        return metricas.status_geral_pagamentos(p.status_pagamento for p in self.pagamentos)


class _Registro(BaseModel):
    id: int
    obra_id: int | None
    criado_por_id: int | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Material
# ---------------------------------------------------------------------------


class MaterialCreate(_ChavePixBoleto):
    """Payload for ``POST /materiais``."""

    numero_nota: TextoObrigatorio = Field(..., max_length=100)
    data: datetime.date
    local_compra: TextoObrigatorio = Field(..., max_length=200)
    valor: Valor
    solicitante: TextoObrigatorio = Field(..., max_length=200)
    forma_pagamento: FormaPagamento
    chave_pix_boleto: TextoOpcional = Field(default="", max_length=200, validate_default=True)
    descricao: TextoOpcional = ""
    obra_id: int | None = None
    observacoes: TextoOpcional = ""
    status_pagamento: StatusPagamento = "pendente"


class MaterialUpdate(BaseModel):
    numero_nota: str | None = None
    data: datetime.date | None = None
    local_compra: str | None = None
    valor: float | None = None
    solicitante: str | None = None
    forma_pagamento: str | None = None
    chave_pix_boleto: str | None = None
    descricao: str | None = None
    obra_id: int | None = None
    observacoes: str | None = None
    status_pagamento: str | None = None


class MaterialResponse(_Registro):
    numero_nota: str
    data: datetime.date
    local_compra: str
    valor: float
    solicitante: str
    forma_pagamento: str
    chave_pix_boleto: str
    descricao: str
    observacoes: str
    status_pagamento: str


# ---------------------------------------------------------------------------
# Mão de obra
# ---------------------------------------------------------------------------


class MaoObraCreate(_ChavePixBoleto):
    """Payload for ``POST /mao-obra``.

    ``fim_contrato`` must be strictly after ``inicio_contrato``.
    """

    nome: TextoObrigatorio = Field(..., max_length=100)
    funcao: TextoObrigatorio = Field(..., max_length=50)
    tipo_contratacao: Annotated[str, opcoes(TIPOS_CONTRATACAO_MAO_OBRA)]
    valor: Valor
    inicio_contrato: datetime.date
    fim_contrato: datetime.date
    dia_pagamento: DiaMes
    forma_pagamento: FormaPagamento = "pix"
    chave_pix_boleto: TextoOpcional = Field(default="", max_length=100, validate_default=True)
    obra_id: int | None = None
    status: Annotated[str, opcoes(STATUS_MAO_OBRA)] = "ativo"
    status_pagamento: StatusPagamento = "pendente"
    observacoes: TextoOpcional = Field(default="", max_length=500)

    @field_validator("fim_contrato")
    @classmethod
    def _fim_apos_inicio(cls, valor: datetime.date, info: ValidationInfo) -> datetime.date:
        inicio = info.data.get("inicio_contrato")
        if inicio is not None and valor <= inicio:
            raise ValueError("Data de fim deve ser posterior à data de início")
        return valor


class MaoObraUpdate(BaseModel):
    nome: str | None = None
    funcao: str | None = None
    tipo_contratacao: str | None = None
    valor: float | None = None
    inicio_contrato: datetime.date | None = None
    fim_contrato: datetime.date | None = None
    dia_pagamento: int | None = None
    forma_pagamento: str | None = None
    chave_pix_boleto: str | None = None
    obra_id: int | None = None
    status: str | None = None
    status_pagamento: str | None = None
    observacoes: str | None = None


class MaoObraResponse(_Registro):
    nome: str
    funcao: str
    tipo_contratacao: str
    valor: float
    inicio_contrato: datetime.date
    fim_contrato: datetime.date
    dia_pagamento: int
    forma_pagamento: str
    chave_pix_boleto: str
    status: str
    status_pagamento: str
    observacoes: str

    @computed_field
    @property
    def duracao_contrato(self) -> int:
        return metricas.duracao_contrato_dias(self.inicio_contrato, self.fim_contrato)

    @computed_field
    @property
    def contrato_ativo(self) -> bool:
        return metricas.contrato_ativo(self.inicio_contrato, self.fim_contrato, self.status)

    @computed_field
    @property
    def pagamento_atrasado(self) -> bool:
        return metricas.pagamento_atrasado(self.dia_pagamento, self.status_pagamento)


# ---------------------------------------------------------------------------
# Equipamentos
# ---------------------------------------------------------------------------


class EquipamentoCreate(_ChavePixBoleto):
    """Payload for ``POST /equipamentos``.

    ``pagamentos`` may be sent on create; afterwards they are managed through
    ``/equipamentos/{id}/pagamentos``.
    """

    numero_nota: TextoObrigatorio = Field(..., max_length=100)
    item: TextoObrigatorio = Field(..., max_length=200)
    data: datetime.date
    local_compra: TextoObrigatorio = Field(..., max_length=200)
    valor: Valor
    solicitante: TextoObrigatorio = Field(..., max_length=200)
    descricao: TextoObrigatorio
    tipo_contratacao: Annotated[str, opcoes(TIPOS_CONTRATACAO_EQUIPAMENTO)]
    forma_pagamento: FormaPagamento
    chave_pix_boleto: TextoOpcional = Field(default="", max_length=200, validate_default=True)
    parcelas: int | None = Field(default=None, ge=1)
    dia_pagamento: DiaMes
    obra_id: int | None = None
    observacoes: TextoOpcional = ""
    pagamentos: list[ParcelaCreate] = []


class EquipamentoUpdate(BaseModel):
    numero_nota: str | None = None
    item: str | None = None
    data: datetime.date | None = None
    local_compra: str | None = None
    valor: float | None = None
    solicitante: str | None = None
    descricao: str | None = None
    tipo_contratacao: str | None = None
    forma_pagamento: str | None = None
    chave_pix_boleto: str | None = None
    parcelas: int | None = None
    dia_pagamento: int | None = None
    obra_id: int | None = None
    observacoes: str | None = None


class EquipamentoResponse(_ComPagamentos, _Registro):
    numero_nota: str
    item: str
    data: datetime.date
    local_compra: str
    valor: float
    solicitante: str
    descricao: str
    tipo_contratacao: str
    forma_pagamento: str
    chave_pix_boleto: str
    parcelas: int | None
    dia_pagamento: int
    observacoes: str


# ---------------------------------------------------------------------------
# Contratos
# ---------------------------------------------------------------------------


class ContratoCreate(BaseModel):
    """Payload for ``POST /contratos``.

    ``codigo`` is generated as ``CONT-{ano}-{seq:04d}`` when omitted.
    """

    codigo: str | None = Field(default=None, max_length=30)
    loja: TextoObrigatorio = Field(..., max_length=200)
    valor: Valor = 0
    valor_inicial: Valor = 0
    inicio_contrato: datetime.date | None = None
    final_contrato: datetime.date | None = None
    obra_id: int | None = None
    status: Annotated[str, opcoes(STATUS_CONTRATO)] = "ativo"
    observacoes: TextoOpcional = ""
    pagamentos: list[ParcelaCreate] = []

    @field_validator("final_contrato")
    @classmethod
    def _final_apos_inicio(cls, valor: datetime.date | None, info: ValidationInfo):
        inicio = info.data.get("inicio_contrato")
        if valor is not None and inicio is not None and valor < inicio:
            raise ValueError("Final do contrato não pode ser anterior ao início")
        return valor


class ContratoUpdate(BaseModel):
    codigo: str | None = None
    loja: str | None = None
    valor: float | None = None
    valor_inicial: float | None = None
    inicio_contrato: datetime.date | None = None
    final_contrato: datetime.date | None = None
    obra_id: int | None = None
    status: str | None = None
    observacoes: str | None = None


class ContratoResponse(_ComPagamentos, _Registro):
    codigo: str
    loja: str
    valor: float
    valor_inicial: float
    inicio_contrato: datetime.date | None
    final_contrato: datetime.date | None
    status: str
    observacoes: str


# ---------------------------------------------------------------------------
# Outros gastos
# ---------------------------------------------------------------------------


class OutroGastoCreate(_ChavePixBoleto):
    descricao: TextoObrigatorio = Field(..., max_length=500)
    valor: Valor
    data: datetime.date
    categoria_livre: TextoObrigatorio = Field(..., max_length=100)
    forma_pagamento: Annotated[str, opcoes(FORMAS_OUTROS_GASTOS)] = "pix"
    chave_pix_boleto: TextoOpcional = Field(default="", max_length=200, validate_default=True)
    numero_documento: TextoOpcional = Field(default="", max_length=100)
    fornecedor: TextoOpcional = Field(default="", max_length=200)
    obra_id: int | None = None
    observacoes: TextoOpcional = ""
    pagamentos: list[ParcelaCreate] = []


class OutroGastoUpdate(BaseModel):
    descricao: str | None = None
    valor: float | None = None
    data: datetime.date | None = None
    categoria_livre: str | None = None
    forma_pagamento: str | None = None
    chave_pix_boleto: str | None = None
    numero_documento: str | None = None
    fornecedor: str | None = None
    obra_id: int | None = None
    observacoes: str | None = None


class OutroGastoResponse(_ComPagamentos, _Registro):
    descricao: str
    valor: float
    data: datetime.date
    categoria_livre: str
    forma_pagamento: str
    chave_pix_boleto: str
    numero_documento: str
    fornecedor: str
    observacoes: str


class CategoriaTotal(BaseModel):
    """One row of ``GET /outros-gastos/relatorio/categorias``."""

    categoria: str
    total: float
    quantidade: int


# ---------------------------------------------------------------------------
# Entradas
# ---------------------------------------------------------------------------


class EntradaCreate(BaseModel):
    nome: TextoObrigatorio = Field(..., max_length=200)
    valor: Valor
    data: datetime.date
    observacoes: TextoOpcional = ""
    obra_id: int | None = None
    status_recebimento: Annotated[str, opcoes(STATUS_RECEBIMENTO)] = "recebido"


class EntradaUpdate(BaseModel):
    nome: str | None = None
    valor: float | None = None
    data: datetime.date | None = None
    observacoes: str | None = None
    obra_id: int | None = None
    status_recebimento: str | None = None


class EntradaResponse(_Registro):
    nome: str
    valor: float
    data: datetime.date
    observacoes: str
    status_recebimento: str
