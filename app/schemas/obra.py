"""
Pydantic v2 schemas for the Obras module.

``ObraCreate`` holds every constraint of a project.  ``ObraUpdate`` only
declares types: the service merges the partial payload onto the stored
record and re-validates the result against ``ObraCreate``, so a partial
update can never leave a project in a state a create would reject.
"""

from __future__ import annotations

import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.schemas.common import TextoObrigatorio, TextoOpcional, Valor, opcoes
from app.utils.constants import STATUS_OBRA


class ObraCreate(BaseModel):
    """Payload for ``POST /obras``.

    Attributes:
        nome: Project name.
        endereco: Site address.
        cliente: Client name.
        valor_contrato: Contracted value (>= 0).
        data_inicio: Start date.
        data_previsao_termino: Planned end date.
        data_termino: Actual end date; must not precede ``data_inicio``.
        status: One of ``constants.STATUS_OBRA``.
        spreadsheet_id: Optional Google Sheets id.
    """

    nome: TextoObrigatorio = Field(..., max_length=200, description="Nome da obra")
    endereco: TextoObrigatorio = Field(..., max_length=300)
    cliente: TextoObrigatorio = Field(..., max_length=200)
    valor_contrato: Valor
    data_inicio: datetime.date
    data_previsao_termino: datetime.date
    data_termino: datetime.date | None = None
    status: Annotated[str, opcoes(STATUS_OBRA)] = "planejamento"
    descricao: TextoOpcional = ""
    observacoes: TextoOpcional = ""
    spreadsheet_id: str | None = Field(default=None, max_length=200)

    @field_validator("data_termino")
    @classmethod
    def _termino_apos_inicio(cls, valor: datetime.date | None, info: ValidationInfo):
        inicio = info.data.get("data_inicio")
        if valor is not None and inicio is not None and valor < inicio:
            raise ValueError("Data de término não pode ser anterior à data de início")
        return valor

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "nome": "Residencial Jardim das Flores",
                "endereco": "Rua das Acácias, 120",
                "cliente": "Construtora Horizonte",
                "valor_contrato": 850000.00,
                "data_inicio": "2025-03-01",
                "data_previsao_termino": "2026-02-28",
                "status": "em_andamento",
            }
        }
    )


class ObraUpdate(BaseModel):
    nome: str | None = None
    endereco: str | None = None
    cliente: str | None = None
    valor_contrato: float | None = None
    data_inicio: datetime.date | None = None
    data_previsao_termino: datetime.date | None = None
    data_termino: datetime.date | None = None
    status: str | None = None
    descricao: str | None = None
    observacoes: str | None = None
    spreadsheet_id: str | None = None


class PlanilhaAssociar(BaseModel):
    """Payload for ``PUT /obras/{id}/planilha``."""

    spreadsheet_id: TextoObrigatorio = Field(..., max_length=200)


class ObraResponse(BaseModel):
    id: int
    nome: str
    endereco: str
    cliente: str
    valor_contrato: float
    data_inicio: datetime.date
    data_previsao_termino: datetime.date
    data_termino: datetime.date | None
    status: str
    descricao: str
    observacoes: str
    spreadsheet_id: str | None
    criado_por_id: int | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class ObraResumo(BaseModel):
    """Compact project reference embedded in other responses."""

    id: int
    nome: str

    model_config = ConfigDict(from_attributes=True)
