"""
Request bodies of the ``/google`` endpoints (Drive and Sheets).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.schemas.common import TextoObrigatorio


class ArquivoDrive(BaseModel):
    id: str
    name: str


class PlanilhaCreate(BaseModel):
    titulo: TextoObrigatorio = "Nova Planilha"


class PlanilhaCopia(BaseModel):
    template_id: TextoObrigatorio
    novo_titulo: TextoObrigatorio
    folder_id: str | None = None


class PlanilhaCriadaResponse(BaseModel):
    message: str
    spreadsheet_id: str


class IntervaloLeitura(BaseModel):
    """Spreadsheet range in A1 notation, e.g. ``Dados!A1:C10``."""

    spreadsheet_id: TextoObrigatorio
    intervalo: TextoObrigatorio


class ValoresUpdate(IntervaloLeitura):
    valores: list[list[Any]] = Field(..., min_length=1)


class ValoresAtualizadosResponse(BaseModel):
    message: str
    updated_cells: int | None = None
    updated_range: str | None = None


class AbaCreate(BaseModel):
    titulo: TextoObrigatorio


class AbaCriadaResponse(BaseModel):
    message: str
    sheet_id: int
