"""
Obras service layer.

Declares the ``OBRAS`` resource for the generic CRUD store and adds the
project-specific operations:

- deletion guard: a project that is still referenced by any expense,
  entrada or lancamento cannot be deleted (``Conflict``); nothing is
  cascaded or orphaned.
- spreadsheet binding: ``associar_planilha`` / ``obter_por_planilha``.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.exceptions import Conflict, NotFound
from app.models.contrato import Contrato
from app.models.entrada import Entrada
from app.models.equipamento import Equipamento
from app.models.lancamento import Lancamento
from app.models.mao_obra import MaoObra
from app.models.material import Material
from app.models.obra import Obra
from app.models.outro_gasto import OutroGasto
from app.schemas.obra import ObraCreate
from app.services import crud_service
from app.services.crud_service import Recurso
from app.services.filtros import CONTEM, EXATO, CampoFiltro

logger = logging.getLogger(__name__)

# Tables whose ``obra_id`` blocks deleting the referenced project
_DEPENDENTES: tuple[tuple[str, type], ...] = (
    ("materiais", Material),
    ("mão de obra", MaoObra),
    ("equipamentos", Equipamento),
    ("contratos", Contrato),
    ("outros gastos", OutroGasto),
    ("entradas", Entrada),
    ("lançamentos", Lancamento),
)


def _bloquear_se_referenciada(db: Session, obra: Obra) -> None:
    vinculos = {
        rotulo: db.query(modelo).filter(modelo.obra_id == obra.id).count()
        for rotulo, modelo in _DEPENDENTES
    }
    vinculos = {rotulo: qtd for rotulo, qtd in vinculos.items() if qtd}
    if vinculos:
        logger.info("Obra id=%d not deleted, still referenced: %s", obra.id, vinculos)
        raise Conflict(
            "Obra possui registros vinculados e não pode ser excluída",
            detail=vinculos,
        )


OBRAS = Recurso(
    nome="Obra",
    modelo=Obra,
    esquema=ObraCreate,
    filtros=(
        CampoFiltro("status", Obra.status, EXATO),
        CampoFiltro("cliente", Obra.cliente, CONTEM),
        CampoFiltro("nome", Obra.nome, CONTEM),
    ),
    ordem=(Obra.created_at.desc(), Obra.id.desc()),
    coluna_escopo=Obra.id,
    antes_de_remover=_bloquear_se_referenciada,
)


def associar_planilha(
    db: Session, obra_id: int, spreadsheet_id: str, obras_permitidas: set[int] | None = None
) -> Obra:
    """Bind a Google spreadsheet to a project (replaces any previous one)."""
    obra = crud_service.obter(db, OBRAS, obra_id, obras_permitidas)
    obra.spreadsheet_id = spreadsheet_id
    db.commit()
    db.refresh(obra)
    logger.info("Obra id=%d bound to spreadsheet '%s'", obra_id, spreadsheet_id)
    return obra


def obter_por_planilha(
    db: Session, spreadsheet_id: str, obras_permitidas: set[int] | None = None
) -> Obra:
    """Find the project bound to *spreadsheet_id*.

    Raises:
        NotFound: If no project references that spreadsheet.
        Forbidden: If the project lies outside the caller's allow-list.
    """
    obra = db.query(Obra).filter(Obra.spreadsheet_id == spreadsheet_id).first()
    if obra is None:
        raise NotFound("Nenhuma obra associada a esta planilha")
    return crud_service.obter(db, OBRAS, obra.id, obras_permitidas)
