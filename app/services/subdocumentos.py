"""
Add / update / remove-by-id over a parent record's child collections.

Works for any parent whose child collection is a one-to-many relationship
with ``cascade="all, delete-orphan"``: the four painel collections
(``gastos``, ``contratos``, ``cronograma``, ``pagamentos_semanais``) and the
``pagamentos`` list of equipamentos, contratos and outros gastos.

Each child row owns an autoincrement primary key, so an element keeps its
id no matter what happens to its siblings.  A missing element raises
``ElementNotFound``, which callers can tell apart from the
``ParentNotFound`` raised when the parent itself is absent.

Optional arguments:
    esquema   Create schema the merged element is re-validated against on
              update (shallow merge: absent keys keep their stored value).
    ao_gravar Callback run on the element after every write, used for
              derived columns such as a weekly payment's ``total_receber``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.exceptions import ElementNotFound, ParentNotFound
from app.services.crud_service import colunas, validar

logger = logging.getLogger(__name__)


def _modelo_filho(pai: Any, campo: str) -> type:
    relacao = type(pai).__mapper__.relationships[campo]
    return relacao.mapper.class_


def _como_dict(dados: BaseModel | dict[str, Any], parcial: bool) -> dict[str, Any]:
    if isinstance(dados, BaseModel):
        return dados.model_dump(exclude_unset=parcial)
    return dict(dados)


def _tocar(pai: Any) -> None:
    if hasattr(pai, "updated_at"):
        pai.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)


def carregar_pai(db: Session, modelo: type, pai_id: int, nome: str) -> Any:
    """Load the parent record or raise ``ParentNotFound``."""
    pai = db.get(modelo, pai_id)
    if pai is None:
        raise ParentNotFound(f"{nome} não encontrado(a)")
    return pai


def find_by_id(pai: Any, campo: str, elemento_id: int) -> Any:
    """Return the element of ``pai.<campo>`` with *elemento_id*; no persistence."""
    for elemento in getattr(pai, campo):
        if elemento.id == elemento_id:
            return elemento
    raise ElementNotFound(f"Item {elemento_id} não encontrado em {campo}")


def append(
    db: Session,
    pai: Any,
    campo: str,
    dados: BaseModel | dict[str, Any],
    ao_gravar: Callable[[Any], None] | None = None,
) -> Any:
    """Insert a new element into ``pai.<campo>`` and return the refreshed parent.

    The element is a single INSERT of a child row, so concurrent appends to
    the same parent do not overwrite each other.
    """
    elemento = _modelo_filho(pai, campo)(**_como_dict(dados, parcial=False))
    if ao_gravar is not None:
        ao_gravar(elemento)
    getattr(pai, campo).append(elemento)
    _tocar(pai)

    db.commit()
    db.refresh(pai)
    logger.info(
        "%s id=%s: appended %s element id=%s",
        type(pai).__name__, pai.id, campo, elemento.id,
    )
    return pai


def update_by_id(
    db: Session,
    pai: Any,
    campo: str,
    elemento_id: int,
    dados: BaseModel | dict[str, Any],
    esquema: Any = None,
    ao_gravar: Callable[[Any], None] | None = None,
) -> Any:
    """Shallow-merge *dados* onto one element and return the refreshed parent.

    Raises:
        ElementNotFound: If no element of ``pai.<campo>`` has *elemento_id*.
        ValidationFailed: If *esquema* rejects the merged element.
    """
    elemento = find_by_id(pai, campo, elemento_id)
    alteracoes = _como_dict(dados, parcial=True)

    if esquema is not None and alteracoes:
        validado = validar(esquema, {**colunas(elemento), **alteracoes})
        alteracoes = {chave: validado[chave] for chave in alteracoes if chave in validado}

    for chave, valor in alteracoes.items():
        setattr(elemento, chave, valor)
    if ao_gravar is not None:
        ao_gravar(elemento)
    _tocar(pai)

    db.commit()
    db.refresh(pai)
    logger.info(
        "%s id=%s: updated %s element id=%d fields=%s",
        type(pai).__name__, pai.id, campo, elemento_id, sorted(alteracoes),
    )
    return pai


def remove_by_id(db: Session, pai: Any, campo: str, elemento_id: int) -> Any:
    """Remove one element and return the refreshed parent.

    Raises:
        ElementNotFound: If absent; the collection is left untouched.
    """
    elemento = find_by_id(pai, campo, elemento_id)
    getattr(pai, campo).remove(elemento)
    _tocar(pai)

    db.commit()
    db.refresh(pai)
    logger.info(
        "%s id=%s: removed %s element id=%d",
        type(pai).__name__, pai.id, campo, elemento_id,
    )
    return pai
