"""
Generic record store for the uniform CRUD endpoints.

Every financial entity (obras, materiais, mão de obra, equipamentos,
contratos, outros gastos, entradas, lancamentos) is described once by a
``Recurso`` declaration: model, create schema, filters, default ordering and
optional hooks.  The five operations below work for all of them.

Design notes
------------
- Creates are validated by the router (FastAPI body parsing).  Partial
  updates merge the payload onto the stored columns and re-validate the
  result against the create schema, so ``PUT`` can never store a record a
  ``POST`` would reject.  Failures raise ``ValidationFailed`` with
  ``[{campo, mensagem}]``.
- ``obra_id`` references are checked on every write; an unknown project is
  a validation error on that field.
- ``created_at`` / ``updated_at`` come from the column defaults, never from
  the client.
- Default orderings always end with ``id desc`` so pages are deterministic.
- Uniqueness violations (e.g. a duplicate contract ``codigo``) surface as
  ``Conflict``.
- Project scope: a resource with ``coluna_escopo`` is narrowed to the
  caller's allowed projects on every list, read and write; records outside
  it raise ``Forbidden``.  ``None`` as allow-list means unrestricted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy import inspect, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import Conflict, Forbidden, NotFound, StoreFailure, ValidationFailed
from app.models.obra import Obra
from app.models.usuario import Usuario
from app.services.filtros import CampoFiltro, aplicar_filtros, pagina_vazia, paginar, resolver_paginacao

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recurso:
    """Declaration of one CRUD entity.

    Attributes:
        nome: Human label used in messages ("Material", "Obra"...).
        modelo: SQLAlchemy model class.
        esquema: Create schema (a ``BaseModel`` subclass or an annotated
                 union); also used to re-validate merged updates.
        filtros: Filterable query parameters.
        ordem: Default ORDER BY, ending with ``id desc``.
        filhos: Child collections accepted on create, mapped to their model
                (``{"pagamentos": EquipamentoPagamento}``).
        coluna_escopo: Column narrowed to the caller's allowed projects.
        sem_obra_visivel: Rows whose scope column is NULL (company-level
                          records) stay visible to scoped callers.
        preparar: Hook ``(db, dados) -> dados`` run before insert.
        ao_gravar: Hook ``(registro) -> None`` run after every write is
                   applied and before commit (derived columns).
        antes_de_remover: Hook ``(db, registro) -> None`` that may veto a delete.
    """

    nome: str
    modelo: type
    esquema: Any
    filtros: tuple[CampoFiltro, ...] = ()
    ordem: tuple[Any, ...] = ()
    filhos: dict[str, type] = field(default_factory=dict)
    coluna_escopo: Any = None
    sem_obra_visivel: bool = False
    preparar: Callable[[Session, dict[str, Any]], dict[str, Any]] | None = None
    ao_gravar: Callable[[Any], None] | None = None
    antes_de_remover: Callable[[Session, Any], None] | None = None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def validar(esquema: Any, dados: dict[str, Any]) -> dict[str, Any]:
    """Validate *dados* against *esquema* and return the normalised dict.

    Raises:
        ValidationFailed: With one ``{campo, mensagem}`` entry per error.
    """
    try:
        validado = TypeAdapter(esquema).validate_python(dados)
    except ValidationError as exc:
        raise ValidationFailed.from_pydantic(exc) from exc
    if isinstance(validado, BaseModel):
        return validado.model_dump()
    return dict(validado)


def colunas(registro: Any) -> dict[str, Any]:
    """Current column values of an ORM instance, keyed by attribute name."""
    return {attr.key: getattr(registro, attr.key) for attr in inspect(registro).mapper.column_attrs}


def _verificar_obra(db: Session, dados: dict[str, Any]) -> None:
    obra_id = dados.get("obra_id")
    if obra_id is not None and db.get(Obra, obra_id) is None:
        raise ValidationFailed([{"campo": "obra_id", "mensagem": "Obra não encontrada"}])


def _no_escopo(recurso: Recurso, valor: Any, obras_permitidas: set[int] | None) -> bool:
    if obras_permitidas is None or recurso.coluna_escopo is None:
        return True
    if valor is None:
        return recurso.sem_obra_visivel
    return valor in obras_permitidas


def filtro_escopo(query: Any, recurso: Recurso, obras_permitidas: set[int] | None) -> Any:
    """Narrow *query* to the rows of *recurso* visible to a scoped caller."""
    coluna = recurso.coluna_escopo
    if obras_permitidas is None or coluna is None:
        return query
    condicao = coluna.in_(obras_permitidas)
    if recurso.sem_obra_visivel:
        condicao = or_(condicao, coluna.is_(None))
    return query.filter(condicao)


def _verificar_escopo(recurso: Recurso, valor: Any, obras_permitidas: set[int] | None) -> None:
    if not _no_escopo(recurso, valor, obras_permitidas):
        raise Forbidden(f"Acesso negado a este(a) {recurso.nome.lower()}")


def _commit(db: Session, recurso: Recurso) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("%s: integrity error on commit: %s", recurso.nome, exc.orig)
        raise Conflict(f"{recurso.nome}: registro duplicado ou referência inválida") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s: commit failed", recurso.nome)
        raise StoreFailure(f"{recurso.nome}: erro ao gravar no banco de dados") from exc


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def listar(
    db: Session,
    recurso: Recurso,
    params: dict[str, Any],
    page: Any = None,
    limit: Any = None,
    obras_permitidas: set[int] | None = None,
) -> dict[str, Any]:
    """Filtered, ordered, paginated list.

    Args:
        db: Active SQLAlchemy session.
        recurso: Entity declaration.
        params: Raw query parameters; unknown keys are ignored.
        page: Raw ``page`` value (lenient, see ``filtros.resolver_paginacao``).
        limit: Raw ``limit`` value.
        obras_permitidas: Allowed project ids for a scoped caller, or
                          ``None`` for unrestricted access.

    Returns:
        ``{"records": [ORM rows], "pagination": {...}}``.  An empty allow-list
        yields an empty page without touching the database unless
        company-level rows are visible.
    """
    paginacao = resolver_paginacao(page, limit)
    coluna = recurso.coluna_escopo

    query = db.query(recurso.modelo)
    if obras_permitidas is not None and coluna is not None:
        if not obras_permitidas and not recurso.sem_obra_visivel:
            logger.debug("listar %s: empty allow-list, returning empty page", recurso.nome)
            return pagina_vazia(paginacao)
        query = filtro_escopo(query, recurso, obras_permitidas)

    query = aplicar_filtros(query, recurso.filtros, params)
    return paginar(query, paginacao, recurso.ordem)


def obter(
    db: Session,
    recurso: Recurso,
    registro_id: int,
    obras_permitidas: set[int] | None = None,
) -> Any:
    """Fetch one record by primary key.

    Raises:
        NotFound: If no record has *registro_id*.
        Forbidden: If the record lies outside the caller's allowed projects.
    """
    registro = db.get(recurso.modelo, registro_id)
    if registro is None:
        raise NotFound(f"{recurso.nome} não encontrado(a)")

    verificar_acesso(recurso, registro, obras_permitidas)
    return registro


def verificar_acesso(recurso: Recurso, registro: Any, obras_permitidas: set[int] | None) -> None:
    """Raise ``Forbidden`` if *registro* lies outside the caller's allowed projects."""
    if recurso.coluna_escopo is not None:
        _verificar_escopo(recurso, getattr(registro, recurso.coluna_escopo.key), obras_permitidas)


def criar(
    db: Session,
    recurso: Recurso,
    payload: Any,
    usuario: Usuario | None,
    obras_permitidas: set[int] | None = None,
) -> Any:
    """Insert a new record from an already-validated create payload.

    Child collections declared in ``recurso.filhos`` are inserted with the
    parent in the same transaction.  A scoped caller may only link the
    record to one of their allowed projects.
    """
    dados = payload.model_dump() if isinstance(payload, BaseModel) else dict(payload)
    _verificar_obra(db, dados)
    if recurso.coluna_escopo is not None and recurso.coluna_escopo.key in dados:
        _verificar_escopo(recurso, dados[recurso.coluna_escopo.key], obras_permitidas)
    if recurso.preparar is not None:
        dados = recurso.preparar(db, dados)

    filhos = {campo: dados.pop(campo, None) or [] for campo in recurso.filhos}
    registro = recurso.modelo(**dados)
    if hasattr(registro, "criado_por_id") and usuario is not None:
        registro.criado_por_id = usuario.id
    for campo, elementos in filhos.items():
        modelo_filho = recurso.filhos[campo]
        setattr(registro, campo, [modelo_filho(**elemento) for elemento in elementos])

    if recurso.ao_gravar is not None:
        recurso.ao_gravar(registro)

    db.add(registro)
    _commit(db, recurso)
    db.refresh(registro)

    logger.info(
        "%s created: id=%s by user_id=%s",
        recurso.nome, registro.id, usuario.id if usuario else None,
    )
    return registro


def atualizar(
    db: Session,
    recurso: Recurso,
    registro_id: int,
    payload: BaseModel,
    obras_permitidas: set[int] | None = None,
) -> Any:
    """Apply a partial update after re-validating the merged record.

    Stored NULL columns are left out of the merge so the create schema's
    defaults apply to them (a lancamento switching ``tipo`` gets the new
    variant's defaults).  Fields present in the request body, and stored
    NULLs the validation filled in, are written from the validated merge so
    normalisation (trimming...) applies.

    Raises:
        NotFound: If the record does not exist.
        Forbidden: If the record, or the project it is moved to, lies
                   outside the caller's allowed projects.
        ValidationFailed: If the merged record violates the create schema.
    """
    registro = obter(db, recurso, registro_id, obras_permitidas)
    alteracoes = payload.model_dump(exclude_unset=True)
    if not alteracoes:
        return registro

    armazenado = colunas(registro)
    mesclado = {campo: valor for campo, valor in armazenado.items() if valor is not None}
    mesclado.update(alteracoes)
    validado = validar(recurso.esquema, mesclado)
    _verificar_obra(db, validado)
    if recurso.coluna_escopo is not None and recurso.coluna_escopo.key in alteracoes:
        _verificar_escopo(recurso, validado.get(recurso.coluna_escopo.key), obras_permitidas)

    for campo, valor in validado.items():
        if campo in recurso.filhos or campo not in armazenado:
            continue
        if campo in alteracoes or armazenado[campo] is None:
            setattr(registro, campo, valor)

    if recurso.ao_gravar is not None:
        recurso.ao_gravar(registro)

    _commit(db, recurso)
    db.refresh(registro)

    logger.info(
        "%s updated: id=%d fields=%s", recurso.nome, registro_id, sorted(alteracoes)
    )
    return registro


def remover(
    db: Session,
    recurso: Recurso,
    registro_id: int,
    obras_permitidas: set[int] | None = None,
) -> None:
    """Delete a record (and its child collections).

    Raises:
        NotFound: If the record does not exist.
        Forbidden: If the record lies outside the caller's allowed projects.
        Conflict: If ``recurso.antes_de_remover`` vetoes the deletion.
    """
    registro = obter(db, recurso, registro_id, obras_permitidas)
    if recurso.antes_de_remover is not None:
        recurso.antes_de_remover(db, registro)

    db.delete(registro)
    _commit(db, recurso)
    logger.info("%s deleted: id=%d", recurso.nome, registro_id)
