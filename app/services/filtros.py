"""
Declarative filtering and pagination for list endpoints.

Each entity declares a tuple of ``CampoFiltro`` entries mapping a query
parameter to a model column and a matching mode.  ``aplicar_filtros`` turns
the received parameters into SQLAlchemy criteria and ``paginar`` runs the
count and page queries.

Matching modes:
    EXATO   column == value                 (enums, references)
    CONTEM  case-insensitive substring      (free text)
    DESDE   column >= value                 (inclusive lower date bound)
    ATE     column <= value                 (inclusive upper date bound)

Pagination is lenient: ``page`` / ``limit`` values that are not positive
integers fall back to the defaults instead of failing the request, and
``limit`` is capped at ``MAX_PAGE_SIZE``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from sqlalchemy.orm import Query

from app.config import get_settings
from app.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

EXATO = "exato"
CONTEM = "contem"
DESDE = "desde"
ATE = "ate"


@dataclass(frozen=True)
class CampoFiltro:
    """One filterable query parameter.

    Attributes:
        param: Query-string name (``data_inicio``, ``nome``...).
        coluna: Model column the criterion applies to.
        modo: One of ``EXATO``, ``CONTEM``, ``DESDE``, ``ATE``.
        tipo: Converter applied to the raw string (``int``, ``str``...).
    """

    param: str
    coluna: Any
    modo: str = EXATO
    tipo: Callable[[str], Any] = str


@dataclass(frozen=True)
class Paginacao:
    page: int
    limit: int
    offset: int


def _inteiro_positivo(valor: Any, padrao: int) -> int:
    try:
        numero = int(valor)
    except (TypeError, ValueError):
        return padrao
    return numero if numero > 0 else padrao


def resolver_paginacao(page: Any = None, limit: Any = None) -> Paginacao:
    """Normalise raw ``page`` / ``limit`` query values.

    Example::

        >>> resolver_paginacao("3", "10")
        Paginacao(page=3, limit=10, offset=20)
        >>> resolver_paginacao("abc", "-5")
        Paginacao(page=1, limit=10, offset=0)
    """
    settings = get_settings()
    pagina = _inteiro_positivo(page, 1)
    tamanho = min(_inteiro_positivo(limit, settings.DEFAULT_PAGE_SIZE), settings.MAX_PAGE_SIZE)
    return Paginacao(page=pagina, limit=tamanho, offset=(pagina - 1) * tamanho)


def _escapar_like(texto: str) -> str:
    return texto.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _converter(campo: CampoFiltro, bruto: Any) -> Any:
    if campo.modo in (DESDE, ATE):
        try:
            return bruto if isinstance(bruto, date) else date.fromisoformat(str(bruto))
        except ValueError as exc:
            raise ValidationFailed(
                [{"campo": campo.param, "mensagem": "Data deve estar no formato AAAA-MM-DD"}]
            ) from exc
    try:
        return campo.tipo(bruto)
    except (TypeError, ValueError) as exc:
        raise ValidationFailed([{"campo": campo.param, "mensagem": "Valor inválido"}]) from exc


def aplicar_filtros(query: Query, campos: tuple[CampoFiltro, ...], params: dict[str, Any]) -> Query:
    """Apply every declared filter whose parameter is present and non-empty."""
    for campo in campos:
        bruto = params.get(campo.param)
        if bruto is None or (isinstance(bruto, str) and not bruto.strip()):
            continue
        valor = _converter(campo, bruto.strip() if isinstance(bruto, str) else bruto)

        if campo.modo == EXATO:
            query = query.filter(campo.coluna == valor)
        elif campo.modo == CONTEM:
            query = query.filter(campo.coluna.ilike(f"%{_escapar_like(str(valor))}%", escape="\\"))
        elif campo.modo == DESDE:
            query = query.filter(campo.coluna >= valor)
        elif campo.modo == ATE:
            query = query.filter(campo.coluna <= valor)
    return query


def pagina_vazia(paginacao: Paginacao) -> dict[str, Any]:
    return {
        "records": [],
        "pagination": {"page": paginacao.page, "limit": paginacao.limit, "total": 0, "pages": 0},
    }


def paginar(query: Query, paginacao: Paginacao, ordem: tuple[Any, ...] = ()) -> dict[str, Any]:
    """Count all matches, then fetch one ordered page.

    Returns:
        ``{"records": [...ORM rows...], "pagination": {page, limit, total, pages}}``
    """
    total = query.order_by(None).count()
    registros = query.order_by(*ordem).offset(paginacao.offset).limit(paginacao.limit).all()
    logger.debug(
        "paginar: page=%d limit=%d total=%d returned=%d",
        paginacao.page, paginacao.limit, total, len(registros),
    )
    return {
        "records": registros,
        "pagination": {
            "page": paginacao.page,
            "limit": paginacao.limit,
            "total": total,
            "pages": math.ceil(total / paginacao.limit) if total else 0,
        },
    }
