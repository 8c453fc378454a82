"""
Shared Pydantic v2 schemas and field types reused across modules.

Provides the paginated envelope, the message response, and the annotated
field types (required text, non-negative amount, day of month, enum
membership) that every entity schema composes.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, Field, StringConstraints

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Field types
# ---------------------------------------------------------------------------

TextoObrigatorio = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TextoOpcional = Annotated[str, StringConstraints(strip_whitespace=True)]
Valor = Annotated[float, Field(ge=0)]
DiaMes = Annotated[int, Field(ge=1, le=31)]


def opcoes(valores: Iterable[str]) -> AfterValidator:
    """Build a validator that accepts only the given enum values.

    Example::

        status: Annotated[str, opcoes(STATUS_OBRA)] = "planejamento"
    """
    permitidos = tuple(valores)

    def _validar(valor: str) -> str:
        if valor not in permitidos:
            raise ValueError(f"deve ser um de: {', '.join(permitidos)}")
        return valor

    return AfterValidator(_validar)


def exigir_chave(forma_pagamento: str | None, chave: str, formas: Iterable[str]) -> str:
    """Require a PIX key / boleto barcode when the payment method needs one."""
    if forma_pagamento in set(formas) and not chave:
        raise ValueError("Chave Pix / Código de Barras é obrigatório para PIX/Boleto")
    return chave


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class Paginacao(BaseModel):
    """Pagination block of a list response.

    Attributes:
        page: 1-based page actually served.
        limit: Page size actually applied.
        total: Matching records, ignoring pagination.
        pages: ``ceil(total / limit)``; 0 when nothing matches.
    """

    page: int
    limit: int
    total: int
    pages: int


class Pagina(BaseModel, Generic[T]):
    """``{records, pagination}`` envelope returned by every list endpoint."""

    records: list[T]
    pagination: Paginacao


class MessageResponse(BaseModel):
    """Generic message envelope for operations that do not return a resource.

    Attributes:
        message: Short human-readable result summary.
        detail: Optional extended information.
    """

    message: str = Field(..., description="Resumo do resultado da operação.")
    detail: str | None = Field(
        default=None,
        description="Informação adicional (contexto do erro, sugestão, etc.).",
    )


class FieldError(BaseModel):
    campo: str
    mensagem: str


class ErrorResponse(BaseModel):
    """Body of every error response produced by the exception handlers."""

    message: str
    detail: list[FieldError] | str | dict | None = None
