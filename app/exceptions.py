"""
Domain exception hierarchy for the Controle de Obras API.

Services raise these instead of ``HTTPException`` so that the same code can
be exercised from tests without an HTTP layer.  ``app.main`` registers one
handler for ``ControleObrasError`` that turns every subclass into a JSON
response ``{"message": ..., "detail": ...}`` using ``status_code``.

Taxonomy
--------
- ``ValidationFailed``   400  client-correctable, carries per-field messages.
- ``NotFound``           404  entity absent.
  - ``ParentNotFound``   404  parent of a nested operation absent.
  - ``ElementNotFound``  404  sub-record absent inside an existing parent.
- ``Unauthenticated``    401  no bearer credential supplied.
- ``InvalidCredential``  401  malformed, expired or revoked credential.
- ``Forbidden``          403  role or ownership denial.
- ``Conflict``           409  uniqueness or dependency conflict.
- ``IntegrationFailure`` 502  spreadsheet service error.
- ``StoreFailure``       500  persistence error.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError


class ControleObrasError(Exception):
    """Base class; ``status_code`` is the HTTP status used by the handler."""

    status_code: int = 500

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationFailed(ControleObrasError):
    status_code = 400

    def __init__(self, errors: list[dict[str, str]], message: str = "Dados inválidos") -> None:
        super().__init__(message, detail=errors)
        self.errors = errors

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailed":
        return cls(erros_por_campo(exc.errors()))


class NotFound(ControleObrasError):
    status_code = 404


class ParentNotFound(NotFound):
    pass


class ElementNotFound(NotFound):
    pass


class Unauthenticated(ControleObrasError):
    status_code = 401


class InvalidCredential(ControleObrasError):
    status_code = 401


class Forbidden(ControleObrasError):
    status_code = 403


class Conflict(ControleObrasError):
    status_code = 409


class IntegrationFailure(ControleObrasError):
    status_code = 502


class StoreFailure(ControleObrasError):
    status_code = 500


def erros_por_campo(errors: list[dict[str, Any]] | tuple[Any, ...]) -> list[dict[str, str]]:
    """Flatten pydantic/FastAPI error dicts into ``[{campo, mensagem}]``.

    The ``loc`` tuple is joined with dots after dropping the request section
    (``body``, ``query``, ``path``) that FastAPI prepends.
    """
    result: list[dict[str, str]] = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        result.append({
            "campo": ".".join(loc) or "__root__",
            "mensagem": err.get("msg", "valor inválido"),
        })
    return result
