"""
Pydantic v2 schemas for user management endpoints.

Write schemas (``UsuarioCreate``, ``UsuarioUpdate``, ``UsuarioSelfUpdate``)
are separate from the read schema (``UsuarioResponse``) so that the password
hash never appears in an API response.
"""

from __future__ import annotations

import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.common import TextoObrigatorio, opcoes
from app.schemas.obra import ObraResumo
from app.utils.constants import ROLES


class UsuarioCreate(BaseModel):
    """Payload for ``POST /usuarios`` (sign-up).

    Anonymous sign-ups always start as ``PreAprovacao``.  Creating a ``User``
    or ``Admin`` account directly requires an authenticated Admin.

    Attributes:
        nome: Display name.
        email: Unique login e-mail.
        senha: Plain-text password, hashed before storage.
        role: Optional role code from ``constants.ROLES``.
    """

    nome: TextoObrigatorio = Field(..., max_length=200)
    email: EmailStr
    senha: str = Field(..., min_length=6, max_length=128)
    role: Annotated[str, opcoes(ROLES)] | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "nome": "Maria Souza",
                "email": "maria@construtora.com.br",
                "senha": "segredo123",
            }
        }
    )


class UsuarioUpdate(BaseModel):
    """Admin update of any account; ``role`` also sets ``aprovado``."""

    nome: TextoObrigatorio | None = Field(default=None, max_length=200)
    email: EmailStr | None = None
    senha: str | None = Field(default=None, min_length=6, max_length=128)
    role: Annotated[str, opcoes(ROLES)] | None = None
    aprovado: bool | None = None


class UsuarioSelfUpdate(BaseModel):
    """Update of the caller's own account; role and approval are not editable."""

    nome: TextoObrigatorio | None = Field(default=None, max_length=200)
    email: EmailStr | None = None
    senha: str | None = Field(default=None, min_length=6, max_length=128)


class ObrasPermitidasUpdate(BaseModel):
    """Replaces the allow-list of projects a ``User`` may see."""

    obra_ids: list[int] = Field(default_factory=list)


class UsuarioResponse(BaseModel):
    id: int
    nome: str
    email: str
    aprovado: bool
    role: str
    obras_permitidas: list[ObraResumo] = []
    ultimo_acesso: datetime.datetime | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
