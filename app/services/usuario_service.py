"""
User management service layer.

Business rules
--------------
- Anonymous sign-ups are stored as ``PreAprovacao`` with ``aprovado=False``
  and cannot log in until an Admin approves them.
- Only an Admin may create a ``User`` / ``Admin`` account directly, or
  change anyone's role or approval.  Setting ``role`` also sets
  ``aprovado`` (``PreAprovacao`` means not approved).
- E-mails are unique, compared case-insensitively; duplicates raise
  ``Conflict``.
- Self-service updates never touch role or approval.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from app.models.obra import Obra
from app.models.usuario import Usuario
from app.schemas.usuario import UsuarioCreate, UsuarioSelfUpdate, UsuarioUpdate
from app.services.filtros import paginar, resolver_paginacao
from app.utils.constants import ROLE_ADMIN, ROLE_PRE_APROVACAO
from app.utils.security import hash_password

logger = logging.getLogger(__name__)


def _normalizar_email(email: str) -> str:
    return email.strip().lower()


def _garantir_email_livre(db: Session, email: str, exceto_id: int | None = None) -> None:
    query = db.query(Usuario).filter(Usuario.email == email)
    if exceto_id is not None:
        query = query.filter(Usuario.id != exceto_id)
    if query.first() is not None:
        raise Conflict("Este e-mail já está cadastrado")


def _eh_admin(usuario: Usuario | None) -> bool:
    return usuario is not None and usuario.role == ROLE_ADMIN


def obter(db: Session, usuario_id: int) -> Usuario:
    usuario = db.get(Usuario, usuario_id)
    if usuario is None:
        raise NotFound("Usuário não encontrado")
    return usuario


def listar(db: Session, page=None, limit=None, pendentes: bool = False) -> dict:
    query = db.query(Usuario)
    if pendentes:
        query = query.filter(Usuario.aprovado.is_(False))
    return paginar(query, resolver_paginacao(page, limit), (Usuario.created_at.desc(), Usuario.id.desc()))


def criar(db: Session, payload: UsuarioCreate, autor: Usuario | None) -> Usuario:
    """Sign up a new account.

    Raises:
        Forbidden: A non-admin requested a ``User`` or ``Admin`` role.
        Conflict: The e-mail is already registered.
    """
    role = payload.role or ROLE_PRE_APROVACAO
    if role != ROLE_PRE_APROVACAO and not _eh_admin(autor):
        raise Forbidden("Apenas um Admin pode criar usuários com perfil User ou Admin")

    email = _normalizar_email(payload.email)
    _garantir_email_livre(db, email)

    usuario = Usuario(
        nome=payload.nome,
        email=email,
        senha_hash=hash_password(payload.senha),
        role=role,
        aprovado=role != ROLE_PRE_APROVACAO,
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    logger.info(
        "Usuario created: id=%d email=%s role=%s by=%s",
        usuario.id, usuario.email, usuario.role, autor.email if autor else "signup",
    )
    return usuario


def _aplicar_dados_pessoais(db: Session, usuario: Usuario, dados: dict) -> None:
    if dados.get("email"):
        email = _normalizar_email(dados["email"])
        if email != usuario.email:
            _garantir_email_livre(db, email, exceto_id=usuario.id)
            usuario.email = email
    if dados.get("senha"):
        usuario.senha_hash = hash_password(dados["senha"])
    if dados.get("nome"):
        usuario.nome = dados["nome"]


def atualizar(db: Session, usuario_id: int, payload: UsuarioUpdate) -> Usuario:
    """Admin update: personal data, role and approval."""
    usuario = obter(db, usuario_id)
    dados = payload.model_dump(exclude_unset=True)
    _aplicar_dados_pessoais(db, usuario, dados)

    if dados.get("role"):
        usuario.role = dados["role"]
        usuario.aprovado = dados["role"] != ROLE_PRE_APROVACAO
    if dados.get("aprovado") is not None:
        usuario.aprovado = dados["aprovado"]

    db.commit()
    db.refresh(usuario)
    logger.info("Usuario updated: id=%d fields=%s", usuario_id, sorted(dados))
    return usuario


def atualizar_proprio(db: Session, usuario: Usuario, payload: UsuarioSelfUpdate) -> Usuario:
    dados = payload.model_dump(exclude_unset=True)
    _aplicar_dados_pessoais(db, usuario, dados)
    db.commit()
    db.refresh(usuario)
    logger.info("Usuario id=%d updated own profile: fields=%s", usuario.id, sorted(dados))
    return usuario


def remover(db: Session, usuario_id: int) -> None:
    usuario = obter(db, usuario_id)
    db.delete(usuario)
    db.commit()
    logger.info("Usuario deleted: id=%d", usuario_id)


def definir_obras_permitidas(db: Session, usuario_id: int, obra_ids: list[int]) -> Usuario:
    """Replace the user's project allow-list.

    Raises:
        ValidationFailed: If any id does not match an existing Obra.
    """
    usuario = obter(db, usuario_id)
    ids = sorted(set(obra_ids))
    obras = db.query(Obra).filter(Obra.id.in_(ids)).all() if ids else []
    faltando = set(ids) - {obra.id for obra in obras}
    if faltando:
        raise ValidationFailed(
            [{"campo": "obra_ids", "mensagem": f"Obras inexistentes: {sorted(faltando)}"}]
        )

    usuario.obras_permitidas = obras
    db.commit()
    db.refresh(usuario)
    logger.info("Usuario id=%d allowed obras set to %s", usuario_id, ids)
    return usuario
