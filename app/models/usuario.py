"""Usuario model: application user with role-based access control."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base

# Allow-list of projects a non-admin user may see
usuario_obra_permitida = Table(
    "usuario_obra_permitida",
    Base.metadata,
    Column("usuario_id", Integer, ForeignKey("usuario.id", ondelete="CASCADE"), primary_key=True),
    Column("obra_id", Integer, ForeignKey("obra.id", ondelete="CASCADE"), primary_key=True),
)


class Usuario(Base):
    """System user with a role that controls API access levels.

    Roles:
        - PreAprovacao: Signed up, waiting for an admin; cannot log in.
        - User: Operates financial records; sees only ``obras_permitidas``.
        - Admin: Full access, manages users and spreadsheets.

    Attributes:
        id: Primary key.
        nome: Display name.
        email: Unique login e-mail.
        senha_hash: Bcrypt-hashed password (never store plain text).
        aprovado: Whether an admin approved the account.
        role: Role code controlling permissions.
        ultimo_acesso: Timestamp of the last successful login.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "usuario"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(200), nullable=False)
    email = Column(String(200), unique=True, nullable=False, index=True)
    senha_hash = Column(String(200), nullable=False)
    aprovado = Column(Boolean, default=False, nullable=False)
    role = Column(String(20), default="PreAprovacao", nullable=False)
    ultimo_acesso = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    obras_permitidas = relationship(
        "Obra",
        secondary=usuario_obra_permitida,
        order_by="Obra.id",
        lazy="select",
    )
