"""Obra model: a construction project."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Obra(Base):
    """Construction project that expenses, entradas and lancamentos refer to.

    Attributes:
        id: Primary key.
        nome: Project name.
        endereco: Site address.
        cliente: Client name.
        valor_contrato: Contracted value with the client.
        data_inicio: Start date.
        data_previsao_termino: Planned end date.
        data_termino: Actual end date (null while running).
        status: One of ``constants.STATUS_OBRA``.
        descricao: Free text description.
        observacoes: Free text notes.
        spreadsheet_id: Optional Google Sheets id bound to this project.
        criado_por_id: FK to the Usuario that created the record.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "obra"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(200), nullable=False, index=True)
    endereco = Column(String(300), nullable=False)
    cliente = Column(String(200), nullable=False, index=True)
    valor_contrato = Column(Numeric(15, 2), nullable=False)
    data_inicio = Column(Date, nullable=False)
    data_previsao_termino = Column(Date, nullable=False)
    data_termino = Column(Date, nullable=True)
    status = Column(String(20), default="planejamento", nullable=False, index=True)
    descricao = Column(Text, default="", nullable=False)
    observacoes = Column(Text, default="", nullable=False)
    spreadsheet_id = Column(String(200), nullable=True, index=True)
    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    criado_por = relationship("Usuario", foreign_keys=[criado_por_id], lazy="select")
