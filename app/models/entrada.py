"""Entrada model: incoming payment (client installment, advance, refund)."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Entrada(Base):
    """Money received, optionally tied to an Obra.

    Attributes:
        id: Primary key.
        nome: Short label of the receipt.
        valor: Amount received.
        data: Receipt date.
        observacoes: Free text notes.
        obra_id: FK to Obra (``NULL`` = company-level receipt).
        status_recebimento: One of ``constants.STATUS_RECEBIMENTO``.
    """

    __tablename__ = "entrada"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(200), nullable=False, index=True)
    valor = Column(Numeric(15, 2), nullable=False)
    data = Column(Date, nullable=False, index=True)
    observacoes = Column(Text, default="", nullable=False)
    obra_id = Column(Integer, ForeignKey("obra.id"), nullable=True, index=True)
    status_recebimento = Column(String(20), default="recebido", nullable=False, index=True)
    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    obra = relationship("Obra", lazy="select")
