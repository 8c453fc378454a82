"""Contrato model: supplier contract with installment payments."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Contrato(Base):
    """Supplier contract.

    Attributes:
        id: Primary key.
        codigo: Unique human code, auto-generated as ``CONT-{ano}-{seq:04d}``.
        loja: Supplier / store name.
        valor: Current contract value.
        valor_inicial: Value at signature.
        inicio_contrato: Contract start (optional).
        final_contrato: Contract end (optional).
        obra_id: FK to Obra (nullable).
        status: One of ``constants.STATUS_CONTRATO``.
        observacoes: Free text notes.
        pagamentos: Installment sub-records (``ContratoPagamento``).
    """

    __tablename__ = "contrato"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo = Column(String(30), unique=True, nullable=False, index=True)
    loja = Column(String(200), nullable=False, index=True)
    valor = Column(Numeric(15, 2), default=0, nullable=False)
    valor_inicial = Column(Numeric(15, 2), default=0, nullable=False)
    inicio_contrato = Column(Date, nullable=True)
    final_contrato = Column(Date, nullable=True)
    obra_id = Column(Integer, ForeignKey("obra.id"), nullable=True, index=True)
    status = Column(String(20), default="ativo", nullable=False, index=True)
    observacoes = Column(Text, default="", nullable=False)
    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    obra = relationship("Obra", lazy="select")
    pagamentos = relationship(
        "ContratoPagamento",
        order_by="ContratoPagamento.id",
        lazy="select",
        cascade="all, delete-orphan",
    )
