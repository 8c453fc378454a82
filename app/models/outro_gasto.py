"""OutroGasto model: miscellaneous expense with a free category."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class OutroGasto(Base):
    """Miscellaneous expense (fees, taxes, services) grouped by ``categoria_livre``.

    Attributes:
        id: Primary key.
        descricao: Description.
        valor: Amount.
        data: Expense date.
        categoria_livre: Free-text category used by the category report.
        forma_pagamento: One of ``constants.FORMAS_OUTROS_GASTOS``.
        chave_pix_boleto: PIX key or boleto barcode.
        numero_documento: Receipt / document number.
        fornecedor: Supplier name.
        obra_id: FK to Obra (nullable).
        observacoes: Free text notes.
        pagamentos: Installment sub-records (``OutroGastoPagamento``).
    """

    __tablename__ = "outro_gasto"

    id = Column(Integer, primary_key=True, autoincrement=True)
    descricao = Column(String(500), nullable=False)
    valor = Column(Numeric(15, 2), nullable=False)
    data = Column(Date, nullable=False, index=True)
    categoria_livre = Column(String(100), nullable=False, index=True)
    forma_pagamento = Column(String(20), default="pix", nullable=False)
    chave_pix_boleto = Column(String(200), default="", nullable=False)
    numero_documento = Column(String(100), default="", nullable=False)
    fornecedor = Column(String(200), default="", nullable=False, index=True)
    obra_id = Column(Integer, ForeignKey("obra.id"), nullable=True, index=True)
    observacoes = Column(Text, default="", nullable=False)
    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    obra = relationship("Obra", lazy="select")
    pagamentos = relationship(
        "OutroGastoPagamento",
        order_by="OutroGastoPagamento.id",
        lazy="select",
        cascade="all, delete-orphan",
    )
