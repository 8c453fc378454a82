"""Material model: purchase of construction material."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Material(Base):
    """Material purchase, optionally tied to an Obra.

    ``obra_id = NULL`` marks a company-level expense not linked to any project.

    Attributes:
        id: Primary key.
        numero_nota: Invoice number.
        data: Purchase date.
        local_compra: Store / supplier.
        valor: Amount paid.
        solicitante: Who requested the purchase.
        forma_pagamento: One of ``constants.FORMAS_PAGAMENTO``.
        chave_pix_boleto: PIX key or boleto barcode.
        descricao: Free text description.
        obra_id: FK to Obra (nullable).
        observacoes: Free text notes.
        status_pagamento: One of ``constants.STATUS_PAGAMENTO``.
        criado_por_id: FK to the Usuario that created the record.
    """

    __tablename__ = "material"

    id = Column(Integer, primary_key=True, autoincrement=True)
    numero_nota = Column(String(100), nullable=False, index=True)
    data = Column(Date, nullable=False, index=True)
    local_compra = Column(String(200), nullable=False)
    valor = Column(Numeric(15, 2), nullable=False)
    solicitante = Column(String(200), nullable=False, index=True)
    forma_pagamento = Column(String(20), nullable=False)
    chave_pix_boleto = Column(String(200), default="", nullable=False)
    descricao = Column(Text, default="", nullable=False)
    obra_id = Column(Integer, ForeignKey("obra.id"), nullable=True, index=True)
    observacoes = Column(Text, default="", nullable=False)
    status_pagamento = Column(String(20), default="pendente", nullable=False, index=True)
    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    obra = relationship("Obra", lazy="select")
