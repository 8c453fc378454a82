"""Equipamento model: equipment purchase, rental or leasing."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Equipamento(Base):
    """Equipment expense with an embedded list of installment payments.

    Attributes:
        id: Primary key.
        numero_nota: Invoice number.
        item: Equipment name.
        data: Purchase / contract date.
        local_compra: Store / supplier.
        valor: Total amount.
        solicitante: Who requested the equipment.
        descricao: Description.
        tipo_contratacao: One of ``constants.TIPOS_CONTRATACAO_EQUIPAMENTO``.
        forma_pagamento: One of ``constants.FORMAS_PAGAMENTO``.
        parcelas: Number of installments (optional, >= 1).
        dia_pagamento: Day of month the payment is due (1-31).
        chave_pix_boleto: PIX key or boleto barcode.
        obra_id: FK to Obra (nullable).
        observacoes: Free text notes.
        pagamentos: Installment sub-records (``EquipamentoPagamento``).
    """

    __tablename__ = "equipamento"

    id = Column(Integer, primary_key=True, autoincrement=True)
    numero_nota = Column(String(100), nullable=False, index=True)
    item = Column(String(200), nullable=False, index=True)
    data = Column(Date, nullable=False, index=True)
    local_compra = Column(String(200), nullable=False)
    valor = Column(Numeric(15, 2), nullable=False)
    solicitante = Column(String(200), nullable=False)
    descricao = Column(Text, nullable=False)
    tipo_contratacao = Column(String(20), nullable=False)
    forma_pagamento = Column(String(20), nullable=False)
    parcelas = Column(Integer, nullable=True)
    dia_pagamento = Column(Integer, nullable=False)
    chave_pix_boleto = Column(String(200), default="", nullable=False)
    obra_id = Column(Integer, ForeignKey("obra.id"), nullable=True, index=True)
    observacoes = Column(Text, default="", nullable=False)
    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    obra = relationship("Obra", lazy="select")
    pagamentos = relationship(
        "EquipamentoPagamento",
        order_by="EquipamentoPagamento.id",
        lazy="select",
        cascade="all, delete-orphan",
    )
