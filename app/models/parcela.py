"""Parcela models: payment sub-records embedded in expense records.

Equipment, contract and miscellaneous-expense records carry a list of
installment/partial payments.  The three child tables share their columns
through ``ParcelaMixin`` and differ only in the parent foreign key.  A
parcela has no identity outside its parent: the parent relationships use
``cascade="all, delete-orphan"``.
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from app.database import Base


class ParcelaMixin:
    """Columns shared by every payment sub-record.

    Attributes:
        id: Server-assigned identifier, stable across removals.
        valor: Paid (or to be paid) amount.
        tipo_pagamento: One of ``constants.TIPOS_PAGAMENTO_PARCELA``.
        data_pagamento: Due or payment date.
        status_pagamento: One of ``constants.STATUS_PAGAMENTO``.
        observacoes: Free text notes.
    """

    id = Column(Integer, primary_key=True, autoincrement=True)
    valor = Column(Numeric(15, 2), nullable=False)
    tipo_pagamento = Column(String(20), nullable=False)
    data_pagamento = Column(Date, nullable=False)
    status_pagamento = Column(String(20), default="pendente", nullable=False)
    observacoes = Column(Text, default="", nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)


class EquipamentoPagamento(ParcelaMixin, Base):
    __tablename__ = "equipamento_pagamento"

    equipamento_id = Column(
        Integer, ForeignKey("equipamento.id", ondelete="CASCADE"), nullable=False, index=True
    )


class ContratoPagamento(ParcelaMixin, Base):
    __tablename__ = "contrato_pagamento"

    contrato_id = Column(
        Integer, ForeignKey("contrato.id", ondelete="CASCADE"), nullable=False, index=True
    )


class OutroGastoPagamento(ParcelaMixin, Base):
    __tablename__ = "outro_gasto_pagamento"

    outro_gasto_id = Column(
        Integer, ForeignKey("outro_gasto.id", ondelete="CASCADE"), nullable=False, index=True
    )
