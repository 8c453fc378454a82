"""MaoObra model: labor contract (worker or crew)."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class MaoObra(Base):
    """Labor contract paid monthly on ``dia_pagamento``.

    Attributes:
        id: Primary key.
        nome: Worker or crew name.
        funcao: Role on site.
        tipo_contratacao: One of ``constants.TIPOS_CONTRATACAO_MAO_OBRA``.
        valor: Contract amount.
        inicio_contrato: Contract start date.
        fim_contrato: Contract end date (strictly after start).
        dia_pagamento: Day of month the payment is due (1-31).
        forma_pagamento: One of ``constants.FORMAS_PAGAMENTO``.
        chave_pix_boleto: PIX key or boleto barcode.
        obra_id: FK to Obra (nullable).
        status: One of ``constants.STATUS_MAO_OBRA``.
        status_pagamento: One of ``constants.STATUS_PAGAMENTO``.
        observacoes: Free text notes.
    """

    __tablename__ = "mao_obra"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(100), nullable=False, index=True)
    funcao = Column(String(50), nullable=False, index=True)
    tipo_contratacao = Column(String(20), nullable=False)
    valor = Column(Numeric(15, 2), nullable=False)
    inicio_contrato = Column(Date, nullable=False)
    fim_contrato = Column(Date, nullable=False)
    dia_pagamento = Column(Integer, nullable=False)
    forma_pagamento = Column(String(20), default="pix", nullable=False)
    chave_pix_boleto = Column(String(100), default="", nullable=False)
    obra_id = Column(Integer, ForeignKey("obra.id"), nullable=True, index=True)
    status = Column(String(20), default="ativo", nullable=False, index=True)
    status_pagamento = Column(String(20), default="pendente", nullable=False, index=True)
    observacoes = Column(String(500), default="", nullable=False)
    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    obra = relationship("Obra", lazy="select")
