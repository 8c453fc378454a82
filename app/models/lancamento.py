"""Lancamento model: payment entry of one of three kinds.

All kinds share one table keyed by ``tipo``; columns that belong to a single
kind are nullable.  Which columns are required for each ``tipo`` is decided
by the tagged-union schemas in ``app.schemas.lancamento``.
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Lancamento(Base):
    """Payment entry.

    Kinds (``tipo``):
        - material: purchase paid outside the expense registry.
        - mao_obra: labor contract paid in ``numero_parcelas`` equal parts.
        - pagamento_semanal: weekly payment with VA/VT allowances.

    Attributes:
        id: Primary key.
        tipo: One of ``constants.TIPOS_LANCAMENTO``.
        obra_id: FK to Obra (nullable until associated).
        status: One of ``constants.STATUS_LANCAMENTO``.
        observacoes: Free text notes.
    """

    __tablename__ = "lancamento"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tipo = Column(String(20), nullable=False, index=True)
    obra_id = Column(Integer, ForeignKey("obra.id"), nullable=True, index=True)
    status = Column(String(30), default="pendente_associacao", nullable=False, index=True)
    observacoes = Column(Text, default="", nullable=False)

    # Shared by mao_obra / pagamento_semanal
    nome = Column(String(200), nullable=True, index=True)
    funcao = Column(String(100), nullable=True)
    data_inicio = Column(Date, nullable=True)

    # material
    nr_nota = Column(String(100), nullable=True)
    descricao = Column(Text, nullable=True)
    data = Column(Date, nullable=True)
    valor = Column(Numeric(15, 2), nullable=True)
    local_compra = Column(String(200), nullable=True)
    solicitante = Column(String(200), nullable=True)
    forma_pagamento = Column(String(20), nullable=True)

    # mao_obra
    data_fim = Column(Date, nullable=True)
    conta_bancaria = Column(String(200), nullable=True)
    valor_total = Column(Numeric(15, 2), nullable=True)
    numero_parcelas = Column(Integer, nullable=True)
    data_pagamento = Column(Date, nullable=True)
    status_pagamento = Column(String(20), nullable=True)

    # pagamento_semanal
    data_fim_contrato = Column(Date, nullable=True)
    tipo_contratacao = Column(String(20), nullable=True)
    valor_pagar = Column(Numeric(15, 2), nullable=True)
    chave_pix = Column(String(200), nullable=True)
    nome_chave_pix = Column(String(200), nullable=True)
    qualificacao_tecnica = Column(String(200), nullable=True)
    valor_va = Column(Numeric(15, 2), nullable=True)
    valor_vt = Column(Numeric(15, 2), nullable=True)
    valor_va_vt = Column(Numeric(15, 2), nullable=True)
    total_receber = Column(Numeric(15, 2), nullable=True)
    semana = Column(Integer, nullable=True)
    ano = Column(Integer, nullable=True)
    status_semanal = Column(String(30), nullable=True)
    data_pagamento_efetuado = Column(DateTime, nullable=True)

    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    obra = relationship("Obra", lazy="select")
