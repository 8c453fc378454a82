"""PainelFinanceiro models: one project's consolidated financial picture.

A painel embeds a project summary (``obra_*`` columns) and owns four child
collections.  Every child row has its own autoincrement id, so removing or
reordering elements never changes another element's identifier.  Deleting a
painel deletes all of its children (``cascade="all, delete-orphan"``).

Derived figures (total spent, balance, budget status, schedule completion)
are never stored here; ``app.services.metricas`` recomputes them on read.
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class PainelFinanceiro(Base):
    """Aggregate financial container exposed under ``/pagamentos``.

    Attributes:
        id: Primary key.
        obra_nome: Project name.
        obra_orcamento: Project budget.
        obra_data_inicio: Project start date.
        obra_data_final_entrega: Planned delivery date.
        obra_descricao: Project description.
        obra_endereco: Site address.
        obra_responsavel: Person in charge.
        obra_status: One of ``constants.STATUS_OBRA_PAINEL``.
        gastos: Generic expenses.
        contratos: Service contracts.
        cronograma: Schedule milestones.
        pagamentos_semanais: Weekly payroll-style payments.
    """

    __tablename__ = "painel_financeiro"

    id = Column(Integer, primary_key=True, autoincrement=True)
    obra_nome = Column(String(200), nullable=False, index=True)
    obra_orcamento = Column(Numeric(15, 2), nullable=False)
    obra_data_inicio = Column(Date, nullable=False)
    obra_data_final_entrega = Column(Date, nullable=False)
    obra_descricao = Column(Text, default="", nullable=False)
    obra_endereco = Column(String(300), default="", nullable=False)
    obra_responsavel = Column(String(200), default="", nullable=False)
    obra_status = Column(String(20), default="planejamento", nullable=False, index=True)
    criado_por_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    gastos = relationship(
        "GastoPainel", order_by="GastoPainel.id", cascade="all, delete-orphan", lazy="select"
    )
    contratos = relationship(
        "ContratoPainel", order_by="ContratoPainel.id", cascade="all, delete-orphan", lazy="select"
    )
    cronograma = relationship(
        "EtapaCronograma", order_by="EtapaCronograma.id", cascade="all, delete-orphan", lazy="select"
    )
    pagamentos_semanais = relationship(
        "PagamentoSemanal",
        order_by="PagamentoSemanal.id",
        cascade="all, delete-orphan",
        lazy="select",
    )


class GastoPainel(Base):
    __tablename__ = "painel_gasto"

    id = Column(Integer, primary_key=True, autoincrement=True)
    painel_id = Column(
        Integer, ForeignKey("painel_financeiro.id", ondelete="CASCADE"), nullable=False, index=True
    )
    descricao = Column(String(500), nullable=False)
    categoria = Column(String(100), nullable=False)
    valor = Column(Numeric(15, 2), nullable=False)
    data = Column(Date, nullable=False)
    fornecedor = Column(String(200), default="", nullable=False)
    observacoes = Column(Text, default="", nullable=False)


class ContratoPainel(Base):
    __tablename__ = "painel_contrato"

    id = Column(Integer, primary_key=True, autoincrement=True)
    painel_id = Column(
        Integer, ForeignKey("painel_financeiro.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nome_contratado = Column(String(200), nullable=False)
    servico = Column(String(300), nullable=False)
    valor_total = Column(Numeric(15, 2), nullable=False)
    data_inicio = Column(Date, nullable=True)
    data_fim = Column(Date, nullable=True)
    status = Column(String(20), default="ativo", nullable=False)
    observacoes = Column(Text, default="", nullable=False)


class EtapaCronograma(Base):
    __tablename__ = "painel_etapa"

    id = Column(Integer, primary_key=True, autoincrement=True)
    painel_id = Column(
        Integer, ForeignKey("painel_financeiro.id", ondelete="CASCADE"), nullable=False, index=True
    )
    etapa = Column(String(200), nullable=False)
    descricao = Column(Text, default="", nullable=False)
    data_inicio = Column(Date, nullable=True)
    data_fim = Column(Date, nullable=True)
    status = Column(String(20), default="previsto", nullable=False)
    responsavel = Column(String(200), default="", nullable=False)
    percentual_concluido = Column(Integer, default=0, nullable=False)


class PagamentoSemanal(Base):
    """Weekly payment.

    ``valor_va_vt`` and ``total_receber`` are written only by the service
    layer, recomputed from ``valor_pagar``, ``valor_va`` and ``valor_vt`` on
    every write.
    """

    __tablename__ = "painel_pagamento_semanal"

    id = Column(Integer, primary_key=True, autoincrement=True)
    painel_id = Column(
        Integer, ForeignKey("painel_financeiro.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nome = Column(String(200), nullable=False)
    funcao = Column(String(100), default="", nullable=False)
    semana = Column(Integer, nullable=False, index=True)
    ano = Column(Integer, nullable=False, index=True)
    valor_pagar = Column(Numeric(15, 2), nullable=False)
    valor_va = Column(Numeric(15, 2), default=0, nullable=False)
    valor_vt = Column(Numeric(15, 2), default=0, nullable=False)
    valor_va_vt = Column(Numeric(15, 2), default=0, nullable=False)
    total_receber = Column(Numeric(15, 2), default=0, nullable=False)
    data_vencimento = Column(Date, nullable=True)
    status = Column(String(30), default="pagar", nullable=False, index=True)
    data_pagamento_efetuado = Column(DateTime, nullable=True)
    observacoes = Column(Text, default="", nullable=False)

    # Relationships
    painel = relationship("PainelFinanceiro", viewonly=True, lazy="select")
