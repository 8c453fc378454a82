"""
Application-wide constants for the Controle de Obras system.

Defines domain enumerations and business rule thresholds used across
routers, schemas, services, and models.
"""

from typing import Final

# ---------------------------------------------------------------------------
# User roles
# ---------------------------------------------------------------------------

ROLE_PRE_APROVACAO: Final[str] = "PreAprovacao"
ROLE_USER: Final[str] = "User"
ROLE_ADMIN: Final[str] = "Admin"

ROLES: Final[list[str]] = [
    ROLE_PRE_APROVACAO,
    ROLE_USER,
    ROLE_ADMIN,
]

# Roles allowed to read and write financial records
ROLES_OPERACAO: Final[tuple[str, ...]] = (ROLE_USER, ROLE_ADMIN)

# ---------------------------------------------------------------------------
# Project (obra) states
# ---------------------------------------------------------------------------

STATUS_OBRA: Final[list[str]] = [
    "planejamento",
    "em_andamento",
    "pausada",
    "concluida",
    "cancelada",
]

# ---------------------------------------------------------------------------
# Payment methods and payment states
# ---------------------------------------------------------------------------

FORMAS_PAGAMENTO: Final[list[str]] = [
    "pix",
    "transferencia",
    "avista",
    "cartao",
    "boleto",
    "cheque",
    "outro",
]

FORMAS_OUTROS_GASTOS: Final[list[str]] = FORMAS_PAGAMENTO + ["dinheiro", "parcelado"]

# Payment methods that require a PIX key or boleto barcode
FORMAS_COM_CHAVE: Final[frozenset[str]] = frozenset({"pix", "boleto"})

STATUS_PAGAMENTO: Final[list[str]] = [
    "pendente",
    "efetuado",
    "em_processamento",
    "cancelado",
    "atrasado",
]

STATUS_RECEBIMENTO: Final[list[str]] = [
    "pendente",
    "recebido",
    "em_processamento",
    "cancelado",
    "atrasado",
]

TIPOS_PAGAMENTO_PARCELA: Final[list[str]] = [
    "avista",
    "parcelado",
    "mensal",
    "por_etapa",
    "pix",
    "transferencia",
    "cartao",
    "boleto",
    "cheque",
]

# ---------------------------------------------------------------------------
# Aggregated payment-list status (expenses with nested payments)
# ---------------------------------------------------------------------------

STATUS_GERAL_SEM_PAGAMENTOS: Final[str] = "sem_pagamentos"
STATUS_GERAL_TODOS_PAGOS: Final[str] = "todos_pagos"
STATUS_GERAL_COM_ATRASO: Final[str] = "com_atraso"
STATUS_GERAL_PENDENTE: Final[str] = "pendente"
STATUS_GERAL_EM_PROCESSAMENTO: Final[str] = "em_processamento"

# ---------------------------------------------------------------------------
# Labor and equipment
# ---------------------------------------------------------------------------

TIPOS_CONTRATACAO_MAO_OBRA: Final[list[str]] = [
    "clt",
    "pj",
    "diaria",
    "empreitada",
    "temporario",
]

STATUS_MAO_OBRA: Final[list[str]] = ["ativo", "inativo", "finalizado"]

TIPOS_CONTRATACAO_EQUIPAMENTO: Final[list[str]] = [
    "compra",
    "aluguel",
    "leasing",
    "comodato",
]

STATUS_CONTRATO: Final[list[str]] = ["ativo", "finalizado", "cancelado"]

# ---------------------------------------------------------------------------
# Painel financeiro (aggregate container)
# ---------------------------------------------------------------------------

STATUS_OBRA_PAINEL: Final[list[str]] = [
    "planejamento",
    "em andamento",
    "concluida",
    "pausada",
    "cancelada",
]

STATUS_CONTRATO_PAINEL: Final[list[str]] = ["ativo", "concluido", "cancelado"]

STATUS_ETAPA: Final[list[str]] = ["previsto", "em andamento", "concluida", "atrasada"]
ETAPA_CONCLUIDA: Final[str] = "concluida"

SEMANAL_A_PAGAR: Final[str] = "pagar"
SEMANAL_EFETUADO: Final[str] = "pagamento efetuado"
SEMANAL_CANCELADO: Final[str] = "cancelado"
STATUS_PAGAMENTO_SEMANAL: Final[list[str]] = [
    SEMANAL_A_PAGAR,
    SEMANAL_EFETUADO,
    SEMANAL_CANCELADO,
]

# Accepted reference years of weekly payments (painel and lancamentos)
ANO_SEMANAL_MINIMO: Final[int] = 2000
ANO_SEMANAL_MAXIMO: Final[int] = 2100

# ---------------------------------------------------------------------------
# Budget status (semaphore), inclusive upper bounds, in percent
# ---------------------------------------------------------------------------

ORCAMENTO_DENTRO: Final[str] = "dentro do orçamento"
ORCAMENTO_ATENCAO: Final[str] = "atenção"
ORCAMENTO_PROXIMO_LIMITE: Final[str] = "próximo do limite"
ORCAMENTO_ACIMA: Final[str] = "acima do orçamento"

LIMITE_DENTRO_ORCAMENTO: Final[int] = 70
LIMITE_ATENCAO: Final[int] = 90
LIMITE_PROXIMO: Final[int] = 100

# ---------------------------------------------------------------------------
# Lancamentos (polymorphic payment entries)
# ---------------------------------------------------------------------------

TIPOS_LANCAMENTO: Final[list[str]] = ["material", "mao_obra", "pagamento_semanal"]

STATUS_LANCAMENTO: Final[list[str]] = ["pendente_associacao", "associado", "cancelado"]

STATUS_PAGAMENTO_MAO_OBRA: Final[list[str]] = ["previsto", "pago", "em atraso", "cancelado"]

FORMAS_PAGAMENTO_LANCAMENTO: Final[list[str]] = [
    "pix",
    "transferencia",
    "avista",
    "cartao",
    "boleto",
    "outro",
]
