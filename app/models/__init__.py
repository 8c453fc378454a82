"""SQLAlchemy models package for Controle de Obras.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` runs and before string
relationship targets (``"Obra"``, ``"ContratoPagamento"``...) are resolved.

Usage from other modules:
    from app.models import Obra, Material
"""

# Users and projects
from app.models.usuario import Usuario, usuario_obra_permitida  # noqa: F401
from app.models.obra import Obra  # noqa: F401

# Expense records
from app.models.material import Material  # noqa: F401
from app.models.mao_obra import MaoObra  # noqa: F401
from app.models.equipamento import Equipamento  # noqa: F401
from app.models.contrato import Contrato  # noqa: F401
from app.models.outro_gasto import OutroGasto  # noqa: F401
from app.models.parcela import (  # noqa: F401
    ContratoPagamento,
    EquipamentoPagamento,
    OutroGastoPagamento,
)

# Incoming payments and payment entries
from app.models.entrada import Entrada  # noqa: F401
from app.models.lancamento import Lancamento  # noqa: F401

# Aggregate financial container
from app.models.painel_financeiro import (  # noqa: F401
    ContratoPainel,
    EtapaCronograma,
    GastoPainel,
    PagamentoSemanal,
    PainelFinanceiro,
)

__all__ = [
    "Usuario",
    "usuario_obra_permitida",
    "Obra",
    "Material",
    "MaoObra",
    "Equipamento",
    "Contrato",
    "OutroGasto",
    "ContratoPagamento",
    "EquipamentoPagamento",
    "OutroGastoPagamento",
    "Entrada",
    "Lancamento",
    "PainelFinanceiro",
    "GastoPainel",
    "ContratoPainel",
    "EtapaCronograma",
    "PagamentoSemanal",
]
