"""
Entradas (incoming payments) and lancamentos (payment entries) routers.

Both are plain CRUD resources narrowed to the caller's projects; ``main.py``
mounts them under ``/entradas`` and ``/lancamentos``.  A lancamento body is
one of three variants selected by its ``tipo`` field (``material``,
``mao_obra``, ``pagamento_semanal``).
"""

from app.routers._crud import crud_router
from app.schemas.despesas import EntradaCreate, EntradaResponse, EntradaUpdate
from app.schemas.lancamento import LancamentoPayload, LancamentoResponse, LancamentoUpdate
from app.services.despesa_service import ENTRADAS
from app.services.lancamento_service import LANCAMENTOS

entradas_router = crud_router(
    ENTRADAS,
    create_schema=EntradaCreate,
    update_schema=EntradaUpdate,
    response_schema=EntradaResponse,
    tag="Entradas",
    escopado=True,
)

lancamentos_router = crud_router(
    LANCAMENTOS,
    create_schema=LancamentoPayload,
    update_schema=LancamentoUpdate,
    response_schema=LancamentoResponse,
    tag="Lançamentos",
    escopado=True,
)
