"""
Router factory for the uniform CRUD endpoints.

``crud_router`` builds the five standard routes of one ``Recurso``:

    POST   /        create (201)
    GET    /        list with filters + ``page`` / ``limit``
    GET    /{id}    fetch one
    PUT    /{id}    partial update, re-validated as a whole
    DELETE /{id}    delete, ``{"message": ...}``

``parcelas_router`` adds the nested ``/{id}/pagamentos[/{pid}]`` routes of
the expense types that carry an installment list.

Every route needs a bearer token; writes additionally require one of
``ROLES_OPERACAO``.  Filters are read straight from the query string and
interpreted by the resource's ``CampoFiltro`` declarations.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.common import MessageResponse, Pagina, Paginacao
from app.schemas.despesas import ParcelaCreate, ParcelaResponse, ParcelaUpdate
from app.services import crud_service, subdocumentos
from app.services.auth_service import get_current_user, obras_permitidas_do_usuario, require_role
from app.services.crud_service import Recurso
from app.utils.constants import ROLES_OPERACAO

logger = logging.getLogger(__name__)

_RESERVADOS = frozenset({"page", "limit"})


def _sem_escopo() -> None:
    return None


def pagina(resultado: dict[str, Any], esquema: type) -> dict[str, Any]:
    """Convert the ORM rows of a ``listar`` result into response models."""
    return {
        "records": [esquema.model_validate(r) for r in resultado["records"]],
        "pagination": Paginacao(**resultado["pagination"]),
    }


def crud_router(
    recurso: Recurso,
    *,
    create_schema: type,
    update_schema: type,
    response_schema: type,
    tag: str,
    escopado: bool = False,
    router: APIRouter | None = None,
) -> APIRouter:
    """Build the CRUD router of *recurso*.

    Args:
        recurso: Entity declaration from the service layer.
        create_schema: Body model of ``POST``.
        update_schema: Body model of ``PUT`` (all fields optional).
        response_schema: Model returned for a single record.
        tag: OpenAPI tag.
        escopado: Narrow every route to the caller's allowed projects.
        router: Existing router to add the routes to (a new one by default).
    """
    if router is None:
        router = APIRouter(tags=[tag])
    nome = recurso.nome
    escopo_dep = obras_permitidas_do_usuario if escopado else _sem_escopo

    @router.post(
        "",
        response_model=response_schema,
        status_code=status.HTTP_201_CREATED,
        summary=f"Criar {nome.lower()}",
        responses={
            400: {"description": "Dados inválidos."},
            403: {"description": "Perfil sem permissão de escrita."},
        },
    )
    def criar(
        payload: create_schema,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
    ):
        registro = crud_service.criar(db, recurso, payload, current_user, obras_permitidas)
        logger.info("POST %s id=%s by '%s'", nome, registro.id, current_user.email)
        return response_schema.model_validate(registro)

    @router.get(
        "",
        response_model=Pagina[response_schema],
        summary=f"Listar {nome.lower()}",
        description=(
            "Lista paginada. Filtros: "
            + ", ".join(campo.param for campo in recurso.filtros)
            + ". Valores inválidos de ``page`` / ``limit`` usam os padrões."
        ),
    )
    def listar(
        request: Request,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(get_current_user)],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
        page: Annotated[str | None, Query()] = None,
        limit: Annotated[str | None, Query()] = None,
    ):
        params = {k: v for k, v in request.query_params.items() if k not in _RESERVADOS}
        logger.debug("GET %s list: params=%s page=%s limit=%s", nome, params, page, limit)
        resultado = crud_service.listar(db, recurso, params, page, limit, obras_permitidas)
        return pagina(resultado, response_schema)

    @router.get(
        "/{registro_id}",
        response_model=response_schema,
        summary=f"Obter {nome.lower()}",
        responses={404: {"description": f"{nome} não encontrado(a)."}},
    )
    def obter(
        registro_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(get_current_user)],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
    ):
        registro = crud_service.obter(db, recurso, registro_id, obras_permitidas)
        return response_schema.model_validate(registro)

    @router.put(
        "/{registro_id}",
        response_model=response_schema,
        summary=f"Atualizar {nome.lower()}",
        description="Atualização parcial; o registro resultante é validado por inteiro.",
    )
    def atualizar(
        registro_id: int,
        payload: update_schema,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
    ):
        registro = crud_service.atualizar(db, recurso, registro_id, payload, obras_permitidas)
        logger.info("PUT %s id=%d by '%s'", nome, registro_id, current_user.email)
        return response_schema.model_validate(registro)

    @router.delete(
        "/{registro_id}",
        response_model=MessageResponse,
        summary=f"Excluir {nome.lower()}",
    )
    def remover(
        registro_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
    ) -> MessageResponse:
        crud_service.remover(db, recurso, registro_id, obras_permitidas)
        logger.info("DELETE %s id=%d by '%s'", nome, registro_id, current_user.email)
        return MessageResponse(message=f"{nome} excluído(a) com sucesso")

    return router


def parcelas_router(
    recurso: Recurso,
    response_schema: type,
    tag: str,
    *,
    escopado: bool = False,
    router: APIRouter | None = None,
) -> APIRouter:
    """Nested installment routes under ``/{id}/pagamentos``.

    Writes return the whole parent so the client sees the recomputed
    ``valor_total_pagamentos`` / ``status_geral_pagamentos``.  With
    *escopado* the parent must belong to one of the caller's projects.
    """
    if router is None:
        router = APIRouter(tags=[tag])
    nome = recurso.nome
    escopo_dep = obras_permitidas_do_usuario if escopado else _sem_escopo

    def _pai(db: Session, registro_id: int, obras_permitidas: set[int] | None) -> Any:
        pai = subdocumentos.carregar_pai(db, recurso.modelo, registro_id, nome)
        crud_service.verificar_acesso(recurso, pai, obras_permitidas)
        return pai

    @router.post(
        "/{registro_id}/pagamentos",
        response_model=response_schema,
        status_code=status.HTTP_201_CREATED,
        summary=f"Adicionar pagamento a {nome.lower()}",
    )
    def adicionar_parcela(
        registro_id: int,
        payload: ParcelaCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
    ):
        pai = _pai(db, registro_id, obras_permitidas)
        pai = subdocumentos.append(db, pai, "pagamentos", payload)
        return response_schema.model_validate(pai)

    @router.get(
        "/{registro_id}/pagamentos/{parcela_id}",
        response_model=ParcelaResponse,
        summary=f"Obter pagamento de {nome.lower()}",
    )
    def obter_parcela(
        registro_id: int,
        parcela_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(get_current_user)],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
    ):
        pai = _pai(db, registro_id, obras_permitidas)
        parcela = subdocumentos.find_by_id(pai, "pagamentos", parcela_id)
        return ParcelaResponse.model_validate(parcela)

    @router.put(
        "/{registro_id}/pagamentos/{parcela_id}",
        response_model=response_schema,
        summary=f"Atualizar pagamento de {nome.lower()}",
    )
    def atualizar_parcela(
        registro_id: int,
        parcela_id: int,
        payload: ParcelaUpdate,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
    ):
        pai = _pai(db, registro_id, obras_permitidas)
        pai = subdocumentos.update_by_id(
            db, pai, "pagamentos", parcela_id, payload, esquema=ParcelaCreate
        )
        return response_schema.model_validate(pai)

    @router.delete(
        "/{registro_id}/pagamentos/{parcela_id}",
        response_model=response_schema,
        summary=f"Remover pagamento de {nome.lower()}",
    )
    def remover_parcela(
        registro_id: int,
        parcela_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: Annotated[Usuario, Depends(require_role(*ROLES_OPERACAO))],
        obras_permitidas: Annotated[set[int] | None, Depends(escopo_dep)],
    ):
        pai = _pai(db, registro_id, obras_permitidas)
        pai = subdocumentos.remove_by_id(db, pai, "pagamentos", parcela_id)
        return response_schema.model_validate(pai)

    return router
