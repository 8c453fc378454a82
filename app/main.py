import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app import models  # noqa: F401  (registers every table on Base.metadata)
from app.config import get_settings
from app.exceptions import ControleObrasError, erros_por_campo

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _seed_admin_user() -> None:
    """Create the default admin account when the usuario table is empty."""
    from app.database import SessionLocal
    from app.models.usuario import Usuario
    from app.utils.constants import ROLE_ADMIN
    from app.utils.security import hash_password

    db = SessionLocal()
    try:
        count = db.query(Usuario).count()
        logger.info("Usuarios in DB: %d", count)
        if count == 0:
            db.add(
                Usuario(
                    nome=settings.ADMIN_NOME,
                    email=settings.ADMIN_EMAIL.lower(),
                    senha_hash=hash_password(settings.ADMIN_PASSWORD),
                    role=ROLE_ADMIN,
                    aprovado=True,
                )
            )
            db.commit()
            logger.info("Default admin created: %s", settings.ADMIN_EMAIL)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    from app.database import Base, engine
    from app.services.google_workspace import build_client

    Base.metadata.create_all(bind=engine)
    _seed_admin_user()

    app.state.google, http = build_client(settings)
    try:
        yield
    finally:
        if http is not None:
            http.close()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(ControleObrasError)
async def controle_obras_error_handler(request: Request, exc: ControleObrasError):
    if exc.status_code >= 500:
        logger.error(
            "%s %s -> %s: %s",
            request.method, request.url.path, type(exc).__name__, exc.message,
        )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "detail": exc.detail},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    erros = erros_por_campo(exc.errors())
    logger.debug("%s %s rejected: %s", request.method, request.url.path, erros)
    return JSONResponse(status_code=400, content={"message": "Dados inválidos", "detail": erros})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"message": "Erro ao acessar o banco de dados", "detail": None},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Erro interno do servidor"})


@app.get("/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from app.routers import auth  # noqa: E402

app.include_router(auth.router, prefix="/auth")

from app.routers import usuarios  # noqa: E402

app.include_router(usuarios.router, prefix="/usuarios")

# Projects
from app.routers import obras  # noqa: E402

app.include_router(obras.router, prefix="/obras")

# Expenses
from app.routers import despesas  # noqa: E402

app.include_router(despesas.materiais_router, prefix="/materiais")
app.include_router(despesas.mao_obra_router, prefix="/mao-obra")
app.include_router(despesas.equipamentos_router, prefix="/equipamentos")
app.include_router(despesas.contratos_router, prefix="/contratos")
app.include_router(despesas.outros_gastos_router, prefix="/outros-gastos")

# Entradas and lancamentos
from app.routers import entradas  # noqa: E402

app.include_router(entradas.entradas_router, prefix="/entradas")
app.include_router(entradas.lancamentos_router, prefix="/lancamentos")

# Painel financeiro
from app.routers import pagamentos  # noqa: E402

app.include_router(pagamentos.router, prefix="/pagamentos")

# Google Drive / Sheets
from app.routers import google  # noqa: E402

app.include_router(google.router, prefix="/google")
