"""
Fixtures compartilhadas: banco SQLite em memória, cliente HTTP e usuários.
"""

import datetime
import os

# Antes de importar a aplicação, para que nenhum arquivo .db seja usado
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models.obra import Obra
from app.models.usuario import Usuario
from app.utils.constants import ROLE_ADMIN, ROLE_PRE_APROVACAO, ROLE_USER
from app.utils.security import create_access_token, hash_password

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    """Sessão de teste com as tabelas criadas e removidas a cada teste."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    """Cliente HTTP que usa a mesma sessão do teste."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def criar_usuario(
    db,
    email: str,
    role: str = ROLE_USER,
    aprovado: bool | None = None,
    senha: str = "segredo123",
) -> Usuario:
    usuario = Usuario(
        nome=email.split("@")[0].title(),
        email=email,
        senha_hash=hash_password(senha),
        role=role,
        aprovado=role != ROLE_PRE_APROVACAO if aprovado is None else aprovado,
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


def auth_header(usuario: Usuario) -> dict[str, str]:
    token = create_access_token({"sub": str(usuario.id), "role": usuario.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin(db) -> Usuario:
    return criar_usuario(db, "admin@obras.com", ROLE_ADMIN)


@pytest.fixture()
def operador(db) -> Usuario:
    return criar_usuario(db, "operador@obras.com", ROLE_USER)


@pytest.fixture()
def admin_headers(admin) -> dict[str, str]:
    return auth_header(admin)


@pytest.fixture()
def operador_headers(operador) -> dict[str, str]:
    return auth_header(operador)


@pytest.fixture()
def obra(db) -> Obra:
    obra = Obra(
        nome="Residencial Aurora",
        endereco="Rua A, 10",
        cliente="Construtora Sol",
        valor_contrato=500000,
        data_inicio=datetime.date(2025, 1, 10),
        data_previsao_termino=datetime.date(2025, 12, 20),
        status="em_andamento",
    )
    db.add(obra)
    db.commit()
    db.refresh(obra)
    return obra


@pytest.fixture()
def obra_liberada(db, obra, operador) -> Obra:
    """A obra do fixture ``obra`` incluída nas obras permitidas do operador."""
    operador.obras_permitidas.append(obra)
    db.commit()
    return obra
