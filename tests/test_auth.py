"""
Testes de autenticação, cadastro de usuários e escopo de obras.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from app.config import get_settings
from app.utils.constants import ROLE_ADMIN, ROLE_PRE_APROVACAO, ROLE_USER
from tests.conftest import auth_header, criar_usuario


class TestLogin:
    def test_login_sucesso(self, client, operador):
        response = client.post(
            "/auth/login", data={"username": operador.email, "password": "segredo123"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == operador.email
        assert me.json()["ultimo_acesso"] is not None

    def test_senha_incorreta(self, client, operador):
        response = client.post(
            "/auth/login", data={"username": operador.email, "password": "errada"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "E-mail ou senha incorretos"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_cadastro_pendente_nao_entra(self, client, db):
        criar_usuario(db, "novo@obras.com", ROLE_PRE_APROVACAO)
        response = client.post(
            "/auth/login", data={"username": "novo@obras.com", "password": "segredo123"}
        )
        assert response.status_code == 403

    def test_refresh(self, client, operador_headers):
        response = client.post("/auth/refresh", headers=operador_headers)
        assert response.status_code == 200
        assert response.json()["access_token"]


class TestToken:
    """Token ausente, inválido ou expirado sempre resulta em 401."""

    def test_sem_token(self, client):
        response = client.get("/materiais")
        assert response.status_code == 401

    def test_token_invalido(self, client):
        response = client.get("/materiais", headers={"Authorization": "Bearer nao-e-um-jwt"})
        assert response.status_code == 401

    def test_token_expirado(self, client, operador):
        settings = get_settings()
        token = jwt.encode(
            {
                "sub": str(operador.id),
                "role": operador.role,
                "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
            },
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        response = client.get("/materiais", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_de_usuario_nao_aprovado(self, client, db):
        pendente = criar_usuario(db, "pendente@obras.com", ROLE_PRE_APROVACAO)
        response = client.get("/materiais", headers=auth_header(pendente))
        assert response.status_code == 401

    def test_perfil_sem_permissao(self, client, operador_headers):
        response = client.get("/usuarios", headers=operador_headers)
        assert response.status_code == 403


class TestCadastro:
    def test_cadastro_publico_fica_pendente(self, client, admin_headers):
        response = client.post(
            "/usuarios",
            json={"nome": "Ana", "email": "Ana@Obras.com", "senha": "segredo123"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["role"] == ROLE_PRE_APROVACAO
        assert body["aprovado"] is False
        assert body["email"] == "ana@obras.com"
        assert "senha" not in body and "senha_hash" not in body

        pendentes = client.get("/usuarios/pendentes", headers=admin_headers).json()
        assert [u["email"] for u in pendentes["records"]] == ["ana@obras.com"]

    def test_anonimo_nao_cria_admin(self, client):
        response = client.post(
            "/usuarios",
            json={"nome": "Bia", "email": "bia@obras.com", "senha": "segredo123", "role": ROLE_ADMIN},
        )
        assert response.status_code == 403

    def test_admin_cria_usuario_aprovado(self, client, admin_headers):
        response = client.post(
            "/usuarios",
            json={"nome": "Caio", "email": "caio@obras.com", "senha": "segredo123", "role": ROLE_USER},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["aprovado"] is True

    def test_email_duplicado(self, client, operador):
        response = client.post(
            "/usuarios",
            json={"nome": "Outro", "email": operador.email.upper(), "senha": "segredo123"},
        )
        assert response.status_code == 409

    def test_senha_curta(self, client):
        response = client.post(
            "/usuarios", json={"nome": "Dan", "email": "dan@obras.com", "senha": "123"}
        )
        assert response.status_code == 400
        assert response.json()["detail"][0]["campo"] == "senha"

    def test_aprovacao_pelo_admin(self, client, db, admin_headers):
        pendente = criar_usuario(db, "eva@obras.com", ROLE_PRE_APROVACAO)
        response = client.put(
            f"/usuarios/{pendente.id}", json={"role": ROLE_USER}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["aprovado"] is True

        login = client.post(
            "/auth/login", data={"username": "eva@obras.com", "password": "segredo123"}
        )
        assert login.status_code == 200

    def test_atualizar_e_remover_propria_conta(self, client, operador_headers):
        response = client.put("/usuarios/me", json={"nome": "Operador Chefe"}, headers=operador_headers)
        assert response.status_code == 200
        assert response.json()["nome"] == "Operador Chefe"

        assert client.delete("/usuarios/me", headers=operador_headers).status_code == 200
        assert client.get("/auth/me", headers=operador_headers).status_code == 401


class TestEscopoObras:
    def test_lista_vazia_sem_obras_permitidas(self, client, obra, operador_headers):
        response = client.get("/obras", headers=operador_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["records"] == []
        assert body["pagination"]["total"] == 0
        assert body["pagination"]["pages"] == 0

    def test_obra_fora_do_escopo(self, client, obra, operador_headers):
        response = client.get(f"/obras/{obra.id}", headers=operador_headers)
        assert response.status_code == 403

    def test_obra_liberada_pelo_admin(self, client, obra, operador, operador_headers, admin_headers):
        response = client.put(
            f"/usuarios/{operador.id}/obras-permitidas",
            json={"obra_ids": [obra.id]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert [o["id"] for o in response.json()["obras_permitidas"]] == [obra.id]

        lista = client.get("/obras", headers=operador_headers).json()
        assert [o["id"] for o in lista["records"]] == [obra.id]
        assert client.get(f"/obras/{obra.id}", headers=operador_headers).status_code == 200

    def test_obra_permitida_inexistente(self, client, operador, admin_headers):
        response = client.put(
            f"/usuarios/{operador.id}/obras-permitidas",
            json={"obra_ids": [999]},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_admin_ve_todas(self, client, obra, admin_headers):
        lista = client.get("/obras", headers=admin_headers).json()
        assert lista["pagination"]["total"] == 1
