"""
Testes da integração com Google Drive / Sheets usando ``httpx.MockTransport``.
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt

from app.exceptions import IntegrationFailure
from app.main import app
from app.services.google_workspace import (
    DRIVE_URL,
    SCOPES,
    SHEETS_URL,
    GoogleWorkspaceClient,
    ServiceAccountTokenProvider,
)

TOKEN_URI = "https://oauth2.googleapis.com/token"


def _cliente(handler) -> GoogleWorkspaceClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return GoogleWorkspaceClient(http, lambda: "token-teste")


@pytest.fixture()
def chave_privada() -> str:
    chave = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return chave.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture()
def google_falso():
    """Instala um cliente falso em ``app.state.google`` durante o teste."""
    chamadas: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        chamadas.append(request)
        url = str(request.url)
        if request.method == "GET" and url.startswith(f"{DRIVE_URL}/files"):
            return httpx.Response(200, json={"files": [{"id": "p1", "name": "Obras 2025"}]})
        if request.method == "POST" and url == SHEETS_URL:
            return httpx.Response(200, json={"spreadsheetId": "novo-id"})
        if request.method == "PUT":
            return httpx.Response(200, json={"updatedCells": 4, "updatedRange": "Dados!A1:B2"})
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(404, json={"error": "not found"})

    app.state.google = _cliente(handler)
    try:
        yield chamadas
    finally:
        app.state.google = None


class TestTokenProvider:
    def test_troca_e_cache_do_token(self, chave_privada):
        pedidos = []

        def handler(request):
            pedidos.append(request)
            return httpx.Response(200, json={"access_token": "abc", "expires_in": 3600})

        provider = ServiceAccountTokenProvider(
            httpx.Client(transport=httpx.MockTransport(handler)),
            "robo@projeto.iam.gserviceaccount.com",
            chave_privada,
            TOKEN_URI,
        )

        assert provider() == "abc"
        assert provider() == "abc"
        assert len(pedidos) == 1
        corpo = parse_qs(pedidos[0].content.decode())
        assert corpo["grant_type"] == ["urn:ietf:params:oauth:grant-type:jwt-bearer"]
        claims = jwt.get_unverified_claims(corpo["assertion"][0])
        assert claims["iss"] == "robo@projeto.iam.gserviceaccount.com"
        assert claims["aud"] == TOKEN_URI
        assert set(claims["scope"].split()) == set(SCOPES)

    def test_chave_invalida(self):
        provider = ServiceAccountTokenProvider(
            httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200))),
            "robo@projeto.iam.gserviceaccount.com",
            "não é uma chave",
            TOKEN_URI,
        )
        with pytest.raises(IntegrationFailure) as exc:
            provider()
        assert exc.value.message == "Credencial do Google inválida"

    def test_troca_recusada(self, chave_privada):
        provider = ServiceAccountTokenProvider(
            httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(400))),
            "robo@projeto.iam.gserviceaccount.com",
            chave_privada,
            TOKEN_URI,
        )
        with pytest.raises(IntegrationFailure):
            provider()


class TestGoogleWorkspaceClient:
    def test_listar_pastas(self):
        def handler(request):
            assert request.headers["Authorization"] == "Bearer token-teste"
            assert "application/vnd.google-apps.folder" in request.url.params["q"]
            return httpx.Response(200, json={"files": [{"id": "1", "name": "Obras"}]})

        assert _cliente(handler).listar_pastas() == [{"id": "1", "name": "Obras"}]

    def test_criar_planilha_com_cabecalho(self):
        def handler(request):
            corpo = json.loads(request.content)
            assert corpo["properties"]["title"] == "Fornecedores"
            valores = corpo["sheets"][0]["data"][0]["rowData"][0]["values"]
            assert [v["userEnteredValue"]["stringValue"] for v in valores] == [
                "Nome", "Email", "Telefone"
            ]
            return httpx.Response(200, json={"spreadsheetId": "sheet-1"})

        assert _cliente(handler).criar_planilha("Fornecedores") == "sheet-1"

    def test_copiar_planilha_em_pasta(self):
        def handler(request):
            assert request.url.path.endswith("/files/modelo/copy")
            assert json.loads(request.content) == {"name": "Obra X", "parents": ["pasta"]}
            return httpx.Response(200, json={"id": "copia-1"})

        assert _cliente(handler).copiar_planilha("modelo", "Obra X", "pasta") == "copia-1"

    def test_atualizar_valores(self):
        def handler(request):
            assert request.method == "PUT"
            assert request.url.params["valueInputOption"] == "USER_ENTERED"
            return httpx.Response(
                200, json={"updatedCells": 2, "updatedRange": "Dados!A2:B2", "spreadsheetId": "s"}
            )

        resultado = _cliente(handler).atualizar_valores("s", "Dados!A2:B2", [["a", "b"]])
        assert resultado == {"updatedCells": 2, "updatedRange": "Dados!A2:B2"}

    def test_adicionar_aba(self):
        def handler(request):
            assert request.url.path.endswith(":batchUpdate")
            return httpx.Response(
                200, json={"replies": [{"addSheet": {"properties": {"sheetId": 77}}}]}
            )

        assert _cliente(handler).adicionar_aba("s", "Junho") == 77

    def test_excluir_sem_corpo(self):
        assert _cliente(lambda r: httpx.Response(204)).excluir_arquivo("f1") is None

    def test_erro_http_vira_falha_de_integracao(self):
        cliente = _cliente(lambda r: httpx.Response(403, json={"error": "forbidden"}))
        with pytest.raises(IntegrationFailure) as exc:
            cliente.obter_valores("s", "A1:B2")
        assert exc.value.status_code == 502
        assert exc.value.detail == {"status": 403}

    def test_erro_de_rede(self):
        def handler(request):
            raise httpx.ConnectError("sem rede", request=request)

        with pytest.raises(IntegrationFailure):
            _cliente(handler).listar_pastas()


class TestGoogleEndpoints:
    def test_nao_configurado(self, client, operador_headers):
        response = client.get("/google/drive/folders", headers=operador_headers)
        assert response.status_code == 502
        assert response.json()["message"] == "Integração com o Google não configurada"

    def test_listar_pastas(self, client, operador_headers, google_falso):
        response = client.get("/google/drive/folders", headers=operador_headers)
        assert response.status_code == 200
        assert response.json() == [{"id": "p1", "name": "Obras 2025"}]

    def test_criar_planilha_exige_admin(self, client, operador_headers, admin_headers, google_falso):
        negado = client.post("/google/sheets", json={}, headers=operador_headers)
        assert negado.status_code == 403

        criado = client.post("/google/sheets", json={}, headers=admin_headers)
        assert criado.status_code == 201
        assert criado.json()["spreadsheet_id"] == "novo-id"

    def test_atualizar_valores(self, client, operador_headers, google_falso):
        response = client.put(
            "/google/sheets/values",
            json={"spreadsheet_id": "s1", "intervalo": "Dados!A1:B2", "valores": [[1, 2], [3, 4]]},
            headers=operador_headers,
        )
        assert response.status_code == 200
        assert response.json()["updated_cells"] == 4

    def test_excluir_arquivo(self, client, admin_headers, google_falso):
        response = client.delete("/google/drive/files/f9", headers=admin_headers)
        assert response.status_code == 200
        assert google_falso[-1].url.path.endswith("/files/f9")

    def test_falha_no_google(self, client, operador_headers, google_falso):
        response = client.post(
            "/google/sheets/values",
            json={"spreadsheet_id": "s1", "intervalo": "A1:B2"},
            headers=operador_headers,
        )
        assert response.status_code == 502
