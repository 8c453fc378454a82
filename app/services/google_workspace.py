"""
Google Drive v3 / Sheets v4 client.

Thin synchronous wrapper over the REST APIs using ``httpx``.  Authentication
uses a service account through ``google-auth``: the credentials sign the JWT
grant and keep the access token until it expires.  Token requests go
through the same ``httpx.Client`` as the API calls (``HttpxAuthRequest``).

The client is built once in ``app.main``'s lifespan, stored on
``app.state.google`` and handed to routers by ``get_google_client``.  Any
transport error or non-2xx answer is raised as ``IntegrationFailure``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

import google.auth.transport
import httpx
from fastapi import Request
from google.auth import exceptions as google_exceptions
from google.oauth2 import service_account

from app.config import Settings
from app.exceptions import IntegrationFailure

logger = logging.getLogger(__name__)

DRIVE_URL = "https://www.googleapis.com/drive/v3"
SHEETS_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SCOPES = (
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/spreadsheets",
)
FOLDER_MIME = "application/vnd.google-apps.folder"

# Header row of spreadsheets created from scratch
MODELO_CABECALHO = ("Nome", "Email", "Telefone")


class _HttpxAuthResponse(google.auth.transport.Response):
    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    @property
    def data(self) -> bytes:
        return self._response.content


class HttpxAuthRequest(google.auth.transport.Request):
    """``google-auth`` transport backed by an ``httpx.Client``."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    def __call__(
        self,
        url: str,
        method: str = "GET",
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> _HttpxAuthResponse:
        opcoes = {"timeout": timeout} if timeout is not None else {}
        try:
            resp = self._http.request(method, url, content=body, headers=headers, **opcoes)
        except httpx.HTTPError as exc:
            raise google_exceptions.TransportError(exc) from exc
        return _HttpxAuthResponse(resp)


class ServiceAccountTokenProvider:
    """Issue and cache OAuth2 access tokens for a service account.

    The credentials are loaded on first use so a malformed key surfaces as
    ``IntegrationFailure`` on the request that needs it.
    """

    def __init__(
        self,
        http: httpx.Client,
        client_email: str,
        private_key: str,
        token_uri: str,
    ) -> None:
        self._request = HttpxAuthRequest(http)
        self._info = {
            "type": "service_account",
            "client_email": client_email,
            # Keys coming from env vars usually carry literal "\n"
            "private_key": private_key.replace("\\n", "\n"),
            "token_uri": token_uri,
        }
        self._credenciais: service_account.Credentials | None = None

    def _carregar(self) -> service_account.Credentials:
        if self._credenciais is None:
            try:
                self._credenciais = service_account.Credentials.from_service_account_info(
                    self._info, scopes=SCOPES
                )
            except (ValueError, google_exceptions.GoogleAuthError) as exc:
                logger.error("Google service-account key could not be loaded: %s", exc)
                raise IntegrationFailure("Credencial do Google inválida") from exc
        return self._credenciais

    def __call__(self) -> str:
        credenciais = self._carregar()
        if not credenciais.valid:
            try:
                credenciais.refresh(self._request)
            except google_exceptions.GoogleAuthError as exc:
                logger.error("Google token exchange failed: %s", exc)
                raise IntegrationFailure("Falha ao autenticar no Google", detail=str(exc)) from exc
            logger.debug("Google access token renewed for %s", self._info["client_email"])
        return credenciais.token


class GoogleWorkspaceClient:
    """Drive / Sheets operations used by the ``/google`` endpoints.

    Args:
        http: Shared ``httpx.Client`` (timeouts are configured on it).
        token_provider: Callable returning a valid bearer token.
    """

    def __init__(self, http: httpx.Client, token_provider: Callable[[], str]) -> None:
        self._http = http
        self._token_provider = token_provider

    def _request(self, method: str, url: str, operacao: str, **kwargs: Any) -> Any:
        headers = {"Authorization": f"Bearer {self._token_provider()}"}
        try:
            resp = self._http.request(method, url, headers=headers, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Google %s failed: status=%d body=%s",
                operacao, exc.response.status_code, exc.response.text[:500],
            )
            raise IntegrationFailure(
                f"Erro ao {operacao}",
                detail={"status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Google %s failed: %s", operacao, exc)
            raise IntegrationFailure(f"Erro ao {operacao}", detail=str(exc)) from exc

        logger.debug("Google %s ok (%s %s)", operacao, method, url)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # -- Drive ---------------------------------------------------------------

    def _listar(self, consulta: str, operacao: str) -> list[dict[str, Any]]:
        dados = self._request(
            "GET",
            f"{DRIVE_URL}/files",
            operacao,
            params={"q": consulta, "fields": "files(id, name)"},
        )
        return dados.get("files", [])

    def listar_pastas(self) -> list[dict[str, Any]]:
        return self._listar(f"mimeType='{FOLDER_MIME}' and trashed=false", "listar pastas")

    def listar_arquivos(self, folder_id: str) -> list[dict[str, Any]]:
        folder_id = folder_id.replace("'", "\\'")
        return self._listar(f"'{folder_id}' in parents and trashed=false", "listar arquivos")

    def copiar_planilha(
        self, template_id: str, titulo: str, folder_id: str | None = None
    ) -> str:
        """Copy a template spreadsheet; returns the new file id."""
        corpo: dict[str, Any] = {"name": titulo}
        if folder_id:
            corpo["parents"] = [folder_id]
        dados = self._request(
            "POST", f"{DRIVE_URL}/files/{template_id}/copy", "copiar planilha", json=corpo
        )
        logger.info("Spreadsheet %s copied to %s ('%s')", template_id, dados["id"], titulo)
        return dados["id"]

    def excluir_arquivo(self, file_id: str) -> None:
        self._request("DELETE", f"{DRIVE_URL}/files/{file_id}", "excluir arquivo")
        logger.info("Drive file %s deleted", file_id)

    # -- Sheets --------------------------------------------------------------

    def criar_planilha(self, titulo: str) -> str:
        """Create a spreadsheet with a "Dados" sheet and the default header row."""
        corpo = {
            "properties": {"title": titulo},
            "sheets": [
                {
                    "properties": {"title": "Dados"},
                    "data": [
                        {
                            "startRow": 0,
                            "startColumn": 0,
                            "rowData": [
                                {
                                    "values": [
                                        {"userEnteredValue": {"stringValue": nome}}
                                        for nome in MODELO_CABECALHO
                                    ]
                                }
                            ],
                        }
                    ],
                }
            ],
        }
        dados = self._request("POST", SHEETS_URL, "criar planilha", json=corpo)
        logger.info("Spreadsheet created: %s ('%s')", dados["spreadsheetId"], titulo)
        return dados["spreadsheetId"]

    def obter_valores(self, spreadsheet_id: str, intervalo: str) -> dict[str, Any]:
        return self._request(
            "GET",
            f"{SHEETS_URL}/{spreadsheet_id}/values/{intervalo}",
            "buscar dados da planilha",
        )

    def obter_planilha(self, spreadsheet_id: str, incluir_dados: bool = False) -> dict[str, Any]:
        return self._request(
            "GET",
            f"{SHEETS_URL}/{spreadsheet_id}",
            "buscar planilha",
            params={"includeGridData": "true" if incluir_dados else "false"},
        )

    def atualizar_valores(
        self, spreadsheet_id: str, intervalo: str, valores: list[list[Any]]
    ) -> dict[str, Any]:
        dados = self._request(
            "PUT",
            f"{SHEETS_URL}/{spreadsheet_id}/values/{intervalo}",
            "atualizar dados da planilha",
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": valores},
        )
        return {
            "updatedCells": dados.get("updatedCells"),
            "updatedRange": dados.get("updatedRange"),
        }

    def adicionar_aba(self, spreadsheet_id: str, titulo: str) -> int:
        """Add a sheet (tab); returns its ``sheetId``."""
        dados = self._request(
            "POST",
            f"{SHEETS_URL}/{spreadsheet_id}:batchUpdate",
            "adicionar aba",
            json={"requests": [{"addSheet": {"properties": {"title": titulo}}}]},
        )
        return dados["replies"][0]["addSheet"]["properties"]["sheetId"]


def build_client(settings: Settings) -> tuple[GoogleWorkspaceClient | None, httpx.Client | None]:
    """Build the client from settings; ``(None, None)`` when not configured."""
    if not settings.google_configurado:
        logger.info("Google service account not configured; /google endpoints disabled")
        return None, None

    http = httpx.Client(timeout=settings.GOOGLE_TIMEOUT_SECONDS)
    tokens = ServiceAccountTokenProvider(
        http,
        settings.GOOGLE_CLIENT_EMAIL,
        settings.GOOGLE_PRIVATE_KEY,
        settings.GOOGLE_TOKEN_URI,
    )
    return GoogleWorkspaceClient(http, tokens), http


def get_google_client(request: Request) -> GoogleWorkspaceClient:
    """FastAPI dependency returning the client kept on ``app.state``."""
    client = getattr(request.app.state, "google", None)
    if client is None:
        raise IntegrationFailure("Integração com o Google não configurada")
    return client
