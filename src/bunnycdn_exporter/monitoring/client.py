"""Cliente HTTP para a API do BunnyCDN.

Executa requisições GET autenticadas (cabeçalho ``AccessKey``) contra a URI
base da API e devolve a resposta aberta em modo streaming. O chamador é
responsável por consumir e fechar a resposta (``requests.Response`` é um
context manager).

Erros possíveis:
- ``TransportError``: falha antes de existir resposta (DNS, conexão, timeout)
- ``FetchError``: resposta com status fora da faixa 2xx
- ``ParseError``: corpo que não corresponde ao formato esperado (usado em ``api``)
"""

import logging

import requests  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class BunnyAPIError(Exception):
    """Erro base para qualquer falha ao falar com a API do BunnyCDN."""


class TransportError(BunnyAPIError):
    """Falha de transporte (DNS, conexão recusada, timeout) antes de haver resposta."""


class FetchError(BunnyAPIError):
    """Resposta HTTP fora da faixa 2xx."""

    def __init__(self, status: int, url: str):
        self.status = status
        self.url = url
        super().__init__(f"HTTP status {status} ({url})")


class ParseError(BunnyAPIError):
    """Corpo da resposta não decodifica no formato esperado."""


class FetchClient:
    """Executa GETs autenticados contra a API do BunnyCDN.

    Todas as chamadas usam o mesmo timeout, a mesma verificação TLS e os
    cabeçalhos ``AccessKey`` e ``Accept: application/json``.
    """

    def __init__(
        self,
        base_uri: str,
        api_key: str,
        ssl_verify: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_uri = base_uri.rstrip("/")
        self.ssl_verify = ssl_verify
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"AccessKey": api_key, "Accept": "application/json"}

    def url_for(self, path: str) -> str:
        """Monta a URL absoluta para ``path`` (que já inclui a query string)."""
        if not path.startswith("/"):
            path = "/" + path
        return self.base_uri + path

    def fetch(self, path: str) -> requests.Response:
        """Executa um GET e devolve a resposta aberta (stream) em caso de sucesso.

        Levanta ``TransportError`` ou ``FetchError``; nunca devolve resposta não-2xx.
        """
        url = self.url_for(path)
        logger.debug("GET %s", url)
        try:
            resp = self._session.get(
                url,
                headers=self._headers,
                timeout=self.timeout,
                verify=self.ssl_verify,
                stream=True,
            )
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} falhou: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            # URL efetiva da requisição (pode diferir após redirects)
            req_url = getattr(resp.request, "url", None) or url
            resp.close()
            raise FetchError(resp.status_code, req_url)
        return resp

    def close(self) -> None:
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
