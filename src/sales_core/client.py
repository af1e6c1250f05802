"""HTTP client for the sales API.

The client is the engine's data source: it lists items, sellers and sales,
fetches the server-side summary and forwards create/delete mutations.
Authentication is an explicit AuthSession passed to the client, never
process-wide state.

Environment (optional, via ApiSettings.from_env):
  SALES_API_BASE: API root URL
  SALES_API_TIMEOUT=60   # seconds
  SALES_API_RETRIES=3
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from sales_core.config import ApiSettings
from sales_core.exceptions import ApiError, AuthenticationError, DataQualityError
from sales_core.models import AuthSession, AuthUser, Item, Sale, SaleFilter, Seller, Summary

logger = logging.getLogger(__name__)


def make_session(timeout: float, retries: int) -> requests.Session:
    """Create a requests Session with retry logic and default timeout.

    Configures the session with:
    - JSON content headers
    - Retry adapter for HTTP/HTTPS with exponential backoff
    - Default timeout for all requests
    - Retries on 429, 500, 502, 503, 504 status codes (GET and DELETE only)

    Args:
        timeout: Default timeout in seconds for all requests.
        retries: Number of retry attempts.

    Returns:
        Configured requests.Session object.
    """
    s = requests.Session()
    s.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.8,  # 0.8, 1.6, 3.2, ...
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "DELETE", "HEAD", "OPTIONS"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    # Default timeouts via a wrapper
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


def _error_message(response: requests.Response) -> str:
    """Extract the API's ``error`` field, falling back to the HTTP status."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}"


class SalesApiClient:
    """Read and mutation operations against the sales API.

    Args:
        settings: Connection settings. Defaults to ApiSettings.from_env().
        auth: Authentication context. Defaults to an anonymous session.
        session: Preconfigured requests Session (mainly for tests).

    Examples:
        >>> client = SalesApiClient(ApiSettings())
        >>> auth = client.login("admin@example.com", "secret")
        >>> client = client.with_auth(auth)
        >>> sales = client.list_sales(SaleFilter(sort="desc"))
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        auth: Optional[AuthSession] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings or ApiSettings.from_env()
        self.auth = auth or AuthSession()
        self.session = session or make_session(self.settings.timeout, self.settings.retries)

    def with_auth(self, auth: AuthSession) -> SalesApiClient:
        """Return a client sharing this HTTP session but using ``auth``."""
        return SalesApiClient(self.settings, auth=auth, session=self.session)

    def _url(self, endpoint: str) -> str:
        return f"{self.settings.base_url}{endpoint}"

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            AuthenticationError: On 401/403.
            ApiError: On any other non-2xx status or connection failure.
        """
        headers = {**self.auth.headers(), **kwargs.pop("headers", {})}
        url = self._url(endpoint)
        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError("Erro de conexão com o servidor", status=0) from e

        if not response.ok:
            message = _error_message(response)
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            if response.status_code in (401, 403):
                raise AuthenticationError(message, status=response.status_code)
            raise ApiError(message, status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {endpoint}", status=response.status_code) from e

    # --- Authentication ---

    def login(self, email: str, password: str) -> AuthSession:
        """Authenticate and return the resulting AuthSession.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        try:
            data = self._request("POST", "/api/auth/login", json={"email": email, "senha": password})
        except AuthenticationError:
            raise
        except ApiError as e:
            if e.status in (400, 404):
                raise AuthenticationError(str(e) or "Erro ao fazer login", status=e.status) from e
            raise

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError("Login response did not include a token", status=0)

        user_data = data.get("user") or {}
        user = AuthUser.from_api(user_data, email=email) if user_data else None
        logger.info("Logged in as %s", user.email if user else email)
        return AuthSession(token=token, user=user)

    # --- Reads ---

    def _list(self, endpoint: str, params: Optional[dict[str, str]] = None) -> list[dict]:
        data = self._request("GET", endpoint, params=params or None)
        if not isinstance(data, list):
            raise DataQualityError(f"Expected a list from {endpoint}, got {type(data).__name__}")
        return data

    def list_items(self) -> list[Item]:
        return [Item.from_api(row) for row in self._list("/api/itens")]

    def list_sellers(self) -> list[Seller]:
        return [Seller.from_api(row) for row in self._list("/api/vendedores")]

    def list_sales(self, sale_filter: Optional[SaleFilter] = None) -> list[Sale]:
        """List sales matching the filter, in the order the server returns them."""
        params = sale_filter.to_query_params() if sale_filter else None
        return [Sale.from_api(row) for row in self._list("/api/vendas", params)]

    def get_summary(self, sale_filter: Optional[SaleFilter] = None) -> Summary:
        """Server-computed totals for the filter (sort is not sent)."""
        params = sale_filter.to_query_params(include_sort=False) if sale_filter else None
        data = self._request("GET", "/api/vendas/summary", params=params or None)
        if not isinstance(data, dict):
            raise DataQualityError("Expected an object from /api/vendas/summary")
        return Summary.from_api(data)

    # --- Mutations ---

    def create_item(self, name: str, price: float, cost: float) -> Item:
        data = self._request(
            "POST", "/api/itens", json={"nome": name, "preco": price, "custo": cost}
        )
        return Item.from_api(data)

    def delete_item(self, item_id: int) -> None:
        self._request("DELETE", f"/api/itens/{item_id}")

    def create_seller(self, name: str) -> Seller:
        return Seller.from_api(self._request("POST", "/api/vendedores", json={"nome": name}))

    def delete_seller(self, seller_id: int) -> None:
        self._request("DELETE", f"/api/vendedores/{seller_id}")

    def create_sale(
        self,
        seller_id: int,
        item_id: int,
        buyer_name: str,
        quantity: int,
        amount_paid: float,
        timestamp: Optional[str] = None,
    ) -> Sale:
        """Record a sale. The server stamps the current time when none is given."""
        payload: dict[str, Any] = {
            "vendedorId": seller_id,
            "itemId": item_id,
            "compradorNome": buyer_name,
            "quantidade": quantity,
            "valorPago": amount_paid,
        }
        if timestamp:
            payload["horario"] = timestamp
        data = self._request("POST", "/api/vendas", json=payload)
        return Sale.from_api(data["venda"] if "venda" in data else data)

    def delete_sale(self, sale_id: int) -> None:
        self._request("DELETE", f"/api/vendas/{sale_id}")
