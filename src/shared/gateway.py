"""Backend gateway — the single chokepoint for commerce backend calls.

Every request goes through ``BackendGateway.request``:

- the caller's session credential (if any) is attached as a header,
- a fixed timeout bounds the call; timeouts and transport failures raise
  NetworkError,
- a 401 notifies the registered unauthorized-listeners (the SessionStore
  invalidates the session) before AuthError is raised,
- any other non-2xx becomes a ServerError carrying the backend's message.

Credentials are passed explicitly by each caller rather than read from
ambient state, so every authenticated call site is visible.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import requests
import structlog

from shared.config import DEFAULT_AUTH_HEADER, DEFAULT_TIMEOUT
from shared.errors import AuthError, NetworkError, ServerError
from shared.response import extract_error_detail

logger = structlog.get_logger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."


class BackendGateway:
    """HTTP client for the commerce backend."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        auth_header: str = DEFAULT_AUTH_HEADER,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.auth_header = auth_header
        self.http = http or requests.Session()
        self._unauthorized_listeners: list[Callable[[], None]] = []

    def add_unauthorized_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback fired on every 401, before the error propagates."""
        self._unauthorized_listeners.append(listener)

    # -------------------------------------------------------------------
    # Core request
    # -------------------------------------------------------------------
    def request(
        self,
        method: str,
        path: str,
        *,
        credential: str | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded body of a 2xx response."""
        headers = {"Accept": "application/json"}
        if credential:
            headers[self.auth_header] = credential

        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            logger.warning("Backend request timed out", method=method, path=path, timeout=self.timeout)
            raise NetworkError() from exc
        except requests.RequestException as exc:
            logger.warning("Backend request failed", method=method, path=path, error=str(exc))
            raise NetworkError() from exc

        if response.status_code == 401:
            logger.warning("Backend rejected credential", method=method, path=path)
            for listener in list(self._unauthorized_listeners):
                listener()
            raise AuthError(SESSION_EXPIRED_MESSAGE)

        if not 200 <= response.status_code < 300:
            detail = extract_error_detail(response)
            logger.warning(
                "Backend returned an error",
                method=method,
                path=path,
                status_code=response.status_code,
                detail=detail,
            )
            raise ServerError(detail, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    # -------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------
    def signup(self, payload: dict[str, Any]) -> Any:
        return self.request("POST", "/signup", json=payload)

    def login(self, payload: dict[str, Any]) -> Any:
        return self.request("POST", "/login", json=payload)

    # -------------------------------------------------------------------
    # Catalogue
    # -------------------------------------------------------------------
    def list_products(self, credential: str | None = None) -> Any:
        return self.request("GET", "/products", credential=credential)

    def search_products(self, query: str, credential: str | None = None) -> Any:
        return self.request("GET", "/products/search", credential=credential, params={"name": query})

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def get_cart(self, user_id: str, credential: str) -> Any:
        return self.request("GET", "/cart", credential=credential, params={"id": user_id})

    def add_to_cart(self, user_id: str, product_id: str, credential: str) -> Any:
        return self.request("GET", "/cart/add", credential=credential, params={"id": user_id, "pid": product_id})

    def remove_from_cart(self, user_id: str, product_id: str, credential: str) -> Any:
        return self.request("GET", "/cart/remove", credential=credential, params={"id": user_id, "pid": product_id})

    def checkout_cart(self, user_id: str, credential: str) -> Any:
        return self.request("GET", "/cart/checkout", credential=credential, params={"id": user_id})

    def instant_buy(self, user_id: str, product_id: str, credential: str) -> Any:
        return self.request(
            "GET",
            "/cart/instant-buy",
            credential=credential,
            params={"id": product_id, "userID": user_id},
        )

    # -------------------------------------------------------------------
    # Addresses
    # -------------------------------------------------------------------
    def add_address(self, user_id: str, address: dict[str, Any], credential: str) -> Any:
        return self.request("POST", "/address", credential=credential, params={"id": user_id}, json=address)

    def edit_home_address(self, user_id: str, address: dict[str, Any], credential: str) -> Any:
        return self.request("PUT", "/address/home", credential=credential, params={"id": user_id}, json=address)

    def edit_work_address(self, user_id: str, address: dict[str, Any], credential: str) -> Any:
        return self.request("PUT", "/address/work", credential=credential, params={"id": user_id}, json=address)

    def delete_addresses(self, user_id: str, credential: str) -> Any:
        return self.request("GET", "/address/delete", credential=credential, params={"id": user_id})
