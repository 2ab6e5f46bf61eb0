"""
Thin async HTTP wrapper around the admin REST API.

Every call goes through ApiClient.request, which attaches the session's bearer
token and turns non-2xx responses into the errors in admin_console.errors.
"""
import logging
from typing import Any, Dict, Optional, Sequence, Tuple

import httpx

from .config import API_URL, REQUEST_TIMEOUT
from .errors import ApiError, NetworkError, Unauthorized, error_for_status
from .resources import (
    AuthAPI,
    BrandsAPI,
    CategoriesAPI,
    DashboardAPI,
    FeaturedAPI,
    OrdersAPI,
    ProductsAPI,
    SettingsAPI,
)
from .session import Session

logger = logging.getLogger(__name__)

# (field name, (filename, content, content type))
FileField = Tuple[str, Tuple[str, bytes, str]]


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None and v != ""}


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    def __init__(
        self,
        session: Session,
        base_url: str = API_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.base_url = f"{base_url.rstrip('/')}/api"
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

        self.auth = AuthAPI(self)
        self.dashboard = DashboardAPI(self)
        self.products = ProductsAPI(self)
        self.featured = FeaturedAPI(self)
        self.brands = BrandsAPI(self)
        self.categories = CategoriesAPI(self)
        self.orders = OrdersAPI(self)
        self.settings = SettingsAPI(self)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Sequence[FileField]] = None,
        authenticated: bool = True,
    ) -> Any:
        headers = self.session.auth_headers() if authenticated else {}
        kwargs: Dict[str, Any] = {"params": _clean_params(params), "headers": headers}
        if json is not None:
            kwargs["json"] = json
        if data is not None:
            kwargs["data"] = data
        if files:
            kwargs["files"] = list(files)

        logger.debug("%s %s%s", method, self.base_url, path)
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("%s %s timed out", method, path)
            raise NetworkError("Request timed out") from e
        except httpx.TransportError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise NetworkError(str(e) or None) from e

        payload = _parse_body(response)
        if response.is_success:
            return payload

        error = error_for_status(response.status_code, payload)
        if isinstance(error, Unauthorized):
            logger.info("Received 401 for %s %s, clearing stored token", method, path)
            self.session.clear()
        logger.warning("API error %s on %s %s: %s", response.status_code, method, path, error.message)
        raise error

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = ["ApiClient", "ApiError"]
