# ccmart/services/api_client.py
import asyncio
import logging
from typing import Any, Dict, Optional
import aiohttp
from ..config import Config
from ..exceptions import ApiError, TransportError

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x200?text=No+Image"


class ApiClient:
    """JSON client for the shop REST backend"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or Config.API_BASE_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or Config.REQUEST_TIMEOUT)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        # created lazily so it binds to the running loop
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self):
        """Close the underlying HTTP session"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def request(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None,
                      token: Optional[str] = None) -> Any:
        """Send a request and return the decoded JSON body"""
        url = f"{self.base_url}{endpoint}"
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        session = await self._get_session()
        try:
            async with session.request(method, url, json=data, headers=headers) as response:
                if not 200 <= response.status < 300:
                    logger.error(f"API request failed: {method} {endpoint} -> {response.status}")
                    raise ApiError(f"HTTP error! status: {response.status}", status=response.status)

                if response.status == 204 or response.content_length == 0:
                    return None
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ApiError(f"Invalid JSON from {endpoint}: {e}", status=response.status)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"API request failed: {method} {endpoint}: {e}")
            raise TransportError(f"Could not reach backend: {e}")

    async def get(self, endpoint: str, token: Optional[str] = None) -> Any:
        return await self.request("GET", endpoint, token=token)

    async def post(self, endpoint: str, data: Dict[str, Any], token: Optional[str] = None) -> Any:
        return await self.request("POST", endpoint, data=data, token=token)

    async def put(self, endpoint: str, data: Optional[Dict[str, Any]] = None,
                  token: Optional[str] = None) -> Any:
        return await self.request("PUT", endpoint, data=data, token=token)

    async def delete(self, endpoint: str, token: Optional[str] = None) -> Any:
        return await self.request("DELETE", endpoint, token=token)


def get_image_url(image_path: Optional[str]) -> str:
    """Full URL of a product image served by the backend"""
    if not image_path:
        return PLACEHOLDER_IMAGE
    if image_path.startswith(("http://", "https://")):
        return image_path
    return f"{Config.BACKEND_BASE_URL.rstrip('/')}{image_path}"
