"""JSON-RPC over HTTP with optional JWT authentication."""

import json
import logging
import time
from itertools import count
from typing import Any, Optional

import aiohttp
import jwt

from ..errors import TransportError
from .base import Transport, build_request, parse_response

logger = logging.getLogger(__name__)


class HTTPTransport(Transport):
    """Engine API transport over HTTP POST."""

    def __init__(self, url: str, jwt_secret: Optional[bytes] = None):
        self.url = url
        self.jwt_secret = jwt_secret
        self._session: Optional[aiohttp.ClientSession] = None
        self._request_ids = count(1)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def _create_jwt_token(self) -> str:
        """Create a JWT token for authentication."""
        payload = {"iat": int(time.time())}
        return jwt.encode(payload, self.jwt_secret, algorithm="HS256")

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.jwt_secret:
            headers["Authorization"] = f"Bearer {self._create_jwt_token()}"
        return headers

    async def call(self, method: str, *params: Any) -> Any:
        session = await self._ensure_session()
        payload = build_request(next(self._request_ids), method, params)

        try:
            body = json.dumps(payload)
        except (TypeError, ValueError) as e:
            raise TransportError(f"Cannot encode request params: {e}", method) from e

        try:
            async with session.post(self.url, data=body, headers=self._headers()) as response:
                text = await response.text()
                status = response.status
        except aiohttp.ClientError as e:
            logger.error(f"Engine API connection error: {e}")
            raise TransportError(f"HTTP request to {self.url} failed: {e}", method) from e

        try:
            data = json.loads(text)
        except ValueError as e:
            raise TransportError(
                f"HTTP {status} with non-JSON body: {text[:200]!r}", method
            ) from e

        # Some servers reply with a non-2xx status and a JSON-RPC error body.
        if status != 200 and not (isinstance(data, dict) and "error" in data):
            raise TransportError(f"HTTP {status}: {text[:200]}", method)
        return parse_response(method, data)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
