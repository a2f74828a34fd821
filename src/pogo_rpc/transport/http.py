"""
HTTP transport for the RPC endpoint.
"""

import logging
from typing import Optional

import httpx

from pogo_rpc.config import RpcConfig
from pogo_rpc.errors import TransportError

logger = logging.getLogger(__name__)


class HttpTransport:
    def __init__(self, config: Optional[RpcConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        config = config or RpcConfig()
        # httpx negotiates gzip/deflate on its own.
        self._client = httpx.AsyncClient(
            headers={"User-Agent": config.user_agent, "Content-Type": "application/binary"},
            timeout=config.timeout,
            transport=transport,
        )

    async def post(self, url: str, body: bytes) -> bytes:
        try:
            resp = await self._client.post(url, content=body)
        except httpx.HTTPError as e:
            logger.error(f"RPC POST to {url} failed: {e}")
            raise TransportError(f"RPC request failed: {e}") from e
        if not resp.is_success:
            logger.debug(resp.text[:200])
            logger.error(f"RPC server answered HTTP {resp.status_code}")
            raise TransportError(
                f"Received a non-success HTTP status code from the RPC server: {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.content

    async def close(self) -> None:
        await self._client.aclose()
