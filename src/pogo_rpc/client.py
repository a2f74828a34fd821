"""
RpcClient / AsyncRpcClient — the RPC facade handed to the rest of the application.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

import httpx
from pydantic import ValidationError

from pogo_rpc.cache import ASSET_DIGEST_KEY, ITEM_TEMPLATES_KEY
from pogo_rpc.config import RpcConfig
from pogo_rpc.dispatcher import RpcDispatcher
from pogo_rpc.errors import ConfigurationError, PogoRpcError, ProtocolError
from pogo_rpc.models.envelope import Request, RequestType, WireModel
from pogo_rpc.models.messages import (
    CheckChallengeMessage,
    DownloadRemoteConfigVersionMessage,
    GetAssetDigestMessage,
    GetMapObjectsMessage,
)
from pogo_rpc.models.responses import (
    DownloadItemTemplatesResponse,
    DownloadRemoteConfigVersionResponse,
    GetAssetDigestResponse,
    GetMapObjectsResponse,
    GetPlayerResponse,
    MapCell,
    MapObjectsStatus,
    PlayerData,
)
from pogo_rpc.router import ResponseRouter
from pogo_rpc.session import Coordinate, Session
from pogo_rpc.signing import Signer
from pogo_rpc.transport.envelope import EnvelopeBuilder, RequestIdGenerator
from pogo_rpc.transport.http import HttpTransport

logger = logging.getLogger(__name__)

CellIdProvider = Callable[[float, float], Sequence[int]]

M = TypeVar("M", bound=WireModel)


def parse_payload(model: type[M], payload: bytes) -> M:
    try:
        return model.from_bytes(payload)
    except ValidationError as e:
        logger.error(f"Received a malformed {model.__name__}: {e}")
        raise ProtocolError(f"Malformed {model.__name__} payload: {e}") from e


def parse_cached(model: type[M], data: bytes) -> Optional[M]:
    try:
        return model.from_bytes(data)
    except ValidationError as e:
        logger.warning(f"Ignoring unreadable cached {model.__name__}: {e}")
        return None


class AsyncRpcClient:
    """Async RPC client (primary)."""

    def __init__(
        self,
        session: Session,
        signer: Signer,
        *,
        config: Optional[RpcConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cell_ids: Optional[CellIdProvider] = None,
        request_ids: Optional[RequestIdGenerator] = None,
    ):
        self._session = session
        self._config = config or RpcConfig()
        self._cell_ids = cell_ids

        self.http = HttpTransport(self._config, transport=transport)
        self.builder = EnvelopeBuilder(session, signer, request_ids)
        self.router = ResponseRouter(session)
        self.dispatcher = RpcDispatcher(session, self.http, self.builder, self.router, self._config)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def api_url(self) -> str:
        return self.dispatcher.api_url

    @property
    def last_rpc_request(self) -> Optional[datetime]:
        return self.dispatcher.last_rpc_request

    @property
    def last_map_objects_request(self) -> Optional[datetime]:
        return self.dispatcher.last_map_objects_request

    @property
    def last_map_objects_coordinate(self) -> Optional[Coordinate]:
        return self.dispatcher.last_map_objects_coordinate

    async def call(self, request: Union[Request, RequestType]) -> bytes:
        """Send one request together with the default requests; return its response payload."""
        if isinstance(request, RequestType):
            request = Request(request_type=request)
        envelope = await self.builder.build([request], add_default_requests=True)
        return await self.dispatcher.dispatch(envelope)

    async def call_batch(self, requests: Sequence[Request]) -> bytes:
        """Send `requests` as-is, without default requests; return the first response payload."""
        if not requests:
            raise ValueError("call_batch needs at least one request")
        envelope = await self.builder.build(requests, add_default_requests=False)
        return await self.dispatcher.dispatch(envelope)

    async def startup(self) -> PlayerData:
        """Send what the game client sends on startup until the server acknowledges the player."""
        for attempt in range(1, self._config.startup_attempts + 1):
            payload = await self.call_batch([
                Request(request_type=RequestType.GET_PLAYER),
                Request(
                    request_type=RequestType.CHECK_CHALLENGE,
                    request_message=CheckChallengeMessage(debug_request=False).to_bytes(),
                ),
            ])
            response = parse_payload(GetPlayerResponse, payload)
            if response.success and response.player_data is not None:
                self._session.player.data = response.player_data
                return response.player_data
            logger.debug(f"GetPlayer attempt {attempt} was not successful")
            if attempt < self._config.startup_attempts:
                await asyncio.sleep(self._config.startup_retry_delay)
        raise PogoRpcError("startup_failed", f"GetPlayer did not succeed after {self._config.startup_attempts} attempts")

    async def get_assets(self) -> GetAssetDigestResponse:
        remote = await self._remote_config_version()
        # Compared against the blob's own fetch time, not the current time.
        cached = self._session.data_cache.get_cached(ASSET_DIGEST_KEY)
        if cached is not None and cached.is_fresh(remote.asset_digest_timestamp_ms):
            digest = parse_cached(GetAssetDigestResponse, cached.data)
            if digest is not None:
                return digest

        payload = await self.call(Request(
            request_type=RequestType.GET_ASSET_DIGEST,
            request_message=GetAssetDigestMessage(app_version=self._config.app_version).to_bytes(),
        ))
        response = parse_payload(GetAssetDigestResponse, payload)
        self._session.data_cache.save(ASSET_DIGEST_KEY, payload)
        return response

    async def get_item_templates(self) -> DownloadItemTemplatesResponse:
        remote = await self._remote_config_version()
        cached = self._session.data_cache.get_cached(ITEM_TEMPLATES_KEY)
        if cached is not None and cached.is_fresh(remote.item_templates_timestamp_ms):
            templates = parse_cached(DownloadItemTemplatesResponse, cached.data)
            if templates is not None:
                return templates

        payload = await self.call(RequestType.DOWNLOAD_ITEM_TEMPLATES)
        response = parse_payload(DownloadItemTemplatesResponse, payload)
        self._session.data_cache.save(ITEM_TEMPLATES_KEY, payload)
        return response

    async def refresh_map_objects(self) -> list[MapCell]:
        """Fetch map cells around the current coordinate and store them on the session."""
        if self._cell_ids is None:
            raise ConfigurationError("refresh_map_objects needs a cell_ids provider")
        coordinate = self._session.coordinate
        cell_ids = list(self._cell_ids(coordinate.latitude, coordinate.longitude))

        payload = await self.call(Request(
            request_type=RequestType.GET_MAP_OBJECTS,
            request_message=GetMapObjectsMessage(
                cell_id=cell_ids,
                since_timestamp_ms=[0] * len(cell_ids),
                latitude=coordinate.latitude,
                longitude=coordinate.longitude,
            ).to_bytes(),
        ))
        response = parse_payload(GetMapObjectsResponse, payload)

        if response.status != MapObjectsStatus.SUCCESS:
            logger.error(f"GetMapObjects status is: '{response.status}'.")
            return self._session.map_cells
        logger.debug(f"Received '{len(response.map_cells)}' map cells.")
        if not response.map_cells:
            logger.error("We received 0 map cells, are your GPS coordinates correct?")
            return self._session.map_cells
        self._session.map_cells = response.map_cells
        return response.map_cells

    async def close(self) -> None:
        await self.http.close()

    async def __aenter__(self) -> "AsyncRpcClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def _remote_config_version(self) -> DownloadRemoteConfigVersionResponse:
        payload = await self.call(Request(
            request_type=RequestType.DOWNLOAD_REMOTE_CONFIG_VERSION,
            request_message=DownloadRemoteConfigVersionMessage(app_version=self._config.app_version).to_bytes(),
        ))
        return parse_payload(DownloadRemoteConfigVersionResponse, payload)


class RpcClient:
    """Sync wrapper around AsyncRpcClient. Runs the event loop internally."""

    def __init__(self, session: Session, signer: Signer, **kwargs: Any):
        self._async = AsyncRpcClient(session, signer, **kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def session(self) -> Session:
        return self._async.session

    @property
    def api_url(self) -> str:
        return self._async.api_url

    @property
    def last_rpc_request(self) -> Optional[datetime]:
        return self._async.last_rpc_request

    def call(self, request: Union[Request, RequestType]) -> bytes:
        return self._run(self._async.call(request))

    def call_batch(self, requests: Sequence[Request]) -> bytes:
        return self._run(self._async.call_batch(requests))

    def startup(self) -> PlayerData:
        return self._run(self._async.startup())

    def get_assets(self) -> GetAssetDigestResponse:
        return self._run(self._async.get_assets())

    def get_item_templates(self) -> DownloadItemTemplatesResponse:
        return self._run(self._async.get_item_templates())

    def refresh_map_objects(self) -> list[MapCell]:
        return self._run(self._async.refresh_map_objects())

    def close(self) -> None:
        self._run(self._async.close())
        self._loop.close()
