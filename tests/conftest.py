"""Shared fixtures: a fake RPC server behind httpx.MockTransport."""

from typing import Any, Callable, Union

import httpx
import pytest

from pogo_rpc import AccessToken, AsyncRpcClient, Coordinate, HmacSigner, RpcConfig, Session
from pogo_rpc.models.envelope import RequestEnvelope, ResponseEnvelope, StatusCode, WireModel
from pogo_rpc.models.responses import (
    CheckAwardedBadgesResponse,
    CheckChallengeResponse,
    DownloadSettingsResponse,
    GetHatchedEggsResponse,
    GetInventoryResponse,
    InventoryDelta,
)
from pogo_rpc.transport.envelope import RequestIdGenerator

SIGNING_KEY = b"test-signing-key"

Reply = Union[ResponseEnvelope, httpx.Response, Callable[[RequestEnvelope], Any], Exception]


class FakeServer:
    """Pops one queued reply per request and records what was sent where."""

    def __init__(self) -> None:
        self.replies: list[Reply] = []
        self.received: list[tuple[str, RequestEnvelope]] = []

    def queue(self, *replies: Reply) -> None:
        self.replies.extend(replies)

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.received]

    @property
    def envelopes(self) -> list[RequestEnvelope]:
        return [env for _, env in self.received]

    def handler(self, request: httpx.Request) -> httpx.Response:
        envelope = RequestEnvelope.from_bytes(request.content)
        self.received.append((str(request.url), envelope))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        if callable(reply):
            reply = reply(envelope)
        return httpx.Response(200, content=reply.to_bytes())


def encode(payload: Union[WireModel, bytes]) -> bytes:
    return payload if isinstance(payload, bytes) else payload.to_bytes()


def default_returns(inventory=None, settings=None) -> list[bytes]:
    return [
        encode(CheckChallengeResponse()),
        encode(GetHatchedEggsResponse(success=True)),
        encode(inventory or GetInventoryResponse(success=True, inventory_delta=InventoryDelta())),
        encode(CheckAwardedBadgesResponse(success=True)),
        encode(settings or DownloadSettingsResponse()),
    ]


def ok(primary, *, defaults: bool = True, status: int = StatusCode.OK, **kwargs: Any) -> ResponseEnvelope:
    returns = [encode(primary)] + (default_returns() if defaults else [])
    return ResponseEnvelope(status_code=status, returns=returns, **kwargs)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def session() -> Session:
    return Session(
        AccessToken(token="token-1"),
        Coordinate(latitude=51.5007, longitude=-0.1246, horizontal_accuracy=5.0),
    )


@pytest.fixture
def make_client(server: FakeServer):
    def _make(session: Session, **kwargs: Any) -> AsyncRpcClient:
        kwargs.setdefault("config", RpcConfig(startup_retry_delay=0))
        return AsyncRpcClient(
            session,
            HmacSigner(SIGNING_KEY),
            transport=httpx.MockTransport(server.handler),
            request_ids=RequestIdGenerator(start=1000),
            **kwargs,
        )
    return _make


@pytest.fixture
def client(make_client, session: Session) -> AsyncRpcClient:
    return make_client(session)
