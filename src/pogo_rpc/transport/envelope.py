"""
Envelope construction and parsing.

The builder stamps every envelope with the next request id, the session's
position and credentials, then signs it and attaches the signature as the
single platform request.
"""

import logging
import random
import threading
from typing import Optional, Sequence

from pydantic import ValidationError

from pogo_rpc.batching import get_default_requests
from pogo_rpc.errors import PogoRpcError, ProtocolError, SigningError
from pogo_rpc.models.envelope import (
    JWT,
    AuthInfo,
    PlatformRequest,
    PlatformRequestType,
    Request,
    RequestEnvelope,
    ResponseEnvelope,
)
from pogo_rpc.session import Session, now_ms
from pogo_rpc.signing import Signer

logger = logging.getLogger(__name__)


class RequestIdGenerator:
    """Strictly increasing request ids, starting from a random non-zero value."""

    def __init__(self, start: Optional[int] = None):
        self._next = start if start is not None else random.randint(100000000, 999999999)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            request_id = self._next
            self._next += 1
            return request_id


class EnvelopeBuilder:
    def __init__(self, session: Session, signer: Signer, request_ids: Optional[RequestIdGenerator] = None):
        self._session = session
        self._signer = signer
        self._request_ids = request_ids or RequestIdGenerator()

    async def build(self, requests: Sequence[Request], add_default_requests: bool) -> RequestEnvelope:
        coordinate = self._session.coordinate
        envelope = RequestEnvelope(
            status_code=2,
            request_id=self._request_ids.next(),
            latitude=coordinate.latitude,
            longitude=coordinate.longitude,
            accuracy=coordinate.horizontal_accuracy,
            ms_since_last_locationfix=max(0, now_ms() - coordinate.fixed_at_ms),
        )
        envelope.requests.extend(requests)
        if add_default_requests:
            envelope.requests.extend(get_default_requests(self._session))

        await self._authorize(envelope)
        self._sign(envelope)
        return envelope

    async def reauthorize(self, envelope: RequestEnvelope) -> RequestEnvelope:
        """Refresh the credentials and signature of an envelope, keeping its id and requests."""
        await self._authorize(envelope)
        self._sign(envelope)
        return envelope

    async def _authorize(self, envelope: RequestEnvelope) -> None:
        token = self._session.access_token
        if token.has_valid_ticket:
            envelope.auth_ticket = token.auth_ticket
            envelope.auth_info = None
            return

        if token.is_expired:
            await self._session.reauthenticate()
            token = self._session.access_token

        envelope.auth_ticket = None
        envelope.auth_info = AuthInfo(provider=token.provider_id, token=JWT(contents=token.token))

    def _sign(self, envelope: RequestEnvelope) -> None:
        envelope.platform_requests = []
        try:
            signature = self._signer.sign(envelope)
        except PogoRpcError:
            raise
        except Exception as e:
            logger.error(f"Signing request {envelope.request_id} failed: {e}")
            raise SigningError(f"Failed to sign request envelope: {e}") from e
        envelope.platform_requests.append(PlatformRequest(
            type=PlatformRequestType.SEND_ENCRYPTED_SIGNATURE,
            request_message=signature,
        ))


def serialize_envelope(envelope: RequestEnvelope) -> bytes:
    return envelope.to_bytes()


def parse_response_envelope(raw: bytes) -> ResponseEnvelope:
    try:
        return ResponseEnvelope.from_bytes(raw)
    except ValidationError as e:
        logger.error(f"Received a malformed response envelope: {e}")
        raise ProtocolError(f"Malformed response envelope: {e}") from e
