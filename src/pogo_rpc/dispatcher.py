"""
Call dispatcher: sends envelopes and drives the status code state machine.

    OK                      route the response
    OK_RPC_URL_IN_RESPONSE  store the new endpoint, route the response
    REDIRECT                store the new endpoint, send the envelope again
    INVALID_AUTH_TOKEN      reauthenticate, send the envelope again
    anything else           log, route the response

Re-sends are capped by RpcConfig.max_retries.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from pogo_rpc.config import RpcConfig
from pogo_rpc.errors import ConfigurationError, InvalidEndpointError, RetryLimitExceeded
from pogo_rpc.models.envelope import RequestEnvelope, RequestType, ResponseEnvelope, StatusCode
from pogo_rpc.router import ResponseRouter
from pogo_rpc.session import Coordinate, Session
from pogo_rpc.transport.envelope import EnvelopeBuilder, parse_response_envelope, serialize_envelope
from pogo_rpc.transport.http import HttpTransport

logger = logging.getLogger(__name__)


class RpcDispatcher:
    def __init__(
        self,
        session: Session,
        transport: HttpTransport,
        builder: EnvelopeBuilder,
        router: ResponseRouter,
        config: Optional[RpcConfig] = None,
    ):
        self._session = session
        self._transport = transport
        self._builder = builder
        self._router = router
        self._config = config or RpcConfig()
        try:
            self._api_url_pattern = re.compile(self._config.api_url_pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid api_url_pattern '{self._config.api_url_pattern}': {e}") from e
        self.api_url = self._config.api_url
        self.last_rpc_request: Optional[datetime] = None
        self.last_map_objects_request: Optional[datetime] = None
        self.last_map_objects_coordinate: Optional[Coordinate] = None

    async def dispatch(self, envelope: RequestEnvelope) -> bytes:
        """Send `envelope`, recover from redirects and invalid tokens, return the primary payload."""
        resends = 0
        while True:
            response = await self._send(envelope)
            status = response.status_code

            if status == StatusCode.OK:
                break

            if status == StatusCode.OK_RPC_URL_IN_RESPONSE:
                self._update_api_url(response)
                break

            if status not in (StatusCode.REDIRECT, StatusCode.INVALID_AUTH_TOKEN):
                logger.info(f"Unknown status code: {status}")
                break

            if resends >= self._config.max_retries:
                logger.error(f"Request {envelope.request_id} still not answered after {resends} re-sends")
                raise RetryLimitExceeded(resends, status)
            resends += 1

            if status == StatusCode.REDIRECT:
                self._update_api_url(response)
                logger.debug(f"Redirected to {self.api_url}, sending request {envelope.request_id} again")
            else:
                logger.debug("Received StatusCode 102, reauthenticating.")
                await self._reauthenticate(envelope)

        self._record_success(envelope)

        if response.auth_ticket is not None:
            self._session.access_token.auth_ticket = response.auth_ticket
            logger.debug("Received a new AuthTicket from the server")

        return self._router.route(envelope, response)

    async def _send(self, envelope: RequestEnvelope) -> ResponseEnvelope:
        logger.debug(f"Sending RPC Request: '{', '.join(r.request_type.name for r in envelope.requests)}'")
        raw = await self._transport.post(self.api_url, serialize_envelope(envelope))
        return parse_response_envelope(raw)

    def _update_api_url(self, response: ResponseEnvelope) -> None:
        api_url = response.api_url
        if not api_url or not self._api_url_pattern.fullmatch(api_url):
            logger.error(f"Received an incorrect API url: '{api_url}'")
            raise InvalidEndpointError(api_url, response.status_code)
        self.api_url = f"https://{api_url}/rpc"

    async def _reauthenticate(self, envelope: RequestEnvelope) -> None:
        self._session.access_token.expire()
        await self._session.reauthenticate()
        await self._builder.reauthorize(envelope)

    def _record_success(self, envelope: RequestEnvelope) -> None:
        self.last_rpc_request = datetime.now(timezone.utc)
        if envelope.requests and envelope.requests[0].request_type == RequestType.GET_MAP_OBJECTS:
            self.last_map_objects_request = self.last_rpc_request
            self.last_map_objects_coordinate = self._session.coordinate.model_copy()
