"""
Response routing.

Returns the primary payload (index 0) to the caller and hands every payload
the session cares about to its mutator, looked up by request type.
"""

import logging
from typing import Callable, Optional

from pogo_rpc import mutators
from pogo_rpc.batching import DEFAULT_REQUEST_TYPES
from pogo_rpc.errors import ProtocolError
from pogo_rpc.models.envelope import Request, RequestEnvelope, RequestType, ResponseEnvelope
from pogo_rpc.session import Session

logger = logging.getLogger(__name__)

Handler = Callable[[Session, bytes, Request], None]

DEFAULT_HANDLERS: dict[RequestType, Handler] = {
    RequestType.CHECK_CHALLENGE: mutators.apply_challenge,
    RequestType.GET_HATCHED_EGGS: mutators.apply_hatched_eggs,
    RequestType.GET_INVENTORY: mutators.apply_inventory,
    RequestType.CHECK_AWARDED_BADGES: mutators.apply_awarded_badges,
    RequestType.DOWNLOAD_SETTINGS: mutators.apply_settings,
}

INVENTORY_HANDLERS: dict[RequestType, Handler] = {
    RequestType.RELEASE_POKEMON: mutators.apply_release,
    RequestType.EVOLVE_POKEMON: mutators.apply_evolve,
}


class ResponseRouter:
    def __init__(
        self,
        session: Session,
        default_handlers: Optional[dict[RequestType, Handler]] = None,
        inventory_handlers: Optional[dict[RequestType, Handler]] = None,
    ):
        self._session = session
        self._default_handlers = default_handlers if default_handlers is not None else dict(DEFAULT_HANDLERS)
        self._inventory_handlers = inventory_handlers if inventory_handlers is not None else dict(INVENTORY_HANDLERS)

    def route(self, request_envelope: RequestEnvelope, response_envelope: ResponseEnvelope) -> bytes:
        returns = response_envelope.returns
        if not returns:
            logger.error(f"Request {request_envelope.request_id} got 0 responses")
            raise ProtocolError("There were 0 responses.")

        primary = returns[0]
        self._handle_default_responses(request_envelope, returns)

        request = request_envelope.requests[0]
        handler = self._inventory_handlers.get(request.request_type)
        if handler is not None:
            self._run(handler, primary, request)

        return primary

    def _handle_default_responses(self, request_envelope: RequestEnvelope, returns: list[bytes]) -> None:
        for index, request in enumerate(request_envelope.requests):
            if request.request_type not in DEFAULT_REQUEST_TYPES:
                continue
            handler = self._default_handlers.get(request.request_type)
            if handler is None:
                continue
            if index >= len(returns):
                logger.warning(f"No response for {request.request_type.name} at index {index}")
                continue
            self._run(handler, returns[index], request)

    def _run(self, handler: Handler, payload: bytes, request: Request) -> None:
        try:
            handler(self._session, payload, request)
        except Exception:
            logger.exception(f"Handling the {request.request_type.name} response failed")
