"""
Envelope signing.

The real signature algorithm is supplied by the application; anything with a
`sign(envelope) -> bytes` method will do. `HmacSigner` is a keyed reference
implementation used by the CLI and the tests.
"""

import hashlib
import hmac
from typing import Protocol

from pogo_rpc.models.envelope import RequestEnvelope


class Signer(Protocol):
    def sign(self, envelope: RequestEnvelope) -> bytes: ...


class HmacSigner:
    def __init__(self, key: bytes):
        if not key:
            raise ValueError("signing key must not be empty")
        self._key = key

    def sign(self, envelope: RequestEnvelope) -> bytes:
        # platform_requests is where the signature goes, so it is not signed itself.
        body = envelope.model_dump_json(exclude={"platform_requests"}).encode()
        return hmac.new(self._key, body, hashlib.sha256).digest()

    def verify(self, envelope: RequestEnvelope, signature: bytes) -> bool:
        return hmac.compare_digest(self.sign(envelope), signature)
