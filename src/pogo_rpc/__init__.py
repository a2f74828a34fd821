"""
pogo-rpc — RPC core of a location-based game client.

Builds signed request envelopes, recovers from redirects and expired
credentials, and keeps the player's session state current.
"""

from pogo_rpc.client import RpcClient, AsyncRpcClient
from pogo_rpc.config import RpcConfig
from pogo_rpc.session import Session, AccessToken, Coordinate
from pogo_rpc.signing import Signer, HmacSigner
from pogo_rpc.errors import (
    PogoRpcError,
    TransportError,
    ProtocolError,
    InvalidEndpointError,
    RecoveryError,
    AuthError,
    RetryLimitExceeded,
    SigningError,
    ConfigurationError,
)
from pogo_rpc.models.envelope import Request, RequestType, StatusCode

__version__ = "0.1.0"
__all__ = [
    "RpcClient",
    "AsyncRpcClient",
    "RpcConfig",
    "Session",
    "AccessToken",
    "Coordinate",
    "Signer",
    "HmacSigner",
    "PogoRpcError",
    "TransportError",
    "ProtocolError",
    "InvalidEndpointError",
    "RecoveryError",
    "AuthError",
    "RetryLimitExceeded",
    "SigningError",
    "ConfigurationError",
    "Request",
    "RequestType",
    "StatusCode",
]
