"""
pogo-rpc error types.

Every failure surfaced by the RPC core is a PogoRpcError carrying a short
machine-readable code, so callers can tell transport problems apart from
protocol violations and failed recoveries.
"""

from typing import Any, Optional


class PogoRpcError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class TransportError(PogoRpcError):
    """Connection failure or non-success HTTP status. Never retried."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        details = {"status_code": status_code} if status_code is not None else None
        super().__init__("transport_error", message, details)
        self.status_code = status_code


class ProtocolError(PogoRpcError):
    def __init__(self, message: str, code: str = "protocol_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class InvalidEndpointError(ProtocolError):
    def __init__(self, api_url: Optional[str], status_code: int):
        super().__init__(
            f"Received an incorrect API url: '{api_url}', status code was: '{status_code}'.",
            code="invalid_endpoint",
            details={"api_url": api_url, "status_code": status_code},
        )


class RecoveryError(PogoRpcError):
    def __init__(self, message: str, code: str = "recovery_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class AuthError(RecoveryError):
    def __init__(self, message: str):
        super().__init__(message, code="auth_error")


class RetryLimitExceeded(RecoveryError):
    def __init__(self, attempts: int, status_code: int):
        super().__init__(
            f"Gave up after {attempts} re-sends, last status code was: '{status_code}'.",
            code="retry_limit_exceeded",
            details={"attempts": attempts, "status_code": status_code},
        )


class SigningError(PogoRpcError):
    def __init__(self, message: str):
        super().__init__("signing_error", message)


class ConfigurationError(PogoRpcError):
    def __init__(self, message: str):
        super().__init__("configuration_error", message)
