"""
Request / response envelopes.

Envelopes and every message they carry are pydantic models serialized as
JSON; raw byte fields travel base64 encoded.
"""

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class WireModel(BaseModel):
    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode()

    @classmethod
    def from_bytes(cls, data: bytes):
        return cls.model_validate_json(data)


class RequestType(IntEnum):
    METHOD_UNSET = 0
    GET_PLAYER = 2
    GET_INVENTORY = 4
    DOWNLOAD_SETTINGS = 5
    DOWNLOAD_ITEM_TEMPLATES = 6
    DOWNLOAD_REMOTE_CONFIG_VERSION = 7
    GET_MAP_OBJECTS = 106
    RELEASE_POKEMON = 112
    EVOLVE_POKEMON = 125
    GET_HATCHED_EGGS = 126
    CHECK_AWARDED_BADGES = 129
    GET_ASSET_DIGEST = 300
    CHECK_CHALLENGE = 600


class StatusCode(IntEnum):
    UNKNOWN = 0
    OK = 1
    OK_RPC_URL_IN_RESPONSE = 2
    BAD_REQUEST = 3
    INVALID_REQUEST = 51
    INVALID_PLATFORM_REQUEST = 52
    REDIRECT = 53
    SESSION_INVALIDATED = 100
    INVALID_AUTH_TOKEN = 102


class PlatformRequestType(IntEnum):
    UNSET = 0
    SEND_ENCRYPTED_SIGNATURE = 6


class Request(WireModel):
    request_type: RequestType
    request_message: Optional[bytes] = None


class AuthTicket(WireModel):
    start: bytes = b""
    expire_timestamp_ms: int = 0
    end: bytes = b""


class JWT(WireModel):
    contents: str
    unknown2: int = 59


class AuthInfo(WireModel):
    provider: str
    token: JWT


class PlatformRequest(WireModel):
    type: int = PlatformRequestType.SEND_ENCRYPTED_SIGNATURE
    request_message: bytes = b""


class RequestEnvelope(WireModel):
    status_code: int = 2
    request_id: int = 0
    requests: list[Request] = []
    platform_requests: list[PlatformRequest] = []
    latitude: float = 0.0
    longitude: float = 0.0
    accuracy: float = 0.0
    auth_info: Optional[AuthInfo] = None
    auth_ticket: Optional[AuthTicket] = None
    ms_since_last_locationfix: int = 0


class ResponseEnvelope(WireModel):
    # Plain int: unknown codes must still parse.
    status_code: int
    request_id: int = 0
    api_url: Optional[str] = None
    auth_ticket: Optional[AuthTicket] = None
    returns: list[bytes] = []
