"""
Request message bodies, one per parameterised RequestType.
"""

from typing import Optional

from pogo_rpc.models.envelope import WireModel

ANDROID = 2


class CheckChallengeMessage(WireModel):
    debug_request: bool = False


class GetInventoryMessage(WireModel):
    last_timestamp_ms: int = 0
    item_been_seen: int = 0


class DownloadSettingsMessage(WireModel):
    hash: Optional[str] = None


class DownloadRemoteConfigVersionMessage(WireModel):
    platform: int = ANDROID
    device_manufacturer: str = ""
    device_model: str = ""
    locale: str = ""
    app_version: int = 0


class GetAssetDigestMessage(WireModel):
    platform: int = ANDROID
    device_manufacturer: str = ""
    device_model: str = ""
    locale: str = ""
    app_version: int = 0


class GetMapObjectsMessage(WireModel):
    cell_id: list[int] = []
    since_timestamp_ms: list[int] = []
    latitude: float = 0.0
    longitude: float = 0.0


class ReleasePokemonMessage(WireModel):
    pokemon_id: int


class EvolvePokemonMessage(WireModel):
    pokemon_id: int
