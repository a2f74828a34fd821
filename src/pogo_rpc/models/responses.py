"""
Response payloads for the request types the client understands.
"""

from enum import IntEnum
from typing import Any, Optional

from pogo_rpc.models.envelope import WireModel


class PokemonData(WireModel):
    id: int = 0
    pokemon_id: int = 0
    cp: int = 0
    nickname: Optional[str] = None


class ItemData(WireModel):
    item_id: int = 0
    count: int = 0
    unseen: bool = False


class Candy(WireModel):
    family_id: int = 0
    candy: int = 0


class PlayerStats(WireModel):
    level: int = 0
    experience: int = 0
    km_walked: float = 0.0


class InventoryItemData(WireModel):
    pokemon_data: Optional[PokemonData] = None
    item: Optional[ItemData] = None
    candy: Optional[Candy] = None
    player_stats: Optional[PlayerStats] = None


class DeletedItem(WireModel):
    pokemon_id: int = 0


class InventoryItem(WireModel):
    modified_timestamp_ms: int = 0
    deleted_item: Optional[DeletedItem] = None
    inventory_item_data: Optional[InventoryItemData] = None


class InventoryDelta(WireModel):
    original_timestamp_ms: int = 0
    new_timestamp_ms: int = 0
    inventory_items: list[InventoryItem] = []


class GetInventoryResponse(WireModel):
    success: bool = False
    inventory_delta: Optional[InventoryDelta] = None


class GlobalSettings(WireModel):
    fort_settings: Optional[dict[str, Any]] = None
    map_settings: Optional[dict[str, Any]] = None
    level_settings: Optional[dict[str, Any]] = None
    inventory_settings: Optional[dict[str, Any]] = None
    minimum_client_version: str = ""


class DownloadSettingsResponse(WireModel):
    error: str = ""
    hash: str = ""
    settings: Optional[GlobalSettings] = None


class GetHatchedEggsResponse(WireModel):
    success: bool = False
    pokemon_id: list[int] = []
    experience_awarded: list[int] = []
    candy_awarded: list[int] = []
    stardust_awarded: list[int] = []


class CheckAwardedBadgesResponse(WireModel):
    success: bool = False
    awarded_badges: list[int] = []
    awarded_badge_levels: list[int] = []


class CheckChallengeResponse(WireModel):
    show_challenge: bool = False
    challenge_url: str = ""


class ReleasePokemonResult(IntEnum):
    UNSET = 0
    SUCCESS = 1
    POKEMON_DEPLOYED = 2
    FAILED = 3
    ERROR_POKEMON_IS_EGG = 4


class ReleasePokemonResponse(WireModel):
    result: int = ReleasePokemonResult.UNSET
    candy_awarded: int = 0


class EvolvePokemonResult(IntEnum):
    UNSET = 0
    SUCCESS = 1
    FAILED_POKEMON_MISSING = 2
    FAILED_INSUFFICIENT_RESOURCES = 3
    FAILED_POKEMON_CANNOT_EVOLVE = 4
    FAILED_POKEMON_IS_DEPLOYED = 5


class EvolvePokemonResponse(WireModel):
    result: int = EvolvePokemonResult.UNSET
    evolved_pokemon_data: Optional[PokemonData] = None
    experience_awarded: int = 0
    candy_awarded: int = 0


class PlayerData(WireModel):
    creation_timestamp_ms: int = 0
    username: str = ""
    team: int = 0
    max_pokemon_storage: int = 0
    max_item_storage: int = 0


class GetPlayerResponse(WireModel):
    success: bool = False
    player_data: Optional[PlayerData] = None
    banned: bool = False
    warn: bool = False


class MapObjectsStatus(IntEnum):
    UNSET_STATUS = 0
    SUCCESS = 1
    LOCATION_UNSET = 2


class MapCell(WireModel):
    s2_cell_id: int = 0
    current_timestamp_ms: int = 0
    forts: list[dict[str, Any]] = []
    catchable_pokemons: list[dict[str, Any]] = []
    wild_pokemons: list[dict[str, Any]] = []


class GetMapObjectsResponse(WireModel):
    map_cells: list[MapCell] = []
    status: int = MapObjectsStatus.UNSET_STATUS


class DownloadRemoteConfigVersionResponse(WireModel):
    result: int = 0
    item_templates_timestamp_ms: int = 0
    asset_digest_timestamp_ms: int = 0


class AssetDigestEntry(WireModel):
    asset_id: str = ""
    bundle_name: str = ""
    version: int = 0
    checksum: int = 0
    size: int = 0


class GetAssetDigestResponse(WireModel):
    digest: list[AssetDigestEntry] = []
    timestamp_ms: int = 0


class ItemTemplate(WireModel):
    template_id: str = ""
    data: Optional[dict[str, Any]] = None


class DownloadItemTemplatesResponse(WireModel):
    success: bool = False
    item_templates: list[ItemTemplate] = []
    timestamp_ms: int = 0
