"""
Session state read and mutated by the RPC core.

The session is created once at login by the surrounding application and
lives for the process. The RPC core only touches the fields listed here:
coordinate, access token, global settings, player inventory and map cells.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Iterable, Optional

from pydantic import BaseModel, Field

from pogo_rpc.cache import DataCache, MemoryDataCache
from pogo_rpc.errors import AuthError
from pogo_rpc.models.envelope import AuthTicket
from pogo_rpc.models.responses import GlobalSettings, InventoryDelta, InventoryItem, MapCell, PlayerData

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class Coordinate(BaseModel):
    latitude: float = 0.0
    longitude: float = 0.0
    horizontal_accuracy: float = 0.0
    fixed_at_ms: int = Field(default_factory=now_ms)


class AccessToken(BaseModel):
    token: str
    provider_id: str = "google"
    expiry: Optional[datetime] = None  # None: never expires
    auth_ticket: Optional[AuthTicket] = None

    @property
    def is_expired(self) -> bool:
        if self.expiry is None:
            return False
        expiry = self.expiry if self.expiry.tzinfo else self.expiry.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) >= expiry

    @property
    def has_valid_ticket(self) -> bool:
        if self.auth_ticket is None or self.is_expired:
            return False
        expires = self.auth_ticket.expire_timestamp_ms
        return expires == 0 or expires > now_ms()

    def expire(self) -> None:
        self.expiry = datetime.now(timezone.utc) - timedelta(seconds=1)
        self.auth_ticket = None


def _item_key(item: InventoryItem) -> Optional[tuple[Any, ...]]:
    data = item.inventory_item_data
    if data is None:
        return None
    if data.pokemon_data is not None:
        return ("pokemon", data.pokemon_data.id)
    if data.item is not None:
        return ("item", data.item.item_id)
    if data.candy is not None:
        return ("candy", data.candy.family_id)
    if data.player_stats is not None:
        return ("player_stats",)
    return None


class Inventory:
    def __init__(self) -> None:
        self.last_inventory_timestamp_ms = 0
        self.inventory_items: list[InventoryItem] = []

    def update_inventory_items(self, delta: InventoryDelta) -> None:
        """Merge a delta: replace items with the same identity, append new ones, drop deleted pokemon."""
        index = {_item_key(i): n for n, i in enumerate(self.inventory_items) if _item_key(i) is not None}
        deleted: set[int] = set()
        for item in delta.inventory_items:
            if item.deleted_item is not None:
                deleted.add(item.deleted_item.pokemon_id)
                continue
            key = _item_key(item)
            if key is None:
                logger.debug(f"Skipping inventory item without identity: {item!r}")
                continue
            if key in index:
                self.inventory_items[index[key]] = item
            else:
                index[key] = len(self.inventory_items)
                self.inventory_items.append(item)
        if deleted:
            self.remove_pokemon(deleted)

    def remove_inventory_items(self, items: Iterable[InventoryItem]) -> None:
        doomed = {id(i) for i in items}
        self.inventory_items = [i for i in self.inventory_items if id(i) not in doomed]

    def remove_pokemon(self, pokemon_ids: Iterable[int]) -> None:
        ids = set(pokemon_ids)
        self.remove_inventory_items(
            i for i in self.inventory_items
            if i.inventory_item_data is not None
            and i.inventory_item_data.pokemon_data is not None
            and i.inventory_item_data.pokemon_data.id in ids
        )

    def pokemon(self) -> list[InventoryItem]:
        return [
            i for i in self.inventory_items
            if i.inventory_item_data is not None and i.inventory_item_data.pokemon_data is not None
        ]


class Player:
    def __init__(self, coordinate: Coordinate) -> None:
        self.coordinate = coordinate
        self.inventory = Inventory()
        self.data: Optional[PlayerData] = None


Reauthenticator = Callable[["Session"], Awaitable[AccessToken]]


class Session:
    def __init__(
        self,
        access_token: AccessToken,
        coordinate: Optional[Coordinate] = None,
        reauthenticator: Optional[Reauthenticator] = None,
        data_cache: Optional[DataCache] = None,
    ):
        self.access_token = access_token
        self.player = Player(coordinate or Coordinate())
        self.global_settings: Optional[GlobalSettings] = None
        self.global_settings_hash: Optional[str] = None
        self.map_cells: list[MapCell] = []
        self.data_cache = data_cache or MemoryDataCache()
        self._reauthenticator = reauthenticator
        self._reauth_lock = asyncio.Lock()

    @property
    def coordinate(self) -> Coordinate:
        return self.player.coordinate

    def set_coordinate(self, latitude: float, longitude: float, accuracy: float = 0.0) -> None:
        self.player.coordinate = Coordinate(latitude=latitude, longitude=longitude, horizontal_accuracy=accuracy)

    async def reauthenticate(self) -> None:
        """Obtain a fresh access token through the login collaborator. Concurrent callers share one attempt."""
        async with self._reauth_lock:
            if not self.access_token.is_expired:
                return
            if self._reauthenticator is None:
                logger.error("Access token expired and no reauthenticator is configured")
                raise AuthError("Access token expired and no reauthenticator is configured.")
            try:
                token = await self._reauthenticator(self)
            except AuthError:
                raise
            except Exception as e:
                logger.error(f"Reauthentication failed: {e}")
                raise AuthError(f"Reauthentication failed: {e}") from e
            if token.is_expired:
                raise AuthError("Reauthentication returned an expired access token.")
            self.access_token = token
            logger.debug("Reauthenticated, received a new access token")
