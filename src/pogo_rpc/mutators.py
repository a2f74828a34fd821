"""
State mutators apply parsed response payloads to the session.

Each mutator takes the session, the raw response bytes and the request that
produced them. They raise on malformed payloads; the router isolates that.
"""

import logging

from pogo_rpc.models.envelope import Request
from pogo_rpc.models.messages import EvolvePokemonMessage, ReleasePokemonMessage
from pogo_rpc.models.responses import (
    CheckAwardedBadgesResponse,
    CheckChallengeResponse,
    DownloadSettingsResponse,
    EvolvePokemonResponse,
    EvolvePokemonResult,
    GetHatchedEggsResponse,
    GetInventoryResponse,
    ReleasePokemonResponse,
    ReleasePokemonResult,
)
from pogo_rpc.session import Session

logger = logging.getLogger(__name__)

RELEASE_HANDLED = {ReleasePokemonResult.SUCCESS, ReleasePokemonResult.FAILED}
EVOLVE_HANDLED = {EvolvePokemonResult.SUCCESS, EvolvePokemonResult.FAILED_POKEMON_MISSING}


def apply_inventory(session: Session, payload: bytes, request: Request) -> None:
    response = GetInventoryResponse.from_bytes(payload)
    if not response.success or response.inventory_delta is None:
        return
    inventory = session.player.inventory
    delta = response.inventory_delta
    if delta.new_timestamp_ms < inventory.last_inventory_timestamp_ms:
        logger.debug(
            f"Ignoring stale inventory delta ({delta.new_timestamp_ms} < {inventory.last_inventory_timestamp_ms})"
        )
        return
    inventory.last_inventory_timestamp_ms = delta.new_timestamp_ms
    if delta.inventory_items:
        inventory.update_inventory_items(delta)


def apply_settings(session: Session, payload: bytes, request: Request) -> None:
    response = DownloadSettingsResponse.from_bytes(payload)
    if response.error:
        logger.debug(f"DownloadSettingsResponse.Error: '{response.error}'")
        return
    if response.settings is None:
        return
    session.global_settings = response.settings
    session.global_settings_hash = response.hash


def apply_hatched_eggs(session: Session, payload: bytes, request: Request) -> None:
    response = GetHatchedEggsResponse.from_bytes(payload)
    if response.success and response.pokemon_id:
        logger.debug(f"Hatched {len(response.pokemon_id)} egg(s)")


def apply_awarded_badges(session: Session, payload: bytes, request: Request) -> None:
    response = CheckAwardedBadgesResponse.from_bytes(payload)
    if response.success and response.awarded_badges:
        logger.debug(f"Awarded badges: {response.awarded_badges}")


def apply_challenge(session: Session, payload: bytes, request: Request) -> None:
    response = CheckChallengeResponse.from_bytes(payload)
    if response.show_challenge:
        logger.warning(f"Server requires a challenge to be solved: {response.challenge_url}")


def apply_release(session: Session, payload: bytes, request: Request) -> None:
    response = ReleasePokemonResponse.from_bytes(payload)
    if response.result in RELEASE_HANDLED and request.request_message:
        message = ReleasePokemonMessage.from_bytes(request.request_message)
        session.player.inventory.remove_pokemon([message.pokemon_id])


def apply_evolve(session: Session, payload: bytes, request: Request) -> None:
    response = EvolvePokemonResponse.from_bytes(payload)
    if response.result in EVOLVE_HANDLED and request.request_message:
        message = EvolvePokemonMessage.from_bytes(request.request_message)
        session.player.inventory.remove_pokemon([message.pokemon_id])
