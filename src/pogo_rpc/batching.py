"""
Default ("housekeeping") requests appended to every single-request call.
"""

from pogo_rpc.models.envelope import Request, RequestType
from pogo_rpc.models.messages import CheckChallengeMessage, DownloadSettingsMessage, GetInventoryMessage
from pogo_rpc.session import Session

DEFAULT_REQUEST_TYPES = (
    RequestType.CHECK_CHALLENGE,
    RequestType.GET_HATCHED_EGGS,
    RequestType.GET_INVENTORY,
    RequestType.CHECK_AWARDED_BADGES,
    RequestType.DOWNLOAD_SETTINGS,
)


def get_default_requests(session: Session) -> list[Request]:
    """Build the default batch from the session's inventory timestamp and settings hash."""
    requests = [
        Request(
            request_type=RequestType.CHECK_CHALLENGE,
            request_message=CheckChallengeMessage(debug_request=False).to_bytes(),
        ),
        Request(request_type=RequestType.GET_HATCHED_EGGS),
        Request(
            request_type=RequestType.GET_INVENTORY,
            request_message=GetInventoryMessage(
                last_timestamp_ms=session.player.inventory.last_inventory_timestamp_ms,
            ).to_bytes(),
        ),
        Request(request_type=RequestType.CHECK_AWARDED_BADGES),
    ]

    # No hash yet: send no body at all so the server returns the full settings.
    if session.global_settings_hash:
        requests.append(Request(
            request_type=RequestType.DOWNLOAD_SETTINGS,
            request_message=DownloadSettingsMessage(hash=session.global_settings_hash).to_bytes(),
        ))
    else:
        requests.append(Request(request_type=RequestType.DOWNLOAD_SETTINGS))

    return requests
