"""Client facade: startup handshake, cached config blobs, sync wrapper, CLI config."""

import json
import time

import httpx
import pytest

from pogo_rpc import ConfigurationError, HmacSigner, PogoRpcError, ProtocolError, RpcClient, RpcConfig
from pogo_rpc.cache import ASSET_DIGEST_KEY, ITEM_TEMPLATES_KEY, FileDataCache, MemoryDataCache
from pogo_rpc.models.envelope import RequestType
from pogo_rpc.models.responses import (
    AssetDigestEntry,
    DownloadItemTemplatesResponse,
    DownloadRemoteConfigVersionResponse,
    GetAssetDigestResponse,
    GetPlayerResponse,
    ItemTemplate,
    PlayerData,
)
from pogo_rpc.transport.envelope import RequestIdGenerator

from tests.conftest import SIGNING_KEY, ok

NOW_MS = int(time.time() * 1000)
DIGEST = GetAssetDigestResponse(digest=[AssetDigestEntry(asset_id="a1", bundle_name="pm0001")], timestamp_ms=5)
TEMPLATES = DownloadItemTemplatesResponse(success=True, item_templates=[ItemTemplate(template_id="V0001_POKEMON")])


def remote_config(asset_ts: int = 0, templates_ts: int = 0):
    return ok(DownloadRemoteConfigVersionResponse(
        result=1, asset_digest_timestamp_ms=asset_ts, item_templates_timestamp_ms=templates_ts,
    ))


class TestStartup:
    @pytest.mark.asyncio
    async def test_retries_until_player_is_acknowledged(self, client, server, session):
        player = GetPlayerResponse(success=True, player_data=PlayerData(username="ash", team=1))
        server.queue(ok(GetPlayerResponse(success=False), defaults=False), ok(player, defaults=False))

        data = await client.startup()

        assert data.username == "ash"
        assert session.player.data == data
        assert len(server.received) == 2
        assert [r.request_type for r in server.envelopes[0].requests] == [
            RequestType.GET_PLAYER, RequestType.CHECK_CHALLENGE,
        ]

    @pytest.mark.asyncio
    async def test_gives_up_after_configured_attempts(self, make_client, session, server):
        client = make_client(session, config=RpcConfig(startup_attempts=2, startup_retry_delay=0))
        server.queue(*[ok(GetPlayerResponse(success=False), defaults=False)] * 2)
        with pytest.raises(PogoRpcError) as exc:
            await client.startup()
        assert exc.value.code == "startup_failed"

    @pytest.mark.asyncio
    async def test_no_wait_after_last_attempt(self, make_client, session, server, monkeypatch):
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        monkeypatch.setattr("pogo_rpc.client.asyncio.sleep", fake_sleep)
        client = make_client(session, config=RpcConfig(startup_attempts=3, startup_retry_delay=0.5))
        server.queue(*[ok(GetPlayerResponse(success=False), defaults=False)] * 3)
        with pytest.raises(PogoRpcError):
            await client.startup()
        assert delays == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_malformed_player_payload(self, client, server):
        server.queue(ok(b"{not json", defaults=False))
        with pytest.raises(PogoRpcError) as exc:
            await client.startup()
        assert isinstance(exc.value, ProtocolError)
        assert len(server.received) == 1


class TestCachedBlobs:
    @pytest.mark.asyncio
    async def test_fresh_asset_digest_is_reused(self, client, server, session):
        session.data_cache.save(ASSET_DIGEST_KEY, DIGEST.to_bytes())
        server.queue(remote_config(asset_ts=NOW_MS - 60_000))

        digest = await client.get_assets()

        assert digest == DIGEST
        assert len(server.received) == 1
        assert server.envelopes[0].requests[0].request_type == RequestType.DOWNLOAD_REMOTE_CONFIG_VERSION

    @pytest.mark.asyncio
    async def test_stale_asset_digest_is_refetched(self, client, server, session):
        session.data_cache.save(ASSET_DIGEST_KEY, GetAssetDigestResponse().to_bytes())
        server.queue(remote_config(asset_ts=NOW_MS + 3_600_000), ok(DIGEST))

        digest = await client.get_assets()

        assert digest == DIGEST
        assert server.envelopes[1].requests[0].request_type == RequestType.GET_ASSET_DIGEST
        assert GetAssetDigestResponse.from_bytes(session.data_cache.get_cached(ASSET_DIGEST_KEY).data) == DIGEST

    @pytest.mark.asyncio
    async def test_unreadable_cached_digest_is_refetched(self, client, server, session):
        session.data_cache.save(ASSET_DIGEST_KEY, b"{broken")
        server.queue(remote_config(asset_ts=NOW_MS - 60_000), ok(DIGEST))

        assert await client.get_assets() == DIGEST
        assert server.envelopes[1].requests[0].request_type == RequestType.GET_ASSET_DIGEST

    @pytest.mark.asyncio
    async def test_malformed_item_templates_payload(self, client, server, session):
        server.queue(remote_config(), ok(b"[]"))
        with pytest.raises(ProtocolError):
            await client.get_item_templates()
        assert session.data_cache.get_cached(ITEM_TEMPLATES_KEY) is None

    @pytest.mark.asyncio
    async def test_empty_cache_fetches_item_templates(self, client, server, session):
        server.queue(remote_config(), ok(TEMPLATES))

        templates = await client.get_item_templates()

        assert templates == TEMPLATES
        assert server.envelopes[1].requests[0].request_type == RequestType.DOWNLOAD_ITEM_TEMPLATES
        assert session.data_cache.get_cached(ITEM_TEMPLATES_KEY) is not None

    @pytest.mark.asyncio
    async def test_item_templates_use_their_own_timestamp(self, client, server, session):
        session.data_cache.save(ITEM_TEMPLATES_KEY, TEMPLATES.to_bytes())
        server.queue(remote_config(asset_ts=NOW_MS + 3_600_000, templates_ts=NOW_MS - 60_000))

        assert await client.get_item_templates() == TEMPLATES
        assert len(server.received) == 1


def test_file_cache_keeps_blob_and_fetch_time(tmp_path):
    cache = FileDataCache(tmp_path / "cache")
    assert cache.get_cached(ASSET_DIGEST_KEY) is None

    saved = cache.save(ASSET_DIGEST_KEY, b"\x00\xffbinary")
    loaded = FileDataCache(tmp_path / "cache").get_cached(ASSET_DIGEST_KEY)

    assert loaded == saved
    assert loaded.data == b"\x00\xffbinary"
    assert loaded.is_fresh(saved.timestamp_ms)
    assert not loaded.is_fresh(saved.timestamp_ms + 1)


def test_file_cache_ignores_corrupt_entry(tmp_path):
    (tmp_path / f"{ITEM_TEMPLATES_KEY}.json").write_text("garbage")
    assert FileDataCache(tmp_path).get_cached(ITEM_TEMPLATES_KEY) is None


def test_memory_cache_overwrites():
    cache = MemoryDataCache()
    cache.save("k", b"one")
    cache.save("k", b"two")
    assert cache.get_cached("k").data == b"two"


@pytest.mark.asyncio
async def test_map_refresh_needs_cell_provider(client):
    with pytest.raises(ConfigurationError):
        await client.refresh_map_objects()


def test_sync_client(session, server):
    client = RpcClient(
        session,
        HmacSigner(SIGNING_KEY),
        transport=httpx.MockTransport(server.handler),
        request_ids=RequestIdGenerator(start=1),
    )
    server.queue(ok(GetPlayerResponse(success=True)), ok(GetPlayerResponse(success=True)))
    try:
        assert GetPlayerResponse.from_bytes(client.call(RequestType.GET_PLAYER)).success
        client.call(RequestType.GET_PLAYER)
    finally:
        client.close()
    assert [e.request_id for e in server.envelopes] == [1, 2]
    assert client.last_rpc_request is not None


def test_cli_config_set_and_show(tmp_path, monkeypatch):
    click_testing = pytest.importorskip("click.testing")
    pytest.importorskip("rich")
    monkeypatch.setattr("pogo_rpc.config.CONFIG_FILE", tmp_path / "config.json")
    from pogo_rpc.cli.main import main

    runner = click_testing.CliRunner()
    assert runner.invoke(main, ["config", "set", "latitude", "51.5"]).exit_code == 0
    assert runner.invoke(main, ["config", "set", "access_token", "secret"]).exit_code == 0

    result = runner.invoke(main, ["config", "show"])
    assert result.exit_code == 0
    shown = json.loads(result.output)
    assert shown == {"latitude": 51.5, "access_token": "***"}
