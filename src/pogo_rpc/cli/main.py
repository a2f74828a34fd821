"""
pogo-rpc CLI — `pogo-rpc` command.

Commands:
  pogo-rpc config show|set   Inspect or edit ~/.pogo_rpc/config.json
  pogo-rpc player            Run the startup handshake, print player data
  pogo-rpc inventory         Fetch the inventory delta, print items
  pogo-rpc assets            Fetch (or reuse cached) asset digest
"""

import asyncio
import logging
from typing import Any

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install pogo-rpc[cli]")

from pogo_rpc.cache import FileDataCache
from pogo_rpc.client import AsyncRpcClient
from pogo_rpc.config import CONFIG_FILE, load_config, rpc_config_from
from pogo_rpc.session import AccessToken, Coordinate, Session
from pogo_rpc.signing import HmacSigner

console = Console()
CACHE_DIR = CONFIG_FILE.parent / "cache"


def _get_client() -> AsyncRpcClient:
    cfg = load_config()
    missing = [k for k in ("access_token", "signing_key", "latitude", "longitude") if k not in cfg]
    if missing:
        console.print(f"[red]Missing config keys: {', '.join(missing)}. Use `pogo-rpc config set`.[/red]")
        raise SystemExit(1)
    session = Session(
        AccessToken(token=cfg["access_token"], provider_id=cfg.get("provider", "google")),
        Coordinate(
            latitude=float(cfg["latitude"]),
            longitude=float(cfg["longitude"]),
            horizontal_accuracy=float(cfg.get("accuracy", 0.0)),
        ),
        data_cache=FileDataCache(CACHE_DIR),
    )
    return AsyncRpcClient(session, HmacSigner(cfg["signing_key"].encode()), config=rpc_config_from(cfg))


def _run(coro: Any) -> Any:
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log RPC traffic")
def main(verbose: bool):
    """pogo-rpc — talk to the game's RPC endpoint."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# Register subcommands from separate modules
from pogo_rpc.cli.config import config
from pogo_rpc.cli.rpc import assets, inventory, player

main.add_command(config)
main.add_command(player)
main.add_command(inventory)
main.add_command(assets)


if __name__ == "__main__":
    main()
