"""CLI: pogo-rpc player|inventory|assets"""

import click
from rich.console import Console
from rich.table import Table

from pogo_rpc.errors import PogoRpcError
from pogo_rpc.models.envelope import RequestType

console = Console()


def _get_client():
    from pogo_rpc.cli.main import _get_client
    return _get_client()


def _run(coro):
    from pogo_rpc.cli.main import _run
    return _run(coro)


@click.command("player")
def player():
    """Run the startup handshake and print player data."""

    async def _player():
        async with _get_client() as client:
            with console.status("Contacting server..."):
                data = await client.startup()
        console.print(f"[green]{data.username}[/green] (team {data.team})")
        console.print(f"[dim]Endpoint: {client.api_url}[/dim]")

    try:
        _run(_player())
    except PogoRpcError as e:
        console.print(f"[red]{e.code}: {e}[/red]")
        raise SystemExit(1)


@click.command("inventory")
def inventory():
    """Fetch the inventory and print its items."""

    async def _inventory():
        async with _get_client() as client:
            with console.status("Fetching inventory..."):
                await client.call(RequestType.GET_PLAYER)
            inv = client.session.player.inventory
        table = Table(title=f"Inventory (timestamp {inv.last_inventory_timestamp_ms})")
        table.add_column("Kind", style="bold")
        table.add_column("Id")
        table.add_column("Detail")
        for item in inv.inventory_items:
            data = item.inventory_item_data
            if data is None:
                continue
            if data.pokemon_data is not None:
                table.add_row("pokemon", str(data.pokemon_data.id), f"cp {data.pokemon_data.cp}")
            elif data.item is not None:
                table.add_row("item", str(data.item.item_id), f"x{data.item.count}")
            elif data.candy is not None:
                table.add_row("candy", str(data.candy.family_id), str(data.candy.candy))
            elif data.player_stats is not None:
                table.add_row("stats", "", f"level {data.player_stats.level}")
        console.print(table)

    try:
        _run(_inventory())
    except PogoRpcError as e:
        console.print(f"[red]{e.code}: {e}[/red]")
        raise SystemExit(1)


@click.command("assets")
def assets():
    """Fetch the asset digest, reusing the cached copy while it is fresh."""

    async def _assets():
        async with _get_client() as client:
            with console.status("Checking asset digest..."):
                digest = await client.get_assets()
        console.print(f"[green]{len(digest.digest)} assets[/green] (timestamp {digest.timestamp_ms})")

    try:
        _run(_assets())
    except PogoRpcError as e:
        console.print(f"[red]{e.code}: {e}[/red]")
        raise SystemExit(1)
