"""CLI: pogo-rpc config show|set"""

import json

import click
from rich.console import Console

from pogo_rpc.config import load_config, save_config

console = Console()

SECRET_KEYS = {"access_token", "signing_key"}


@click.group()
def config():
    """Client configuration."""


@config.command("show")
def config_show():
    """Print the saved configuration (secrets masked)."""
    cfg = load_config()
    masked = {k: ("***" if k in SECRET_KEYS and v else v) for k, v in cfg.items()}
    click.echo(json.dumps(masked, indent=2))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value."""
    cfg = load_config()
    try:
        cfg[key] = json.loads(value)
    except json.JSONDecodeError:
        cfg[key] = value
    save_config(cfg)
    console.print(f"[green]{key} saved.[/green]")
