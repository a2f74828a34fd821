"""
Client configuration.

`RpcConfig` holds the knobs of the RPC core. The CLI keeps it, together with
its credentials and position, in ~/.pogo_rpc/config.json.
"""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

DEFAULT_API_URL = "https://pgorelease.nianticlabs.com/plfe/rpc"
DEFAULT_API_URL_PATTERN = r"pgorelease\.nianticlabs\.com/plfe/\d+"
CONFIG_FILE = Path.home() / ".pogo_rpc" / "config.json"


class RpcConfig(BaseModel):
    api_url: str = DEFAULT_API_URL
    # Hosts the server may migrate us to, matched against the bare api_url.
    api_url_pattern: str = DEFAULT_API_URL_PATTERN
    max_retries: int = 5
    timeout: float = 30.0
    user_agent: str = "Niantic App"
    app_version: int = 2903
    startup_attempts: int = 10
    startup_retry_delay: float = 1.0


def load_config(path: Optional[Path] = None) -> dict[str, Any]:
    try:
        return json.loads((path or CONFIG_FILE).read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def save_config(cfg: dict[str, Any], path: Optional[Path] = None) -> None:
    target = path or CONFIG_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(cfg, indent=2))


def rpc_config_from(cfg: dict[str, Any]) -> RpcConfig:
    """Pick the RpcConfig fields out of a loaded config file."""
    return RpcConfig(**{k: v for k, v in cfg.items() if k in RpcConfig.model_fields})
