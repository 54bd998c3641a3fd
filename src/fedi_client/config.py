"""Configuration loading and saving.

Config file location: ~/.config/fedi-client/config.toml

Schema:
    [server]
    name = "mastodon.social"

    [store]
    path = "~/.config/fedi-client/store.json"  # tokens live here, not in config

    [fetch]
    limit = 20
    smart_paging = true
    timeout = 30.0
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomli_w

CONFIG_DIR = Path.home() / ".config" / "fedi-client"
CONFIG_FILE = CONFIG_DIR / "config.toml"
STORE_FILE = CONFIG_DIR / "store.json"


@dataclass
class AppConfig:
    server: str
    store_path: Path = STORE_FILE
    page_limit: int = 20
    smart_paging: bool = True
    timeout: float = 30.0


def load_config(config_path: Path = CONFIG_FILE) -> AppConfig:
    """Load and validate config from TOML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    server = data.get("server", {}).get("name", "")
    if not server:
        raise ValueError("Config missing required server.name")

    store_data = data.get("store", {})
    fetch_data = data.get("fetch", {})

    limit = int(fetch_data.get("limit", 20))
    if limit <= 0:
        raise ValueError("fetch.limit must be positive")

    return AppConfig(
        server=server,
        store_path=Path(store_data.get("path", STORE_FILE)).expanduser(),
        page_limit=limit,
        smart_paging=bool(fetch_data.get("smart_paging", True)),
        timeout=float(fetch_data.get("timeout", 30.0)),
    )


def save_config(config: AppConfig, config_path: Path = CONFIG_FILE) -> None:
    """Write config to TOML file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "server": {"name": config.server},
        "store": {"path": str(config.store_path)},
        "fetch": {
            "limit": config.page_limit,
            "smart_paging": config.smart_paging,
            "timeout": config.timeout,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)

    os.chmod(config_path, 0o600)


def config_exists(config_path: Path = CONFIG_FILE) -> bool:
    """Check if config file exists."""
    return config_path.exists()
