"""Settings for the Droip Bridge MCP server.

Settings live in `settings.yaml` inside the data directory (default
~/.droip-bridge, overridable with DROIP_BRIDGE_DATA_DIR). The server is
disabled until explicitly enabled, either in the file or with
DROIP_BRIDGE_ENABLED=1.

Precedence, lowest to highest: dataclass defaults, settings.yaml, env vars.
"""

import json
import os
import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import yaml

from .ids import DEFAULT_STYLE_PREFIX

SETTINGS_FILE = "settings.yaml"
SERVER_NAME = "droip-bridge"
BRIDGE_VERSION = "1.0.0"
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


class BridgeConfigError(Exception):
    """Settings file is unreadable or holds invalid values."""


def get_default_data_dir() -> str:
    """Get the data directory, respecting the DROIP_BRIDGE_DATA_DIR env var."""
    data_dir = os.environ.get("DROIP_BRIDGE_DATA_DIR")
    if data_dir:
        return os.path.expanduser(data_dir)
    return os.path.expanduser("~/.droip-bridge")


@dataclass
class BridgeSettings:
    """Runtime settings for the bridge."""

    enabled: bool = False
    data_dir: str = field(default_factory=get_default_data_dir)
    style_prefix: str = DEFAULT_STYLE_PREFIX  # Prefix for generated style block IDs
    max_ids_per_request: int = 100
    example_limit: int = 3  # Example symbols returned per knowledge query

    @property
    def db_path(self) -> str:
        return str(Path(self.data_dir) / "symbols.db")

    @property
    def settings_path(self) -> Path:
        return Path(self.data_dir) / SETTINGS_FILE


def _parse_bool(value: str, source: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise BridgeConfigError(f"{source} must be a boolean (got '{value}')")


def _check_types(raw: dict) -> None:
    expected = {"enabled": bool, "style_prefix": str, "max_ids_per_request": int, "example_limit": int}
    for key, value in raw.items():
        if key not in expected:
            valid = ", ".join(sorted(expected))
            raise BridgeConfigError(f"Unknown setting '{key}'. Valid settings: {valid}")
        # bool is a subclass of int; reject it for the numeric settings
        if not isinstance(value, expected[key]) or (expected[key] is int and isinstance(value, bool)):
            raise BridgeConfigError(f"Setting '{key}' must be of type {expected[key].__name__}")
    for key in ("max_ids_per_request", "example_limit"):
        if key in raw and raw[key] < 1:
            raise BridgeConfigError(f"Setting '{key}' must be at least 1")
    if "style_prefix" in raw and not raw["style_prefix"].strip():
        raise BridgeConfigError("Setting 'style_prefix' cannot be empty")


def load_settings(data_dir: str | None = None) -> BridgeSettings:
    """Load settings from the data directory and apply env overrides.

    Raises:
        BridgeConfigError: If the settings file or an env override is invalid.
    """
    base = Path(os.path.expanduser(data_dir)) if data_dir else Path(get_default_data_dir())
    path = base / SETTINGS_FILE

    raw: dict = {}
    if path.exists():
        try:
            with open(path) as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise BridgeConfigError(f"Cannot read {path}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise BridgeConfigError(f"{path} must contain a mapping of settings")
        raw = loaded

    _check_types(raw)

    env_enabled = os.environ.get("DROIP_BRIDGE_ENABLED")
    if env_enabled is not None:
        raw["enabled"] = _parse_bool(env_enabled, "DROIP_BRIDGE_ENABLED")

    return BridgeSettings(data_dir=str(base), **raw)


def save_settings(settings: BridgeSettings) -> Path:
    """Write settings to `settings.yaml` in their data directory."""
    path = settings.settings_path
    path.parent.mkdir(parents=True, exist_ok=True)
    values = {k: v for k, v in asdict(settings).items() if k != "data_dir"}
    with open(path, "w") as f:
        yaml.safe_dump(values, f, sort_keys=False)
    return path


def generate_mcp_config(settings: BridgeSettings) -> dict:
    """Build the `.mcp.json` stanza that launches this server over stdio."""
    return {
        "mcpServers": {
            SERVER_NAME: {
                "command": "droip-bridge",
                "args": [],
                "env": {"DROIP_BRIDGE_DATA_DIR": settings.data_dir},
            },
        },
    }


def main():
    """CLI entry point: droip-bridge-config {show,enable,disable,mcp-json}."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Manage Droip Bridge settings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  droip-bridge-config enable
  droip-bridge-config mcp-json > .mcp.json
  droip-bridge-config show --data-dir /srv/droip
""",
    )
    parser.add_argument("command", choices=["show", "enable", "disable", "mcp-json"])
    parser.add_argument("--data-dir", help="Data directory (default: $DROIP_BRIDGE_DATA_DIR or ~/.droip-bridge)")
    args = parser.parse_args()

    try:
        settings = load_settings(args.data_dir)
    except BridgeConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command in ("enable", "disable"):
        settings.enabled = args.command == "enable"
        path = save_settings(settings)
        print(f"MCP server {'enabled' if settings.enabled else 'disabled'} ({path})")
    elif args.command == "mcp-json":
        print(json.dumps(generate_mcp_config(settings), indent=2))
    else:
        for f in fields(settings):
            print(f"{f.name}: {getattr(settings, f.name)}")


if __name__ == "__main__":
    main()
