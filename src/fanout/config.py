import os
import tomllib
from pathlib import Path

import fanout.constants as C
from fanout.errors import ConfigError

pkg_root = Path(__file__).parent
config_file = pkg_root / "config.toml"

DEFAULTS = {
    "network": {
        "rpc_url": C.TESTNET_RPC,
        "faucet_url": C.TESTNET_FAUCET,
        "explorer_url": C.TESTNET_EXPLORER,
    },
    "timeout": {
        "transfer": C.TRANSFER_TIMEOUT,
        "balance": C.BALANCE_TIMEOUT,
        "global": C.GLOBAL_TRANSFER_TIMEOUT,
        "faucet": C.FAUCET_TIMEOUT,
        "faucet_poll": C.FAUCET_POLL_INTERVAL,
    },
    "funding": {
        "minimum_balance": C.MINIMUM_FUNDING_BALANCE,
    },
    "output": {
        "path": C.DEFAULT_OUTPUT,
        "explorer_pause": C.EXPLORER_PAUSE,
    },
}

# env var -> (section, key)
ENV_OVERRIDES = {
    "RPC_URL": ("network", "rpc_url"),
    "FAUCET_URL": ("network", "faucet_url"),
    "FANOUT_OUTPUT": ("output", "path"),
}


def load_config(path: str | Path | None = None, env: dict | None = None) -> dict:
    """Read the TOML config over the built-in defaults, then apply env overrides."""
    path = Path(path) if path is not None else config_file
    env = os.environ if env is None else env
    try:
        loaded = tomllib.loads(path.read_text())
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"bad config file {path}: {e}") from e

    cfg = {section: dict(values) for section, values in DEFAULTS.items()}
    for section, values in loaded.items():
        cfg.setdefault(section, {}).update(values)

    for var, (section, key) in ENV_OVERRIDES.items():
        if value := env.get(var):
            cfg[section][key] = value

    for key, value in cfg["timeout"].items():
        if not isinstance(value, int | float) or value <= 0:
            raise ConfigError(f"timeout.{key} must be a positive number, got {value!r}")
    if "{address}" not in cfg["network"]["explorer_url"]:
        raise ConfigError("network.explorer_url must contain an {address} placeholder")
    return cfg
