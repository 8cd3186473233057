from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

ENV_FILE = "~/.sapphire-relay.env"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.environ.get(name)
    if raw is None:
        value = default
    else:
        value = int(raw)
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_float(name: str, default: float, min_value: float | None = None) -> float:
    raw = os.environ.get(name)
    if raw is None:
        value = default
    else:
        value = float(raw)
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_str(name: str) -> str:
    return os.environ.get(name, "").strip()


@dataclass(frozen=True)
class Settings:
    network: str
    grpc_url: str
    log_level: str
    poll_interval_sec: float
    transfer_delay_sec: float
    request_timeout_sec: float
    data_dir: str
    events_enabled: bool
    dashboard_enabled: bool
    dashboard_host: str
    dashboard_port: int
    mnemonic: str = ""
    destination: str = ""


def load_settings(env_file: str | None = ENV_FILE) -> Settings:
    if env_file:
        load_dotenv(os.path.expanduser(env_file))
    return Settings(
        network=os.environ.get("RELAY_NETWORK", "mainnet").strip().lower(),
        # empty means: use the endpoint compiled in for the network
        grpc_url=_env_str("RELAY_GRPC_URL"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
        poll_interval_sec=_env_float("RELAY_POLL_SEC", 10.0, min_value=0.5),
        transfer_delay_sec=_env_float("RELAY_TRANSFER_DELAY_SEC", 0.001, min_value=0.0),
        request_timeout_sec=_env_float("RELAY_HTTP_TIMEOUT_SEC", 15.0, min_value=1.0),
        data_dir=os.environ.get("DATA_DIR", os.path.expanduser("~/.sapphire-relay")),
        events_enabled=_env_bool("RELAY_EVENTS", False),
        dashboard_enabled=_env_bool("DASHBOARD_ENABLED", False),
        dashboard_host=os.environ.get("DASHBOARD_HOST", "127.0.0.1").strip(),
        dashboard_port=_env_int("DASHBOARD_PORT", 8080, min_value=1),
        mnemonic=" ".join(_env_str("RELAY_MNEMONIC").split()),
        destination=_env_str("RELAY_DESTINATION"),
    )
