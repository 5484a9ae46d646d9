"""Store configuration: defaults, TOML files and environment lookup."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib  # type: ignore
from solana.rpc.commitment import Commitment, Confirmed, Finalized, Processed

from .util import ensure_bool, ensure_str

RPC_URL_ENV = "ONDEMAND_RPC_URL"

CLUSTER_URLS: dict[str, str] = {
    "localnet": "http://127.0.0.1:8899",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet": "https://api.mainnet-beta.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}

COMMITMENTS: dict[str, Commitment] = {
    "processed": Processed,
    "confirmed": Confirmed,
    "finalized": Finalized,
}

STORE_KEYS = {"rpc_url", "commitment", "allow_missing_accounts", "skip_program_validation"}


@dataclass(frozen=True)
class StoreConfig:
    rpc_url: str
    commitment: Commitment = Confirmed
    allow_missing_accounts: bool = False
    skip_program_validation: bool = False


def _load_toml(path: Path) -> Dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _solana_cli_config_path() -> Path:
    path = os.environ.get("SOLANA_CONFIG") or os.environ.get("SOLANA_CONFIG_FILE")
    if path:
        return Path(path).expanduser()
    return Path.home() / ".config" / "solana" / "cli" / "config.yml"


def solana_cli_rpc_url() -> str | None:
    """``json_rpc_url`` from the Solana CLI config, if there is one."""
    try:
        lines = _solana_cli_config_path().read_text().splitlines()
    except OSError:
        return None
    for line in lines:
        key, sep, value = line.partition(":")
        if sep and key.strip() == "json_rpc_url":
            url = value.split(" #", 1)[0].strip().strip("\"'")
            return url or None
    return None


def resolve_rpc_url(value: str | None = None) -> str:
    """Explicit value, then $ONDEMAND_RPC_URL, then the Solana CLI config, then mainnet."""
    url = value or os.environ.get(RPC_URL_ENV) or solana_cli_rpc_url()
    if not url:
        return CLUSTER_URLS["mainnet"]
    return CLUSTER_URLS.get(url.strip().lower(), url.strip())


def parse_commitment(value: str) -> Commitment:
    commitment = COMMITMENTS.get(value.strip().lower())
    if commitment is None:
        raise ValueError("commitment must be 'processed', 'confirmed' or 'finalized'")
    return commitment


def load_store_config(path: str | Path) -> StoreConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = _load_toml(path)
    store = data.get("store", {})
    if not isinstance(store, dict):
        raise ValueError("[store] must be a table")
    for key in store:
        if key not in STORE_KEYS:
            raise ValueError(f"Unknown store key: {key}")

    rpc_url = store.get("rpc_url")
    commitment = store.get("commitment", "confirmed")
    return StoreConfig(
        rpc_url=resolve_rpc_url(ensure_str(rpc_url, "store.rpc_url") if rpc_url is not None else None),
        commitment=parse_commitment(ensure_str(commitment, "store.commitment")),
        allow_missing_accounts=ensure_bool(
            store.get("allow_missing_accounts", False), "store.allow_missing_accounts"
        ),
        skip_program_validation=ensure_bool(
            store.get("skip_program_validation", False), "store.skip_program_validation"
        ),
    )
