"""Save fetched accounts to a JSON fixture and load them back.

A fixture lets a test capture mainnet state once and replay it offline::

    {
      "version": 1,
      "metadata": {"slot": 123, "timestamp": "1700000000", "rpc_url": "..."},
      "accounts": {
        "<base58 pubkey>": {
          "lamports": 1, "data": "<base64>", "owner": "<base58>",
          "executable": false, "rent_epoch": 0
        }
      }
    }
"""

from __future__ import annotations

import base64
import binascii
import json
import time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from solders.account import Account
from solders.pubkey import Pubkey

from .constants import FIXTURE_VERSION
from .errors import InvalidFixture
from .util import ensure_bool, ensure_str, ensure_u64, parse_pubkey


def account_to_json(account: Account) -> Dict[str, Any]:
    return {
        "lamports": account.lamports,
        "data": base64.b64encode(bytes(account.data)).decode("ascii"),
        "owner": str(account.owner),
        "executable": account.executable,
        "rent_epoch": account.rent_epoch,
    }


def account_from_json(entry: Any) -> Account:
    if not isinstance(entry, dict):
        raise ValueError("account entry must be an object")
    try:
        data = base64.b64decode(ensure_str(entry.get("data"), "data"), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"data is not valid base64: {exc}") from exc
    return Account(
        lamports=ensure_u64(entry.get("lamports"), "lamports"),
        data=data,
        owner=parse_pubkey(entry.get("owner"), "owner"),
        executable=ensure_bool(entry.get("executable"), "executable"),
        rent_epoch=ensure_u64(entry.get("rent_epoch"), "rent_epoch"),
    )


def save_fixture(
    accounts: Mapping[Pubkey, Account],
    path: str | Path,
    *,
    slot: Optional[int] = None,
    rpc_url: Optional[str] = None,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    metadata: Dict[str, Any] = {"timestamp": str(int(time.time()))}
    if slot is not None:
        metadata["slot"] = slot
    if rpc_url:
        metadata["rpc_url"] = rpc_url
    doc = {
        "version": FIXTURE_VERSION,
        "metadata": metadata,
        "accounts": {str(pubkey): account_to_json(account) for pubkey, account in accounts.items()},
    }
    path.write_text(json.dumps(doc, indent=2, sort_keys=True) + "\n")
    return path


def load_fixture(path: str | Path) -> Dict[Pubkey, Account]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Fixture not found: {path}")
    try:
        doc = json.loads(path.read_bytes())
    except ValueError as exc:
        raise InvalidFixture(f"{path}: not valid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise InvalidFixture(f"{path}: top level must be an object")
    version = doc.get("version")
    if isinstance(version, bool) or version != FIXTURE_VERSION:
        raise InvalidFixture(f"Unsupported fixture version: {version}")
    entries = doc.get("accounts")
    if not isinstance(entries, dict):
        raise InvalidFixture(f"{path}: accounts must be an object")

    accounts: Dict[Pubkey, Account] = {}
    for key, entry in entries.items():
        try:
            pubkey = parse_pubkey(key, "account key")
            accounts[pubkey] = account_from_json(entry)
        except ValueError as exc:
            raise InvalidFixture(f"{path}: account {key}: {exc}") from exc
    return accounts
