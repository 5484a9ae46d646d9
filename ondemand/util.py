"""Small value checks shared by fixture and config parsing."""

from __future__ import annotations

from typing import Any

from solders.pubkey import Pubkey

U64_MAX = 2**64 - 1


def ensure_int(value: Any, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    return value


def ensure_u64(value: Any, name: str) -> int:
    value = ensure_int(value, name)
    if value < 0 or value > U64_MAX:
        raise ValueError(f"{name} must be within u64 range")
    return value


def ensure_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def ensure_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean")
    return value


def parse_pubkey(value: Any, name: str) -> Pubkey:
    text = ensure_str(value, name).strip()
    try:
        return Pubkey.from_string(text)
    except ValueError as exc:
        raise ValueError(f"{name} is not a valid base58 pubkey: {text!r}") from exc
