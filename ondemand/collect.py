"""Collect the account ids referenced by instructions."""

from __future__ import annotations

from typing import Any, Iterable, List, Union

from solders.instruction import Instruction
from solders.pubkey import Pubkey


def collect_pubkeys(instructions: Union[Instruction, Iterable[Instruction]]) -> List[Pubkey]:
    """Deduplicated account ids of one or many instructions, first-seen order.

    The program id of an instruction is not included, only its account metas.
    """
    if hasattr(instructions, "accounts"):
        instructions = [instructions]  # type: ignore[list-item]
    seen: dict[Pubkey, None] = {}
    for ix in instructions:  # type: ignore[union-attr]
        for meta in _account_metas(ix):
            seen.setdefault(meta.pubkey, None)
    return list(seen)


def _account_metas(ix: Any) -> Iterable[Any]:
    metas = ix.accounts
    return metas() if callable(metas) else metas
