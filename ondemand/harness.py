"""The execution harness a store registers accounts and programs with."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple

from solders.account import Account
from solders.pubkey import Pubkey

from .loader import LoaderConvention


class ExecutionHarness(Protocol):
    def register_account(self, pubkey: Pubkey, account: Account) -> None: ...

    def register_program(self, program_id: Pubkey, loader: LoaderConvention, elf: bytes) -> None: ...

    def advance_to_slot(self, slot: int) -> None: ...


@dataclass
class RecordingHarness:
    """Harness that only records what it was given."""

    accounts: Dict[Pubkey, Account] = field(default_factory=dict)
    programs: Dict[Pubkey, Tuple[LoaderConvention, bytes]] = field(default_factory=dict)
    slot: Optional[int] = None
    calls: List[str] = field(default_factory=list)

    def register_account(self, pubkey: Pubkey, account: Account) -> None:
        self.accounts[pubkey] = account
        self.calls.append(f"account:{pubkey}")

    def register_program(self, program_id: Pubkey, loader: LoaderConvention, elf: bytes) -> None:
        self.programs[program_id] = (loader, bytes(elf))
        self.calls.append(f"program:{program_id}")

    def advance_to_slot(self, slot: int) -> None:
        self.slot = slot
        self.calls.append(f"slot:{slot}")
