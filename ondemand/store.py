"""Fetch mainnet accounts for instructions and hand them to a test harness.

Example::

    store = AccountStore("https://api.mainnet-beta.solana.com")
    accounts = await store.with_accounts([(payer, payer_account)]).from_instruction(ix)
    await store.add_programs(harness)
    await store.with_synced_slot(harness)

Accounts passed to ``with_accounts`` always win over fetched state: an id that
is already cached is never requested from the ledger.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from solana.rpc.commitment import Commitment, Confirmed
from solders.account import Account
from solders.instruction import Instruction
from solders.pubkey import Pubkey

from .accounts import AccountCache, default_account
from .client import LedgerClient
from .collect import collect_pubkeys
from .config import StoreConfig, load_store_config
from .elf import validate_program
from .errors import AccountNotFound, ConfigurationFrozen, InvalidProgramData, MalformedProgram
from .fixture import load_fixture, save_fixture
from .harness import ExecutionHarness
from .loader import (
    ExtractedProgram,
    LoaderConvention,
    classify_owner,
    extract_loader_v2,
    extract_loader_v3,
    programdata_address,
    programdata_slot,
)

logger = logging.getLogger(__name__)


class AccountStore:
    """Builder over an account cache filled from a ledger RPC endpoint.

    Options can be changed until accounts are first fetched; after that the
    configuration is frozen and the toggles raise ``ConfigurationFrozen``.
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: Commitment = Confirmed,
        *,
        client: Optional[LedgerClient] = None,
    ) -> None:
        self._config = StoreConfig(rpc_url=rpc_url, commitment=commitment)
        self._client = client
        self._frozen = False
        self._cache = AccountCache()

    @classmethod
    def from_config(cls, path: Union[str, Path], *, client: Optional[LedgerClient] = None) -> "AccountStore":
        config = load_store_config(path)
        store = cls(config.rpc_url, config.commitment, client=client)
        store._config = config
        return store

    async def __aenter__(self) -> "AccountStore":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def is_populated(self) -> bool:
        return self._frozen

    @property
    def accounts(self) -> Mapping[Pubkey, Account]:
        return self._cache.as_dict()

    @property
    def client(self) -> LedgerClient:
        if self._client is None:
            self._client = LedgerClient(self._config.rpc_url, self._config.commitment)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    # ── Builder ─────────────────────────────────────────────────────

    def _update(self, **changes: object) -> "AccountStore":
        if self._frozen:
            names = ", ".join(sorted(changes))
            raise ConfigurationFrozen(f"cannot change {names} after accounts have been fetched")
        self._config = dataclasses.replace(self._config, **changes)  # type: ignore[arg-type]
        return self

    def allow_missing_accounts(self) -> "AccountStore":
        """Store missing accounts as empty defaults and skip programs without program data."""
        return self._update(allow_missing_accounts=True)

    def skip_program_validation(self) -> "AccountStore":
        return self._update(skip_program_validation=True)

    def with_accounts(self, accounts: Iterable[Tuple[Pubkey, Account]]) -> "AccountStore":
        if isinstance(accounts, Mapping):
            accounts = accounts.items()
        for pubkey, account in accounts:
            self._cache.seed(pubkey, account)
        return self

    def with_fixture(self, path: Union[str, Path]) -> "AccountStore":
        return self.with_accounts(load_fixture(path).items())

    def save_fixture(self, path: Union[str, Path], *, slot: Optional[int] = None) -> Path:
        return save_fixture(self._cache.as_dict(), path, slot=slot, rpc_url=self._config.rpc_url)

    # ── Fetching ────────────────────────────────────────────────────

    async def from_instruction(self, instruction: Instruction) -> Dict[Pubkey, Account]:
        return await self.from_pubkeys(collect_pubkeys(instruction))

    async def from_instructions(self, instructions: Iterable[Instruction]) -> Dict[Pubkey, Account]:
        return await self.from_pubkeys(collect_pubkeys(instructions))

    async def from_pubkeys(self, pubkeys: Iterable[Pubkey]) -> Dict[Pubkey, Account]:
        self._frozen = True
        missing = await self._cache.fill_missing(pubkeys, self.client.get_multiple_accounts)
        self._apply_missing_policy(missing)
        return self._cache.as_dict()

    def _apply_missing_policy(self, missing: List[Pubkey]) -> None:
        if not missing:
            return
        if not self._config.allow_missing_accounts:
            raise AccountNotFound(missing[0])
        for pubkey in missing:
            if pubkey not in self._cache:
                logger.debug("account %s not found, using empty default", pubkey)
                self._cache.insert(pubkey, default_account())

    # ── Terminal operations ─────────────────────────────────────────

    def add_accounts(self, harness: ExecutionHarness) -> int:
        count = 0
        for pubkey, account in self._cache.items():
            harness.register_account(pubkey, account)
            count += 1
        return count

    async def add_programs(self, harness: ExecutionHarness) -> List[ExtractedProgram]:
        """Register every cached executable account with ``harness``.

        Program-data accounts of upgradeable programs are fetched in one batch.
        Programs registered before an error stay registered.
        """
        programs: List[Tuple[Pubkey, Account, LoaderConvention]] = []
        programdata_ids: List[Pubkey] = []
        for pubkey, account in self._cache.items():
            if not account.executable:
                continue
            loader = classify_owner(account.owner)
            if loader is LoaderConvention.NOT_A_PROGRAM_LOADER:
                logger.debug("skipping %s: owner %s is not a program loader", pubkey, account.owner)
                continue
            programs.append((pubkey, account, loader))
            if loader is LoaderConvention.LOADER_V3:
                try:
                    programdata_ids.append(programdata_address(pubkey, bytes(account.data)))
                except MalformedProgram:
                    # Reported when this program is reached below, after earlier registrations.
                    continue

        self._frozen = True
        missing = await self._cache.fill_missing(programdata_ids, self.client.get_multiple_accounts)
        if self._config.allow_missing_accounts:
            self._apply_missing_policy(missing)

        registered: List[ExtractedProgram] = []
        for pubkey, account, loader in programs:
            if loader is LoaderConvention.LOADER_V2:
                elf = extract_loader_v2(pubkey, bytes(account.data))
            else:
                programdata_id = programdata_address(pubkey, bytes(account.data))
                programdata = self._cache.get(programdata_id)
                if programdata_id in missing or programdata is None:
                    if self._config.allow_missing_accounts:
                        logger.debug("skipping %s: program data %s not found", pubkey, programdata_id)
                        continue
                    raise InvalidProgramData(pubkey, f"program data account {programdata_id} not found")
                data = bytes(programdata.data)
                logger.debug("%s: program data %s deployed at slot %s", pubkey, programdata_id, programdata_slot(data))
                elf = extract_loader_v3(pubkey, data)
            validate_program(elf, enabled=not self._config.skip_program_validation)
            harness.register_program(pubkey, loader, elf)
            registered.append(ExtractedProgram(program_id=pubkey, loader=loader, elf=elf))
        logger.debug("registered %d of %d program(s)", len(registered), len(programs))
        return registered

    async def with_synced_slot(self, harness: ExecutionHarness) -> int:
        slot = await self.client.get_current_slot()
        logger.debug("advancing harness to slot %d", slot)
        harness.advance_to_slot(slot)
        return slot
