"""In-memory account cache backing an AccountStore."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from solders.account import Account
from solders.pubkey import Pubkey

from .constants import SYSTEM_PROGRAM_ID
from .errors import FetchError

logger = logging.getLogger(__name__)

FetchAccounts = Callable[[List[Pubkey]], Awaitable[Sequence[Optional[Account]]]]


def default_account() -> Account:
    """Placeholder used for accounts the ledger does not know about."""
    return Account(
        lamports=0,
        data=b"",
        owner=Pubkey.from_string(SYSTEM_PROGRAM_ID),
        executable=False,
        rent_epoch=0,
    )


class AccountCache:
    """Pubkey -> Account map that only ever grows.

    Besides cached accounts it remembers which ids the ledger reported as
    non-existent so a later fill never asks for them again.
    """

    def __init__(self) -> None:
        self._accounts: Dict[Pubkey, Account] = {}
        self._absent: Set[Pubkey] = set()

    def insert(self, pubkey: Pubkey, account: Account) -> None:
        self._accounts[pubkey] = account

    def seed(self, pubkey: Pubkey, account: Account) -> None:
        """Insert a caller-provided account, replacing any absent mark."""
        self._absent.discard(pubkey)
        self._accounts[pubkey] = account

    def get(self, pubkey: Pubkey) -> Optional[Account]:
        return self._accounts.get(pubkey)

    def is_absent(self, pubkey: Pubkey) -> bool:
        return pubkey in self._absent

    def __contains__(self, pubkey: object) -> bool:
        return pubkey in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Pubkey]:
        return iter(self._accounts)

    def items(self) -> Iterator[Tuple[Pubkey, Account]]:
        return iter(list(self._accounts.items()))

    def as_dict(self) -> Dict[Pubkey, Account]:
        return dict(self._accounts)

    async def fill_missing(self, pubkeys: Iterable[Pubkey], fetch: FetchAccounts) -> List[Pubkey]:
        """Fetch every id that is neither cached nor known absent, in one call.

        Returns the requested ids the ledger does not have, in request order.
        If ``fetch`` raises, nothing from the batch is applied.
        """
        requested = list(dict.fromkeys(pubkeys))
        missing = [pk for pk in requested if pk not in self._accounts and pk not in self._absent]
        if missing:
            logger.debug("fetching %d account(s), %d cached", len(missing), len(requested) - len(missing))
            results = await fetch(missing)
            if len(results) != len(missing):
                raise FetchError(
                    f"fetch returned {len(results)} result(s) for {len(missing)} account(s)"
                )
            for pubkey, account in zip(missing, results):
                if account is None:
                    self._absent.add(pubkey)
                else:
                    self._accounts[pubkey] = account
        return [pk for pk in requested if pk in self._absent]
