"""Thin async adapter over the solana-py RPC client."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solders.account import Account
from solders.pubkey import Pubkey

from .constants import MAX_MULTIPLE_ACCOUNTS
from .errors import FetchError

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (SolanaRpcException, RPCException, httpx.HTTPError)


class LedgerClient:
    """Account and slot reads at a fixed commitment level."""

    def __init__(
        self,
        rpc_url: str,
        commitment: Commitment = Confirmed,
        *,
        client: AsyncClient | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.commitment = commitment
        self._client = client if client is not None else AsyncClient(rpc_url, commitment=commitment)

    async def get_multiple_accounts(self, pubkeys: Sequence[Pubkey]) -> List[Optional[Account]]:
        """Accounts for ``pubkeys`` in input order; ``None`` where the account does not exist."""
        out: List[Optional[Account]] = []
        for start in range(0, len(pubkeys), MAX_MULTIPLE_ACCOUNTS):
            chunk = list(pubkeys[start : start + MAX_MULTIPLE_ACCOUNTS])
            try:
                resp = await self._client.get_multiple_accounts(
                    chunk, commitment=self.commitment, encoding="base64"
                )
            except _TRANSPORT_ERRORS as exc:
                raise FetchError(f"getMultipleAccounts failed for {len(chunk)} account(s): {exc}") from exc
            values = list(resp.value)
            if len(values) != len(chunk):
                raise FetchError(
                    f"getMultipleAccounts returned {len(values)} value(s) for {len(chunk)} account(s)"
                )
            out.extend(values)
        logger.debug("getMultipleAccounts: %d requested, %d found", len(out), sum(v is not None for v in out))
        return out

    async def get_account(self, pubkey: Pubkey) -> Optional[Account]:
        try:
            resp = await self._client.get_account_info(pubkey, commitment=self.commitment, encoding="base64")
        except _TRANSPORT_ERRORS as exc:
            raise FetchError(f"getAccountInfo failed for {pubkey}: {exc}") from exc
        return resp.value

    async def get_current_slot(self) -> int:
        try:
            resp = await self._client.get_slot(commitment=self.commitment)
        except _TRANSPORT_ERRORS as exc:
            raise FetchError(f"getSlot failed: {exc}") from exc
        return int(resp.value)

    async def close(self) -> None:
        await self._client.close()
