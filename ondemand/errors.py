"""Error types raised while assembling account fixtures."""

from __future__ import annotations

from solders.pubkey import Pubkey


class OnDemandError(Exception):
    """Base class for fixture assembly failures."""


class FetchError(OnDemandError):
    """Raised when the ledger RPC request itself fails."""


class AccountNotFound(OnDemandError):
    def __init__(self, pubkey: Pubkey) -> None:
        super().__init__(f"Account not found: {pubkey}")
        self.pubkey = pubkey


class InvalidProgramData(OnDemandError):
    """The program-data account of an upgradeable program is missing or too short."""

    def __init__(self, program: Pubkey, reason: str) -> None:
        super().__init__(f"Invalid program data for {program}: {reason}")
        self.program = program
        self.reason = reason


class MalformedProgram(OnDemandError):
    """The program account does not match the layout of its loader."""

    def __init__(self, program: Pubkey, reason: str) -> None:
        super().__init__(f"Malformed program {program}: {reason}")
        self.program = program
        self.reason = reason


class ValidationError(OnDemandError):
    """Raised when an extracted program fails the ELF header check."""


class InvalidFixture(OnDemandError):
    """Raised when a fixture file cannot be decoded."""


class ConfigurationFrozen(RuntimeError):
    """Raised when a store option is changed after accounts were fetched."""
