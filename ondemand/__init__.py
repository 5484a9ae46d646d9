"""Mainnet account fixtures for program test harnesses."""

from __future__ import annotations

from .errors import (
    AccountNotFound,
    ConfigurationFrozen,
    FetchError,
    InvalidFixture,
    InvalidProgramData,
    MalformedProgram,
    OnDemandError,
    ValidationError,
)
from .harness import ExecutionHarness, RecordingHarness
from .loader import ExtractedProgram, LoaderConvention
from .store import AccountStore

__all__ = [
    "AccountNotFound",
    "AccountStore",
    "ConfigurationFrozen",
    "ExecutionHarness",
    "ExtractedProgram",
    "FetchError",
    "InvalidFixture",
    "InvalidProgramData",
    "LoaderConvention",
    "MalformedProgram",
    "OnDemandError",
    "RecordingHarness",
    "ValidationError",
]
