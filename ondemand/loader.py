"""Program account layouts for the BPF loader v2 and the upgradeable loader."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from .constants import (
    BPF_LOADER_UPGRADEABLE_ID,
    BPF_LOADER_V2_ID,
    PROGRAM_ACCOUNT_SIZE,
    PROGRAMDATA_METADATA_SIZE,
    PROGRAMDATA_SLOT_OFFSET,
    PUBKEY_SIZE,
    UPGRADEABLE_TAG_PROGRAM,
    UPGRADEABLE_TAG_PROGRAMDATA,
    UPGRADEABLE_TAG_SIZE,
)
from .errors import InvalidProgramData, MalformedProgram


class LoaderConvention(enum.Enum):
    LOADER_V2 = "loader-v2"
    LOADER_V3 = "loader-v3"
    NOT_A_PROGRAM_LOADER = "none"

    @property
    def loader_id(self) -> Pubkey | None:
        if self is LoaderConvention.LOADER_V2:
            return LOADER_V2
        if self is LoaderConvention.LOADER_V3:
            return LOADER_V3
        return None


LOADER_V2 = Pubkey.from_string(BPF_LOADER_V2_ID)
LOADER_V3 = Pubkey.from_string(BPF_LOADER_UPGRADEABLE_ID)


@dataclass(frozen=True)
class ExtractedProgram:
    program_id: Pubkey
    loader: LoaderConvention
    elf: bytes


def classify_owner(owner: Pubkey) -> LoaderConvention:
    for convention in (LoaderConvention.LOADER_V2, LoaderConvention.LOADER_V3):
        if owner == convention.loader_id:
            return convention
    return LoaderConvention.NOT_A_PROGRAM_LOADER


def extract_loader_v2(program: Pubkey, data: bytes) -> bytes:
    # The v2 loader stores the ELF in the program account itself.
    return bytes(data)


def programdata_address(program: Pubkey, data: bytes) -> Pubkey:
    """Read the program-data address out of an upgradeable program account."""
    if len(data) < PROGRAM_ACCOUNT_SIZE:
        raise MalformedProgram(
            program,
            f"program account is {len(data)} bytes, expected at least {PROGRAM_ACCOUNT_SIZE}",
        )
    (tag,) = struct.unpack_from("<I", data, 0)
    if tag != UPGRADEABLE_TAG_PROGRAM:
        raise MalformedProgram(
            program, f"unexpected upgradeable loader state {tag} (expected {UPGRADEABLE_TAG_PROGRAM})"
        )
    return Pubkey(bytes(data[UPGRADEABLE_TAG_SIZE : UPGRADEABLE_TAG_SIZE + PUBKEY_SIZE]))


def programdata_slot(data: bytes) -> int | None:
    if len(data) < PROGRAMDATA_SLOT_OFFSET + 8:
        return None
    (tag, slot) = struct.unpack_from("<IQ", data, 0)
    if tag != UPGRADEABLE_TAG_PROGRAMDATA:
        return None
    return slot


def extract_loader_v3(program: Pubkey, programdata: bytes) -> bytes:
    """Return the ELF stored after the program-data metadata."""
    if len(programdata) <= PROGRAMDATA_METADATA_SIZE:
        raise InvalidProgramData(
            program,
            f"program data is {len(programdata)} bytes; the ELF starts at offset {PROGRAMDATA_METADATA_SIZE}",
        )
    return bytes(programdata[PROGRAMDATA_METADATA_SIZE:])
