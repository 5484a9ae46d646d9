"""Header sanity check for extracted program binaries."""

from __future__ import annotations

from .constants import ELF64_HEADER_SIZE, ELF_MAGIC
from .errors import ValidationError


def validate_program(data: bytes, *, enabled: bool = True) -> None:
    """Fail fast on payloads that cannot be an ELF (wrong offset, truncation).

    This does not check that the program would load.
    """
    if not enabled:
        return
    if len(data) < ELF64_HEADER_SIZE:
        raise ValidationError(
            f"program is {len(data)} bytes; an ELF header needs at least {ELF64_HEADER_SIZE}"
        )
    if data[: len(ELF_MAGIC)] != ELF_MAGIC:
        raise ValidationError(f"missing ELF magic (got {data[:len(ELF_MAGIC)].hex()})")
