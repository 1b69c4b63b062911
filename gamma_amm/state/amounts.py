"""
Shared type aliases and storage widths for pool records.

Amounts are arbitrary-precision Python ints; the widths below are the storage
widths every record is validated against.
"""

from typing import Iterable, Tuple


# Type aliases
ParticipantId = str  # account / public key identifier
AssetId = str  # 32-byte hex string (0x...)
PoolId = str  # 32-byte hex string (0x...)
Amount = int  # Non-negative integer

U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1


def require_width(fields: Iterable[Tuple[str, int]], max_value: int) -> None:
    """Validate that every `(name, value)` is an int in `[0, max_value]`."""
    for name, value in fields:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{name} must be an int")
        if not (0 <= value <= max_value):
            raise ValueError(f"{name} must be in [0, {max_value}]: {value}")
