"""
Asset movements planned by core operations.

Core operations never move funds themselves. They return an ordered tuple of
`PlannedTransfer`s which the shell hands to the transfer collaborator in
exactly that order. The only thing the core asks of the collaborator is the
fee an asset withholds on transfer (`TransferQuotes`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..state.amounts import AssetId


class TransferQuotes(Protocol):
    def transfer_overhead(self, asset: AssetId, net_amount: int) -> int:
        """Extra amount to send so that `net_amount` arrives in full."""
        ...

    def transfer_fee(self, asset: AssetId, gross_amount: int) -> int:
        """Amount withheld when `gross_amount` is sent."""
        ...


@dataclass(frozen=True)
class PlannedTransfer:
    payer: str
    source: str
    destination: str
    asset: AssetId
    amount: int
    decimals: int

    def __post_init__(self) -> None:
        if not isinstance(self.amount, int) or isinstance(self.amount, bool):
            raise TypeError("amount must be an int")
        if self.amount <= 0:
            raise ValueError(f"transfer amount must be positive: {self.amount}")


def vault_account(pool_id: str) -> str:
    """Account that holds a pool's reserves and signs its outgoing transfers."""
    return f"vault:{pool_id}"
