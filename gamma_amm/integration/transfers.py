"""
Transfer collaborator.

The engine asks the following of whatever moves assets:
- `asset_info(asset)`: kind, decimals and transfer fee of a registered asset
- `transfer(...)`: move `amount` (gross) from `source` to `destination`
- `transfer_overhead(asset, net)`: extra amount so that `net` arrives in full
- `transfer_fee(asset, gross)`: amount withheld when `gross` is sent
- `atomic()`: a context in which a raised exception undoes every transfer

`InMemoryTransferLedger` is the reference implementation used by tests and
the offline demo.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Protocol, Tuple

from ..kernels.python.transfer_fee_v1 import calculate_fee, calculate_inverse_fee
from ..state.amounts import Amount, AssetId
from ..state.assets import AssetInfo


class TransferError(Exception):
    """A transfer could not be executed (unknown asset, insufficient balance, bad decimals)."""


class TransferCollaborator(Protocol):
    def asset_info(self, asset: AssetId) -> AssetInfo:
        ...

    def transfer(
        self,
        payer: str,
        source: str,
        destination: str,
        asset: AssetId,
        amount: int,
        decimals: int,
    ) -> None:
        ...

    def transfer_overhead(self, asset: AssetId, net_amount: int) -> int:
        ...

    def transfer_fee(self, asset: AssetId, gross_amount: int) -> int:
        ...

    def atomic(self):
        ...


@dataclass(frozen=True)
class TransferRecord:
    payer: str
    source: str
    destination: str
    asset: AssetId
    amount: int
    fee: int


class InMemoryTransferLedger:
    """
    Balance table mapping (owner, asset) -> amount, plus an asset registry.

    A transfer debits `amount` from the source and credits `amount - fee` to
    the destination; the withheld fee is accumulated per asset.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[str, AssetId], Amount] = {}
        self._assets: Dict[AssetId, AssetInfo] = {}
        self._withheld: Dict[AssetId, Amount] = {}
        self.history: List[TransferRecord] = []

    def register_asset(self, info: AssetInfo) -> None:
        self._assets[info.asset_id] = info

    def asset_info(self, asset: AssetId) -> AssetInfo:
        try:
            return self._assets[asset]
        except KeyError:
            raise TransferError(f"unknown asset {asset}") from None

    def balance(self, owner: str, asset: AssetId) -> Amount:
        """Balance for (owner, asset). Returns 0 if not found."""
        return self._balances.get((owner, asset), 0)

    def withheld(self, asset: AssetId) -> Amount:
        return self._withheld.get(asset, 0)

    def mint(self, owner: str, asset: AssetId, amount: Amount) -> None:
        """Credit `amount` out of thin air (test and demo setup)."""
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        self.asset_info(asset)
        self._set(owner, asset, self.balance(owner, asset) + amount)

    def _set(self, owner: str, asset: AssetId, amount: Amount) -> None:
        if amount == 0:
            # Keep the table sparse
            self._balances.pop((owner, asset), None)
        else:
            self._balances[(owner, asset)] = amount

    def transfer_fee(self, asset: AssetId, gross_amount: int) -> int:
        fee = self.asset_info(asset).fee_config
        return calculate_fee(amount=gross_amount, fee_bps=fee.fee_bps, max_fee=fee.max_fee)

    def transfer_overhead(self, asset: AssetId, net_amount: int) -> int:
        fee = self.asset_info(asset).fee_config
        return calculate_inverse_fee(post_fee_amount=net_amount, fee_bps=fee.fee_bps, max_fee=fee.max_fee)

    def transfer(
        self,
        payer: str,
        source: str,
        destination: str,
        asset: AssetId,
        amount: int,
        decimals: int,
    ) -> None:
        info = self.asset_info(asset)
        if decimals != info.decimals:
            raise TransferError(f"decimals mismatch for {asset}: {decimals} != {info.decimals}")
        if amount <= 0:
            raise TransferError(f"transfer amount must be positive: {amount}")
        available = self.balance(source, asset)
        if available < amount:
            raise TransferError(f"insufficient balance: {source} holds {available} {asset}, needs {amount}")

        fee = self.transfer_fee(asset, amount)
        self._set(source, asset, available - amount)
        self._set(destination, asset, self.balance(destination, asset) + amount - fee)
        if fee:
            self._withheld[asset] = self.withheld(asset) + fee
        self.history.append(TransferRecord(payer, source, destination, asset, amount, fee))

    @contextmanager
    def atomic(self) -> Iterator["InMemoryTransferLedger"]:
        """Undo every transfer made inside the block if it raises."""
        balances = dict(self._balances)
        withheld = dict(self._withheld)
        history = list(self.history)
        try:
            yield self
        except BaseException:
            self._balances = balances
            self._withheld = withheld
            self.history = history
            raise
