"""Fungible asset collaborator interface and an in-memory ledger implementation."""

from typing import Callable, Dict, Optional, Protocol, Tuple, runtime_checkable

from ..logging_config import get_logger

logger = get_logger(__name__)

# Called before balances move: (asset_id, sender, recipient, amount)
TransferHook = Callable[[str, str, str, int], None]


@runtime_checkable
class FungibleAsset(Protocol):
    """What the vault needs from the underlying asset.

    Transfers signal failure by returning False; the vault turns that into
    TransferFailedError and rolls back.
    """

    asset_id: str

    def balance_of(self, holder: str) -> int:
        ...

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Push amount from sender (the caller) to to."""
        ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Pull amount from owner to to, spending spender's allowance."""
        ...


class InMemoryAsset:
    """Dictionary-backed fungible asset ledger.

    Supports allowances, a global failure switch, and an optional hook invoked
    before each successful transfer moves balances. The hook lets tests model
    a token that calls back into the vault mid-transfer; if the hook raises,
    no balance moves.
    """

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self.total_supply = 0
        self.fail_transfers = False
        self.hook: Optional[TransferHook] = None

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def mint(self, to: str, amount: int) -> None:
        """Create amount out of thin air for to (test and simulation funding)."""
        if amount < 0:
            raise ValueError(f"Cannot mint negative amount {amount}")
        self._balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            return False
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        if not self._can_move(sender, amount):
            return False
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if allowed < amount or not self._can_move(owner, amount):
            return False
        self._move(owner, to, amount)
        self._allowances[(owner, spender)] = allowed - amount
        return True

    def _can_move(self, sender: str, amount: int) -> bool:
        if self.fail_transfers or amount < 0:
            return False
        return self.balance_of(sender) >= amount

    def _move(self, sender: str, to: str, amount: int) -> None:
        if self.hook is not None:
            self.hook(self.asset_id, sender, to, amount)
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[to] = self.balance_of(to) + amount
        logger.debug(
            "Asset transfer",
            extra={"event": "asset.transfer", "asset_id": self.asset_id,
                   "sender": sender, "recipient": to, "amount": amount},
        )
