"""Share ledger - per-holder balances and share/asset conversion."""

from typing import Dict, Iterator, Tuple

from ..exceptions import InsufficientSharesError, InvalidAmountError
from .fixed_point import checked_add, checked_sub, div_scale_down, mul_scale_down


class ShareLedger:
    """Holder share balances with a running total.

    Absent holders read as zero. Zero balances are dropped so the mapping only
    holds live positions, and total_shares always equals the sum of balances.
    """

    def __init__(self):
        self._balances: Dict[str, int] = {}
        self._total_shares = 0

    @property
    def total_shares(self) -> int:
        return self._total_shares

    def shares_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def holders(self) -> Iterator[Tuple[str, int]]:
        """Iterate (holder, shares) for every non-zero balance."""
        return iter(list(self._balances.items()))

    def __len__(self) -> int:
        return len(self._balances)

    @staticmethod
    def to_shares(amount: int, exchange_rate: int) -> int:
        """Shares for an asset amount: floor(amount * SCALE / rate)."""
        return div_scale_down(amount, exchange_rate)

    @staticmethod
    def to_assets(shares: int, exchange_rate: int) -> int:
        """Assets for a share amount: floor(shares * rate / SCALE)."""
        return mul_scale_down(shares, exchange_rate)

    def mint(self, holder: str, shares: int) -> None:
        """Credit shares to holder."""
        if shares <= 0:
            raise InvalidAmountError(shares, what="shares")
        new_total = checked_add(self._total_shares, shares)
        self._balances[holder] = checked_add(self.shares_of(holder), shares)
        self._total_shares = new_total

    def burn(self, holder: str, shares: int) -> None:
        """
        Debit shares from holder.

        Raises:
            InsufficientSharesError: If holder owns fewer than shares
        """
        if shares <= 0:
            raise InvalidAmountError(shares, what="shares")
        balance = self.shares_of(holder)
        if balance < shares:
            raise InsufficientSharesError(holder, shares, balance)
        remaining = balance - shares
        if remaining:
            self._balances[holder] = remaining
        else:
            del self._balances[holder]
        self._total_shares = checked_sub(self._total_shares, shares)

    def snapshot(self) -> Tuple[Dict[str, int], int]:
        return dict(self._balances), self._total_shares

    def restore(self, snapshot: Tuple[Dict[str, int], int]) -> None:
        balances, total = snapshot
        self._balances = dict(balances)
        self._total_shares = total
