"""Yield vault - share accounting over a single fungible asset.

Depositors hand over the asset and receive shares at the current exchange
rate; the rate grows with time, so shares redeem for more asset later.

Every mutating entry point runs as one transaction:

1. checks (amount, pause gate, balances, ownership)
2. accrue the exchange rate to now
3. mutate the share ledger
4. call out to the asset (deposit pulls, withdraw pushes)
5. record the audit event

Any exception anywhere in that sequence restores the state captured before
step 1, so a failed call has no observable effect. Audit observers are
notified only after the outermost transaction commits.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .engine.accrual import ExchangeRateAccrual
from .engine.asset import FungibleAsset
from .engine.clock import Clock, SystemClock
from .engine.events import (
    ASSET_RESCUED,
    DEPOSIT,
    PAUSED_SET,
    RATE_PER_SECOND_UPDATED,
    WITHDRAW,
    AuditLog,
)
from .engine.fixed_point import SCALE, mul_scale_down
from .engine.guard import VaultGuard
from .engine.ledger import ShareLedger
from .exceptions import (
    DustAmountError,
    InsufficientSharesError,
    InvalidAmountError,
    NoSharesError,
    ReservedAssetError,
    TransferFailedError,
    VaultError,
)
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class VaultState:
    """Point-in-time snapshot of the vault for reporting and validation."""
    timestamp: int
    asset_id: str
    owner: str
    exchange_rate: int
    rate_per_second: int
    last_accrual_timestamp: int
    total_shares: int
    shares_of: Mapping[str, int]
    total_assets: int
    paused: bool

    @property
    def liabilities(self) -> int:
        """Assets owed if every share redeemed at the stored rate."""
        return mul_scale_down(self.total_shares, self.exchange_rate)


@dataclass
class _Snapshot:
    ledger: tuple
    accrual: object
    paused: bool
    audit_length: int


class Vault:
    """Single-asset yield-bearing vault."""

    def __init__(
        self,
        asset: FungibleAsset,
        owner: str,
        rate_per_second: int,
        clock: Optional[Clock] = None,
        address: Optional[str] = None,
        paused: bool = False,
    ):
        """
        Initialize vault.

        Args:
            asset: Underlying asset ledger (fixed for the vault's lifetime)
            owner: Identity allowed to call admin operations
            rate_per_second: Initial growth coefficient scaled by SCALE
            clock: Time source (system time by default)
            address: Vault's own identity on the asset ledger
            paused: Start with deposits and withdrawals gated off
        """
        self._asset = asset
        self.clock = clock or SystemClock()
        self.address = address or f"vault:{asset.asset_id}"
        self.guard = VaultGuard(owner=owner, paused=paused)
        self.ledger = ShareLedger()
        self.accrual = ExchangeRateAccrual(
            rate_per_second=rate_per_second,
            start_timestamp=self.clock.now(),
        )
        self.audit = AuditLog()
        self._depth = 0

    @classmethod
    def from_config(cls, config, asset: FungibleAsset, clock: Optional[Clock] = None) -> "Vault":
        """Build a vault from a loaded Config."""
        settings = config.vault
        if asset.asset_id != settings.asset_id:
            raise ValueError(
                f"Asset {asset.asset_id} does not match configured asset {settings.asset_id}"
            )
        return cls(
            asset=asset,
            owner=settings.owner,
            rate_per_second=settings.rate_per_second,
            clock=clock,
            address=settings.address,
            paused=settings.paused,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def asset(self) -> FungibleAsset:
        return self._asset

    @property
    def owner(self) -> str:
        return self.guard.owner

    @property
    def paused(self) -> bool:
        return self.guard.paused

    @property
    def exchange_rate(self) -> int:
        """Stored exchange rate, as of the last accrual."""
        return self.accrual.exchange_rate

    @property
    def rate_per_second(self) -> int:
        return self.accrual.rate_per_second

    @property
    def last_accrual_timestamp(self) -> int:
        return self.accrual.last_accrual_timestamp

    @property
    def total_shares(self) -> int:
        return self.ledger.total_shares

    def shares_of(self, holder: str) -> int:
        return self.ledger.shares_of(holder)

    def total_assets(self) -> int:
        """Asset balance actually held by the vault (not shares * rate)."""
        return self._asset.balance_of(self.address)

    def pending_exchange_rate(self) -> int:
        """Exchange rate an accrue() at the current time would produce."""
        return self.accrual.pending_rate(self.clock.now())

    def preview_deposit(self, amount: int) -> int:
        """
        Shares a deposit of amount would mint at the stored rate.

        Does not accrue first, so it can under-state value when time has
        passed since the last accrual. Call accrue() beforehand for a current
        quote.
        """
        if amount <= 0:
            return 0
        return ShareLedger.to_shares(amount, self.accrual.exchange_rate)

    def preview_withdraw(self, share_amount: int) -> int:
        """Assets share_amount would redeem for at the stored rate (no accrual)."""
        if share_amount <= 0:
            return 0
        return ShareLedger.to_assets(share_amount, self.accrual.exchange_rate)

    def state(self) -> VaultState:
        return VaultState(
            timestamp=self.clock.now(),
            asset_id=self._asset.asset_id,
            owner=self.guard.owner,
            exchange_rate=self.accrual.exchange_rate,
            rate_per_second=self.accrual.rate_per_second,
            last_accrual_timestamp=self.accrual.last_accrual_timestamp,
            total_shares=self.ledger.total_shares,
            shares_of=MappingProxyType(dict(self.ledger.holders())),
            total_assets=self.total_assets(),
            paused=self.guard.paused,
        )

    # ------------------------------------------------------------------
    # Holder operations
    # ------------------------------------------------------------------

    def accrue(self) -> int:
        """Bring the exchange rate up to the current time. Returns the growth."""
        with self._transaction("accrue"):
            return self.accrual.accrue(self.clock.now())

    def deposit(self, holder: str, amount: int) -> int:
        """
        Deposit amount of the asset for holder and mint shares.

        The vault pulls the asset with transfer_from, so holder must have
        approved the vault's address beforehand.

        Args:
            holder: Depositor and recipient of the shares
            amount: Asset amount to deposit

        Returns:
            Shares minted

        Raises:
            InvalidAmountError: amount is zero
            VaultPausedError: the vault is paused
            DustAmountError: amount converts to zero shares
            TransferFailedError: the asset pull failed
            ReentrantCallError: called from inside another guarded operation
        """
        with self._transaction("deposit", guarded=True):
            _require_positive(amount, "amount")
            self.guard.require_not_paused("deposit")

            now = self.clock.now()
            self.accrual.accrue(now)
            rate = self.accrual.exchange_rate

            shares = ShareLedger.to_shares(amount, rate)
            if shares == 0:
                raise DustAmountError(amount, rate)
            self.ledger.mint(holder, shares)

            if not self._asset.transfer_from(self.address, holder, self.address, amount):
                raise TransferFailedError(self._asset.asset_id, holder, self.address, amount)

            self.audit.record(
                DEPOSIT, now, holder=holder, amount=amount, shares=shares, exchange_rate=rate
            )
            logger.info(
                "Deposit",
                extra={"event": "vault.deposit", "holder": holder, "amount": amount,
                       "shares": shares, "exchange_rate": rate},
            )
            return shares

    def withdraw(self, holder: str, share_amount: int) -> int:
        """
        Burn share_amount of holder's shares and pay out the asset.

        Shares are burned before the asset is pushed out.

        Args:
            holder: Share owner and recipient of the asset
            share_amount: Shares to redeem

        Returns:
            Asset amount paid out

        Raises:
            InvalidAmountError: share_amount is zero
            VaultPausedError: the vault is paused
            InsufficientSharesError: holder owns fewer shares
            TransferFailedError: the asset push failed
            ReentrantCallError: called from inside another guarded operation
        """
        with self._transaction("withdraw", guarded=True):
            return self._withdraw(holder, share_amount)

    def withdraw_all(self, holder: str) -> int:
        """Redeem holder's entire share balance. Raises NoSharesError if empty."""
        with self._transaction("withdraw_all", guarded=True):
            balance = self.ledger.shares_of(holder)
            if balance == 0:
                raise NoSharesError(holder)
            return self._withdraw(holder, balance, operation="withdraw_all")

    def _withdraw(self, holder: str, share_amount: int, operation: str = "withdraw") -> int:
        _require_positive(share_amount, "share_amount")
        self.guard.require_not_paused(operation)
        balance = self.ledger.shares_of(holder)
        if balance < share_amount:
            raise InsufficientSharesError(holder, share_amount, balance)

        now = self.clock.now()
        self.accrual.accrue(now)
        rate = self.accrual.exchange_rate

        assets = ShareLedger.to_assets(share_amount, rate)
        self.ledger.burn(holder, share_amount)

        if not self._asset.transfer(self.address, holder, assets):
            raise TransferFailedError(self._asset.asset_id, self.address, holder, assets)

        self.audit.record(
            WITHDRAW, now, holder=holder, shares=share_amount, amount=assets, exchange_rate=rate
        )
        logger.info(
            "Withdraw",
            extra={"event": "vault.withdraw", "holder": holder, "amount": assets,
                   "shares": share_amount, "exchange_rate": rate},
        )
        return assets

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def set_rate_per_second(self, caller: str, new_rate: int) -> None:
        """Accrue at the old rate up to now, then switch to new_rate."""
        with self._transaction("set_rate_per_second"):
            self.guard.require_owner(caller, "set_rate_per_second")
            if isinstance(new_rate, bool) or not isinstance(new_rate, int) or new_rate < 0:
                raise InvalidAmountError(new_rate, what="rate_per_second")

            now = self.clock.now()
            self.accrual.accrue(now)
            old_rate = self.accrual.set_rate_per_second(new_rate)

            self.audit.record(RATE_PER_SECOND_UPDATED, now, old_rate=old_rate, new_rate=new_rate)
            logger.info(
                "Rate per second updated",
                extra={"event": "vault.rate_updated", "old_rate": old_rate, "new_rate": new_rate},
            )

    def set_paused(self, caller: str, flag: bool) -> None:
        """Open or close the deposit/withdraw gate. Does not accrue."""
        with self._transaction("set_paused"):
            self.guard.require_owner(caller, "set_paused")
            self.guard.paused = bool(flag)
            self.audit.record(PAUSED_SET, self.clock.now(), paused=self.guard.paused)
            logger.info("Pause gate set", extra={"event": "vault.paused", "paused": self.guard.paused})

    def rescue_asset(self, caller: str, token: FungibleAsset, to: str, amount: int) -> None:
        """
        Sweep a foreign asset the vault happens to hold.

        Raises:
            UnauthorizedError: caller is not the owner
            ReservedAssetError: token is the vault's managed asset
            TransferFailedError: the push failed
        """
        with self._transaction("rescue_asset"):
            self.guard.require_owner(caller, "rescue_asset")
            if token is self._asset or token.asset_id == self._asset.asset_id:
                raise ReservedAssetError(token.asset_id)
            _require_positive(amount, "amount")

            if not token.transfer(self.address, to, amount):
                raise TransferFailedError(token.asset_id, self.address, to, amount)

            self.audit.record(
                ASSET_RESCUED, self.clock.now(), asset_id=token.asset_id, to=to, amount=amount
            )
            logger.info(
                "Foreign asset rescued",
                extra={"event": "vault.rescue", "asset_id": token.asset_id, "to": to, "amount": amount},
            )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str, guarded: bool = False) -> Iterator[None]:
        snapshot = _Snapshot(
            ledger=self.ledger.snapshot(),
            accrual=self.accrual.snapshot(),
            paused=self.guard.paused,
            audit_length=len(self.audit),
        )
        self._depth += 1
        try:
            if guarded:
                with self.guard.locked(operation):
                    yield
            else:
                yield
        except Exception as exc:
            self.ledger.restore(snapshot.ledger)
            self.accrual.restore(snapshot.accrual)
            self.guard.paused = snapshot.paused
            self.audit.truncate(snapshot.audit_length)
            if isinstance(exc, VaultError):
                logger.warning(
                    "%s rejected: %s", operation, exc.message,
                    extra={"event": "vault.rejected", "operation": operation, "code": exc.code},
                )
            raise
        finally:
            self._depth -= 1
        # Observers only hear about committed work; a call nested inside another
        # operation's transfer hook can still be rolled back by the outer call.
        if self._depth == 0:
            self.audit.publish()


def _require_positive(value: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidAmountError(value, what=what)


__all__ = ["Vault", "VaultState", "SCALE"]
