"""Typed exception hierarchy for the vault engine.

Every failure aborts the whole operation and leaves the vault exactly as it
was before the call. Callers should catch by type and read the structured
attributes rather than parse messages:

    try:
        vault.withdraw(holder, shares)
    except InsufficientSharesError as e:
        reply(code=e.code, requested=e.requested, available=e.available)

Hierarchy:

    VaultError (base)
    +-- InvalidAmountError        INVALID_AMOUNT
    +-- DustAmountError           DUST_AMOUNT
    +-- InsufficientSharesError   INSUFFICIENT_SHARES
    +-- NoSharesError             NO_SHARES
    +-- VaultPausedError          PAUSED
    +-- TransferFailedError       TRANSFER_FAILED
    +-- UnauthorizedError         UNAUTHORIZED
    +-- ReservedAssetError        RESERVED_ASSET
    +-- ArithmeticOverflowError   OVERFLOW
    +-- ReentrantCallError        REENTRANT_CALL
"""

from typing import Any, Optional


class VaultError(Exception):
    """Base class for all vault errors."""

    code: str = "VAULT_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidAmountError(VaultError):
    """Amount is zero, negative, or not an integer."""

    code = "INVALID_AMOUNT"

    def __init__(self, amount: Any, what: str = "amount"):
        self.amount = amount
        self.what = what
        super().__init__(f"Invalid {what}: {amount!r}")


class DustAmountError(VaultError):
    """Deposit converts to zero shares at the current exchange rate."""

    code = "DUST_AMOUNT"

    def __init__(self, amount: int, exchange_rate: int):
        self.amount = amount
        self.exchange_rate = exchange_rate
        super().__init__(
            f"Deposit of {amount} mints zero shares at exchange rate {exchange_rate}"
        )


class InsufficientSharesError(VaultError):
    """Holder owns fewer shares than requested."""

    code = "INSUFFICIENT_SHARES"

    def __init__(self, holder: str, requested: int, available: int):
        self.holder = holder
        self.requested = requested
        self.available = available
        super().__init__(
            f"{holder} requested {requested} shares but holds {available}"
        )


class NoSharesError(VaultError):
    """Holder has no shares to withdraw."""

    code = "NO_SHARES"

    def __init__(self, holder: str):
        self.holder = holder
        super().__init__(f"{holder} holds no shares")


class VaultPausedError(VaultError):
    """Deposits and withdrawals are gated off."""

    code = "PAUSED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Vault is paused; {operation} rejected")


class TransferFailedError(VaultError):
    """The asset collaborator reported a failed transfer."""

    code = "TRANSFER_FAILED"

    def __init__(self, asset_id: str, sender: str, recipient: str, amount: int):
        self.asset_id = asset_id
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
        super().__init__(
            f"Transfer of {amount} {asset_id} from {sender} to {recipient} failed"
        )


class UnauthorizedError(VaultError):
    """Caller is not the vault owner."""

    code = "UNAUTHORIZED"

    def __init__(self, caller: str, operation: str):
        self.caller = caller
        self.operation = operation
        super().__init__(f"{caller} is not authorized to call {operation}")


class ReservedAssetError(VaultError):
    """Rescue targeted the vault's own managed asset."""

    code = "RESERVED_ASSET"

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"{asset_id} is the vault's managed asset and cannot be rescued")


class ArithmeticOverflowError(VaultError):
    """Fixed-point intermediate left the unsigned 256-bit range."""

    code = "OVERFLOW"

    def __init__(self, operation: str, value: Optional[int] = None):
        self.operation = operation
        self.value = value
        super().__init__(f"Arithmetic overflow in {operation}")


class ReentrantCallError(VaultError):
    """A guarded entry point was entered while another was executing."""

    code = "REENTRANT_CALL"

    def __init__(self, operation: str, active: str):
        self.operation = operation
        self.active = active
        super().__init__(f"Reentrant call to {operation} while {active} is executing")
