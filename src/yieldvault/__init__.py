"""Single-asset yield-bearing vault with fixed-point share accounting."""

from .engine.asset import FungibleAsset, InMemoryAsset
from .engine.clock import Clock, ManualClock, SystemClock
from .engine.fixed_point import SCALE
from .exceptions import (
    ArithmeticOverflowError,
    DustAmountError,
    InsufficientSharesError,
    InvalidAmountError,
    NoSharesError,
    ReentrantCallError,
    ReservedAssetError,
    TransferFailedError,
    UnauthorizedError,
    VaultError,
    VaultPausedError,
)
from .vault import Vault, VaultState

__version__ = "0.1.0"

__all__ = [
    "ArithmeticOverflowError",
    "Clock",
    "DustAmountError",
    "FungibleAsset",
    "InMemoryAsset",
    "InsufficientSharesError",
    "InvalidAmountError",
    "ManualClock",
    "NoSharesError",
    "ReentrantCallError",
    "ReservedAssetError",
    "SCALE",
    "SystemClock",
    "TransferFailedError",
    "UnauthorizedError",
    "Vault",
    "VaultError",
    "VaultPausedError",
    "VaultState",
]
