"""Accounting engine components: fixed-point math, accrual, ledger, guard, collaborators."""

from .accrual import AccrualState, ExchangeRateAccrual
from .asset import FungibleAsset, InMemoryAsset
from .clock import Clock, ManualClock, SystemClock
from .events import AuditLog, VaultEvent
from .fixed_point import MAX_UINT256, SCALE
from .guard import VaultGuard
from .ledger import ShareLedger

__all__ = [
    "AccrualState",
    "AuditLog",
    "Clock",
    "ExchangeRateAccrual",
    "FungibleAsset",
    "InMemoryAsset",
    "MAX_UINT256",
    "ManualClock",
    "SCALE",
    "ShareLedger",
    "SystemClock",
    "VaultEvent",
    "VaultGuard",
]
