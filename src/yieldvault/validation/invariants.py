"""Invariant and solvency checks over vault state."""

from dataclasses import dataclass
from typing import List, Optional

from ..engine.fixed_point import SCALE
from ..vault import Vault, VaultState


@dataclass
class ValidationWarning:
    """A validation finding with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # "conservation", "rate", "bounds", "solvency", "transition"
    message: str
    details: Optional[str] = None


def solvency_gap(state: VaultState) -> int:
    """
    Liabilities not covered by assets held.

    Positive means the last redeemers cannot be paid at the quoted rate;
    zero or negative means the vault is fully backed.
    """
    return state.liabilities - state.total_assets


class InvariantChecker:
    """Run invariant checks against a vault snapshot."""

    def __init__(self, vault: Vault):
        """Initialize with the vault to inspect."""
        self.vault = vault

    def _state(self) -> VaultState:
        return self.vault.state()

    def check_conservation(self, state: Optional[VaultState] = None) -> List[ValidationWarning]:
        """Total shares must equal the sum of holder balances."""
        state = state or self._state()
        summed = sum(state.shares_of.values())
        if summed != state.total_shares:
            return [ValidationWarning(
                severity="error",
                category="conservation",
                message="Total shares do not match the sum of balances",
                details=f"total_shares={state.total_shares}, sum={summed}, diff={state.total_shares - summed:+d}",
            )]
        return []

    def check_rate_floor(self, state: Optional[VaultState] = None) -> List[ValidationWarning]:
        """Exchange rate never drops below 1:1."""
        state = state or self._state()
        if state.exchange_rate < SCALE:
            return [ValidationWarning(
                severity="error",
                category="rate",
                message="Exchange rate below the 1:1 baseline",
                details=f"exchange_rate={state.exchange_rate}",
            )]
        return []

    def check_non_negative(self, state: Optional[VaultState] = None) -> List[ValidationWarning]:
        """No holder balance may be negative."""
        state = state or self._state()
        warnings = []
        for holder, shares in state.shares_of.items():
            if shares < 0:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="bounds",
                    message=f"Negative share balance for {holder}",
                    details=f"shares={shares}",
                ))
        if state.total_shares < 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="bounds",
                message="Negative total shares",
                details=f"total_shares={state.total_shares}",
            ))
        return warnings

    def check_solvency(self, state: Optional[VaultState] = None) -> List[ValidationWarning]:
        """
        Compare what shares are worth at the stored rate with what the vault holds.

        Accrual grows the rate whether or not asset arrives to back it, so a
        shortfall is reported as a warning rather than an error.
        """
        state = state or self._state()
        gap = solvency_gap(state)
        if gap > 0:
            return [ValidationWarning(
                severity="warning",
                category="solvency",
                message="Accrued liabilities exceed assets held; late redeemers may not be paid in full",
                details=f"liabilities={state.liabilities}, total_assets={state.total_assets}, shortfall={gap}",
            )]
        return []

    def run_all(self) -> List[ValidationWarning]:
        """Run every state check against one snapshot."""
        state = self._state()
        warnings: List[ValidationWarning] = []
        warnings.extend(self.check_conservation(state))
        warnings.extend(self.check_rate_floor(state))
        warnings.extend(self.check_non_negative(state))
        warnings.extend(self.check_solvency(state))
        return warnings


def check_transition(before: VaultState, after: VaultState) -> List[ValidationWarning]:
    """Rate and accrual timestamp must not move backwards between snapshots."""
    warnings = []
    if after.exchange_rate < before.exchange_rate:
        warnings.append(ValidationWarning(
            severity="error",
            category="transition",
            message="Exchange rate decreased",
            details=f"{before.exchange_rate} -> {after.exchange_rate}",
        ))
    if after.last_accrual_timestamp < before.last_accrual_timestamp:
        warnings.append(ValidationWarning(
            severity="error",
            category="transition",
            message="Accrual timestamp moved backwards",
            details=f"{before.last_accrual_timestamp} -> {after.last_accrual_timestamp}",
        ))
    return warnings


def errors_only(warnings: List[ValidationWarning]) -> List[ValidationWarning]:
    return [w for w in warnings if w.severity == "error"]
