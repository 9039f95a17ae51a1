"""Export functionality for CSV and JSON."""

import json
from typing import Iterable, List

import pandas as pd

from ..engine.events import AuditLog, VaultEvent
from ..engine.fixed_point import SCALE
from ..simulation.runner import SimulationResult
from ..vault import VaultState


def states_to_frame(states: List[VaultState]) -> pd.DataFrame:
    """One row per snapshot. Scaled integers stay exact; *_float columns are for plotting."""
    data = []
    for state in states:
        data.append({
            'timestamp': state.timestamp,
            'exchange_rate': state.exchange_rate,
            'exchange_rate_float': state.exchange_rate / SCALE,
            'rate_per_second': state.rate_per_second,
            'last_accrual_timestamp': state.last_accrual_timestamp,
            'total_shares': state.total_shares,
            'total_assets': state.total_assets,
            'liabilities': state.liabilities,
            'num_holders': len(state.shares_of),
            'paused': state.paused,
        })
    # object dtype keeps integers beyond int64 exact
    return pd.DataFrame(data, dtype=object)


def export_csv(result: SimulationResult, filepath: str):
    """Export simulation states to CSV."""
    states_to_frame(result.states).to_csv(filepath, index=False)


def _state_dict(state: VaultState) -> dict:
    return {
        'timestamp': state.timestamp,
        'exchange_rate': state.exchange_rate,
        'rate_per_second': state.rate_per_second,
        'last_accrual_timestamp': state.last_accrual_timestamp,
        'total_shares': state.total_shares,
        'total_assets': state.total_assets,
        'shares_of': dict(state.shares_of),
        'paused': state.paused,
    }


def export_json(result: SimulationResult, filepath: str):
    """Export simulation results to JSON."""
    export_data = {
        'config': result.config.to_dict(),
        'config_hash': result.config.compute_hash(),
        'states': [_state_dict(state) for state in result.states],
        'events': [event.to_dict() for event in result.events],
        'rejections': [vars(r) for r in result.rejections],
        'invariant_violations': result.invariant_violations,
        'final_metrics': result.final_metrics,
    }

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2)


def export_audit_log(log: Iterable[VaultEvent], filepath: str) -> int:
    """
    Write audit events as JSON lines.

    Args:
        log: AuditLog or any iterable of events
        filepath: Destination path

    Returns:
        Number of events written
    """
    events = log.events if isinstance(log, AuditLog) else list(log)
    with open(filepath, 'w') as f:
        for event in events:
            f.write(json.dumps(event.to_dict(), sort_keys=True) + "\n")
    return len(events)
