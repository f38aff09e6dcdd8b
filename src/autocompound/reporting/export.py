"""Export functionality for CSV and JSON."""

import json
from dataclasses import asdict
from typing import Iterable

import pandas as pd

from ..engine.state import CompoundHistoryEntry
from ..simulation.runner import SimulationResult

HISTORY_COLUMNS = [
    'account',
    'timestamp',
    'gross_reward',
    'net_compounded',
    'operational_cost',
    'fee',
    'efficiency_bps',
]


def history_frame(history: Iterable[CompoundHistoryEntry]) -> pd.DataFrame:
    """Compound history as a DataFrame, one row per compound."""
    rows = [asdict(entry) for entry in history]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def account_summary(history: Iterable[CompoundHistoryEntry]) -> pd.DataFrame:
    """Per-account totals and mean efficiency."""
    df = history_frame(history)
    if df.empty:
        return pd.DataFrame(columns=['account', 'compounds', 'gross_reward', 'net_compounded', 'fee', 'mean_efficiency_bps'])
    summary = df.groupby('account').agg(
        compounds=('timestamp', 'count'),
        gross_reward=('gross_reward', 'sum'),
        net_compounded=('net_compounded', 'sum'),
        fee=('fee', 'sum'),
        mean_efficiency_bps=('efficiency_bps', 'mean'),
    )
    return summary.reset_index()


def export_csv(result: SimulationResult, filepath: str):
    """Export per-step simulation metrics to CSV."""
    df = pd.DataFrame(result.metrics_over_time)
    df.to_csv(filepath, index=False)


def export_history_csv(history: Iterable[CompoundHistoryEntry], filepath: str):
    """Export compound history to CSV."""
    history_frame(history).to_csv(filepath, index=False)


def export_json(result: SimulationResult, filepath: str):
    """Export simulation results to JSON."""
    export_data = {
        'config': result.config.to_dict(),
        'config_hash': result.config.compute_hash(),
        'initial_principals': result.initial_principals,
        'final_principals': result.final_principals,
        'metrics_over_time': result.metrics_over_time,
        'final_metrics': result.final_metrics,
        'history': [asdict(entry) for entry in result.history],
    }

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2)
