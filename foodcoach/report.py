from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from .storage.records import RecordStore

HISTORY_COLUMNS = ["id", "created_at", "test_type", "result_value", "result_category"]

_Y_LABELS = {
    "bmi": "BMI (kg/m²)",
    "bmr": "BMR (kcal/day)",
    "tdee": "TDEE (kcal/day)",
    "ideal_weight": "Ideal weight (kg)",
}


def load_health_history(records: RecordStore, user_id: str) -> pd.DataFrame:
    rows = records.list_health_tests(user_id)
    if not rows:
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    # Rows come newest first; flip so ties on created_at keep insertion order.
    df = pd.DataFrame(list(reversed(rows)))
    for col in HISTORY_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df["created_at"] = pd.to_datetime(df["created_at"], errors="coerce", utc=True)
    df["result_value"] = pd.to_numeric(df["result_value"], errors="coerce")
    return df.sort_values("created_at", kind="stable").reset_index(drop=True)


def summarize_latest(df: pd.DataFrame) -> pd.DataFrame:
    """Latest row per test type, one row each."""
    if df.empty:
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    latest = df.groupby("test_type", sort=True).tail(1)
    return latest[HISTORY_COLUMNS].sort_values("test_type").reset_index(drop=True)


def plot_health_trend(df: pd.DataFrame, test_type: str, out_path: Path) -> Optional[Path]:
    subset = df[df["test_type"] == test_type] if not df.empty else df
    if subset.empty:
        return None
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots()
    try:
        ax.plot(subset["created_at"].dt.tz_convert(None), subset["result_value"], marker="o")
        ax.set_xlabel("Date")
        ax.set_ylabel(_Y_LABELS.get(test_type, "Value"))
        ax.set_title(f"{test_type.upper()} history")
        fig.autofmt_xdate()
        fig.savefig(out_path, dpi=150, bbox_inches="tight")
    finally:
        plt.close(fig)
    return out_path
