from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from incident_insights.viz.common import save_figure


def plot_bucket_counts(buckets: pd.DataFrame, output_path: Path) -> Path | None:
    required = {"period", "total", "resolved", "pending"}
    if buckets.empty or not required.issubset(set(buckets.columns)):
        return None

    positions = np.arange(len(buckets))
    width = 0.27
    plt.figure(figsize=(max(6.0, min(16.0, 0.6 * len(buckets) + 4.0)), 4))
    plt.bar(
        positions - width, buckets["total"], width=width, label="Total Reports", color="#8884d8"
    )
    plt.bar(positions, buckets["resolved"], width=width, label="Resolved", color="#82ca9d")
    plt.bar(positions + width, buckets["pending"], width=width, label="Pending", color="#ffc658")
    plt.xticks(positions, buckets["period"].astype(str).tolist(), rotation=45, ha="right")
    plt.title("Incident reports over time")
    plt.ylabel("Reports")
    plt.legend()
    return save_figure(output_path)
