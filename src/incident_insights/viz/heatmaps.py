from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from incident_insights.analyzers.heatmap import normalized_heatmap
from incident_insights.preprocess.time import DAY_NAMES
from incident_insights.viz.common import save_figure


def cells_to_grid(cells: pd.DataFrame) -> pd.DataFrame:
    """Pivot long-form (day, hour, value) cells back into a day-by-hour grid."""
    return (
        cells.pivot(index="day", columns="hour", values="value")
        .reindex(index=list(DAY_NAMES), columns=range(24))
        .fillna(0)
    )


def plot_day_hour_heatmap(
    grid: pd.DataFrame,
    output_path: Path,
    title: str = "Incident reports by day/hour",
) -> Path:
    intensity = normalized_heatmap(grid)
    plt.figure(figsize=(12, 4))
    image = plt.imshow(
        intensity.to_numpy(dtype=float), aspect="auto", cmap="Reds", vmin=0.0, vmax=1.0
    )
    plt.colorbar(image, label="Relative intensity")
    plt.title(title)
    plt.xlabel("Hour")
    plt.ylabel("Day of week")
    plt.xticks(np.arange(24), [str(hour) for hour in range(24)])
    plt.yticks(np.arange(len(grid.index)), [str(day) for day in grid.index])
    return save_figure(output_path)
