from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt

FIGURE_DPI = 120


def save_figure(output_path: Path, dpi: int = FIGURE_DPI) -> Path:
    """Write the active figure to ``output_path`` and close it."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    figure = plt.gcf()
    try:
        figure.tight_layout()
        figure.savefig(output_path, dpi=dpi)
    finally:
        plt.close(figure)
    return output_path
