from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd


@dataclass(frozen=True)
class AnalysisResult:
    analyzer: str
    summary: dict[str, Any]
    tables: dict[str, pd.DataFrame]


class Analyzer:
    name: str
    # Analyzers that compare against earlier periods need reports outside the time-range view.
    full_history: bool = False

    def run(self, df: pd.DataFrame, now: pd.Timestamp) -> AnalysisResult:
        raise NotImplementedError
