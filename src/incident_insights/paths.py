from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputPaths:
    """Layout of a run directory: ``tables/``, ``figures/`` and ``summary/`` under ``root``."""

    root: Path
    tables: Path
    figures: Path
    summary: Path

    def table(self, analyzer: str, table: str, extension: str) -> Path:
        return self.tables / f"{analyzer}__{table}.{extension}"

    def summary_file(self, analyzer: str) -> Path:
        return self.summary / f"{analyzer}.json"

    def figure(self, name: str, extension: str) -> Path:
        return self.figures / f"{name}.{extension.lstrip('.')}"


def build_output_paths(out_dir: Path) -> OutputPaths:
    root = Path(out_dir)
    paths = OutputPaths(
        root=root,
        tables=root / "tables",
        figures=root / "figures",
        summary=root / "summary",
    )
    for directory in (paths.tables, paths.figures, paths.summary):
        directory.mkdir(parents=True, exist_ok=True)
    return paths
