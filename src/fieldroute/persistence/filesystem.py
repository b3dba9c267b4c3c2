"""On-disk run directories for route plan outputs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import settings

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "summary.json"
ASSIGNMENTS_FILENAME = "assignments.csv"


class FileStorage:
    """Keeps each plan run in its own timestamped folder under ``<data_root>/outputs``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.output_root = self.root / "outputs"
        self.output_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, prefix: str = "plan") -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        path = self.output_root / f"{prefix}_{stamp}"
        suffix = 1
        while path.exists():
            path = self.output_root / f"{prefix}_{stamp}_{suffix}"
            suffix += 1
        path.mkdir(parents=True)
        return path

    def write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def write_csv(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # csv module output already carries \r\n row endings
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def save_plan(self, summary: dict, assignments_csv: str, *, prefix: str = "plan") -> Path:
        """Write a plan summary and its assignment table into a fresh run directory."""
        run_dir = self.make_run_directory(prefix=prefix)
        self.write_json(run_dir / SUMMARY_FILENAME, summary)
        self.write_csv(run_dir / ASSIGNMENTS_FILENAME, assignments_csv)
        logger.info("Saved plan outputs to %s", run_dir)
        return run_dir

    def list_runs(self, prefix: str = "plan") -> list[Path]:
        """Run directories for ``prefix``, oldest first."""
        return sorted(path for path in self.output_root.glob(f"{prefix}_*") if path.is_dir())
