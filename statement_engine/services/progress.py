from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

"""Progress display with tqdm (TTY only).

A single bar over the workbooks of a batch run. When stdout is not a TTY
(CI, redirected output) no bar is created so log lines stay clean.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Workbook progress bar; a no-op outside a TTY."""

    def __init__(self, total_files: int, *, description: str = "Validating reports") -> None:
        self.total_files = total_files
        self.description = description
        self.current_file = 0
        self.passed = 0
        self.failed = 0
        self.enabled = is_tty_enabled()
        self.pbar: tqdm | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def start_file(self, file_path: Path) -> None:
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, passed: bool = True) -> None:
        """Count the workbook outcome and show running passed/failed totals."""
        if passed:
            self.passed += 1
        else:
            self.failed += 1
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)
            self.pbar.set_postfix(passed=self.passed, failed=self.failed)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
