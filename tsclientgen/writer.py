"""Write generated files to the output directory.

Every file is staged next to its destination first and only renamed into
place once all of them were written. Files being overwritten are moved
aside while the renames run and put back if one fails, so a failed write
leaves the output directory as it was.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional, Sequence

from .errors import WriteError
from .models import GeneratedFile

logger = logging.getLogger(__name__)

STAGING_SUFFIX = ".tsclientgen-tmp"
BACKUP_SUFFIX = ".tsclientgen-bak"

Sink = Callable[[Sequence[GeneratedFile]], None]


class FileSink:
    """Persist GeneratedFile objects under output_dir, in the order given."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.written: list[Path] = []

    def _target(self, file: GeneratedFile) -> Path:
        return self.output_dir.joinpath(*file.path.split("/"))

    def __call__(self, files: Sequence[GeneratedFile]) -> None:
        staged: list[tuple[Path, Path]] = []
        try:
            for file in files:
                target = self._target(file)
                temp = target.with_name(target.name + STAGING_SUFFIX)
                target.parent.mkdir(parents=True, exist_ok=True)
                temp.write_text(file.content, encoding="utf-8")
                staged.append((temp, target))
        except OSError as e:
            self._discard(staged)
            raise WriteError(f"Failed to write {file.path}: {e}") from e

        # (target, backup of its previous content or None), in rename order
        moved: list[tuple[Path, Optional[Path]]] = []
        try:
            for temp, target in staged:
                backup = None
                if target.exists():
                    backup = target.with_name(target.name + BACKUP_SUFFIX)
                    os.replace(target, backup)
                moved.append((target, backup))
                os.replace(temp, target)
        except OSError as e:
            self._rollback(moved)
            self._discard(staged)
            raise WriteError(f"Failed to move {target} into place: {e}") from e

        for _, backup in moved:
            if backup is not None:
                backup.unlink(missing_ok=True)
        self.written = [target for _, target in staged]
        logger.info("Wrote %d files to %s", len(staged), self.output_dir)

    @staticmethod
    def _discard(staged: list[tuple[Path, Path]]) -> None:
        for temp, _ in staged:
            temp.unlink(missing_ok=True)

    @staticmethod
    def _rollback(moved: list[tuple[Path, Optional[Path]]]) -> None:
        """Put back every file the rename phase replaced or created."""
        for target, backup in reversed(moved):
            try:
                if backup is None:
                    target.unlink(missing_ok=True)
                else:
                    os.replace(backup, target)
            except OSError as e:
                logger.error("Could not restore %s: %s", target, e)
