from __future__ import annotations

import os
import stat
from collections.abc import Iterator
from pathlib import Path

from .models import DirectoryReadError


class DirectoryWalker:
    """Lazily yields every regular file below ``root`` without following symlinks."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def iter_files(self) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(
            self.root, onerror=self._raise, followlinks=False
        ):
            dirnames.sort()
            directory = Path(dirpath)
            for name in sorted(filenames):
                file_path = directory / name
                if self._is_regular_file(file_path):
                    yield file_path

    def _is_regular_file(self, path: Path) -> bool:
        try:
            mode = path.lstat().st_mode
        except OSError as exc:
            raise DirectoryReadError(path, exc) from exc
        return stat.S_ISREG(mode)

    @staticmethod
    def _raise(exc: OSError) -> None:
        filename = getattr(exc, "filename", None)
        path = Path(os.fsdecode(filename)) if filename else None
        raise DirectoryReadError(path, exc) from exc
