from __future__ import annotations

import shutil
from pathlib import Path

from .models import CopyError, CreateDirectoryError, PathRelativizationError


def relative_destination(path: Path, input_root: Path, output_root: Path) -> Path:
    try:
        relative = path.relative_to(input_root)
    except ValueError as exc:
        raise PathRelativizationError(path, input_root) from exc
    return output_root / relative


def ensure_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CreateDirectoryError(path, exc) from exc


def copy_file(src: Path, dst: Path) -> None:
    ensure_directory(dst.parent)
    try:
        shutil.copy(src, dst)
    except OSError as exc:
        raise CopyError(src, dst, exc) from exc
