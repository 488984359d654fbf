from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True, slots=True)
class WavInfo:
    path: Path
    sample_rate: int
    channels: int
    bits_per_sample: int
    # Samples across all channels, as declared by the data chunk size.
    sample_count: int

    @property
    def frames(self) -> int:
        return self.sample_count // self.channels

    @property
    def duration_ms(self) -> int:
        return int(self.sample_count / self.sample_rate * 1000)


@dataclass(slots=True)
class CopyResult:
    copied: int = 0
    scanned: int = 0
    skipped: int = 0
    failed: int = 0

    def to_record(self) -> dict[str, int]:
        return {
            "copied": self.copied,
            "scanned": self.scanned,
            "skipped": self.skipped,
            "failed": self.failed,
        }


class WavFilterError(Exception):
    """Base class for every error that aborts a filter run."""


class ConfigurationError(WavFilterError):
    pass


class FileOpenError(WavFilterError):
    def __init__(self, path: Path, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to open WAV file: {path}{detail}")


class DirectoryReadError(WavFilterError):
    def __init__(self, path: Optional[Path], cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        where = f" under {path}" if path else ""
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to read directory entry{where}{detail}")


class PathRelativizationError(WavFilterError):
    def __init__(self, path: Path, root: Path) -> None:
        self.path = path
        self.root = root
        super().__init__(f"Failed to compute relative path for: {path} (not under {root})")


class CreateDirectoryError(WavFilterError):
    def __init__(self, path: Path, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to create directory: {path}{detail}")


class CopyError(WavFilterError):
    def __init__(
        self, source: Path, destination: Path, cause: Optional[BaseException] = None
    ) -> None:
        self.source = source
        self.destination = destination
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to copy {source} to {destination}{detail}")
