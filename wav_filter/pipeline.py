from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from .config import FilterSettings
from .duration import get_duration_ms
from .fs_utils import copy_file, ensure_directory, relative_destination
from .models import CopyError, CopyResult, FileOpenError
from .scanner import DirectoryWalker

logger = logging.getLogger(__name__)


class FilterPipeline:
    """Copies every WAV file whose duration lies within the configured range.

    Files are handled one at a time in walk order: extension check, header
    read, range check, then a copy into the mirrored location below the
    output root. Any error aborts the run unless ``fail_fast`` is disabled,
    in which case unreadable or uncopyable files are logged and skipped.
    Directory read failures always abort.
    """

    def __init__(
        self,
        settings: FilterSettings,
        walker: Optional[DirectoryWalker] = None,
    ) -> None:
        self.settings = settings
        self.walker = walker or DirectoryWalker(settings.input_root)

    def run(self) -> CopyResult:
        if not self.settings.dry_run:
            ensure_directory(self.settings.output_root)
        return self.process(self.walker.iter_files())

    def process(self, paths: Iterable[Path]) -> CopyResult:
        result = CopyResult()
        for path in paths:
            result.scanned += 1
            try:
                self._process_file(path, result)
            except (FileOpenError, CopyError) as exc:
                if self.settings.fail_fast:
                    raise
                result.failed += 1
                logger.warning("Skipping %s: %s", path, exc)
        logger.debug("Run finished: %s", result.to_record())
        return result

    def _process_file(self, path: Path, result: CopyResult) -> None:
        if path.suffix != self.settings.extension:
            logger.debug("Ignoring non-WAV file %s", path)
            return
        duration = get_duration_ms(path)
        if not self.settings.matches(duration):
            result.skipped += 1
            logger.debug("Skipping %s (%d ms outside range)", path, duration)
            return
        target = relative_destination(
            path, self.settings.input_root, self.settings.output_root
        )
        if self.settings.dry_run:
            logger.info("Dry-run would copy %s -> %s (%d ms)", path, target, duration)
        else:
            copy_file(path, target)
            logger.info("Copied %s -> %s (%d ms)", path, target, duration)
        result.copied += 1
