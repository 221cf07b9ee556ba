"""File discovery utilities."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from .errors import ReadImportsError
from .models import PendingFile

LOGGER = logging.getLogger(__name__)


class DirectoryScanner:
    """List the regular files directly inside a directory, oldest first."""

    def scan(self, directory: Path) -> list[PendingFile]:
        """Return the files in directory ordered by modification time.

        Subdirectories are not traversed. Entries with equal modification times
        are ordered by name.

        Args:
            directory: Directory to list.

        Returns:
            list[PendingFile]: Regular files, oldest modification first.

        Raises:
            ReadImportsError: If the directory cannot be listed or an entry's
                metadata cannot be read.
        """
        try:
            entries = list(directory.iterdir())
        except OSError as exc:
            raise ReadImportsError(f"Unable to list {directory}: {exc}") from exc

        found: list[tuple[int, str, PendingFile]] = []
        for path in entries:
            try:
                if not path.is_file():
                    continue
                stat = path.stat()
                pending = PendingFile(
                    path=path,
                    size_bytes=stat.st_size,
                    modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            except (OSError, OverflowError, ValueError) as exc:
                raise ReadImportsError(f"Unable to read metadata for {path}: {exc}") from exc

            found.append((stat.st_mtime_ns, path.name, pending))

        found.sort(key=lambda item: (item[0], item[1]))
        LOGGER.debug("Scanned %s: %d of %d entries are files", directory, len(found), len(entries))
        return [pending for _, _, pending in found]


__all__ = ["DirectoryScanner"]
