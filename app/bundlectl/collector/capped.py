"""Count-capped report directory.

A FileListCap keeps at most a fixed number of files in one folder,
deleting the oldest ones as new reports arrive. Pruning takes the
directory guard, so it never runs while a collection pass is reading
the folder.
"""

import logging
from pathlib import Path

from bundlectl.collector.guard import ManagedDirectory

logger = logging.getLogger(__name__)


class FileListCap(ManagedDirectory):
    """A managed directory that retains only the newest ``size`` files.

    Only regular files directly inside the folder count towards the cap;
    subdirectories are left alone.

    Args:
        folder: Directory holding the reports.
        size: Maximum number of files to retain.

    Raises:
        ValueError: If size is not positive.
    """

    def __init__(self, folder: Path, size: int) -> None:
        if size <= 0:
            msg = f"Cap size must be positive, got {size}"
            raise ValueError(msg)
        super().__init__(folder)
        self._size = size

    @property
    def folder(self) -> Path:
        """Directory holding the capped files."""
        return self.root

    @property
    def size(self) -> int:
        """Maximum number of files retained."""
        return self._size

    def file(self, name: str) -> Path:
        """Return the path a new report called name should be written to."""
        return self.root / name

    def add(self, path: Path) -> list[Path]:
        """Register a newly written file and enforce the cap.

        Args:
            path: File that was just written into the folder.

        Returns:
            Paths deleted to bring the folder back under the cap.
        """
        logger.debug("Recorded %s in %s", path.name, self.root)
        return self.prune()

    def prune(self) -> list[Path]:
        """Delete the oldest files beyond the cap.

        Age is taken from the modification time, ties broken by name.
        Blocks while a collection pass holds the directory guard.

        Returns:
            Paths that were deleted, oldest first.
        """
        with self.locked():
            return self._prune_unlocked()

    def _prune_unlocked(self) -> list[Path]:
        """Prune without taking the lock. Caller must hold it."""
        files = self._list_files()
        excess = len(files) - self._size
        if excess <= 0:
            return []

        deleted: list[Path] = []
        for _mtime, _name, path in files[:excess]:
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Cannot prune %s: %s", path, e)
                continue
            deleted.append(path)

        if deleted:
            logger.info("Pruned %d file(s) from %s", len(deleted), self.root)
        return deleted

    def _list_files(self) -> list[tuple[float, str, Path]]:
        """List regular files in the folder, oldest first."""
        if not self.root.is_dir():
            return []

        files: list[tuple[float, str, Path]] = []
        for entry in self.root.iterdir():
            try:
                if entry.is_symlink() or not entry.is_file():
                    continue
                files.append((entry.stat().st_mtime, entry.name, entry))
            except OSError:
                continue
        files.sort()
        return files
