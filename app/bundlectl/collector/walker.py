"""Selective directory walker.

Walks a directory tree and yields the files that pass the suffix,
include, exclude and depth filters of a CollectionSpec. The walker is
a pure filter and namer: it never reads file contents and never
enforces the size cap itself.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

from bundlectl.collector.models import CollectedEntry, CollectionSpec
from bundlectl.collector.patterns import matches_any

logger = logging.getLogger(__name__)


class DirectoryCollector:
    """Selects files below a root directory according to a CollectionSpec.

    Files are yielded depth-first: the files of a directory first, sorted
    by name, then each subdirectory in name order. Symbolic links to
    directories are never followed, and a symlinked file is only
    collected when its target lies inside the root.

    Args:
        spec: Filters and limits for the pass.
    """

    def __init__(self, spec: CollectionSpec) -> None:
        self._spec = spec

    @property
    def spec(self) -> CollectionSpec:
        """The spec this collector applies."""
        return self._spec

    def collect(self, root: Path, prefix: str = "") -> Iterator[CollectedEntry]:
        """Yield an entry for every file below root that passes all filters.

        A missing root, or a root that is not a directory, yields nothing.

        Args:
            root: Directory to walk.
            prefix: Logical prefix prepended to every archive name.

        Yields:
            CollectedEntry instances in a deterministic order.
        """
        if not root.is_dir():
            logger.debug("Collection root does not exist or is not a directory: %s", root)
            return

        resolved_root = root.resolve()
        normalized_prefix = prefix.strip("/")
        yield from self._walk(root, resolved_root, (), normalized_prefix)

    def accepts(self, relative_path: str) -> bool:
        """Check a root-relative path against the suffix, include and exclude filters.

        Args:
            relative_path: Slash-separated path relative to the root.

        Returns:
            True if the file would be collected (depth aside).
        """
        spec = self._spec
        name = relative_path.rsplit("/", 1)[-1]

        if spec.allowed_suffix is not None and not name.endswith(spec.allowed_suffix):
            return False

        if spec.includes and not matches_any(spec.includes, relative_path):
            return False

        # Exclude always wins over include
        return not (spec.excludes and matches_any(spec.excludes, relative_path))

    def _walk(
        self,
        directory: Path,
        resolved_root: Path,
        parents: tuple[str, ...],
        prefix: str,
    ) -> Iterator[CollectedEntry]:
        """Walk one directory level, then recurse into subdirectories.

        Args:
            directory: Directory being listed.
            resolved_root: Fully resolved collection root.
            parents: Names of the directories between the root and this one.
            prefix: Normalized archive-name prefix.

        Yields:
            CollectedEntry for each accepted file at this level and below.
        """
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except FileNotFoundError:
            logger.warning("Directory vanished during collection: %s", directory)
            return
        except PermissionError:
            logger.warning("Permission denied scanning directory: %s", directory)
            return
        except OSError as exc:
            logger.warning("Cannot list directory %s: %s", directory, exc)
            return

        subdirs: list[Path] = []
        for entry in entries:
            try:
                if entry.is_symlink():
                    if entry.is_dir():
                        logger.debug("Not following directory symlink: %s", entry)
                        continue
                    if not self._link_inside_root(entry, resolved_root):
                        logger.debug("Skipping symlink pointing outside root: %s", entry)
                        continue
                if entry.is_dir():
                    subdirs.append(entry)
                    continue
                if not entry.is_file():
                    continue
            except OSError:
                logger.warning("Cannot determine type of: %s", entry)
                continue

            relative = "/".join((*parents, entry.name))
            if not self.accepts(relative):
                continue

            yield CollectedEntry(
                archive_name=f"{prefix}/{relative}" if prefix else relative,
                path=entry,
                relative_path=relative,
                max_size=self._spec.max_file_size,
            )

        # parents holds the depth of the files listed above; subdirectory
        # files sit one level deeper
        if len(parents) + 1 > self._spec.max_depth:
            return

        for subdir in subdirs:
            yield from self._walk(subdir, resolved_root, (*parents, subdir.name), prefix)

    @staticmethod
    def _link_inside_root(link: Path, resolved_root: Path) -> bool:
        """Check whether a symlinked file resolves to a location inside the root."""
        try:
            target = link.resolve(strict=True)
        except (OSError, RuntimeError):
            return False
        return target.is_relative_to(resolved_root)


def collect(root: Path, spec: CollectionSpec, prefix: str = "") -> Iterator[CollectedEntry]:
    """Lazily collect the files below root that satisfy spec.

    Convenience wrapper around DirectoryCollector.

    Args:
        root: Directory to walk.
        spec: Filters and limits for the pass.
        prefix: Logical prefix prepended to every archive name.

    Returns:
        Iterator of CollectedEntry in deterministic order.
    """
    return DirectoryCollector(spec).collect(root, prefix)
