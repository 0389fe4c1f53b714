"""Bundle components that contribute files from managed directories.

A component knows which permissions a caller must hold and how to add
its files to a sink. The authorization check itself belongs to the
caller; ensure_permitted() is provided for that purpose.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from bundlectl.collector.capped import FileListCap
from bundlectl.collector.errors import PermissionDeniedError
from bundlectl.collector.guard import ManagedDirectory
from bundlectl.collector.models import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILE_SIZE,
    CollectionSpec,
)
from bundlectl.collector.sinks import Sink
from bundlectl.collector.walker import DirectoryCollector

logger = logging.getLogger(__name__)

# Maximum file size to pack (2 MB)
MAX_FILE_SIZE: int = DEFAULT_MAX_FILE_SIZE


class Permission(str, Enum):
    """Capabilities a caller may hold.

    Attributes:
        ADMINISTER: Full administrative access to the host.
        READ: Read-only access.
    """

    ADMINISTER = "administer"
    READ = "read"


def add_contents(
    sink: Sink,
    directory: ManagedDirectory,
    spec: CollectionSpec,
    prefix: str = "",
) -> int:
    """Collect files from a managed directory into a sink under its guard.

    Enumeration and sink consumption both happen inside the locked
    window, so a pruner sharing the directory's lock cannot delete a
    discovered file before the sink has copied it. A file that vanishes
    anyway (e.g. removed by an unrelated process) is skipped. Sink
    errors abort the pass; entries already added stay in the sink.

    Args:
        sink: Consumer of the collected files.
        directory: Managed directory to collect from.
        spec: Filters and limits for the pass.
        prefix: Logical prefix prepended to every archive name.

    Returns:
        Number of entries handed to the sink.

    Raises:
        SinkError: If the sink fails to consume an entry.
    """
    collector = DirectoryCollector(spec)
    added = 0

    with directory.locked():
        for entry in collector.collect(directory.root, prefix):
            try:
                handle = entry.open()
            except FileNotFoundError:
                logger.warning("File disappeared before it could be read: %s", entry.path)
                continue
            except OSError as e:
                logger.warning("Cannot read %s: %s", entry.path, e)
                continue

            with handle:
                sink.add(entry.archive_name, handle, entry.max_size)
            added += 1

    logger.debug("Added %d file(s) from %s", added, directory.root)
    return added


@runtime_checkable
class Component(Protocol):
    """Something that contributes files to a support bundle."""

    @property
    def required_permissions(self) -> frozenset[Permission]:
        """Permissions the caller must hold before invoking add_contents()."""
        ...

    def add_contents(self, sink: Sink) -> int:
        """Add this component's files to sink and return how many were added."""
        ...


def ensure_permitted(component: Component, granted: Iterable[Permission]) -> None:
    """Check that granted covers everything component requires.

    Args:
        component: Component about to be invoked.
        granted: Permissions held by the invoking principal.

    Raises:
        PermissionDeniedError: If any required permission is missing.
    """
    missing = component.required_permissions - frozenset(granted)
    if missing:
        names = ", ".join(sorted(p.value for p in missing))
        msg = f"{type(component).__name__} requires permission(s): {names}"
        raise PermissionDeniedError(msg)


class FileListCapComponent:
    """Attaches the ``.txt`` reports of a FileListCap to a bundle.

    Entries are named ``<folder-name>/<file-name>``; subdirectories of
    the folder are not collected.

    Args:
        cap: Capped report directory to collect from.
    """

    SUFFIX = ".txt"

    def __init__(self, cap: FileListCap) -> None:
        self._cap = cap
        # A lone * only matches files directly in the folder
        self._spec = CollectionSpec(
            allowed_suffix=self.SUFFIX,
            max_depth=1,
            include_patterns=("*",),
            max_file_size=MAX_FILE_SIZE,
        )

    @property
    def required_permissions(self) -> frozenset[Permission]:
        """Reading reports requires administrative access."""
        return frozenset({Permission.ADMINISTER})

    def add_contents(self, sink: Sink) -> int:
        """Add the cap's reports to sink while pruning is blocked."""
        return add_contents(sink, self._cap, self._spec, prefix=self._cap.folder.name)


class RunDirectoryComponent:
    """Attaches the files of a build/run directory to a bundle.

    Args:
        directory: Managed run directory.
        prefix: Archive prefix, e.g. ``items/<job>/builds/<number>``.
        includes: Comma/newline separated include globs ("" = everything).
        excludes: Comma/newline separated exclude globs ("" = nothing).
        case_sensitive: Whether glob matching distinguishes letter case.
        max_depth: Directory levels walked below the run directory.
        max_file_size: Per-file byte cap.

    Raises:
        pydantic.ValidationError: If a glob is malformed or a limit is invalid.
    """

    def __init__(
        self,
        directory: ManagedDirectory | Path,
        prefix: str,
        includes: str = "",
        excludes: str = "",
        case_sensitive: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        if isinstance(directory, Path):
            directory = ManagedDirectory(directory)
        self._directory = directory
        self._prefix = prefix
        self._spec = CollectionSpec(
            include_patterns=includes,
            exclude_patterns=excludes,
            case_sensitive=case_sensitive,
            max_depth=max_depth,
            max_file_size=max_file_size,
        )

    @classmethod
    def from_spec(
        cls,
        directory: ManagedDirectory | Path,
        prefix: str,
        spec: CollectionSpec,
    ) -> "RunDirectoryComponent":
        """Build a component from an existing CollectionSpec."""
        component = cls(directory, prefix)
        component._spec = spec
        return component

    @property
    def spec(self) -> CollectionSpec:
        """The collection spec applied to the run directory."""
        return self._spec

    @property
    def directory(self) -> ManagedDirectory:
        """The managed run directory."""
        return self._directory

    @property
    def required_permissions(self) -> frozenset[Permission]:
        """Collecting run files requires administrative access."""
        return frozenset({Permission.ADMINISTER})

    def add_contents(self, sink: Sink) -> int:
        """Add the run directory's selected files to sink."""
        return add_contents(sink, self._directory, self._spec, prefix=self._prefix)
