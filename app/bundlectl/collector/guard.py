"""Directory guard for managed directories.

A managed directory is a folder whose file set is mutated by some
background process (typically pruning of old files). Enumerating and
reading its files must happen while the directory's own lock is held,
otherwise a file could be deleted between discovery and read.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ManagedDirectory:
    """A directory plus the exclusive lock that guards its contents.

    The lock belongs to the instance, not to the path string: two
    ManagedDirectory objects for the same path do not serialize with
    each other. Hold a single instance per logical directory.

    Readers and pruners take the same lock. The lock is not reentrant;
    passes must not nest.

    Attributes:
        root: Filesystem path of the directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._lock = threading.Lock()

    @contextmanager
    def locked(self) -> Iterator["ManagedDirectory"]:
        """Hold the directory lock for the duration of the with-block.

        Yields:
            This managed directory.
        """
        with self._lock:
            logger.debug("Acquired guard on %s", self.root)
            try:
                yield self
            finally:
                logger.debug("Released guard on %s", self.root)

    def is_locked(self) -> bool:
        """Check whether some pass or pruner currently holds the lock."""
        return self._lock.locked()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.root)!r})"


def with_lock(directory: ManagedDirectory, fn: Callable[[], T]) -> T:
    """Run fn while holding the directory's lock.

    The lock is released on every exit path. Exceptions raised by fn
    propagate unchanged.

    Args:
        directory: Managed directory to guard.
        fn: Zero-argument callable to run under the lock.

    Returns:
        Whatever fn returns.
    """
    with directory.locked():
        return fn()
