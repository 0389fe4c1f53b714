"""Bundle sinks that consume collected files.

A sink receives one named, readable file at a time and must copy its
bytes (up to the entry's size cap) before add() returns, because the
directory guard is released as soon as the pass ends.
"""

import logging
import zipfile
from pathlib import Path
from types import TracebackType
from typing import BinaryIO, Protocol, runtime_checkable

from bundlectl.collector.errors import SinkError

logger = logging.getLogger(__name__)

# Copy buffer size for streaming file contents into the archive
_CHUNK_SIZE: int = 64 * 1024


@runtime_checkable
class Sink(Protocol):
    """Consumer of collected files, e.g. a support-bundle archive."""

    def add(self, archive_name: str, handle: BinaryIO, max_size: int) -> None:
        """Fully consume handle (up to max_size bytes) as archive_name.

        Raises:
            SinkError: If the entry cannot be stored.
        """
        ...


class ZipSink:
    """Writes collected files into a zip archive.

    Use as a context manager; the archive is finalized on exit. Files
    larger than their entry's size cap are truncated to the cap.

    Args:
        path: Destination archive path. Parent directories are created.

    Example:
        >>> with ZipSink(Path("bundle.zip")) as sink:
        ...     add_contents(sink, directory, spec, prefix="items/job/builds/1")
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._zip: zipfile.ZipFile | None = None
        self._names: list[str] = []

    @property
    def path(self) -> Path:
        """Destination archive path."""
        return self._path

    @property
    def names(self) -> list[str]:
        """Archive members written so far, in insertion order.

        A member whose copy failed part-way stays in the archive with
        partial content and is listed here as well.
        """
        return list(self._names)

    def open(self) -> "ZipSink":
        """Create the archive file.

        Raises:
            SinkError: If the archive cannot be created.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._zip = zipfile.ZipFile(self._path, mode="w", compression=zipfile.ZIP_DEFLATED)
        except OSError as e:
            msg = f"Cannot create bundle {self._path}: {e}"
            raise SinkError(msg) from e
        return self

    def close(self) -> None:
        """Finalize the archive. Safe to call more than once."""
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> "ZipSink":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def add(self, archive_name: str, handle: BinaryIO, max_size: int) -> None:
        """Copy up to max_size bytes from handle into the archive.

        Args:
            archive_name: Entry name inside the archive.
            handle: Readable binary file object.
            max_size: Maximum number of bytes to copy.

        Raises:
            SinkError: If the archive is closed, the name is already
                present, or reading/writing fails.
        """
        if self._zip is None:
            msg = f"Bundle {self._path} is not open"
            raise SinkError(msg)
        if archive_name in self._names:
            msg = f"Duplicate bundle entry: {archive_name}"
            raise SinkError(msg)

        remaining = max_size
        try:
            with self._zip.open(archive_name, mode="w", force_zip64=True) as dest:
                # The member exists from here on, even if the copy fails
                self._names.append(archive_name)
                while remaining > 0:
                    chunk = handle.read(min(_CHUNK_SIZE, remaining))
                    if not chunk:
                        break
                    dest.write(chunk)
                    remaining -= len(chunk)
            truncated = remaining == 0 and bool(handle.read(1))
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            msg = f"Cannot add {archive_name} to bundle: {e}"
            raise SinkError(msg) from e

        if truncated:
            logger.info("Truncated %s to %d bytes", archive_name, max_size)
