"""Collection domain models.

This module defines the immutable configuration of a single collection
pass and the entries a pass produces.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, BinaryIO

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from bundlectl.collector.patterns import GlobPattern, compile_patterns, split_patterns

# Maximum number of bytes copied per file (2 MB, decimal)
DEFAULT_MAX_FILE_SIZE: int = 2 * 1_000_000

# Default recursion bound below the collection root
DEFAULT_MAX_DEPTH: int = 10


class CollectionSpec(BaseModel):
    """Configuration for one collection pass.

    Pattern fields accept either a comma/newline separated string or a
    sequence of strings. Every pattern is compiled during validation, so
    a malformed glob is rejected when the spec is built rather than in
    the middle of a directory walk.

    Attributes:
        include_patterns: Globs a path must match (empty = include everything).
        exclude_patterns: Globs that reject a path (empty = exclude nothing).
        case_sensitive: Whether glob matching distinguishes letter case.
        max_depth: Deepest directory level (below the root) that is walked.
        max_file_size: Byte cap handed to the sink with every entry.
        allowed_suffix: Optional file-name suffix filter, e.g. ".txt".
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    include_patterns: Annotated[
        tuple[str, ...],
        Field(default_factory=tuple, description="Include globs"),
    ]
    exclude_patterns: Annotated[
        tuple[str, ...],
        Field(default_factory=tuple, description="Exclude globs"),
    ]
    case_sensitive: Annotated[bool, Field(description="Case-sensitive matching")] = True
    max_depth: Annotated[
        int,
        Field(ge=1, description="Directory levels walked below the root"),
    ] = DEFAULT_MAX_DEPTH
    max_file_size: Annotated[
        int,
        Field(gt=0, description="Per-file byte cap applied by the sink"),
    ] = DEFAULT_MAX_FILE_SIZE
    allowed_suffix: Annotated[
        str | None,
        Field(description="Only collect files whose name ends with this suffix"),
    ] = None

    _includes: tuple[GlobPattern, ...] = PrivateAttr(default=())
    _excludes: tuple[GlobPattern, ...] = PrivateAttr(default=())

    @field_validator("include_patterns", "exclude_patterns", mode="before")
    @classmethod
    def split_pattern_input(cls, v: object) -> tuple[str, ...]:
        """Normalize raw pattern input into a tuple of patterns."""
        if v is None or isinstance(v, str):
            return split_patterns(v)
        if isinstance(v, (list, tuple, set, frozenset)):
            return split_patterns(str(item) for item in v)
        msg = "patterns must be a string or a sequence of strings"
        raise ValueError(msg)

    @field_validator("include_patterns", "exclude_patterns")
    @classmethod
    def validate_pattern_syntax(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject malformed globs at construction time."""
        compile_patterns(v)
        return v

    @field_validator("allowed_suffix")
    @classmethod
    def blank_suffix_is_none(cls, v: str | None) -> str | None:
        """Treat an empty suffix as no suffix filter."""
        if v is not None and not v.strip():
            return None
        return v

    def model_post_init(self, __context: Any) -> None:
        """Compile patterns with the configured case sensitivity."""
        self._includes = compile_patterns(self.include_patterns, case_sensitive=self.case_sensitive)
        self._excludes = compile_patterns(self.exclude_patterns, case_sensitive=self.case_sensitive)

    @property
    def includes(self) -> tuple[GlobPattern, ...]:
        """Compiled include patterns."""
        return self._includes

    @property
    def excludes(self) -> tuple[GlobPattern, ...]:
        """Compiled exclude patterns."""
        return self._excludes


@dataclass(frozen=True, slots=True)
class CollectedEntry:
    """A single file selected by a collection pass.

    Entries are only meaningful while the directory guard of the pass
    is held; afterwards the underlying file may already be pruned.

    Attributes:
        archive_name: Name of the entry inside the bundle (``prefix/relative``).
        path: Absolute path of the file on disk.
        relative_path: Slash-separated path relative to the collection root.
        max_size: Byte cap the sink applies when copying the file.
    """

    archive_name: str
    path: Path
    relative_path: str
    max_size: int

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.archive_name:
            msg = "Archive name cannot be empty"
            raise ValueError(msg)
        if self.max_size <= 0:
            msg = f"max_size must be positive, got {self.max_size}"
            raise ValueError(msg)

    def open(self) -> BinaryIO:
        """Open the underlying file for binary reading.

        Raises:
            OSError: If the file cannot be opened (e.g. it was deleted).
        """
        return self.path.open("rb")
