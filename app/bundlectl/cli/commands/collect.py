"""Collect and list commands.

``collect`` writes the selected files of a directory into a zip bundle;
``list`` shows what a pass would collect without writing anything.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import typer

from bundlectl.cli.types import OutputFormat, build_spec
from bundlectl.collector.components import add_contents
from bundlectl.collector.errors import SinkError
from bundlectl.collector.guard import ManagedDirectory
from bundlectl.collector.models import CollectedEntry
from bundlectl.collector.sinks import ZipSink
from bundlectl.collector.walker import DirectoryCollector
from bundlectl.core.paths import ensure_bundles_dir
from bundlectl.utils.formatting import (
    console,
    create_entry_table,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

IncludeOption = Annotated[
    list[str] | None,
    typer.Option(
        "--include",
        "-i",
        help='Include glob (repeatable, comma separated). Pass "" to clear the setting.',
    ),
]
ExcludeOption = Annotated[
    list[str] | None,
    typer.Option(
        "--exclude",
        "-x",
        help='Exclude glob (repeatable, comma separated). Pass "" to clear the setting.',
    ),
]
CaseOption = Annotated[
    bool | None,
    typer.Option(
        "--case-sensitive/--ignore-case",
        help="Match globs with or without regard to letter case. Default: from settings.",
    ),
]
MaxDepthOption = Annotated[
    int | None,
    typer.Option("--max-depth", "-d", help="Directory levels walked below ROOT."),
]
MaxFileSizeOption = Annotated[
    int | None,
    typer.Option("--max-file-size", help="Per-file byte cap in the bundle."),
]
SuffixOption = Annotated[
    str | None,
    typer.Option("--suffix", help="Only collect files ending with this suffix."),
]
PrefixOption = Annotated[
    str,
    typer.Option("--prefix", "-p", help="Prefix for entry names inside the bundle."),
]


def collect_bundle(
    root: Annotated[
        Path,
        typer.Argument(help="Directory to collect files from."),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Bundle file to write. Default: timestamped zip in the state dir.",
        ),
    ] = None,
    prefix: PrefixOption = "",
    include: IncludeOption = None,
    exclude: ExcludeOption = None,
    case_sensitive: CaseOption = None,
    max_depth: MaxDepthOption = None,
    max_file_size: MaxFileSizeOption = None,
    suffix: SuffixOption = None,
) -> None:
    """Collect selected files from ROOT into a zip bundle."""
    spec = build_spec(
        include=include,
        exclude=exclude,
        case_sensitive=case_sensitive,
        max_depth=max_depth,
        max_file_size=max_file_size,
        suffix=suffix,
    )

    if not root.is_dir():
        print_warning(f"Directory does not exist: {root}")

    output_path = output if output is not None else _default_output(root)
    directory = ManagedDirectory(root)

    try:
        with ZipSink(output_path) as sink:
            count = add_contents(sink, directory, spec, prefix=prefix)
    except SinkError as e:
        print_error(str(e))
        print_info(f"Partial bundle left at {output_path}")
        raise typer.Exit(code=1) from e

    if count == 0:
        print_info(f"No files matched; wrote empty bundle {output_path}")
        return
    print_success(f"Collected {count} file(s) into {output_path}")


def list_entries(
    root: Annotated[
        Path,
        typer.Argument(help="Directory to inspect."),
    ],
    prefix: PrefixOption = "",
    include: IncludeOption = None,
    exclude: ExcludeOption = None,
    case_sensitive: CaseOption = None,
    max_depth: MaxDepthOption = None,
    max_file_size: MaxFileSizeOption = None,
    suffix: SuffixOption = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List the files a collection of ROOT would include."""
    spec = build_spec(
        include=include,
        exclude=exclude,
        case_sensitive=case_sensitive,
        max_depth=max_depth,
        max_file_size=max_file_size,
        suffix=suffix,
    )

    directory = ManagedDirectory(root)
    with directory.locked():
        entries = list(DirectoryCollector(spec).collect(root, prefix))
        sizes = [_file_size(e) for e in entries]

    if output_format == OutputFormat.JSON:
        _print_json(entries, sizes)
        return

    if not entries:
        print_info("No files matched.")
        return

    table = create_entry_table()
    for entry, size in zip(entries, sizes, strict=True):
        size_str = format_size(size) if size is not None else "-"
        if size is not None and size > entry.max_size:
            size_str = f"{size_str} [warning](truncated)[/]"
        table.add_row(entry.archive_name, size_str, str(entry.path))
    console.print(table)

    total = sum(min(s, e.max_size) for e, s in zip(entries, sizes, strict=True) if s is not None)
    console.print(f"\n[dim]{len(entries)} file(s), {format_size(total)} after size caps[/dim]")


# === Private helper functions ===


def _default_output(root: Path) -> Path:
    """Build a timestamped bundle path in the bundles directory."""
    try:
        bundles_dir = ensure_bundles_dir()
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    name = root.name or "bundle"
    return bundles_dir / f"{name}-{stamp}.zip"


def _file_size(entry: CollectedEntry) -> int | None:
    """Get the on-disk size of an entry, or None if unavailable."""
    try:
        return entry.path.stat().st_size
    except OSError:
        return None


def _print_json(entries: list[CollectedEntry], sizes: list[int | None]) -> None:
    """Display entries as JSON."""
    data = [
        {
            "archive_name": e.archive_name,
            "relative_path": e.relative_path,
            "path": str(e.path),
            "size_bytes": size,
            "max_size": e.max_size,
        }
        for e, size in zip(entries, sizes, strict=True)
    ]
    console.print_json(json.dumps(data))
