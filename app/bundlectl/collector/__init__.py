"""Selective file collection for support bundles.

This package provides the directory guard, the glob-filtered directory
walker, the count-capped report directory and the sinks and components
that turn managed directories into bundle entries.
"""

from bundlectl.collector.capped import FileListCap
from bundlectl.collector.components import (
    MAX_FILE_SIZE,
    Component,
    FileListCapComponent,
    Permission,
    RunDirectoryComponent,
    add_contents,
    ensure_permitted,
)
from bundlectl.collector.errors import (
    CollectorError,
    PatternSyntaxError,
    PermissionDeniedError,
    SinkError,
)
from bundlectl.collector.guard import ManagedDirectory, with_lock
from bundlectl.collector.models import CollectedEntry, CollectionSpec
from bundlectl.collector.patterns import GlobPattern, compile_patterns, split_patterns
from bundlectl.collector.sinks import Sink, ZipSink
from bundlectl.collector.walker import DirectoryCollector, collect

__all__ = [
    "MAX_FILE_SIZE",
    "CollectedEntry",
    "CollectionSpec",
    "CollectorError",
    "Component",
    "DirectoryCollector",
    "FileListCap",
    "FileListCapComponent",
    "GlobPattern",
    "ManagedDirectory",
    "PatternSyntaxError",
    "Permission",
    "PermissionDeniedError",
    "RunDirectoryComponent",
    "Sink",
    "SinkError",
    "ZipSink",
    "add_contents",
    "collect",
    "compile_patterns",
    "ensure_permitted",
    "split_patterns",
    "with_lock",
]
