"""Tests for DirectoryCollector selection and ordering."""

import os
from pathlib import Path

import pytest
from bundlectl.collector.models import CollectionSpec
from bundlectl.collector.walker import DirectoryCollector, collect

PREFIX = "items/job-name/builds/1"


def _names(root: Path, spec: CollectionSpec, prefix: str = PREFIX) -> list[str]:
    return [e.archive_name for e in collect(root, spec, prefix)]


class TestEmptyAndMissingRoots:
    """Tests for roots with nothing to collect."""

    def test_empty_root(self, tmp_path: Path) -> None:
        """An empty directory yields nothing."""
        assert _names(tmp_path, CollectionSpec()) == []

    def test_missing_root(self, tmp_path: Path) -> None:
        """A missing root yields nothing instead of raising."""
        assert _names(tmp_path / "does-not-exist", CollectionSpec()) == []

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        """A file given as root yields nothing."""
        path = tmp_path / "file.txt"
        path.write_text("x")
        assert _names(path, CollectionSpec()) == []

    def test_no_matching_files(self, run_dir: Path) -> None:
        """Filters that reject everything yield nothing."""
        assert _names(run_dir, CollectionSpec(include_patterns="*.json")) == []


class TestOrderingAndNaming:
    """Tests for deterministic order and archive names."""

    def test_files_before_subdirectories(self, run_dir: Path) -> None:
        """Files of a directory come first, then subdirectories in name order."""
        assert _names(run_dir, CollectionSpec()) == [
            f"{PREFIX}/build.xml",
            f"{PREFIX}/log",
            f"{PREFIX}/archive/test.txt",
            f"{PREFIX}/workflow/1.xml",
            f"{PREFIX}/workflow/2.xml",
        ]

    def test_order_is_stable_across_runs(self, run_dir: Path) -> None:
        """Two passes over an unchanged tree agree."""
        spec = CollectionSpec()
        assert _names(run_dir, spec) == _names(run_dir, spec)

    def test_entry_fields(self, run_dir: Path) -> None:
        """Entries carry the relative path, absolute path and size cap."""
        spec = CollectionSpec(include_patterns="workflow/1.xml", max_file_size=123)
        entries = list(collect(run_dir, spec, PREFIX))

        assert len(entries) == 1
        entry = entries[0]
        assert entry.relative_path == "workflow/1.xml"
        assert entry.path == run_dir / "workflow" / "1.xml"
        assert entry.max_size == 123

    def test_empty_prefix(self, run_dir: Path) -> None:
        """Without a prefix the archive name is the relative path."""
        assert _names(run_dir, CollectionSpec(include_patterns="log"), prefix="") == ["log"]

    def test_prefix_slashes_collapsed(self, run_dir: Path) -> None:
        """Leading/trailing slashes on the prefix do not double up."""
        names = _names(run_dir, CollectionSpec(include_patterns="log"), prefix="/reports/")
        assert names == ["reports/log"]

    def test_collect_is_lazy(self, run_dir: Path) -> None:
        """collect returns an iterator that walks on demand."""
        iterator = collect(run_dir, CollectionSpec(), PREFIX)
        assert next(iterator).archive_name == f"{PREFIX}/build.xml"


class TestSuffixFilter:
    """Tests for allowed_suffix."""

    def test_only_suffixed_files(self, tmp_path: Path) -> None:
        """Only files ending with the suffix are collected."""
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "b.log").write_text("b")
        (tmp_path / "c.txt").write_text("c")

        names = _names(tmp_path, CollectionSpec(allowed_suffix=".txt"), prefix="slow-requests")
        assert names == ["slow-requests/a.txt", "slow-requests/c.txt"]


class TestIncludeExclude:
    """Tests for include/exclude precedence."""

    def test_include_only(self, run_dir: Path) -> None:
        """Only paths under workflow* are kept."""
        names = _names(run_dir, CollectionSpec(include_patterns="workflow*/**"))
        assert names == [f"{PREFIX}/workflow/1.xml", f"{PREFIX}/workflow/2.xml"]

    def test_exclude_only(self, run_dir: Path) -> None:
        """Excluded subtrees and depth-1 log files are dropped."""
        (run_dir / "archive" / "log").write_text("nested log")
        names = _names(run_dir, CollectionSpec(exclude_patterns="workflow*/**, */log"))

        assert names == [
            f"{PREFIX}/build.xml",
            f"{PREFIX}/log",
            f"{PREFIX}/archive/test.txt",
        ]

    def test_exclude_beats_include(self, run_dir: Path) -> None:
        """A path matching both sets is excluded."""
        spec = CollectionSpec(include_patterns="**/*.xml", exclude_patterns="workflow*/**")
        assert _names(run_dir, spec) == [f"{PREFIX}/build.xml"]

    def test_same_pattern_in_both_sets(self, run_dir: Path) -> None:
        """The same pattern in include and exclude excludes the path."""
        spec = CollectionSpec(include_patterns="build.xml", exclude_patterns="build.xml")
        assert _names(run_dir, spec) == []

    def test_case_insensitive_matching(self, run_dir: Path) -> None:
        """Case-insensitive specs match regardless of letter case."""
        spec = CollectionSpec(include_patterns="WORKFLOW/*.XML", case_sensitive=False)
        assert len(_names(run_dir, spec)) == 2

    def test_case_sensitive_matching(self, run_dir: Path) -> None:
        """Case-sensitive specs do not."""
        spec = CollectionSpec(include_patterns="WORKFLOW/*.XML")
        assert _names(run_dir, spec) == []

    def test_accepts(self) -> None:
        """accepts applies the filters to a bare relative path."""
        collector = DirectoryCollector(
            CollectionSpec(include_patterns="**/*.xml", exclude_patterns="workflow/**")
        )
        assert collector.accepts("build.xml") is True
        assert collector.accepts("workflow/1.xml") is False
        assert collector.accepts("log") is False


class TestDepthBound:
    """Tests for max_depth."""

    @pytest.fixture
    def deep_dir(self, tmp_path: Path) -> Path:
        root = tmp_path / "deep"
        (root / "a" / "b" / "c").mkdir(parents=True)
        (root / "top.txt").write_text("0")
        (root / "a" / "one.txt").write_text("1")
        (root / "a" / "b" / "two.txt").write_text("2")
        (root / "a" / "b" / "c" / "three.txt").write_text("3")
        return root

    def test_depth_one(self, deep_dir: Path) -> None:
        """Depth 0 and 1 are present; deeper files are absent."""
        names = _names(deep_dir, CollectionSpec(max_depth=1), prefix="")
        assert names == ["top.txt", "a/one.txt"]

    def test_depth_two(self, deep_dir: Path) -> None:
        """Raising the bound admits the next level."""
        names = _names(deep_dir, CollectionSpec(max_depth=2), prefix="")
        assert names == ["top.txt", "a/one.txt", "a/b/two.txt"]

    def test_default_depth_reaches_everything(self, deep_dir: Path) -> None:
        """The default bound covers ordinary trees."""
        assert len(_names(deep_dir, CollectionSpec(), prefix="")) == 4

    def test_depth_applies_before_patterns(self, deep_dir: Path) -> None:
        """Files beyond the bound are absent even when a pattern matches them."""
        spec = CollectionSpec(include_patterns="**/three.txt", max_depth=2)
        assert _names(deep_dir, spec) == []


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
class TestSymlinks:
    """Tests for symbolic link handling."""

    def test_directory_symlink_not_followed(self, tmp_path: Path) -> None:
        """Symlinked directories are not traversed."""
        root = tmp_path / "root"
        outside = tmp_path / "outside"
        root.mkdir()
        outside.mkdir()
        (outside / "secret.txt").write_text("s")
        (root / "link").symlink_to(outside, target_is_directory=True)

        assert _names(root, CollectionSpec(), prefix="") == []

    def test_symlink_cycle_stops_silently(self, tmp_path: Path) -> None:
        """A link back to the root does not loop."""
        root = tmp_path / "root"
        root.mkdir()
        (root / "file.txt").write_text("f")
        (root / "loop").symlink_to(root, target_is_directory=True)

        assert _names(root, CollectionSpec(), prefix="") == ["file.txt"]

    def test_file_symlink_inside_root_collected(self, tmp_path: Path) -> None:
        """A symlinked file pointing inside the root is collected."""
        root = tmp_path / "root"
        root.mkdir()
        (root / "real.txt").write_text("r")
        (root / "alias.txt").symlink_to(root / "real.txt")

        assert _names(root, CollectionSpec(), prefix="") == ["alias.txt", "real.txt"]

    def test_file_symlink_outside_root_skipped(self, tmp_path: Path) -> None:
        """A symlinked file pointing outside the root is skipped."""
        root = tmp_path / "root"
        root.mkdir()
        outside = tmp_path / "outside.txt"
        outside.write_text("o")
        (root / "escape.txt").symlink_to(outside)

        assert _names(root, CollectionSpec(), prefix="") == []

    def test_dangling_symlink_skipped(self, tmp_path: Path) -> None:
        """A dangling symlink is skipped."""
        root = tmp_path / "root"
        root.mkdir()
        (root / "dangling").symlink_to(root / "missing")

        assert _names(root, CollectionSpec(), prefix="") == []


class TestUnreadableDirectories:
    """Tests for directories that cannot be listed."""

    def test_unreadable_subdirectory_skipped(self, run_dir: Path) -> None:
        """A PermissionError on a subdirectory skips it and keeps going."""
        original_iterdir = Path.iterdir

        def fake_iterdir(self: Path):  # type: ignore[no-untyped-def]
            if self.name == "workflow":
                raise PermissionError("denied")
            return original_iterdir(self)

        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(Path, "iterdir", fake_iterdir)
            names = _names(run_dir, CollectionSpec(), prefix="")

        assert names == ["build.xml", "log", "archive/test.txt"]
