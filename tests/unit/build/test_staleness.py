"""Tests for archive staleness evaluation."""

import os

import pytest

from ccbuild.build.archive_search import AmbiguousArtifactError
from ccbuild.build.staleness import (
    StalenessEvaluator,
    StalenessReport,
    find_include_file,
    should_rebuild,
)

OLD = 1_600_000_000.0
ARCHIVE_TIME = 1_600_000_100.0
NEW = 1_600_000_200.0


@pytest.fixture
def archive(project, touch):
    """A single libfoo.a under the build root, newer than OLD files."""
    return touch(project["build_root"] / "foo-1a2b" / "out" / "libfoo.a", "!<arch>\n", mtime=ARCHIVE_TIME)


class TestFindIncludeFile:
    def test_first_match_wins(self, tmp_path, touch):
        first = tmp_path / "first"
        second = tmp_path / "second"
        touch(first / "a.h")
        touch(second / "a.h")

        resolved = find_include_file([first, second], "a.h")
        assert resolved is not None
        assert resolved.path == first / "a.h"
        assert resolved.directory == first
        assert resolved.reference == "a.h"

    def test_falls_through_to_later_directory(self, tmp_path, touch):
        touch(tmp_path / "second" / "a.h")
        resolved = find_include_file([tmp_path / "first", tmp_path / "second"], "a.h")
        assert resolved is not None
        assert resolved.path == tmp_path / "second" / "a.h"

    def test_subpath(self, tmp_path, touch):
        touch(tmp_path / "inc" / "sub" / "dir" / "x.h")
        resolved = find_include_file([tmp_path / "inc"], "sub/dir/x.h")
        assert resolved is not None
        assert resolved.path == tmp_path / "inc" / "sub" / "dir" / "x.h"

    def test_unresolved(self, tmp_path):
        assert find_include_file([tmp_path], "stdio.h") is None

    def test_empty_search(self):
        assert find_include_file([], "a.h") is None


class TestStalenessEvaluator:
    def test_no_archive_forces_rebuild(self, project, touch):
        source = touch(project["src"] / "foo.c", "int x;", mtime=OLD)
        evaluator = StalenessEvaluator(project["build_root"])

        report = evaluator.evaluate([source], [project["include"]], "foo")
        assert report.rebuild is True
        assert report.reason == "no previous archive found"
        assert report.archive is None

    def test_no_archive_even_with_missing_sources(self, project):
        evaluator = StalenessEvaluator(project["build_root"])
        assert evaluator.should_rebuild([project["src"] / "missing.c"], [], "foo") is True

    def test_up_to_date(self, project, touch, archive):
        touch(project["include"] / "foo.h", "#pragma once", mtime=OLD)
        source = touch(project["src"] / "foo.c", '#include "foo.h"\n#include <stdio.h>\n', mtime=OLD)

        report = StalenessEvaluator(project["build_root"]).evaluate([source], [project["include"]], "foo")
        assert report.rebuild is False
        assert report.path == archive
        assert not report

    def test_archive_name_form_accepted(self, project, touch, archive):
        source = touch(project["src"] / "foo.c", "int x;", mtime=OLD)
        assert should_rebuild([source], [], "libfoo.a", project["build_root"]) is False

    def test_newer_source(self, project, touch, archive):
        source = touch(project["src"] / "foo.c", "int x;", mtime=NEW)

        report = StalenessEvaluator(project["build_root"]).evaluate([source], [], "foo")
        assert report.rebuild is True
        assert report.reason == "source file changed"
        assert report.path == source
        assert report.archive == archive

    def test_equal_mtime_is_not_newer(self, project, touch, archive):
        source = touch(project["src"] / "foo.c", "int x;", mtime=ARCHIVE_TIME)
        assert should_rebuild([source], [], "foo", project["build_root"]) is False

    def test_missing_source(self, project, touch, archive):
        present = touch(project["src"] / "a.c", "int a;", mtime=OLD)
        missing = project["src"] / "gone.c"

        report = StalenessEvaluator(project["build_root"]).evaluate([present, missing], [], "foo")
        assert report.rebuild is True
        assert report.reason == "source file missing"
        assert report.path == missing

    def test_unreadable_source(self, project, archive):
        source = project["src"] / "binary.c"
        source.write_bytes(b"\xff\xfe\x00garbage\x80")
        os.utime(source, (OLD, OLD))

        report = StalenessEvaluator(project["build_root"]).evaluate([source], [], "foo")
        assert report.rebuild is True
        assert report.reason == "source file unreadable"

    def test_newer_header_in_search_path(self, project, touch, archive):
        """A header newer than the archive forces a rebuild even when sources are old."""
        touch(project["include"] / "foo.h", "#pragma once", mtime=NEW)
        source = touch(project["src"] / "foo.c", '#include "foo.h"\n', mtime=OLD)

        report = StalenessEvaluator(project["build_root"]).evaluate([source], [project["include"]], "foo")
        assert report.rebuild is True
        assert report.reason == "header changed"
        assert report.path == project["include"] / "foo.h"

    def test_newer_header_in_subdirectory(self, project, touch, archive):
        touch(project["include"] / "foo" / "detail.h", "", mtime=NEW)
        source = touch(project["src"] / "foo.c", "#include <foo/detail.h>\n", mtime=OLD)
        assert should_rebuild([source], [project["include"]], "foo", project["build_root"]) is True

    def test_header_from_later_source(self, project, touch, archive):
        """Includes are accumulated across all sources before resolution."""
        touch(project["include"] / "b.h", "", mtime=NEW)
        a = touch(project["src"] / "a.c", "int a;", mtime=OLD)
        b = touch(project["src"] / "b.c", '#include "b.h"\n', mtime=OLD)
        assert should_rebuild([a, b], [project["include"]], "foo", project["build_root"]) is True

    def test_unresolved_header_ignored(self, project, touch, archive):
        source = touch(project["src"] / "foo.c", '#include "nowhere.h"\n#include <stdio.h>\n', mtime=OLD)
        assert should_rebuild([source], [project["include"]], "foo", project["build_root"]) is False

    def test_header_outside_search_path_ignored(self, project, touch, archive):
        """A newer header next to the source but not in the search path is not tracked."""
        touch(project["src"] / "local.h", "", mtime=NEW)
        source = touch(project["src"] / "foo.c", '#include "local.h"\n', mtime=OLD)
        assert should_rebuild([source], [project["include"]], "foo", project["build_root"]) is False

    def test_search_order_first_match_wins(self, project, touch, archive):
        """Only the first matching directory counts, even if a later copy is newer."""
        first = project["root"] / "vendor"
        touch(first / "conf.h", "", mtime=OLD)
        touch(project["include"] / "conf.h", "", mtime=NEW)
        source = touch(project["src"] / "foo.c", '#include "conf.h"\n', mtime=OLD)

        assert should_rebuild([source], [first, project["include"]], "foo", project["build_root"]) is False
        assert should_rebuild([source], [project["include"], first], "foo", project["build_root"]) is True

    def test_headers_of_headers_not_scanned(self, project, touch, archive):
        """Only directives in the sources themselves are followed."""
        touch(project["include"] / "outer.h", '#include "inner.h"\n', mtime=OLD)
        touch(project["include"] / "inner.h", "", mtime=NEW)
        source = touch(project["src"] / "foo.c", '#include "outer.h"\n', mtime=OLD)
        assert should_rebuild([source], [project["include"]], "foo", project["build_root"]) is False

    def test_ambiguous_archive_is_fatal(self, project, touch, archive):
        touch(project["build_root"] / "foo-ffff" / "out" / "libfoo.a", "", mtime=ARCHIVE_TIME)
        source = touch(project["src"] / "foo.c", "int x;", mtime=OLD)

        with pytest.raises(AmbiguousArtifactError):
            should_rebuild([source], [], "foo", project["build_root"])

    def test_other_archives_do_not_interfere(self, project, touch, archive):
        touch(project["build_root"] / "bar" / "out" / "libbar.a", "", mtime=OLD)
        source = touch(project["src"] / "foo.c", "int x;", mtime=OLD)
        assert should_rebuild([source], [], "foo", project["build_root"]) is False

    def test_accepts_string_paths(self, project, touch, archive):
        source = touch(project["src"] / "foo.c", "int x;", mtime=OLD)
        evaluator = StalenessEvaluator(str(project["build_root"]))
        assert evaluator.should_rebuild([str(source)], [str(project["include"])], "foo") is False


class TestStalenessReport:
    def test_bool(self):
        assert bool(StalenessReport(True, "x")) is True
        assert bool(StalenessReport(False, "x")) is False
