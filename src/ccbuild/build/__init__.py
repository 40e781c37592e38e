"""
Build system components for ccbuild.

This module provides the incremental archive build implementation including:
- Include directive scanning
- Archive staleness evaluation
- Static archive compilation (cc/c++/nvcc + ar)
- The chainable Build front end
"""

from .archive_build import Build, BuildResult
from .archive_compiler import ArchiveCompiler, CompilerError, CompilerOptions
from .archive_search import AmbiguousArtifactError, archive_file_name, find_static_archive, search_build
from .include_scanner import extract_includes, parse_include
from .staleness import ResolvedDependency, StalenessEvaluator, StalenessReport, should_rebuild

__all__ = [
    "AmbiguousArtifactError",
    "ArchiveCompiler",
    "Build",
    "BuildResult",
    "CompilerError",
    "CompilerOptions",
    "ResolvedDependency",
    "StalenessEvaluator",
    "StalenessReport",
    "archive_file_name",
    "extract_includes",
    "find_static_archive",
    "parse_include",
    "search_build",
    "should_rebuild",
]
