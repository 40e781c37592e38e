"""Incremental archive build front end.

Build collects sources, include directories and flags, asks the staleness
evaluator whether ``lib<output>.a`` is still current, and only runs the
compiler when it is not.

Usage:
    result = (
        Build()
        .files(["src/kernel.cu", "src/host.cpp"])
        .include("include")
        .flag("-Wall")
        .cuda(True)
        .cudart("static")
        .compile("kernels")
    )
"""

import copy
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .archive_compiler import ArchiveCompiler
from .archive_search import archive_file_name
from .build_context import BuildParams
from .build_profiles import BuildProfile, get_compile_flags
from .staleness import StalenessEvaluator, StalenessReport

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class BuildResult:
    """Result of Build.compile().

    Attributes:
        output: Archive file name (``lib<name>.a``)
        rebuilt: True if the compiler ran
        archive_path: Path of the archive
        reason: Why the archive was or was not rebuilt
    """

    output: str
    rebuilt: bool
    archive_path: Optional[Path]
    reason: str


class Build:
    """Chainable builder for one static archive."""

    def __init__(
        self,
        project_dir: Optional[PathLike] = None,
        profile: Optional[BuildProfile] = None,
        build_root: Optional[PathLike] = None,
        compiler: Optional[ArchiveCompiler] = None,
        verbose: bool = False,
    ):
        """Initialize builder.

        Args:
            project_dir: Project root (default: CCBUILD_PROJECT_DIR or cwd)
            profile: Build profile (default: CCBUILD_PROFILE or release)
            build_root: Explicit build-output root
            compiler: Compiler to use (default: ArchiveCompiler with env toolchain)
            verbose: Whether to enable verbose output
        """
        self.params = BuildParams.create(
            project_dir=Path(project_dir) if project_dir is not None else None,
            profile=profile,
            build_root=Path(build_root) if build_root is not None else None,
            verbose=verbose,
        )
        self.compiler = compiler if compiler is not None else ArchiveCompiler()
        self.evaluator = StalenessEvaluator(self.params.build_root)
        self.sources: List[Path] = []
        self.search: List[Path] = []
        self.flags: List[str] = []

    def cuda(self, cuda: bool) -> "Build":
        """Compile every source with nvcc."""
        self._set_options(cuda=cuda)
        return self

    def cudart(self, cudart: str) -> "Build":
        """Select CUDA runtime linkage ("none", "shared" or "static")."""
        self._set_options(cudart=cudart)
        return self

    def _set_options(self, **changes) -> None:
        # A compiler passed in may be shared with other builds; change a private copy
        compiler = copy.copy(self.compiler)
        compiler.options = replace(self.compiler.options, **changes)
        self.compiler = compiler

    def flag(self, flag: str) -> "Build":
        """Add a compile flag."""
        self.flags.append(flag)
        return self

    def include(self, directory: PathLike) -> "Build":
        """Append an include directory (also used to resolve header dependencies)."""
        self.search.append(Path(directory))
        return self

    def includes(self, directories: Iterable[PathLike]) -> "Build":
        """Append several include directories, in order."""
        for directory in directories:
            self.include(directory)
        return self

    def file(self, path: PathLike) -> "Build":
        """Add a source file."""
        self.sources.append(Path(path))
        return self

    def files(self, paths: Iterable[PathLike]) -> "Build":
        """Add several source files, in order."""
        for path in paths:
            self.file(path)
        return self

    def evaluate(self, output: str) -> StalenessReport:
        """Evaluate staleness of ``lib<output>.a`` with a reason.

        Raises:
            AmbiguousArtifactError: If more than one matching archive exists
        """
        return self.evaluator.evaluate(self.sources, self.search, output)

    def should_rebuild(self, output: str) -> bool:
        """Return True if ``lib<output>.a`` must be rebuilt.

        Raises:
            AmbiguousArtifactError: If more than one matching archive exists
        """
        return self.evaluate(output).rebuild

    def compile(self, output: str) -> BuildResult:
        """Compile ``lib<output>.a`` if it is stale.

        Returns:
            BuildResult describing what happened

        Raises:
            AmbiguousArtifactError: If more than one matching archive exists
            CompilerError: If compilation fails
        """
        name = archive_file_name(output)
        report = self.evaluate(output)

        if not report.rebuild:
            logger.debug(f"Skipping compilation of {name}")
            return BuildResult(output=name, rebuilt=False, archive_path=report.path, reason=report.reason)

        # Replace a stale archive where it was found so the next search sees one copy
        out_dir = report.archive.parent if report.archive is not None else self.params.out_dir(output)
        flags = get_compile_flags(self.params.profile, self.flags)
        archive = self.compiler.compile(
            sources=self.sources,
            include_dirs=self.search,
            flags=flags,
            out_dir=out_dir,
            output=output,
        )
        return BuildResult(output=name, rebuilt=True, archive_path=archive, reason=report.reason)
