"""Archive staleness evaluation.

This module decides whether a previously built static archive still reflects
its inputs or must be rebuilt.

Decision Process:
    1. Locate ``lib<output>.a`` under the build root (none -> rebuild,
       several -> AmbiguousArtifactError)
    2. Take the archive mtime as the baseline
    3. Walk the sources in order: missing, newer, or unreadable -> rebuild;
       otherwise collect their include directives
    4. Resolve each include against the search directories (first match
       wins); a resolved header newer than the baseline -> rebuild
    5. Otherwise the archive is up to date

The first conclusive signal ends the evaluation. Every failure short of the
ambiguous-archive case resolves to "rebuild", never to "up to date".
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .archive_search import find_static_archive
from .include_scanner import extract_includes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedDependency:
    """A header reference joined with the search directory that provides it.

    Attributes:
        reference: Header reference as written in the include directive
        directory: First search directory containing the header
        path: Full path of the resolved header
    """

    reference: str
    directory: Path
    path: Path


@dataclass(frozen=True)
class StalenessReport:
    """Outcome of a staleness evaluation.

    Attributes:
        rebuild: True if the archive must be rebuilt
        reason: Human-readable explanation of the decision
        path: File that triggered the decision (archive, source or header), if any
        archive: Previously built archive the decision was made against, if one was found
    """

    rebuild: bool
    reason: str
    path: Optional[Path] = None
    archive: Optional[Path] = None

    def __bool__(self) -> bool:
        return self.rebuild


def get_mtime(path: Path) -> Optional[float]:
    """Return the modification time of ``path``, or None if it can't be read."""
    try:
        return path.stat().st_mtime
    except OSError as e:
        logger.debug(f"Cannot stat {path}: {e}")
        return None


def _changed_since(path: Path, since: float) -> bool:
    """True if ``path`` is strictly newer than ``since`` or can no longer be stat'ed."""
    mtime = get_mtime(path)
    if mtime is None:
        return True
    return mtime > since


def find_include_file(search: Sequence[Path], include: str) -> Optional[ResolvedDependency]:
    """Resolve a header reference against an ordered list of directories.

    Multi-segment references (``sub/dir.h``) are joined segment by segment
    under each directory. The first directory where the file exists wins.

    Args:
        search: Ordered search directories
        include: Header reference

    Returns:
        ResolvedDependency, or None if no directory provides the header
    """
    segments = include.split("/")
    for directory in search:
        candidate = Path(directory).joinpath(*segments)
        if candidate.exists():
            return ResolvedDependency(reference=include, directory=Path(directory), path=candidate)
    return None


def _read_source(path: Path) -> Optional[str]:
    """Read a source file as UTF-8 text, or None if it is unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read source {path}: {e}")
        return None


class StalenessEvaluator:
    """Decides whether a static archive must be rebuilt.

    The build-output root is injected rather than read from global state, so
    an evaluation depends only on its arguments and the filesystem.

    Example usage:
        evaluator = StalenessEvaluator(Path("target/release/build"))
        if evaluator.should_rebuild([Path("src/foo.c")], [Path("include")], "foo"):
            ...
    """

    def __init__(self, build_root: Path):
        """Initialize evaluator.

        Args:
            build_root: Directory searched recursively for previously built archives
        """
        self.build_root = Path(build_root)

    def evaluate(self, sources: Iterable[Path], search: Sequence[Path], output: str) -> StalenessReport:
        """Evaluate staleness and explain the decision.

        Args:
            sources: Source files in compilation order
            search: Ordered include search directories
            output: Logical output name (``foo`` or ``libfoo.a``)

        Returns:
            StalenessReport with the decision and its reason

        Raises:
            AmbiguousArtifactError: If more than one matching archive exists
        """
        report = self._evaluate(sources, search, output)
        if report.rebuild:
            logger.info(f"{output}: rebuild needed ({report.reason})")
        else:
            logger.info(f"{output}: up to date")
        return report

    def should_rebuild(self, sources: Iterable[Path], search: Sequence[Path], output: str) -> bool:
        """Return True if the archive for ``output`` must be rebuilt.

        Raises:
            AmbiguousArtifactError: If more than one matching archive exists
        """
        return self.evaluate(sources, search, output).rebuild

    def _evaluate(self, sources: Iterable[Path], search: Sequence[Path], output: str) -> StalenessReport:
        archive = find_static_archive(self.build_root, output)
        if archive is None:
            return StalenessReport(True, "no previous archive found")

        since = get_mtime(archive)
        if since is None:
            return StalenessReport(True, "archive metadata unreadable", archive, archive)
        logger.debug(f"Baseline {archive} (mtime {since})")

        all_deps: List[str] = []
        for source in sources:
            source = Path(source)
            if not source.exists():
                return StalenessReport(True, "source file missing", source, archive)

            if _changed_since(source, since):
                return StalenessReport(True, "source file changed", source, archive)

            content = _read_source(source)
            if content is None:
                return StalenessReport(True, "source file unreadable", source, archive)

            deps = extract_includes(content)
            logger.debug(f"{source}: {len(deps)} include(s)")
            all_deps.extend(deps)

        for dep in all_deps:
            resolved = find_include_file(search, dep)
            if resolved is None:
                logger.debug(f"Unresolved include skipped: {dep}")
                continue
            if _changed_since(resolved.path, since):
                return StalenessReport(True, "header changed", resolved.path, archive)

        return StalenessReport(False, "archive is up to date", archive, archive)


def should_rebuild(sources: Iterable[Path], search: Sequence[Path], output: str, build_root: Path) -> bool:
    """Return True if the archive for ``output`` under ``build_root`` must be rebuilt.

    Convenience wrapper around :class:`StalenessEvaluator`.

    Raises:
        AmbiguousArtifactError: If more than one matching archive exists
    """
    return StalenessEvaluator(build_root).should_rebuild(sources, search, output)
