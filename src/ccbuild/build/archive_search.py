"""Static archive lookup under the build-output root.

A logical output name ``foo`` maps to the GNU archive file name ``libfoo.a``.
Previous builds may have placed that archive anywhere below the build root, so
the root is searched recursively for an exact file-name match.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import CcbuildError

logger = logging.getLogger(__name__)

ARCHIVE_PREFIX = "lib"
ARCHIVE_SUFFIX = ".a"


class AmbiguousArtifactError(CcbuildError):
    """Raised when more than one archive matches an output name.

    This is a build-output layout violation. Picking either candidate could
    link stale code, so callers must abort instead of guessing.
    """

    def __init__(self, output: str, candidates: Sequence[Path]):
        self.output = output
        self.candidates = list(candidates)
        listing = ", ".join(str(c) for c in self.candidates)
        super().__init__(f"More than one archive for '{output}': {listing}")


def archive_file_name(output: str) -> str:
    """Return the archive file name for a logical output name.

    Args:
        output: Either a bare name (``foo``) or an archive name (``libfoo.a``)

    Returns:
        Archive file name, e.g. ``libfoo.a``
    """
    if output.startswith(ARCHIVE_PREFIX) and output.endswith(ARCHIVE_SUFFIX):
        return output
    return f"{ARCHIVE_PREFIX}{output}{ARCHIVE_SUFFIX}"


def library_name(output: str) -> str:
    """Return the bare library name for ``output`` (``libfoo.a`` -> ``foo``)."""
    name = archive_file_name(output)
    return name[len(ARCHIVE_PREFIX) : -len(ARCHIVE_SUFFIX)]


def search_build(build_root: Path, name: str) -> List[Path]:
    """Find every file literally named ``name`` below ``build_root``.

    Args:
        build_root: Root directory to walk
        name: Exact file name to match

    Returns:
        Sorted list of matching file paths (empty if the root does not exist)
    """
    if not build_root.is_dir():
        logger.debug(f"Build root does not exist: {build_root}")
        return []

    matches: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(build_root):
        if name in filenames:
            candidate = Path(dirpath) / name
            if candidate.is_file():
                matches.append(candidate)

    return sorted(matches)


def find_static_archive(build_root: Path, output: str) -> Optional[Path]:
    """Locate the previously built archive for ``output``.

    Args:
        build_root: Build-output root to search
        output: Logical output name (``foo`` or ``libfoo.a``)

    Returns:
        Path to the single matching archive, or None if there is none

    Raises:
        AmbiguousArtifactError: If two or more archives match
    """
    name = archive_file_name(output)
    candidates = search_build(build_root, name)

    if not candidates:
        logger.debug(f"No {name} under {build_root}")
        return None

    if len(candidates) >= 2:
        logger.error(f"Found {len(candidates)} copies of {name} under {build_root}")
        raise AmbiguousArtifactError(output, candidates)

    return candidates[0]
