"""Build Context - Aggregated build configuration.

This module defines:
- Environment-driven defaults (project dir, profile, build root)
- BuildParams: resolved parameters for one archive build

Environment:
    CCBUILD_PROJECT_DIR: project root (default: current working directory)
    CCBUILD_PROFILE: build profile name (default: release)
    CCBUILD_BUILD_ROOT: explicit build-output root (default:
        ``<project>/target/<profile>/build``)

Design:
    Only the CLI and the Build front end consult the environment. The
    staleness evaluator always receives its build root as an argument.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .archive_search import library_name
from .build_profiles import BuildProfile, ProfileFlags, get_build_root, get_profile, parse_profile

PROJECT_DIR_ENV = "CCBUILD_PROJECT_DIR"
PROFILE_ENV = "CCBUILD_PROFILE"
BUILD_ROOT_ENV = "CCBUILD_BUILD_ROOT"


def default_project_dir() -> Path:
    """Return the project root from CCBUILD_PROJECT_DIR or the cwd."""
    value = os.environ.get(PROJECT_DIR_ENV)
    return Path(value) if value else Path.cwd()


def default_profile() -> BuildProfile:
    """Return the build profile from CCBUILD_PROFILE (release if unset)."""
    value = os.environ.get(PROFILE_ENV)
    return parse_profile(value) if value else BuildProfile.RELEASE


def resolve_build_root(project_dir: Path, profile: BuildProfile, build_root: Optional[Path] = None) -> Path:
    """Resolve the build-output root.

    Precedence: explicit ``build_root``, then CCBUILD_BUILD_ROOT, then
    ``<project_dir>/target/<profile>/build``.
    """
    if build_root is not None:
        return Path(build_root)

    env_root = os.environ.get(BUILD_ROOT_ENV)
    if env_root:
        return Path(env_root)

    return get_build_root(project_dir, profile)


@dataclass(frozen=True)
class BuildParams:
    """Resolved parameters for one archive build.

    Attributes:
        project_dir: Project root directory
        profile: Build profile enum value
        profile_flags: Pre-resolved profile flags
        build_root: Root searched for previously built archives
        verbose: Whether to enable verbose output
    """

    project_dir: Path
    profile: BuildProfile
    profile_flags: ProfileFlags
    build_root: Path
    verbose: bool

    @classmethod
    def create(
        cls,
        project_dir: Optional[Path] = None,
        profile: Optional[BuildProfile] = None,
        build_root: Optional[Path] = None,
        verbose: bool = False,
    ) -> "BuildParams":
        """Create BuildParams, filling unset values from the environment.

        Args:
            project_dir: Project root (default: CCBUILD_PROJECT_DIR or cwd)
            profile: Build profile (default: CCBUILD_PROFILE or release)
            build_root: Explicit build-output root
            verbose: Whether to enable verbose output

        Returns:
            BuildParams instance
        """
        project_dir = Path(project_dir) if project_dir is not None else default_project_dir()
        profile = profile if profile is not None else default_profile()
        return cls(
            project_dir=project_dir,
            profile=profile,
            profile_flags=get_profile(profile),
            build_root=resolve_build_root(project_dir, profile, build_root),
            verbose=verbose,
        )

    def out_dir(self, output: str) -> Path:
        """Directory where a fresh archive for ``output`` is written.

        It lies under the build root so the next evaluation finds the archive.
        """
        return self.build_root / library_name(output) / "out"
