"""Build Profile Configuration.

This module defines the build profiles ccbuild knows about, the compile flags
each profile controls, and where each profile keeps its build output.

Design:
    Profiles declare ALL flags they control explicitly. User-supplied flags
    matching a profile's controlled patterns are stripped before the profile's
    own flags are appended, so the profile always wins.

    Every profile owns a separate build-output root
    (``<project>/target/<profile>/build``). Archives from one profile are never
    compared against sources for another.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List


class BuildProfile(Enum):
    """Build profile enum for type-safe profile selection."""

    RELEASE = "release"
    DEBUG = "debug"

    def __str__(self) -> str:
        """Return the string value for directory names and display."""
        return self.value


@dataclass(frozen=True)
class ProfileFlags:
    """Generic build profile flags.

    Attributes:
        name: Profile identifier (matches BuildProfile enum value)
        description: Human-readable profile description
        compile_flags: All compilation flags for this profile
        controlled_patterns: Flag prefixes this profile controls (stripped from user flags)
    """

    name: str
    description: str
    compile_flags: tuple[str, ...]
    controlled_patterns: tuple[str, ...]


PROFILES: dict[BuildProfile, ProfileFlags] = {
    BuildProfile.RELEASE: ProfileFlags(
        name="release",
        description="Optimized release build (default)",
        compile_flags=(
            "-O2",
            "-DNDEBUG",
            "-ffunction-sections",
            "-fdata-sections",
        ),
        controlled_patterns=(
            "-O",
            "-g",
            "-DNDEBUG",
            "-ffunction-sections",
            "-fdata-sections",
        ),
    ),
    BuildProfile.DEBUG: ProfileFlags(
        name="debug",
        description="Unoptimized build with debug info",
        compile_flags=(
            "-O0",
            "-g",
        ),
        controlled_patterns=(
            "-O",
            "-g",
            "-DNDEBUG",
        ),
    ),
}


def get_profile(profile: BuildProfile) -> ProfileFlags:
    """Get profile configuration by enum."""
    return PROFILES[profile]


def parse_profile(name: str) -> BuildProfile:
    """Parse a profile name (case-insensitive).

    Args:
        name: Profile name, e.g. "release"

    Returns:
        Matching BuildProfile

    Raises:
        ValueError: If the name does not match any profile
    """
    try:
        return BuildProfile(name.strip().lower())
    except ValueError:
        valid = ", ".join(p.value for p in BuildProfile)
        raise ValueError(f"Unknown build profile '{name}' (expected one of: {valid})") from None


def filter_user_flags(flags: List[str], profile_flags: ProfileFlags) -> List[str]:
    """Remove flags that the profile controls.

    Args:
        flags: User-supplied compile flags
        profile_flags: The profile whose controlled patterns to filter

    Returns:
        Filtered list of flags with controlled patterns removed
    """
    return [f for f in flags if not any(f.startswith(p) for p in profile_flags.controlled_patterns)]


def get_compile_flags(profile: BuildProfile, base_flags: List[str] | None = None) -> List[str]:
    """Get compilation flags for a profile.

    Filters controlled flags from base_flags and appends profile's compile_flags.

    Args:
        profile: BuildProfile enum value
        base_flags: User-supplied compilation flags

    Returns:
        List of flags with profile-specific flags applied
    """
    profile_flags = get_profile(profile)
    flags = list(base_flags) if base_flags else []
    return filter_user_flags(flags, profile_flags) + list(profile_flags.compile_flags)


def get_build_root(project_dir: Path, profile: BuildProfile) -> Path:
    """Return the build-output root searched for archives of ``profile``.

    Args:
        project_dir: Project root directory
        profile: BuildProfile enum value

    Returns:
        ``project_dir/target/<profile>/build``
    """
    return project_dir / "target" / profile.value / "build"
