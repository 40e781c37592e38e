"""Tests for build profiles and profile-controlled flags."""

from pathlib import Path

import pytest

from ccbuild.build.build_profiles import (
    PROFILES,
    BuildProfile,
    filter_user_flags,
    get_build_root,
    get_compile_flags,
    get_profile,
    parse_profile,
)


class TestBuildProfile:
    def test_str(self):
        assert str(BuildProfile.RELEASE) == "release"
        assert str(BuildProfile.DEBUG) == "debug"

    def test_every_profile_configured(self):
        for profile in BuildProfile:
            assert get_profile(profile).name == profile.value
            assert profile in PROFILES

    def test_parse_profile(self):
        assert parse_profile("release") is BuildProfile.RELEASE
        assert parse_profile(" DEBUG ") is BuildProfile.DEBUG

    def test_parse_profile_invalid(self):
        with pytest.raises(ValueError, match="Unknown build profile"):
            parse_profile("fast")


class TestCompileFlags:
    def test_controlled_flags_replaced(self):
        flags = get_compile_flags(BuildProfile.RELEASE, ["-O3", "-Wall", "-g"])
        assert "-O3" not in flags
        assert "-g" not in flags
        assert flags[0] == "-Wall"
        assert "-O2" in flags

    def test_debug_profile(self):
        flags = get_compile_flags(BuildProfile.DEBUG, ["-DNDEBUG", "-DFOO=1"])
        assert flags == ["-DFOO=1", "-O0", "-g"]

    def test_no_base_flags(self):
        assert get_compile_flags(BuildProfile.DEBUG) == ["-O0", "-g"]

    def test_filter_keeps_order(self):
        flags = filter_user_flags(["-Wextra", "-O1", "-std=c11"], get_profile(BuildProfile.RELEASE))
        assert flags == ["-Wextra", "-std=c11"]


class TestBuildRoot:
    def test_release(self):
        assert get_build_root(Path("proj"), BuildProfile.RELEASE) == Path("proj/target/release/build")

    def test_debug(self):
        assert get_build_root(Path("proj"), BuildProfile.DEBUG) == Path("proj/target/debug/build")
