"""
Command-line interface for ccbuild.

This module provides the `ccbuild` CLI tool:

    ccbuild check foo -s src/foo.c -I include     # Is libfoo.a stale?
    ccbuild build foo -s src/foo.c -I include     # Rebuild libfoo.a if stale
    ccbuild deps -s src/foo.c -I include          # Show header dependencies

Exit codes:
    check: 0 up to date, 1 rebuild needed
    build: 0 success (rebuilt or up to date), 1 compilation failed
    all:   2 usage or configuration error (bad arguments or CCBUILD_* value),
           3 ambiguous archive (more than one lib<name>.a), 130 interrupted
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ccbuild import __version__
from ccbuild.build import AmbiguousArtifactError, Build, CompilerError
from ccbuild.build.archive_compiler import CUDART_KINDS
from ccbuild.build.archive_search import archive_file_name, find_static_archive
from ccbuild.build.build_profiles import BuildProfile, parse_profile
from ccbuild.build.dependency_report import collect_rows, print_report
from ccbuild.build.staleness import get_mtime
from ccbuild.output import TimedLogger, log, log_decision, log_detail, log_error, log_header, set_verbose

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_AMBIGUOUS = 3
EXIT_INTERRUPTED = 130


@dataclass
class TargetArgs:
    """Arguments shared by every command."""

    sources: List[Path]
    include_dirs: List[Path] = field(default_factory=list)
    project_dir: Optional[Path] = None
    build_root: Optional[Path] = None
    profile: Optional[BuildProfile] = None
    verbose: bool = False


@dataclass
class CheckArgs(TargetArgs):
    """Arguments for the check command."""

    output: str = ""


@dataclass
class BuildArgs(TargetArgs):
    """Arguments for the build command."""

    output: str = ""
    flags: List[str] = field(default_factory=list)
    cuda: bool = False
    cudart: Optional[str] = None


@dataclass
class DepsArgs(TargetArgs):
    """Arguments for the deps command."""

    output: Optional[str] = None


def _make_build(args: TargetArgs) -> Build:
    return (
        Build(
            project_dir=args.project_dir,
            profile=args.profile,
            build_root=args.build_root,
            verbose=args.verbose,
        )
        .files(args.sources)
        .includes(args.include_dirs)
    )


def _report_config_error(e: ValueError) -> None:
    log_error(f"Invalid configuration: {e}")


def _report_ambiguous(e: AmbiguousArtifactError) -> None:
    log_error(f"Ambiguous archive for '{e.output}'")
    for candidate in e.candidates:
        log_detail(str(candidate))
    log_detail("Remove the stale copies so exactly one archive remains.")


def check_command(args: CheckArgs) -> None:
    """Report whether lib<output>.a must be rebuilt.

    Examples:
        ccbuild check foo -s src/foo.c -I include
        ccbuild check libfoo.a -s src/foo.c --build-root out/build
    """
    try:
        builder = _make_build(args)
        log(f"Checking {archive_file_name(args.output)}...")
        report = builder.evaluate(args.output)
        log_decision(archive_file_name(args.output), report.rebuild, report.reason, report.path)
        sys.exit(EXIT_FAILED if report.rebuild else EXIT_OK)

    except AmbiguousArtifactError as e:
        _report_ambiguous(e)
        sys.exit(EXIT_AMBIGUOUS)

    except ValueError as e:
        _report_config_error(e)
        sys.exit(EXIT_USAGE)

    except KeyboardInterrupt:
        log_error("Interrupted")
        sys.exit(EXIT_INTERRUPTED)


def build_command(args: BuildArgs) -> None:
    """Rebuild lib<output>.a if it is stale.

    Examples:
        ccbuild build foo -s src/foo.c -I include --flag=-Wall
        ccbuild build kernels -s src/k.cu --cuda --cudart static
    """
    log_header("ccbuild", __version__)

    try:
        builder = _make_build(args)
        for flag in args.flags:
            builder.flag(flag)
        if args.cuda:
            builder.cuda(True)
        if args.cudart is not None:
            builder.cudart(args.cudart)

        name = archive_file_name(args.output)
        with TimedLogger(f"Building {name}"):
            result = builder.compile(args.output)

        log_decision(name, result.rebuilt, result.reason)
        if result.archive_path is not None:
            log_detail(f"Archive: {result.archive_path}")
        sys.exit(EXIT_OK)

    except AmbiguousArtifactError as e:
        _report_ambiguous(e)
        sys.exit(EXIT_AMBIGUOUS)

    except ValueError as e:
        _report_config_error(e)
        sys.exit(EXIT_USAGE)

    except CompilerError as e:
        log_error(str(e))
        sys.exit(EXIT_FAILED)

    except KeyboardInterrupt:
        log_error("Build interrupted")
        sys.exit(EXIT_INTERRUPTED)


def deps_command(args: DepsArgs) -> None:
    """Print the header dependencies of the sources.

    With an output name, resolved headers newer than the archive are highlighted.

    Examples:
        ccbuild deps -s src/foo.c -I include
        ccbuild deps -s src/foo.c -I include --output foo
    """
    try:
        since = None
        if args.output:
            builder = _make_build(args)
            archive = find_static_archive(builder.params.build_root, args.output)
            since = get_mtime(archive) if archive is not None else None

        print_report(collect_rows(args.sources, args.include_dirs), since=since)
        sys.exit(EXIT_OK)

    except AmbiguousArtifactError as e:
        _report_ambiguous(e)
        sys.exit(EXIT_AMBIGUOUS)

    except ValueError as e:
        _report_config_error(e)
        sys.exit(EXIT_USAGE)

    except KeyboardInterrupt:
        log_error("Interrupted")
        sys.exit(EXIT_INTERRUPTED)


def _add_target_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-s", "--source", dest="sources", action="append", type=Path, required=True, help="Source file (repeatable, order preserved)")
    parser.add_argument("-I", "--include", dest="include_dirs", action="append", type=Path, default=[], help="Include search directory (repeatable, first match wins)")
    parser.add_argument("--project-dir", type=Path, default=None, help="Project root (default: $CCBUILD_PROJECT_DIR or cwd)")
    parser.add_argument("--build-root", type=Path, default=None, help="Build-output root (default: $CCBUILD_BUILD_ROOT or <project>/target/<profile>/build)")
    parser.add_argument("--profile", type=parse_profile, default=None, help="Build profile: release or debug (default: $CCBUILD_PROFILE or release)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(prog="ccbuild", description="Incremental static archive builds for C/C++/CUDA sources")
    parser.add_argument("--version", action="version", version=f"ccbuild {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check whether an archive must be rebuilt")
    check.add_argument("output", help="Output name (foo or libfoo.a)")
    _add_target_arguments(check)

    build = subparsers.add_parser("build", help="Rebuild an archive if it is stale")
    build.add_argument("output", help="Output name (foo or libfoo.a)")
    _add_target_arguments(build)
    build.add_argument("-f", "--flag", dest="flags", action="append", default=[], help="Compile flag (repeatable; use --flag=-Wall for dash-prefixed flags)")
    build.add_argument("--cuda", action="store_true", help="Compile every source with nvcc")
    build.add_argument("--cudart", choices=CUDART_KINDS, default=None, help="CUDA runtime linkage")

    deps = subparsers.add_parser("deps", help="Show header dependencies of sources")
    _add_target_arguments(deps)
    deps.add_argument("--output", default=None, help="Highlight headers newer than this archive")

    return parser


def _target_kwargs(ns: argparse.Namespace) -> dict:
    return {
        "sources": ns.sources,
        "include_dirs": ns.include_dirs,
        "project_dir": ns.project_dir,
        "build_root": ns.build_root,
        "profile": ns.profile,
        "verbose": ns.verbose,
    }


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ccbuild console script."""
    ns = build_parser().parse_args(argv)

    set_verbose(ns.verbose)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if ns.command == "check":
        check_command(CheckArgs(output=ns.output, **_target_kwargs(ns)))
    elif ns.command == "build":
        build_command(BuildArgs(output=ns.output, flags=ns.flags, cuda=ns.cuda, cudart=ns.cudart, **_target_kwargs(ns)))
    elif ns.command == "deps":
        deps_command(DepsArgs(output=ns.output, **_target_kwargs(ns)))


if __name__ == "__main__":
    main()
