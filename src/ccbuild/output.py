"""
Centralized user-facing output for ccbuild.

All output is prefixed with the time elapsed since program launch in MM:SS.cc
format (minutes:seconds.centiseconds), which makes it easy to see where a
build spends its time.

Example output:
    00:00.01 ccbuild v0.1.0
    00:00.02 Checking libfoo.a...
    00:00.03       REBUILD: header changed (include/foo.h)
    00:00.85       [c++] foo.cpp
    00:01.40       Done (1.38s)

Usage:
    from ccbuild.output import log, log_detail, TimedLogger

    log("Checking libfoo.a...")
    log_detail("Archive: target/release/build/foo/out/libfoo.a")

Library modules use the standard logging module for diagnostics. This module
is for messages a user running a build is meant to read.
"""

import sys
import time
from types import TracebackType
from typing import Optional, TextIO

# Global state for the timer
_start_time: Optional[float] = None
_output_stream: TextIO = sys.stdout
_verbose: bool = True


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Initialize the program timer.

    If not called explicitly, it is called automatically on first log.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    """
    Set verbose mode for logging.

    Args:
        verbose: If True, all messages are printed. If False, verbose_only messages are dropped.
    """
    global _verbose
    _verbose = verbose


def get_elapsed() -> float:
    """Get elapsed time in seconds since timer initialization."""
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    """Format the current elapsed time as MM:SS.cc."""
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str) -> None:
    line = f"{format_timestamp()} {message}\n"
    _output_stream.write(line)
    _output_stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """
    Log a message with timestamp.

    Args:
        message: Message to log
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(message)


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    """
    Log a detail message (indented).

    Args:
        message: Detail message
        indent: Number of spaces to indent (default 6)
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


def log_file(tool: str, filename: str, verbose_only: bool = True) -> None:
    """
    Log a file compilation message.

    Format: [tool] filename

    Args:
        tool: Tool compiling the file (e.g. 'cc', 'c++', 'nvcc')
        filename: Name of the file
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(f"      [{tool}] {filename}")


def log_decision(output: str, rebuild: bool, reason: str, path: Optional[object] = None) -> None:
    """
    Log a staleness decision.

    Args:
        output: Archive file name
        rebuild: Whether the archive must be rebuilt
        reason: Explanation of the decision
        path: File that triggered the decision, if any
    """
    verdict = "REBUILD" if rebuild else "UP-TO-DATE"
    suffix = f" ({path})" if path is not None and rebuild else ""
    log_detail(f"{verdict}: {reason}{suffix}")


def log_header(title: str, version: str) -> None:
    """Log the program header."""
    _print(f"{title} v{version}")


def log_error(message: str) -> None:
    """Log an error message."""
    _print(f"ERROR: {message}")


def log_warning(message: str) -> None:
    """Log a warning message."""
    _print(f"WARNING: {message}")


class TimedLogger:
    """
    Context manager for logging with elapsed time tracking.

    Usage:
        with TimedLogger("Compiling libfoo.a") as logger:
            logger.detail("3 sources")
        # Logs "Done (N.NNs)" on success
    """

    def __init__(self, operation: str, verbose_only: bool = False):
        self.operation = operation
        self.verbose_only = verbose_only
        self.start_time = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        log(f"{self.operation}...", self.verbose_only)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        elapsed = time.time() - self.start_time
        if exc_type is None:
            log_detail(f"Done ({elapsed:.2f}s)", verbose_only=self.verbose_only)
        return None

    def detail(self, message: str) -> None:
        """Log a detail message within this operation."""
        log_detail(message, verbose_only=self.verbose_only)
