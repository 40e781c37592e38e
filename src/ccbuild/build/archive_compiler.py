"""Static Archive Compiler.

This module turns a list of C/C++/CUDA sources into a static archive.

Compilation Process:
    1. Pick a compiler per source (cc for .c, nvcc for .cu or CUDA mode, c++ otherwise)
    2. Compile each source to an object file in the output directory
    3. Replace ``lib<name>.a`` with a fresh archive of those objects (ar crs)

Toolchain:
    Executables come from CompilerOptions, which defaults to the CC, CXX,
    NVCC and AR environment variables and falls back to cc, c++, nvcc and ar.
    nvcc does not accept GCC-style host flags directly, so ``-f``/``-W``
    flags are forwarded to the host compiler with ``-Xcompiler``.
"""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import CcbuildError
from ..output import log_file
from ..subprocess_utils import safe_run
from .archive_search import archive_file_name

logger = logging.getLogger(__name__)

C_EXTENSIONS = (".c",)
CUDA_EXTENSIONS = (".cu",)
CUDART_KINDS = ("none", "shared", "static")

# Host-compiler flag prefixes nvcc must receive through -Xcompiler
_HOST_FLAG_PREFIXES = ("-f", "-W")


class CompilerError(CcbuildError):
    """Raised when a compiler or archiver invocation fails.

    Attributes:
        cmd: Command that failed (None if it could not be started)
        stderr: Captured standard error of the failed command
    """

    def __init__(self, message: str, cmd: Optional[List[str]] = None, stderr: str = ""):
        self.cmd = cmd
        self.stderr = stderr
        if stderr:
            message = f"{message}\n{stderr.rstrip()}"
        super().__init__(message)


@dataclass
class CompilerOptions:
    """Toolchain selection for ArchiveCompiler.

    Attributes:
        cc: C compiler executable
        cxx: C++ compiler executable
        nvcc: CUDA compiler executable
        ar: Archiver executable
        cuda: Compile every source with nvcc
        cudart: CUDA runtime linkage passed to nvcc ("none", "shared", "static")
        pic: Generate position-independent code (ignored on Windows)
    """

    cc: str = field(default_factory=lambda: os.environ.get("CC", "cc"))
    cxx: str = field(default_factory=lambda: os.environ.get("CXX", "c++"))
    nvcc: str = field(default_factory=lambda: os.environ.get("NVCC", "nvcc"))
    ar: str = field(default_factory=lambda: os.environ.get("AR", "ar"))
    cuda: bool = False
    cudart: Optional[str] = None
    pic: bool = True

    def __post_init__(self) -> None:
        if self.cudart is not None and self.cudart not in CUDART_KINDS:
            raise ValueError(f"Invalid cudart '{self.cudart}' (expected one of: {', '.join(CUDART_KINDS)})")


class ArchiveCompiler:
    """Compiles sources and packs the objects into a static archive.

    Example usage:
        compiler = ArchiveCompiler(CompilerOptions(cuda=False))
        archive = compiler.compile(
            sources=[Path("src/foo.cpp")],
            include_dirs=[Path("include")],
            flags=["-O2"],
            out_dir=Path("target/release/build/foo/out"),
            output="foo",
        )
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options if options is not None else CompilerOptions()

    def is_cuda(self, source: Path) -> bool:
        """True if ``source`` is compiled with nvcc."""
        return self.options.cuda or source.suffix in CUDA_EXTENSIONS

    def compiler_for(self, source: Path) -> str:
        """Select the compiler executable for ``source``."""
        if self.is_cuda(source):
            return self.options.nvcc
        if source.suffix in C_EXTENSIONS:
            return self.options.cc
        return self.options.cxx

    def object_path(self, source: Path, index: int, out_dir: Path) -> Path:
        """Object file path for the ``index``-th source.

        The index keeps objects distinct when two sources share a stem.
        """
        return out_dir / f"{source.stem}-{index}.o"

    def _flags_for(self, source: Path, flags: Sequence[str]) -> List[str]:
        host_flags = list(flags)
        if self.options.pic and sys.platform != "win32":
            host_flags.append("-fPIC")

        if not self.is_cuda(source):
            return host_flags

        nvcc_flags: List[str] = []
        for flag in host_flags:
            if flag.startswith(_HOST_FLAG_PREFIXES):
                nvcc_flags.extend(["-Xcompiler", flag])
            else:
                nvcc_flags.append(flag)
        if self.options.cudart is not None:
            nvcc_flags.append(f"--cudart={self.options.cudart}")
        if source.suffix not in CUDA_EXTENSIONS:
            nvcc_flags.extend(["-x", "cu"])
        return nvcc_flags

    def compile_command(self, source: Path, include_dirs: Sequence[Path], flags: Sequence[str], obj: Path) -> List[str]:
        """Build the command line compiling ``source`` into ``obj``."""
        cmd = [self.compiler_for(source)]
        cmd.extend(self._flags_for(source, flags))
        cmd.extend(f"-I{d}" for d in include_dirs)
        cmd.extend(["-c", str(source), "-o", str(obj)])
        return cmd

    def compile_object(
        self,
        source: Path,
        include_dirs: Sequence[Path],
        flags: Sequence[str],
        out_dir: Path,
        index: int = 0,
    ) -> Path:
        """Compile one source file to an object file.

        Args:
            source: Source file
            include_dirs: Ordered include directories
            flags: Compile flags
            out_dir: Directory receiving the object file
            index: Position of the source in the build (for object naming)

        Returns:
            Path to the object file

        Raises:
            CompilerError: If the compiler fails or cannot be started
        """
        obj = self.object_path(source, index, out_dir)
        cmd = self.compile_command(source, include_dirs, flags, obj)
        log_file(Path(cmd[0]).name, source.name)
        self._run(cmd, f"Failed to compile {source}")
        return obj

    def create_archive(self, objects: Sequence[Path], archive: Path) -> Path:
        """Create ``archive`` from ``objects``, replacing any existing archive.

        Raises:
            CompilerError: If the archiver fails or cannot be started
        """
        if archive.exists():
            archive.unlink()
        cmd = [self.options.ar, "crs", str(archive)] + [str(o) for o in objects]
        self._run(cmd, f"Failed to create archive {archive}")
        return archive

    def compile(
        self,
        sources: Sequence[Path],
        include_dirs: Sequence[Path],
        flags: Sequence[str],
        out_dir: Path,
        output: str,
    ) -> Path:
        """Compile ``sources`` and archive them as ``lib<output>.a`` in ``out_dir``.

        Returns:
            Path to the archive

        Raises:
            CompilerError: If any compiler or archiver step fails
        """
        if not sources:
            raise CompilerError(f"No sources to compile for {archive_file_name(output)}")

        out_dir.mkdir(parents=True, exist_ok=True)
        objects = [
            self.compile_object(Path(source), include_dirs, flags, out_dir, index)
            for index, source in enumerate(sources)
        ]
        archive = out_dir / archive_file_name(output)
        self.create_archive(objects, archive)
        logger.info(f"Created {archive} from {len(objects)} object(s)")
        return archive

    def _run(self, cmd: List[str], failure: str) -> None:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = safe_run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            raise CompilerError(f"{failure}: tool not found: {cmd[0]}", cmd=cmd) from None
        except subprocess.SubprocessError as e:
            raise CompilerError(f"{failure}: {e}", cmd=cmd) from e

        if result.returncode != 0:
            logger.error(f"{failure} (exit code {result.returncode})")
            raise CompilerError(failure, cmd=cmd, stderr=result.stderr or "")
