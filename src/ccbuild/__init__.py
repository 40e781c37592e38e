"""
ccbuild - incremental static archive builds for C/C++/CUDA sources.

ccbuild decides whether a previously built ``lib<name>.a`` is still valid by
comparing its modification time against the sources and the headers they
include, and only invokes the compiler when it is not.
"""

from .build import AmbiguousArtifactError, Build, BuildResult, CompilerError, StalenessEvaluator, should_rebuild
from .errors import CcbuildError

__version__ = "0.1.0"

__all__ = [
    "AmbiguousArtifactError",
    "Build",
    "BuildResult",
    "CcbuildError",
    "CompilerError",
    "StalenessEvaluator",
    "should_rebuild",
    "__version__",
]
