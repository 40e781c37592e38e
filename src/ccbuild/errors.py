"""Exception hierarchy for ccbuild."""


class CcbuildError(Exception):
    """Base class for all ccbuild errors."""

    pass
