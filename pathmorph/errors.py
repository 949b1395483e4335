"""Exceptions raised by the geometry and morphing core."""


class PathMorphError(Exception):
    """Base class for all pathmorph errors."""


class UnsupportedCommandKind(PathMorphError, TypeError):
    """An operation that only handles line and quadratic segments got something else."""


class InvariantViolation(PathMorphError, ValueError):
    """An internal consistency check failed.

    Raised for mismatched counts after balancing, empty input where a
    non-empty result is required, and conflicting configuration options.
    These point at a logic defect or a bad call, so they are never retried.
    """
