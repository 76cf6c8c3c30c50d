"""
Exceptions raised by the matcher.

Geometry failures are per-record and are turned into "no position" by the
callers that batch over records. Session misuse and dataset problems are
raised to the caller.
"""


class MatcherError(Exception):
    """Base class for all matcher errors."""


class UnresolvablePosition(MatcherError):
    """A record has no computable representative coordinate."""


class UnsupportedGeometryKind(MatcherError):
    """Geometry kind outside node/way for elements or Point/Polygon for features."""


class NoCurrentRecord(MatcherError):
    """A decision was requested before the review session was started."""


class EmptySession(MatcherError):
    """No matched record survived classification."""


class DatasetError(MatcherError):
    """An input dataset is malformed and cannot be matched."""
