""" Custom errors for marginci. """


class MarginCIError(Exception):
    """ Base class for all errors raised by marginci. """


class InvalidSignificanceLevel(MarginCIError, ValueError):
    """
    Raised when a significance level outside the open interval (0, 1)
    is passed to an estimator, builder, or projection.
    """


class EmptySnapshotHistory(MarginCIError, LookupError):
    """
    Raised when a region has no snapshots, or when a snapshot index
    falls outside a region's history.
    """


class MalformedCounts(MarginCIError, ValueError):
    """
    Raised when vote-count data cannot be used as-is: negative or
    fractional counts, negative expected totals, mail-ballot columns
    that don't match the full counts, or an unknown candidate.
    """


class ConfigError(MarginCIError, ValueError):
    """ Raised when a settings file contains an unusable value. """
