"""Exception hierarchy for shellstats.

Input errors are fatal. Degenerate statistics and failed model fits are
recoverable inside replicate loops, where they are excluded and counted.
"""


class ShellStatsError(Exception):
    """Base class for all shellstats errors."""


class DataLoadError(ShellStatsError, ValueError):
    """The input table is missing, unreadable or violates the schema."""


class DegenerateStatisticError(ShellStatsError, ValueError):
    """A statistic is undefined for the given data (e.g. zero variance)."""


class ModelFitError(ShellStatsError, RuntimeError):
    """A regression fit failed to converge or could not be computed."""
