"""Error types raised by the phase plotting pipeline."""


class PhasePlotError(ValueError):
    """Base class for pipeline errors. All of them are fatal to a run."""


class ParseError(PhasePlotError):
    """Input table is missing a required column or holds a non-numeric phase."""


class ConfigurationError(PhasePlotError):
    """A condition has no entry in the colour (or marker) mapping."""


class StatisticalPreconditionError(PhasePlotError):
    """The two-sample test was given the wrong number of groups or an empty one."""
