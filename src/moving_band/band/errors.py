"""
Exceptions raised while building a moving-band descriptor.

All of them derive from :class:`BandError`, so callers can catch a single
type. The concrete classes also derive from the builtin exception that
best matches their meaning (``ValueError`` / ``NotImplementedError``).
"""


class BandError(Exception):
    """Base class for moving-band construction failures."""


class BandConfigurationError(BandError, ValueError):
    """The triangulation source was given in an unsupported form."""


class InconsistentBandInputError(BandError, ValueError):
    """Mesh, element sets and air-gap triangulation do not agree."""


class AutoTriangulationNotImplementedError(BandError, NotImplementedError):
    """Deriving the air-gap triangulation from machine dimensions."""
