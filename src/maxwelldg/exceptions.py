"""
Exceptions raised by the maxwelldg package.

All of them derive from ``ValueError`` so callers that already guard numerical
setup code with ``except ValueError`` keep working.
"""


class MaxwellDGError(Exception):
    """Base class of all errors raised by maxwelldg."""


class InvalidConfiguration(MaxwellDGError, ValueError):
    """Malformed options or material constants."""


class DimensionMismatch(MaxwellDGError, ValueError):
    """Mesh, state vector or source dimension incompatible with the scheme."""


class UnsupportedPolicy(MaxwellDGError, ValueError):
    """No flux coefficient is defined for the requested combination."""


class UnsupportedFluxType(UnsupportedPolicy):
    """The flux type is not one of the known flux types."""


class UnsupportedBoundaryCondition(UnsupportedPolicy):
    """The boundary condition is unknown or a boundary has no registered condition."""


class InvalidFieldReference(MaxwellDGError, ValueError):
    """A field type other than E or H was requested."""
