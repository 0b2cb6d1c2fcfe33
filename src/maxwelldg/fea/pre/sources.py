"""
Initial Field Sources
=====================
Analytic initial conditions projected onto a field component before a run.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

import numpy as np

from maxwelldg.exceptions import DimensionMismatch, InvalidConfiguration
from maxwelldg.fea.maxwell.types import Direction, FieldType, as_field_type

if TYPE_CHECKING:
    import numpy.typing as npt


class InitialField(ABC):
    """Scalar function initializing one component of E or H."""

    def __init__(self, field_type: FieldType, direction: Direction) -> None:
        self.field_type = as_field_type(field_type)
        self.direction = Direction(direction)

    @abstractmethod
    def __call__(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Evaluate the field at physical points of shape (n_points, dim)."""
        pass


class GaussianInitialField(InitialField):
    """
    Gaussian pulse normalization * exp(-|x - center|^2 / (2 spread^2)).

    Args:
        field_type: Field receiving the pulse.
        direction: Component receiving the pulse.
        spread: Standard deviation of the pulse, strictly positive.
        normalization: Peak value.
        center: Pulse centre, its length must match the mesh dimension. Origin when omitted.
    """

    def __init__(
        self,
        field_type: FieldType,
        direction: Direction,
        spread: float = 2.0,
        normalization: float = 1.0,
        center: Sequence[float] | None = None,
    ) -> None:
        super().__init__(field_type, direction)
        if spread <= 0.0:
            raise InvalidConfiguration(f"Gaussian spread must be positive, got {spread}.")
        self.spread = float(spread)
        self.normalization = float(normalization)
        self.center = None if center is None else np.asarray(center, dtype=np.float64)

    def __call__(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        points = np.atleast_2d(points)
        center = np.zeros(points.shape[1]) if self.center is None else self.center
        if center.shape != (points.shape[1],):
            raise DimensionMismatch(
                f"Gaussian centre has {center.size} coordinates but the mesh is {points.shape[1]}D."
            )
        r2 = np.sum((points - center) ** 2, axis=1)
        return self.normalization * np.exp(-r2 / (2.0 * self.spread ** 2))


class ResonantModeInitialField(InitialField):
    """
    Standing cavity mode amplitude * sin(m pi x / Lx) * sin(n pi y / Ly).

    In a PEC rectangle [0, Lx] x [0, Ly] an Ez field of this shape oscillates
    with angular frequency pi * sqrt((m / Lx)^2 + (n / Ly)^2).
    """

    def __init__(
        self,
        field_type: FieldType = FieldType.E,
        direction: Direction = Direction.Z,
        modes: tuple[int, int] = (1, 1),
        lengths: tuple[float, float] = (1.0, 1.0),
        amplitude: float = 1.0,
    ) -> None:
        super().__init__(field_type, direction)
        if min(lengths) <= 0.0:
            raise InvalidConfiguration(f"Cavity lengths must be positive, got {lengths}.")
        self.modes = modes
        self.lengths = lengths
        self.amplitude = amplitude

    @property
    def angular_frequency(self) -> float:
        (m, n), (lx, ly) = self.modes, self.lengths
        return float(np.pi * np.hypot(m / lx, n / ly))

    def __call__(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        points = np.atleast_2d(points)
        if points.shape[1] != 2:
            raise DimensionMismatch(f"Cavity modes are defined on 2D meshes, got {points.shape[1]}D points.")
        (m, n), (lx, ly) = self.modes, self.lengths
        return self.amplitude * np.sin(m * np.pi * points[:, 0] / lx) * np.sin(n * np.pi * points[:, 1] / ly)
