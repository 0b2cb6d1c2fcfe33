from __future__ import annotations

from maxwelldg.exceptions import InvalidConfiguration
from maxwelldg.fea.maxwell.types import FieldType, as_field_type


class Material:
    """Linear isotropic electromagnetic material."""

    def __init__(
        self,
        name: str,
        relative_permittivity: float = 1.0,
        relative_permeability: float = 1.0,
        color: str = "lightgray",
    ) -> None:
        """Initialize the material.

        Args:
            name: The name of the material.
            relative_permittivity: Relative electric permittivity, weights the E mass matrix.
            relative_permeability: Relative magnetic permeability, weights the H mass matrix.
            color: The color of the material, used for visualization.

        Raises:
            InvalidConfiguration: If a material constant is not strictly positive.
        """
        if relative_permittivity <= 0.0:
            raise InvalidConfiguration(
                f"Material '{name}': relative permittivity must be positive, got {relative_permittivity}."
            )
        if relative_permeability <= 0.0:
            raise InvalidConfiguration(
                f"Material '{name}': relative permeability must be positive, got {relative_permeability}."
            )
        self.name = name
        self.relative_permittivity = float(relative_permittivity)
        self.relative_permeability = float(relative_permeability)
        self.color = color

    def __repr__(self) -> str:
        return (
            f"Material(name='{self.name}', relative_permittivity={self.relative_permittivity}, "
            f"relative_permeability={self.relative_permeability})"
        )

    @classmethod
    def vacuum(cls) -> Material:
        return cls(name="Vacuum")

    def coefficient(self, field: FieldType) -> float:
        """Mass weight of ``field``: permittivity for E, permeability for H."""
        if as_field_type(field) == FieldType.E:
            return self.relative_permittivity
        return self.relative_permeability

    @property
    def wave_speed(self) -> float:
        """Speed of light in the material relative to vacuum."""
        return 1.0 / (self.relative_permittivity * self.relative_permeability) ** 0.5
