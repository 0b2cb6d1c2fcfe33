"""
Configuration
=============
Option records consumed when the evolution operator and the solver are built.

Why is this file needed?
------------------------
1. Validation: malformed options are rejected when the record is created,
   before any operator is assembled.
2. Single source of defaults: scripts, tests and the demo entry point share
   the same defaults.

Exports:
    MaxwellEvolOptions: Flux type of the DG scheme.
    SolverOptions: Polynomial order, time stepping and output cadence.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from maxwelldg.exceptions import InvalidConfiguration, UnsupportedFluxType
from maxwelldg.fea.maxwell.types import FluxType, as_flux_type

DEFAULT_ORDER: int = 2
DEFAULT_T_FINAL: float = 1.0
DEFAULT_DT: float = 1e-3
DEFAULT_VIS_STEPS: int = 10
DEFAULT_PRECISION: int = 8


@dataclass
class MaxwellEvolOptions:
    flux_type: FluxType = FluxType.UPWIND

    def __post_init__(self) -> None:
        try:
            self.flux_type = as_flux_type(self.flux_type)
        except UnsupportedFluxType as e:
            raise InvalidConfiguration(str(e)) from e

    def to_dict(self) -> dict:
        return {"flux_type": self.flux_type.value}

    @classmethod
    def from_dict(cls, data: dict) -> MaxwellEvolOptions:
        return cls(flux_type=data.get("flux_type", FluxType.UPWIND))


@dataclass
class SolverOptions:
    """
    Options of a time-domain run.

    Attributes:
        order: Polynomial order of the DG basis.
        t_final: Final simulation time.
        dt: Time step.
        vis_steps: Number of time steps between two exported snapshots.
        precision: Number of significant digits written by text exporters.
        evolution: Options forwarded to the evolution operator.
    """
    order: int = DEFAULT_ORDER
    t_final: float = DEFAULT_T_FINAL
    dt: float = DEFAULT_DT
    vis_steps: int = DEFAULT_VIS_STEPS
    precision: int = DEFAULT_PRECISION
    evolution: MaxwellEvolOptions = field(default_factory=MaxwellEvolOptions)

    def __post_init__(self) -> None:
        if self.order < 0:
            raise InvalidConfiguration(f"Polynomial order must be non-negative, got {self.order}.")
        if self.t_final < 0.0:
            raise InvalidConfiguration(f"Final time must be non-negative, got {self.t_final}.")
        if self.dt <= 0.0:
            raise InvalidConfiguration(f"Time step must be positive, got {self.dt}.")
        if self.vis_steps < 1:
            raise InvalidConfiguration(f"vis_steps must be at least 1, got {self.vis_steps}.")
        if self.precision < 1:
            raise InvalidConfiguration(f"precision must be at least 1, got {self.precision}.")

    def to_dict(self) -> dict:
        return {
            "order": self.order,
            "t_final": self.t_final,
            "dt": self.dt,
            "vis_steps": self.vis_steps,
            "precision": self.precision,
            "evolution": self.evolution.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> SolverOptions:
        return cls(
            order=data.get("order", DEFAULT_ORDER),
            t_final=data.get("t_final", DEFAULT_T_FINAL),
            dt=data.get("dt", DEFAULT_DT),
            vis_steps=data.get("vis_steps", DEFAULT_VIS_STEPS),
            precision=data.get("precision", DEFAULT_PRECISION),
            evolution=MaxwellEvolOptions.from_dict(data.get("evolution", {})),
        )
