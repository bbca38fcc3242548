from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class IntegratorConfig:
    rtol: float = 1e-6
    atol: float = 1e-9
    max_steps: int = 1000

    def __post_init__(self) -> None:
        if self.rtol <= 0 or self.atol <= 0:
            raise ValueError("rtol and atol must be > 0")
        if self.max_steps <= 0:
            raise ValueError("max_steps must be > 0")


@dataclass(frozen=True, slots=True)
class ShootingConfig:
    itol: float = 1e-3  # absolute tolerance on the initial value
    maxiters: int = 100
    obtol: float = 1e-6  # stand-in for ob=0 in radial flowrate problems

    def __post_init__(self) -> None:
        if not self.itol >= 0:
            raise ValueError("itol must be >= 0")
        if self.maxiters < 0:
            raise ValueError("maxiters must be >= 0")
        if not self.obtol > 0:
            raise ValueError("obtol must be > 0")
