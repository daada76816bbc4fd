"""Math configuration for pool calculations."""

from __future__ import annotations

import os
from dataclasses import dataclass

from balancer_math.constants import (
    BPS_PER_ONE,
    MAX_IN_RATIO,
    MAX_OUT_RATIO,
    MAX_POW_RELATIVE_ERROR,
    STABLE_MAX_ITERATIONS,
)

ENV_PREFIX = "BALANCER_MATH_"


@dataclass(frozen=True)
class MathConfig:
    """Centralized configuration for protocol safety parameters.

    The defaults match the deployed Balancer V2 contracts. They are kept
    configurable so results can be verified against a specific protocol
    version.

    Attributes:
        max_pow_relative_error: Relative error margin added/subtracted by
            pow_up/pow_down, scaled by 1e18 (default: 10000, i.e. 1e-14)
        max_in_ratio: Largest share of balance_in a swap may add (default: 0.3)
        max_out_ratio: Largest share of balance_out a swap may remove (default: 0.3)
        stable_max_iterations: Newton iteration budget for stable pools (default: 255)
        bps_per_one: Basis points per unit for slippage inputs (default: 10000)
    """

    max_pow_relative_error: int = MAX_POW_RELATIVE_ERROR
    max_in_ratio: int = MAX_IN_RATIO
    max_out_ratio: int = MAX_OUT_RATIO
    stable_max_iterations: int = STABLE_MAX_ITERATIONS
    bps_per_one: int = BPS_PER_ONE

    def __post_init__(self) -> None:
        if self.max_pow_relative_error < 0:
            raise ValueError(
                f"max_pow_relative_error must be non-negative, got {self.max_pow_relative_error}"
            )
        if self.stable_max_iterations <= 0:
            raise ValueError(
                f"stable_max_iterations must be positive, got {self.stable_max_iterations}"
            )
        if self.bps_per_one <= 0:
            raise ValueError(f"bps_per_one must be positive, got {self.bps_per_one}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> MathConfig:
        """Build a config from environment variables, falling back to defaults.

        Recognised variables:
        - BALANCER_MATH_MAX_POW_RELATIVE_ERROR
        - BALANCER_MATH_STABLE_MAX_ITERATIONS
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            max_pow_relative_error=int(
                env.get(
                    f"{ENV_PREFIX}MAX_POW_RELATIVE_ERROR",
                    str(defaults.max_pow_relative_error),
                )
            ),
            stable_max_iterations=int(
                env.get(
                    f"{ENV_PREFIX}STABLE_MAX_ITERATIONS",
                    str(defaults.stable_max_iterations),
                )
            ),
        )


# Default configuration instance
DEFAULT_MATH_CONFIG = MathConfig()
