"""Mathematical primitives for Balancer pool calculations.

This package provides:
- integer: checked unscaled integer arithmetic (Balancer's Math library)
- fixed_point: 18-decimal fixed-point arithmetic (FixedPoint library)
- log_exp: fixed-point exp/ln/pow (LogExpMath library)
"""

from balancer_math.math import fixed_point, integer, log_exp

__all__ = ["fixed_point", "integer", "log_exp"]
