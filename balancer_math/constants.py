"""Protocol constants for Balancer V2 pool math.

Centralizes fixed-point scales and protocol parameters shared by the
FixedPoint, LogExp and pool math modules.
"""

# Maximum uint256 value (the EVM word the protocol arithmetic is checked against)
MAX_UINT256 = 2**256 - 1

# Fixed-point scales
ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

ONE = ONE_18
TWO = 2 * ONE
FOUR = 4 * ONE

# Relative error bound applied by pow_up/pow_down (1e-14)
MAX_POW_RELATIVE_ERROR = 10000

# Stable pool amplification precision (amp values are scaled by this)
AMP_PRECISION = 1000

# Swap limits: amounts swapped may not be larger than this share of the balance
MAX_IN_RATIO = 3 * 10**17  # 0.3
MAX_OUT_RATIO = 3 * 10**17  # 0.3

# Normalized weights may miss ONE by this many wei per token (decimal rounding of 1/n)
WEIGHT_SUM_TOLERANCE = 1

# Newton iteration budget for the stable invariant and balance solvers
STABLE_MAX_ITERATIONS = 255

# Slippage inputs are expressed in basis points
BPS_PER_ONE = 10_000

# Every token is normalised to this many decimals before any math runs
POOL_DECIMALS = 18
