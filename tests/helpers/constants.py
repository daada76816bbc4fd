"""Shared token and pool constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import WETH, USDC
    # or
    from tests.helpers.constants import WETH, USDC
"""

# =============================================================================
# Mainnet tokens
# =============================================================================

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"  # Wrapped Ether (18 decimals)
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"  # USD Coin (6 decimals)
DAI = "0x6b175474e89094c44da98b954eedeac495271d0f"  # Dai Stablecoin (18 decimals)
USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"  # Tether USD (6 decimals)
BAL = "0xba100000625a3754423978a60c9317c58a424e3d"  # Balancer (18 decimals)
WSTETH = "0x7f39c581f595b53c5cb19bd0b3f8da6c935e2ca0"  # Wrapped stETH (18 decimals)

TOKEN_DECIMALS = {
    WETH: 18,
    USDC: 6,
    DAI: 18,
    USDT: 6,
    BAL: 18,
    WSTETH: 18,
}

# =============================================================================
# Pool addresses (also the BPT addresses)
# =============================================================================

WEIGHTED_POOL = "0x5c6ee304399dbdb9c8ef030ab642b10820db8f56"
STABLE_POOL = "0x06df3b2bbb68adc8b0e302443692037ed9f91b42"
META_STABLE_POOL = "0x32296969ef14eb0c6d29669c550d4a0449130230"
PHANTOM_POOL = "0x7b50775383d3d6f0215a8f290f2c9e2eebbeceb2"
LINEAR_POOL = "0x2bbf681cc4eb09218bee85ea2a5d3d13fa40fc0c"

POOL_ID_SUFFIX = "0002000000000000000000fe"
