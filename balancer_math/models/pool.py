"""Pydantic models for pool snapshots.

A snapshot is the per-call view of a pool supplied by the data layer
(subgraph, API or on-chain reads). All numeric fields arrive as
human-readable decimal strings and are converted to scaled integers
before any math runs.
"""

from enum import Enum

from pydantic import BaseModel, Field

from balancer_math.models.types import Address, DecimalString, normalize_address


class PoolType(str, Enum):
    """Pool type tags as reported by the data layer."""

    WEIGHTED = "Weighted"
    INVESTMENT = "Investment"
    LIQUIDITY_BOOTSTRAPPING = "LiquidityBootstrapping"
    STABLE = "Stable"
    META_STABLE = "MetaStable"
    STABLE_PHANTOM = "StablePhantom"
    COMPOSABLE_STABLE = "ComposableStable"
    LINEAR = "Linear"
    AAVE_LINEAR = "AaveLinear"
    ERC4626_LINEAR = "ERC4626Linear"
    ELEMENT = "Element"
    GYRO2 = "Gyro2"
    FX = "FX"


class PoolToken(BaseModel):
    """A token held by a pool."""

    address: Address
    # Missing decimals are reported by the math layer, not by validation
    decimals: int | None = Field(default=None, ge=0, le=77)
    balance: DecimalString
    weight: DecimalString | None = None
    price_rate: DecimalString | None = Field(default=None, alias="priceRate")
    symbol: str | None = None

    model_config = {"populate_by_name": True}


class Pool(BaseModel):
    """Immutable snapshot of a pool's state.

    Attributes:
        id: Balancer pool id (32-byte hex string)
        address: Pool contract address (also the BPT token address)
        pool_type: Pool type tag, e.g. "Weighted" or "StablePhantom"
        swap_fee: Swap fee as a decimal fraction (e.g. "0.003")
        total_shares: Total BPT supply in human units
        amp: Amplification parameter (stable family only), unscaled
        tokens: Pool tokens in pool order
        tokens_list: Token addresses in pool order (defaults to tokens' order)
    """

    id: str
    address: Address
    pool_type: str = Field(alias="poolType")
    swap_fee: DecimalString = Field(alias="swapFee")
    total_shares: DecimalString = Field(alias="totalShares")
    amp: DecimalString | None = None
    tokens: list[PoolToken]
    tokens_list: list[Address] | None = Field(default=None, alias="tokensList")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def token_addresses(self) -> list[str]:
        """Normalized token addresses in pool order."""
        if self.tokens_list is not None:
            return [normalize_address(t) for t in self.tokens_list]
        return [normalize_address(t.address) for t in self.tokens]

    def get_token(self, address: str) -> PoolToken | None:
        """Get a pool token by address (case-insensitive)."""
        target = normalize_address(address)
        for token in self.tokens:
            if normalize_address(token.address) == target:
                return token
        return None


class Price(BaseModel):
    """Token price from an external price source."""

    usd: DecimalString | None = None
    eth: DecimalString | None = None
