"""
DEX adapters.

Available adapters:
- UniswapV3PoolReader: pool state for Uniswap V3 forks (Pharaoh, Shadow)
"""

from dex.adapters.uniswap_v3 import UniswapV3PoolReader, fetch_pool_pair

__all__ = [
    "UniswapV3PoolReader",
    "fetch_pool_pair",
]
