"""
dex/adapters/uniswap_v3.py - Concentrated-liquidity pool reader.

Pharaoh (Avalanche) and Shadow (Sonic) are Uniswap V3 forks, so both pools
expose the same view functions:
- token0() / token1()
- slot0() -> (sqrtPriceX96, tick, ...)
- ERC20 decimals() on each token
"""

import asyncio

from chains.providers import RPCProvider
from core.constants import ErrorCode
from core.exceptions import ArbError, PriceFetchError
from core.logging import get_logger
from core.math import price_from_sqrt_price_x96
from core.models import PoolQuote

logger = get_logger(__name__)


# =============================================================================
# ABI ENCODING
# =============================================================================

# keccak256("slot0()")[:4]
SELECTOR_SLOT0 = "0x3850c7bd"
# keccak256("token0()")[:4]
SELECTOR_TOKEN0 = "0x0dfe1681"
# keccak256("token1()")[:4]
SELECTOR_TOKEN1 = "0xd21220a7"
# keccak256("decimals()")[:4]
SELECTOR_DECIMALS = "0x313ce567"

WORD_HEX = 64


def _words(hex_result: str, min_words: int, what: str) -> str:
    """Strip 0x and check the response carries at least min_words 32-byte words."""
    if not hex_result or hex_result == "0x":
        raise PriceFetchError(
            f"Empty {what} response",
            code=ErrorCode.DECODE_FAILED,
        )

    data = hex_result[2:] if hex_result.startswith("0x") else hex_result
    if len(data) < WORD_HEX * min_words:
        raise PriceFetchError(
            f"{what} response too short: {len(data)} chars",
            code=ErrorCode.DECODE_FAILED,
            details={"data_length": len(data), "raw": hex_result[:100]},
        )
    return data


def decode_address(hex_result: str) -> str:
    """Decode an ABI-encoded address (right-most 20 bytes of the first word)."""
    data = _words(hex_result, 1, "address")
    return "0x" + data[WORD_HEX - 40:WORD_HEX]


def decode_uint(hex_result: str) -> int:
    """Decode the first ABI word as an unsigned integer."""
    data = _words(hex_result, 1, "uint")
    return int(data[:WORD_HEX], 16)


def decode_slot0_sqrt_price(hex_result: str) -> int:
    """
    Decode sqrtPriceX96 from slot0().

    slot0 returns (uint160 sqrtPriceX96, int24 tick, uint16, uint16, uint16,
    uint8, bool); only the first word is needed.
    """
    data = _words(hex_result, 2, "slot0")
    return int(data[:WORD_HEX], 16)


# =============================================================================
# READER
# =============================================================================

class UniswapV3PoolReader:
    """
    Reads pool state and token metadata through an RPCProvider.

    Usage:
        reader = UniswapV3PoolReader(provider)
        quote = await reader.fetch_pool_quote(pool_address)
    """

    def __init__(self, provider: RPCProvider):
        self.provider = provider
        self.chain = provider.chain
        # decimals() never changes for a deployed token
        self._decimals_cache: dict[str, int] = {}

    async def _call(self, to: str, selector: str) -> str:
        response = await self.provider.eth_call(to=to, data=selector)
        return response.result

    async def fetch_token_decimals(self, token_address: str) -> int:
        """
        Fetch ERC20 decimals for a token.

        Raises:
            PriceFetchError: if the call fails or the response is malformed
        """
        key = token_address.lower()
        if key in self._decimals_cache:
            return self._decimals_cache[key]

        try:
            decimals = decode_uint(await self._call(token_address, SELECTOR_DECIMALS))
        except PriceFetchError:
            raise
        except ArbError as e:
            raise PriceFetchError(
                f"decimals() failed for {token_address}: {e}",
                code=ErrorCode.DECIMALS_FETCH_FAILED,
                details={"token": token_address, "chain": self.chain},
            ) from e

        self._decimals_cache[key] = decimals
        return decimals

    async def fetch_pool_quote(self, pool_address: str) -> PoolQuote:
        """
        Fetch token0/token1, sqrtPriceX96 and decimals, then convert to a price.

        Raises:
            PriceFetchError: on any RPC or decoding failure
        """
        try:
            token0_raw, token1_raw, slot0_raw = await asyncio.gather(
                self._call(pool_address, SELECTOR_TOKEN0),
                self._call(pool_address, SELECTOR_TOKEN1),
                self._call(pool_address, SELECTOR_SLOT0),
            )
            token0 = decode_address(token0_raw)
            token1 = decode_address(token1_raw)
            sqrt_price_x96 = decode_slot0_sqrt_price(slot0_raw)

            decimals0, decimals1 = await asyncio.gather(
                self.fetch_token_decimals(token0),
                self.fetch_token_decimals(token1),
            )
            price = price_from_sqrt_price_x96(sqrt_price_x96, decimals0, decimals1)
        except PriceFetchError:
            raise
        except ArbError as e:
            raise PriceFetchError(
                f"Pool read failed for {pool_address} on {self.chain}: {e}",
                details={"pool": pool_address, "chain": self.chain, "cause": e.to_dict()},
            ) from e

        logger.debug(
            f"Pool {pool_address[:10]}... price {price}",
            extra={"context": {"chain": self.chain, "token0": token0, "token1": token1}},
        )

        return PoolQuote(
            token0=token0,
            token1=token1,
            price=price,
            pool_address=pool_address,
            chain=self.chain,
            decimals0=decimals0,
            decimals1=decimals1,
            sqrt_price_x96=sqrt_price_x96,
        )


async def fetch_pool_pair(
    reader_a: UniswapV3PoolReader,
    pool_a: str,
    reader_b: UniswapV3PoolReader,
    pool_b: str,
) -> tuple[PoolQuote, PoolQuote]:
    """Read both pools concurrently; either failure aborts the pair."""
    quote_a, quote_b = await asyncio.gather(
        reader_a.fetch_pool_quote(pool_a),
        reader_b.fetch_pool_quote(pool_b),
    )
    return quote_a, quote_b
