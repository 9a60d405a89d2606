"""ENS name lookup against Ethereum mainnet.

The NFT contract lives on Polygon, which has no ENS registry, so names are
resolved through a separate mainnet provider.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from ens import AsyncENS
from web3 import AsyncWeb3

from teamminter.config import get_settings

logger = logging.getLogger(__name__)


class EnsLookup:  # pylint: disable=too-few-public-methods
    def __init__(self, rpc_url: str) -> None:
        self._w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self._ns = AsyncENS.from_web3(self._w3)

    async def resolve(self, name: str) -> str | None:
        """Return the checksummed address *name* points to, or None."""
        logger.debug("ENS lookup %s", name)
        return await self._ns.address(name)


@lru_cache()
def get_ens_lookup() -> EnsLookup:
    return EnsLookup(get_settings().ens_rpc_url)
