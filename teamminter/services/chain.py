"""Access to the deployed team-mint NFT contract.

Only the three ABI entries the minting flow needs are declared.  Writes are
signed locally with ``MINTER_PRIVATE_KEY`` and sent as raw transactions.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from functools import lru_cache
from typing import Any, Optional

from eth_account import Account
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted, Web3Exception

from teamminter.config import get_settings

logger = logging.getLogger(__name__)

TEAM_MINT_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "address", "name": "recipient", "type": "address"},
            {"internalType": "string", "name": "customImage", "type": "string"},
            {"internalType": "string", "name": "customText", "type": "string"},
            {"internalType": "string", "name": "eventName", "type": "string"},
            {"internalType": "uint256", "name": "eventDate", "type": "uint256"},
        ],
        "name": "teamMint",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "mintPrice",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "", "type": "address"}],
        "name": "teamMinters",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class ChainError(Exception):
    """Raised when a contract call is rejected or its transaction fails."""

    def __init__(self, message: str, *, tx_hash: Optional[str] = None, request: Any = None):
        super().__init__(message)
        self.tx_hash = tx_hash
        self.request = request


class MintContract:
    """Async wrapper around the team-mint contract."""

    def __init__(
        self,
        w3: AsyncWeb3,
        address: str,
        *,
        private_key: str | None = None,
        chain_id: int = 137,
        receipt_timeout: float = 180.0,
    ) -> None:
        self._w3 = w3
        self.address = AsyncWeb3.to_checksum_address(address)
        self._contract = w3.eth.contract(address=self.address, abi=TEAM_MINT_ABI)
        self._account = Account.from_key(private_key) if private_key else None
        self._chain_id = chain_id
        self._receipt_timeout = receipt_timeout

    @property
    def account_address(self) -> str | None:
        return self._account.address if self._account else None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def has_code(self) -> bool:
        code = await self._w3.eth.get_code(self.address)
        return len(code) > 0

    async def is_team_minter(self, address: str) -> bool:
        return bool(await self._contract.functions.teamMinters(AsyncWeb3.to_checksum_address(address)).call())

    async def mint_price(self) -> Decimal:
        """Public mint price in the chain's native token (team mints are free)."""
        wei = await self._contract.functions.mintPrice().call()
        return AsyncWeb3.from_wei(wei, "ether")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def team_mint(
        self,
        recipient: str,
        custom_image: str,
        custom_text: str,
        event_name: str,
        event_date: int,
    ) -> str:
        """Sign and send ``teamMint``; return the transaction hash."""

        if self._account is None:
            raise ChainError("No minter key configured (MINTER_PRIVATE_KEY)")

        try:
            nonce = await self._w3.eth.get_transaction_count(self._account.address)
            tx = await self._contract.functions.teamMint(
                AsyncWeb3.to_checksum_address(recipient),
                custom_image,
                custom_text,
                event_name,
                event_date,
            ).build_transaction(
                {
                    "from": self._account.address,
                    "nonce": nonce,
                    "chainId": self._chain_id,
                }
            )
            signed = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, ValueError) as exc:
            raise ChainError(str(exc)) from exc

        tx_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info("teamMint sent: %s", tx_hex)
        return tx_hex

    async def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        """Wait for inclusion; raise ChainError if the transaction reverted."""

        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)
        except TimeExhausted as exc:
            raise ChainError(f"Transaction {tx_hash} not mined within {self._receipt_timeout:.0f}s", tx_hash=tx_hash) from exc
        except (Web3Exception, ValueError) as exc:
            raise ChainError(str(exc), tx_hash=tx_hash) from exc

        if receipt["status"] != 1:
            raise ChainError(f"Transaction {tx_hash} reverted", tx_hash=tx_hash)
        logger.info("teamMint %s confirmed in block %s", tx_hash, receipt["blockNumber"])
        return dict(receipt)


@lru_cache()
def get_mint_contract() -> MintContract:
    settings = get_settings()
    w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.chain_rpc_url))
    return MintContract(
        w3,
        settings.contract_address,
        private_key=settings.minter_private_key,
        chain_id=settings.chain_id,
        receipt_timeout=settings.receipt_timeout_seconds,
    )
