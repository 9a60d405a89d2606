"""Team mint submission.

Checks run in this order and stop at the first failure, before anything is
sent to the chain:

1. the connected wallet is a team minter (read from the contract)
2. the recipient is resolved to an address
3. a custom photo, if chosen, has finished uploading
4. the event name is filled in

A failed mint is not retried; the operator fixes the form and mints again,
which builds a fresh ``MintRequest``.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

from teamminter.models import MintRequest, MintSession, MintStatus
from teamminter.services.chain import ChainError
from teamminter.services.name_resolver import NameResolver

logger = logging.getLogger(__name__)


class MintPreconditionError(ValueError):
    """Raised when the form is not ready to mint; nothing was dispatched."""


class TeamMintContract(Protocol):
    async def is_team_minter(self, address: str) -> bool: ...

    async def team_mint(
        self, recipient: str, custom_image: str, custom_text: str, event_name: str, event_date: int
    ) -> str: ...

    async def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]: ...


class MintSubmitter:
    def __init__(
        self,
        contract: TeamMintContract,
        session: MintSession,
        resolver: NameResolver,
        *,
        default_custom_text: str,
    ) -> None:
        self._contract = contract
        self._session = session
        self._resolver = resolver
        self._default_custom_text = default_custom_text

    async def check_preconditions(self) -> None:
        session = self._session

        if not session.caller_address:
            raise MintPreconditionError("Connect wallet first")
        try:
            session.is_team_minter = await self._contract.is_team_minter(session.caller_address)
        except Exception as exc:
            logger.error("Team minter check failed: %s", exc)
            raise ChainError(f"Could not check team minter status: {exc}") from exc
        if not session.is_team_minter:
            raise MintPreconditionError("You are not authorized as a team minter")

        if not session.resolution.is_resolved:
            raise MintPreconditionError("Recipient not resolved: enter a valid address or ENS name")

        if not session.use_default_image and not session.content_url:
            raise MintPreconditionError("Please upload a photo to IPFS first, or use default image")

        if not session.event_name.strip():
            raise MintPreconditionError("Please enter an event name")

    def build_request(self) -> MintRequest:
        session = self._session
        return MintRequest(
            recipient=session.resolution.address,
            content_url="" if session.use_default_image else session.content_url,
            custom_text=session.custom_text,
            event_name=session.event_name.strip(),
            event_date=session.event_date,
        )

    async def submit(self) -> MintRequest:
        """Validate, send ``teamMint`` and wait for it to be mined.

        Raises
        ------
        MintPreconditionError
            The form is incomplete; no transaction was sent.
        ChainError
            Dispatch or inclusion failed; ``exc.request`` is the failed request.
        """

        await self.check_preconditions()
        request = self.build_request()
        self._session.last_request = request

        try:
            request.tx_hash = await self._contract.team_mint(
                request.recipient,
                request.content_url,
                request.custom_text,
                request.event_name,
                request.event_timestamp,
            )
        except Exception as exc:
            raise self._fail(request, exc) from exc

        request.status = MintStatus.SUBMITTED
        logger.info("Transaction sent! Waiting for confirmation: %s", request.tx_hash)

        try:
            receipt = await self._contract.wait_for_receipt(request.tx_hash)
        except Exception as exc:
            raise self._fail(request, exc) from exc

        request.status = MintStatus.CONFIRMED
        request.block_number = receipt.get("blockNumber")
        logger.info("NFT minted to %s, tx %s", request.recipient, request.tx_hash)

        self._resolver.reset()
        self._session.reset_after_mint(default_custom_text=self._default_custom_text)
        return request

    @staticmethod
    def _fail(request: MintRequest, exc: Exception) -> ChainError:
        request.status = MintStatus.FAILED
        request.error = str(exc)
        logger.error("Mint failed: %s", exc)
        return ChainError(f"Mint failed: {exc}", tx_hash=request.tx_hash, request=request)
