"""Recipient classification and debounced ENS resolution.

Every edit of the recipient field bumps a version counter.  Only the edit
that stays untouched for the debounce period is resolved, and a lookup
result is applied only if its version is still the current one, so a slow
answer for an old input can never overwrite a newer one.
"""
from __future__ import annotations

import asyncio
import logging
import re
from enum import Enum
from typing import Callable, Optional, Protocol

from eth_utils import to_checksum_address

from teamminter.models import MintSession, RecipientResolution, ResolutionStatus

logger = logging.getLogger(__name__)

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
NAME_SEPARATOR = "."


class RecipientKind(str, Enum):
    EMPTY = "empty"
    ADDRESS = "address"
    NAME = "name"
    INVALID = "invalid"


class NameLookup(Protocol):
    async def resolve(self, name: str) -> str | None: ...


def classify(text: str) -> RecipientKind:
    value = text.strip()
    if not value:
        return RecipientKind.EMPTY
    if ADDRESS_RE.match(value):
        return RecipientKind.ADDRESS
    if NAME_SEPARATOR in value and not value.startswith(NAME_SEPARATOR) and not value.endswith(NAME_SEPARATOR):
        return RecipientKind.NAME
    return RecipientKind.INVALID


def _short(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"


class NameResolver:
    """Owns ``session.resolution``; nothing else writes it."""

    def __init__(
        self,
        lookup: NameLookup,
        session: MintSession,
        *,
        debounce_seconds: float = 0.5,
        on_change: Optional[Callable[[RecipientResolution], None]] = None,
    ) -> None:
        self._lookup = lookup
        self._session = session
        self._debounce_seconds = debounce_seconds
        self._on_change = on_change
        self._version = 0
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def version(self) -> int:
        return self._version

    @property
    def pending(self) -> bool:
        return self._timer is not None or bool(self._inflight)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, text: str) -> None:
        """Record an edit of the recipient field and restart the quiet period."""

        version = self._begin(text)
        if classify(text) is RecipientKind.EMPTY:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._debounce_seconds, self._dispatch, version, text)

    async def resolve_now(self, text: str) -> RecipientResolution:
        """Resolve *text* immediately, superseding any pending edit."""

        version = self._begin(text)
        if classify(text) is not RecipientKind.EMPTY:
            await self._resolve(version, text)
        return self._session.resolution

    async def wait_settled(self) -> RecipientResolution:
        """Wait until no debounce timer or lookup is outstanding."""

        while self.pending:
            if self._inflight:
                await asyncio.gather(*list(self._inflight), return_exceptions=True)
            else:
                await asyncio.sleep(min(self._debounce_seconds, 0.05) or 0.01)
        return self._session.resolution

    def cancel(self) -> None:
        """Stop a pending debounce timer; in-flight lookups become stale."""
        self._version += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def reset(self) -> None:
        """Empty the recipient field; pending and in-flight lookups are discarded."""
        self._begin("")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _begin(self, text: str) -> int:
        self.cancel()
        version = self._version
        self._session.recipient_input = text
        # The previous address no longer matches the field.
        self._apply(RecipientResolution(input=text.strip(), version=version))
        return version

    def _dispatch(self, version: int, text: str) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._resolve(version, text))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _resolve(self, version: int, text: str) -> None:
        value = text.strip()
        kind = classify(value)

        if kind is RecipientKind.ADDRESS:
            self._apply(
                RecipientResolution(
                    input=value,
                    address=to_checksum_address(value),
                    status=ResolutionStatus.RESOLVED,
                    version=version,
                )
            )
            return

        if kind is not RecipientKind.NAME:
            self._apply(
                RecipientResolution(
                    input=value,
                    status=ResolutionStatus.INVALID,
                    version=version,
                    message="Please enter a valid address or ENS name",
                )
            )
            return

        self._apply(RecipientResolution(input=value, status=ResolutionStatus.RESOLVING, version=version))
        try:
            address = await self._lookup.resolve(value)
        except Exception as exc:  # any lookup failure reads as "not found"
            logger.warning("ENS resolution error for %s: %s", value, exc)
            result = RecipientResolution(
                input=value,
                status=ResolutionStatus.NOT_FOUND,
                version=version,
                message=f'Could not resolve "{value}"',
            )
        else:
            if address:
                result = RecipientResolution(
                    input=value,
                    address=address,
                    status=ResolutionStatus.RESOLVED,
                    version=version,
                    message=f"Resolved {value} to {_short(address)}",
                )
            else:
                result = RecipientResolution(
                    input=value,
                    status=ResolutionStatus.NOT_FOUND,
                    version=version,
                    message=f'ENS name "{value}" not found or not configured',
                )
        self._apply(result)

    def _apply(self, resolution: RecipientResolution) -> None:
        if resolution.version != self._version:
            logger.debug("Dropping stale resolution v%d for %s", resolution.version, resolution.input)
            return
        self._session.resolution = resolution
        if resolution.status in (ResolutionStatus.RESOLVED, ResolutionStatus.NOT_FOUND):
            logger.info("Recipient %s: %s", resolution.input, resolution.message or resolution.status.value)
        if self._on_change is not None:
            self._on_change(resolution)
