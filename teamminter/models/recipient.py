from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ResolutionStatus(str, Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    NOT_FOUND = "not-found"
    INVALID = "invalid"


class RecipientResolution(BaseModel):
    """Outcome of classifying and resolving the recipient field."""

    input: str = ""
    address: str | None = None
    status: ResolutionStatus = ResolutionStatus.UNRESOLVED
    version: int = 0
    message: str | None = None  # human readable outcome, e.g. for alerts

    @property
    def is_resolved(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED and bool(self.address)
