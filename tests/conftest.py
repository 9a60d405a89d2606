"""Shared fixtures.

Settings are read at import time by several modules, so the environment is
pinned here before anything from ``teamminter`` is imported.
"""
from __future__ import annotations

import io
import os
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

os.environ.update(
    {
        "PINATA_API_KEY": "test-api-key",
        "PINATA_SECRET_KEY": "test-secret-value",
        "RESOLVE_DEBOUNCE_SECONDS": "0.05",
        "FRONTEND_URL": "http://localhost:3000",
    }
)

from PIL import Image  # noqa: E402

from teamminter.models import MintSession, RecipientResolution, ResolutionStatus  # noqa: E402

ALICE = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
BOB = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
MINTER = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
TX_HASH = "0x" + "ab" * 32


def image_bytes(width: int, height: int, *, color=(120, 40, 200), fmt: str = "PNG") -> bytes:
    img = Image.new("RGB", (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def noise_bytes(width: int, height: int) -> bytes:
    """Random pixels; JPEG cannot compress these much at any quality."""
    img = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def contract() -> AsyncMock:
    mock = AsyncMock()
    mock.address = "0xF993f484225900D2Be4F7253Cfd4Ab14fC9f4621"
    mock.account_address = MINTER
    mock.has_code.return_value = True
    mock.is_team_minter.return_value = True
    mock.mint_price.return_value = "1"
    mock.team_mint.return_value = TX_HASH
    mock.wait_for_receipt.return_value = {"status": 1, "blockNumber": 1234}
    return mock


@pytest.fixture
def session() -> MintSession:
    return MintSession(
        caller_address=MINTER,
        custom_text="Great connecting at the event!",
        event_name="Networking Event",
        event_date=datetime(2025, 2, 27, 18, 30),
    )


def resolved(address: str = ALICE, name: str = "alice.eth") -> RecipientResolution:
    return RecipientResolution(input=name, address=address, status=ResolutionStatus.RESOLVED)
