"""Tests for the contract wrapper that do not need a live node."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from web3.exceptions import TimeExhausted

from teamminter.services.chain import TEAM_MINT_ABI, ChainError, MintContract
from tests.conftest import TX_HASH

CONTRACT = "0xf993f484225900d2be4f7253cfd4ab14fc9f4621"
# Well-known throwaway key from the web3.py documentation.
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def _w3() -> MagicMock:
    w3 = MagicMock()
    w3.eth.wait_for_transaction_receipt = AsyncMock()
    w3.eth.get_code = AsyncMock(return_value=b"\x60\x80")
    return w3


def test_abi_declares_team_mint_entries() -> None:
    names = {entry["name"] for entry in TEAM_MINT_ABI}
    assert names == {"teamMint", "mintPrice", "teamMinters"}
    team_mint = next(e for e in TEAM_MINT_ABI if e["name"] == "teamMint")
    assert [i["type"] for i in team_mint["inputs"]] == ["address", "string", "string", "string", "uint256"]


def test_address_is_checksummed_and_account_derived() -> None:
    contract = MintContract(_w3(), CONTRACT, private_key=PRIVATE_KEY)
    assert contract.address == "0xF993f484225900D2Be4F7253Cfd4Ab14fC9f4621"
    assert contract.account_address == "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


async def test_team_mint_without_key() -> None:
    contract = MintContract(_w3(), CONTRACT)
    assert contract.account_address is None
    with pytest.raises(ChainError, match="MINTER_PRIVATE_KEY"):
        await contract.team_mint(CONTRACT, "", "hi", "Event", 0)


async def test_has_code() -> None:
    assert await MintContract(_w3(), CONTRACT).has_code() is True


async def test_receipt_success() -> None:
    w3 = _w3()
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "blockNumber": 77}

    receipt = await MintContract(w3, CONTRACT, receipt_timeout=5).wait_for_receipt(TX_HASH)

    assert receipt["blockNumber"] == 77
    w3.eth.wait_for_transaction_receipt.assert_awaited_once_with(TX_HASH, timeout=5)


async def test_receipt_reverted() -> None:
    w3 = _w3()
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "blockNumber": 77}

    with pytest.raises(ChainError, match="reverted") as excinfo:
        await MintContract(w3, CONTRACT).wait_for_receipt(TX_HASH)
    assert excinfo.value.tx_hash == TX_HASH


async def test_receipt_timeout() -> None:
    w3 = _w3()
    w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("timed out")

    with pytest.raises(ChainError, match="not mined"):
        await MintContract(w3, CONTRACT, receipt_timeout=1).wait_for_receipt(TX_HASH)
