#!/usr/bin/env python
"""Show whether an address may team-mint, and the public mint price."""
from __future__ import annotations

import argparse
import asyncio

from teamminter.services.chain import get_mint_contract


async def _check(address: str | None) -> None:
    contract = get_mint_contract()
    address = address or contract.account_address
    if not address:
        raise SystemExit("Pass --address or set MINTER_PRIVATE_KEY")

    if not await contract.has_code():
        raise SystemExit(f"No contract found at {contract.address}")

    is_minter = await contract.is_team_minter(address)
    price = await contract.mint_price()
    print(f"Contract:     {contract.address}")
    print(f"Address:      {address}")
    print(f"Team minter:  {'yes' if is_minter else 'no'}")
    print(f"Mint price:   {price}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Check team minter status")
    parser.add_argument("--address", help="defaults to the MINTER_PRIVATE_KEY account")
    args = parser.parse_args()
    asyncio.run(_check(args.address))


if __name__ == "__main__":
    main()
