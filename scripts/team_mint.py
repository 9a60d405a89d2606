#!/usr/bin/env python
"""Mint one team NFT from the command line.

Runs the same pipeline as the minting form: compress and upload the photo
(unless --default-image), resolve the recipient, then send teamMint and wait
for confirmation.
"""
from __future__ import annotations

import argparse
import asyncio
import mimetypes
from datetime import datetime
from pathlib import Path

from teamminter.config import get_settings
from teamminter.services.chain import ChainError, get_mint_contract
from teamminter.services.ens_lookup import get_ens_lookup
from teamminter.services.mint_submitter import MintPreconditionError
from teamminter.services.relay_client import RelayClient, UploadError
from teamminter.services.team_minter import TeamMinter


async def _mint(args: argparse.Namespace) -> int:
    settings = get_settings()
    minter = TeamMinter(
        contract=get_mint_contract(),
        relay=RelayClient(args.backend_url or settings.backend_api_url),
        lookup=get_ens_lookup(),
    )
    session = minter.session
    try:
        await minter.connect()
        print(f"Connected: {session.caller_address} (team minter: {session.is_team_minter})")

        if args.photo:
            content_type = mimetypes.guess_type(args.photo.name)[0] or "image/jpeg"
            photo = await minter.load_file(args.photo.read_bytes(), content_type, filename=args.photo.name)
            print(f"Photo: {photo.resolution}, {photo.size / 1024:.2f}KB at quality {photo.quality:.1f}")
            record = await minter.upload_photo()
            print(f"Uploaded: {record.ipfs_url}")

        resolution = await minter.resolver.resolve_now(args.recipient)
        print(f"Recipient: {resolution.message or resolution.address or resolution.status.value}")

        if args.text is not None:
            session.custom_text = args.text
        if args.event is not None:
            session.event_name = args.event
        if args.date is not None:
            session.event_date = args.date

        request = await minter.mint()
    except (MintPreconditionError, UploadError, ChainError) as exc:
        print(f"Error: {exc}")
        return 1
    finally:
        await minter.close()

    print(f"Minted! tx={request.tx_hash} block={request.block_number}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Team-mint an NFT")
    parser.add_argument("recipient", help="0x address or ENS name")
    parser.add_argument("--photo", type=Path, help="image file; omit to use the contract's default image")
    parser.add_argument("--text", help="custom text")
    parser.add_argument("--event", help="event name")
    parser.add_argument("--date", type=datetime.fromisoformat, help="event date, ISO format")
    parser.add_argument("--backend-url")
    args = parser.parse_args()
    raise SystemExit(asyncio.run(_mint(args)))


if __name__ == "__main__":
    main()
