from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Upload relay
    port: int = Field(3001, alias="PORT")
    frontend_url: str = Field("http://localhost:3000", alias="FRONTEND_URL")
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Pinata. Credentials are optional here; a missing key only fails the first upload.
    pinata_api_key: Optional[str] = Field(default=None, alias="PINATA_API_KEY")
    pinata_secret_key: Optional[str] = Field(default=None, alias="PINATA_SECRET_KEY")
    pinata_api_url: str = Field("https://api.pinata.cloud/pinning/pinFileToIPFS", alias="PINATA_API_URL")
    ipfs_gateway_host: str = Field("gateway.pinata.cloud", alias="IPFS_GATEWAY_HOST")
    pin_classification: str = Field("superfantastic-nft", alias="PIN_CLASSIFICATION")
    pin_cid_version: int = Field(0, alias="PIN_CID_VERSION")

    # Image processing
    image_max_dim: int = Field(1920, alias="IMAGE_MAX_DIM", description="Maximum width or height for minted photos (pixels).")
    image_target_bytes: int = Field(700 * 1024, alias="IMAGE_TARGET_BYTES", description="Byte ceiling the compressor aims for.")

    # Name resolution (ENS lives on Ethereum mainnet, minting happens elsewhere)
    ens_rpc_url: str = Field("https://eth.llamarpc.com", alias="ENS_RPC_URL")
    resolve_debounce_seconds: float = Field(0.5, alias="RESOLVE_DEBOUNCE_SECONDS")

    # Minting chain
    chain_rpc_url: str = Field("https://polygon-rpc.com/", alias="CHAIN_RPC_URL")
    chain_id: int = Field(137, alias="CHAIN_ID")
    contract_address: str = Field("0xF993f484225900D2Be4F7253Cfd4Ab14fC9f4621", alias="CONTRACT_ADDRESS")
    minter_private_key: Optional[str] = Field(default=None, alias="MINTER_PRIVATE_KEY")
    receipt_timeout_seconds: float = Field(180.0, alias="RECEIPT_TIMEOUT_SECONDS")

    # Minting client
    backend_api_url: str = Field("http://localhost:3001", alias="BACKEND_API_URL")
    default_custom_text: str = Field("Great connecting at the event!", alias="DEFAULT_CUSTOM_TEXT")
    default_event_name: str = Field("Networking Event", alias="DEFAULT_EVENT_NAME")


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
