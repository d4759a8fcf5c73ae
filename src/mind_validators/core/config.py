"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # RPC Configuration
    rpc_url: str = "http://localhost:8545"
    block_poll_interval: float = 2.0  # seconds between block number polls

    # Off-chain block counter API, queried as <url><address>
    block_status_api_url: str = "http://localhost:8080/api/validators/"
    # Separate counters endpoint; the status payload is reused when unset
    block_counter_api_url: str | None = None
    http_timeout_seconds: float = 10.0

    # Contract Addresses
    validator_contract_address: str = "0x0000000000000000000000000000000000001000"
    reward_token_address: str = "0x0000000000000000000000000000000000001001"
    blockchain_info_address: str = "0x0000000000000000000000000000000000001002"

    # Name store
    names_db_path: Path = Path("data") / "names.db"

    # Refresh pipeline
    max_concurrency: int = 16  # validators fetched at once
    fetch_timeout_seconds: float = 15.0
    cycle_timeout_seconds: float = 120.0
    isolate_fetch_failures: bool = True

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
