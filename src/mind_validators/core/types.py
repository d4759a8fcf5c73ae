"""Data models for the validator monitor."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ValidatorStatus(str, Enum):
    """Block validation activity reported by the off-chain status API."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class ValidatorRecord(BaseModel):
    """Merged per-validator data served by /validators."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    address: str
    name: str = ""
    stake: str
    rewards: str
    validated_blocks_count: int = Field(default=0, ge=0)
    validated_blocks_status: ValidatorStatus = ValidatorStatus.INACTIVE


class ChainSummary(BaseModel):
    """Chain-wide figures computed on every /chaindata request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_block_epoch: str
    total_staked_amount: str
    total_validator_addresses: int


class OnChainBalances(BaseModel):
    """Raw token balances read from contracts."""

    stake: int
    rewards: int


class OffChainStatus(BaseModel):
    """Activity flag and validation counter from the status API."""

    is_active: bool = False
    validated_count: int = Field(default=0, ge=0)


class BlockEvent(BaseModel):
    """A new block observed on the chain."""

    number: int


class RefreshResult(BaseModel):
    """Outcome of one refresh cycle."""

    block_number: int | None = None
    listed: int = 0
    updated: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)
    aborted: bool = False
