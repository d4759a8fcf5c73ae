"""API endpoints for the validator dashboard."""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import Web3

from ..services.validator_service import ValidatorService

logger = logging.getLogger(__name__)

router = APIRouter()


class AddNameRequest(BaseModel):
    """Body of POST /addName."""

    model_config = ConfigDict(str_strip_whitespace=True)

    address: str = Field(min_length=1)
    name: str = Field(min_length=1)

    @field_validator("address")
    @classmethod
    def checksum_address(cls, value: str) -> str:
        # Chain-sourced keys are checksummed, so names must be stored the same way
        if not Web3.is_address(value):
            raise ValueError("Invalid validator address")
        return Web3.to_checksum_address(value)


def get_service(request: Request) -> ValidatorService:
    return request.app.state.service


@router.get("/validators")
async def get_validators(service: ValidatorService = Depends(get_service)):
    """All cached validators, most recently updated first."""
    logger.info("Received HTTP request for validator data.")
    return [
        record.model_dump(by_alias=True, mode="json")
        for record in service.list_validators()
    ]


@router.post("/addName")
async def add_name(
    body: AddNameRequest, service: ValidatorService = Depends(get_service)
):
    """
    Assign a human-readable name to a validator address.

    Names can only be set once; a second request for the same address is
    rejected with 400.
    """
    await service.add_name(body.address, body.name)
    return {"success": True}


@router.get("/chaindata")
async def get_chain_data(service: ValidatorService = Depends(get_service)):
    """Current epoch, total stake and number of tracked validators."""
    logger.info("Received HTTP request for chain data.")
    summary = await service.get_chain_summary()
    return summary.model_dump(by_alias=True)


@router.get("/health")
async def health_check(service: ValidatorService = Depends(get_service)):
    """Health check endpoint."""
    last = service.pipeline.last_result
    return {
        "status": "healthy",
        "refresh_state": service.pipeline.state.value,
        "last_refreshed_block": last.block_number if last else None,
        "last_refresh_aborted": last.aborted if last else None,
        "validators": service.cache.size,
    }
