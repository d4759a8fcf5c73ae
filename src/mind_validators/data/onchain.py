"""On-chain data fetching via Web3."""

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from ..core.config import get_settings
from ..core.contracts import BLOCKCHAIN_INFO_ABI, ERC20_ABI, VALIDATOR_ABI


class OnChainDataProvider:
    """Reads validator, reward token and chain info contracts."""

    def __init__(self, rpc_url: str | None = None, w3: AsyncWeb3 | None = None):
        settings = get_settings()
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(rpc_url or settings.rpc_url))

        # Initialize contracts
        self.validator = self.w3.eth.contract(
            address=Web3.to_checksum_address(settings.validator_contract_address),
            abi=VALIDATOR_ABI,
        )
        self.reward_token = self.w3.eth.contract(
            address=Web3.to_checksum_address(settings.reward_token_address),
            abi=ERC20_ABI,
        )
        self.blockchain_info = self.w3.eth.contract(
            address=Web3.to_checksum_address(settings.blockchain_info_address),
            abi=BLOCKCHAIN_INFO_ABI,
        )

    async def get_validators(self) -> list[str]:
        """Get the registered validator addresses, in registry order."""
        return list(await self.validator.functions.validators().call())

    async def get_account_stake(self, address: str) -> int:
        """Get the raw staked balance of a validator."""
        return await self.validator.functions.accountStake(address).call()

    async def get_reward_balance(self, address: str) -> int:
        """Get the raw reward token balance of a validator."""
        return await self.reward_token.functions.balanceOf(address).call()

    async def get_staked_amount(self) -> int:
        """Get the raw total amount staked across all validators."""
        return await self.validator.functions.stakedAmount().call()

    async def get_current_block_epoch(self) -> str | int | bytes:
        """Get the current epoch as returned by the contract (hex-encoded)."""
        return await self.blockchain_info.functions.getCurrentBlockEpoch().call()

    async def get_block_number(self) -> int:
        """Get the latest block number."""
        return await self.w3.eth.block_number

    async def close(self) -> None:
        """Release the provider's cached HTTP sessions."""
        await self.w3.provider.disconnect()
