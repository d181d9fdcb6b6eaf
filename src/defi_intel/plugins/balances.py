"""Wallet balance lookups across chains."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from defi_intel.core.errors import TokenNotFoundError
from defi_intel.plugins.base import BasePlugin, ToolDefinition, ToolResult


class GetBalancesInput(BaseModel):
    """Input for ``defi_get_balances``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    chain_id: str = Field(min_length=1, description='Chain id (e.g. "ethereum", "solana-mainnet", "osmosis-1")')
    address: str = Field(min_length=1, description="Wallet address")
    tokens: list[str] | None = Field(default=None, description="Token symbols or addresses; native balance is always included")


class BalancesPlugin(BasePlugin):
    """Native and token balances for one wallet on one chain."""

    name = "balances"
    description = "Wallet balance lookups across chains"
    version = "1.0.0"

    def get_tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="defi_get_balances",
                description=(
                    "Get token balances for a wallet address on a specific chain. "
                    "The native token balance (ETH, SOL, ATOM, etc.) is always included."
                ),
                input_model=GetBalancesInput,
                handler=self.get_balances,
            )
        ]

    def get_balances(self, params: GetBalancesInput) -> ToolResult:
        adapter = self.context.get_chain_adapter_for_chain(params.chain_id)
        if not adapter.is_valid_address(params.chain_id, params.address):
            return self.error_result(f'Invalid address "{params.address}" for chain "{params.chain_id}"')

        balances = [adapter.get_native_balance(params.chain_id, params.address)]
        if params.tokens:
            token_ids = []
            for token in params.tokens:
                resolved = adapter.resolve_token(params.chain_id, token)
                if resolved is None:
                    raise TokenNotFoundError(token, params.chain_id)
                token_ids.append(resolved.address)
            balances.extend(adapter.get_token_balances(params.chain_id, params.address, token_ids))

        return self.json_result([balance.model_dump(mode="json") for balance in balances])
