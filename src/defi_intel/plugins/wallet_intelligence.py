"""Wallet scanning tool backed by the position aggregator."""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from defi_intel.core.aggregator import PositionAggregator
from defi_intel.plugins.base import BasePlugin, ToolDefinition, ToolResult

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext


class WalletScanInput(BaseModel):
    """Input for ``defi_wallet_scan``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    address: str = Field(min_length=1, description="Wallet address to scan")
    chain_ids: list[str] | None = Field(
        default=None,
        description="Specific chains to scan. If omitted, scans all chains the address is valid on.",
    )
    protocols: list[str] | None = Field(
        default=None,
        description='Specific protocols to scan (e.g. "Native Tokens"). If omitted, scans all.',
    )


class WalletIntelligencePlugin(BasePlugin):
    """Comprehensive wallet scanning across all registered protocols and chains."""

    name = "wallet-intelligence"
    description = "Comprehensive wallet scanning across all DeFi protocols and chains"
    version = "1.0.0"

    def initialize(self, context: "PluginContext") -> None:
        super().initialize(context)
        self.aggregator = PositionAggregator(context)

    def get_tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="defi_wallet_scan",
                description=(
                    "Scan a wallet address for positions across all registered protocols and chains. "
                    "Returns positions with aggregated USD values per protocol and chain."
                ),
                input_model=WalletScanInput,
                handler=self.scan_wallet,
            )
        ]

    def scan_wallet(self, params: WalletScanInput) -> ToolResult:
        report = self.aggregator.scan_wallet(params.address, chain_ids=params.chain_ids, protocols=params.protocols)
        return self.json_result(report.to_payload())
