"""Best-yield finder tool backed by the yield ranker."""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from defi_intel.core.models import RiskLevel
from defi_intel.core.providers import CostEstimator
from defi_intel.core.yields import YieldRanker
from defi_intel.plugins.base import BasePlugin, ToolDefinition, ToolResult
from defi_intel.pricing import HeuristicCostEstimator

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext


class FindBestYieldInput(BaseModel):
    """Input for ``defi_find_best_yield``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str = Field(min_length=1, description='Token symbol (e.g. "USDC", "ETH", "DAI")')
    amount: str = Field(pattern=r"^\d+(\.\d+)?$", description='Amount to deposit (e.g. "10000")')
    current_chain_id: str | None = Field(
        default=None,
        description="Chain where funds currently are. Used to calculate bridge costs.",
    )
    risk_tolerance: RiskLevel = Field(default=RiskLevel.MEDIUM, description="Risk tolerance level")
    time_horizon_days: int = Field(default=365, gt=0, description="Time horizon in days for net APY calculation")


class YieldFinderPlugin(BasePlugin):
    """
    Find optimal yield across all registered yield sources and chains.

    Parameters
    ----------
    cost_estimator : CostEstimator | None
        Entry cost lookups (defaults to :class:`HeuristicCostEstimator`)

    """

    name = "yield-finder"
    description = "Find optimal yield across all DeFi protocols and chains"
    version = "1.0.0"

    def __init__(self, cost_estimator: CostEstimator | None = None) -> None:
        self.cost_estimator = cost_estimator or HeuristicCostEstimator()

    def initialize(self, context: "PluginContext") -> None:
        super().initialize(context)
        self.ranker = YieldRanker(context, self.cost_estimator)

    def get_tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="defi_find_best_yield",
                description=(
                    "Find the best yield opportunities for a token across all supported protocols and chains. "
                    "Factors in gas costs and bridge costs to calculate net APY. "
                    "Returns a ranked list with execution steps."
                ),
                input_model=FindBestYieldInput,
                handler=self.find_best_yield,
            )
        ]

    def find_best_yield(self, params: FindBestYieldInput) -> ToolResult:
        ranking = self.ranker.find_best_yield(
            params.token,
            params.amount,
            current_chain_id=params.current_chain_id,
            risk_tolerance=params.risk_tolerance,
            time_horizon_days=params.time_horizon_days,
        )
        payload = ranking.to_payload()
        if not ranking.opportunities:
            payload["message"] = (
                f"No yield opportunities found for {params.token}. "
                "Make sure the token is available on a registered yield source."
            )
        return self.json_result(payload)
