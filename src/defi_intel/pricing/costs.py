"""Heuristic gas and bridge cost estimates in USD."""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from defi_intel.chains.evm import EvmChainAdapter
from defi_intel.core.errors import ChainNotSupportedError
from defi_intel.core.providers import PriceSource

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext

logger = logging.getLogger(__name__)

WEI_PER_NATIVE = Decimal(10) ** 18

# Gas units for common operations; avoids an eth_estimateGas round trip.
GAS_ESTIMATES = {
    "erc20_approve": 50_000,
    "protocol_deposit": 250_000,
    "aave_supply": 250_000,
    "aave_withdraw": 300_000,
    "bridge_transfer": 200_000,
}
DEFAULT_GAS_UNITS = 250_000

# Typical USD cost of one transaction per chain, used when live data is missing.
FALLBACK_GAS_COST_USD = {
    "ethereum": Decimal("5.0"),
    "polygon": Decimal("0.01"),
    "arbitrum": Decimal("0.10"),
    "base": Decimal("0.01"),
    "optimism": Decimal("0.05"),
    "avalanche": Decimal("0.10"),
}
DEFAULT_FALLBACK_GAS_COST_USD = Decimal("0.5")


class HeuristicCostEstimator:
    """
    Estimates entry costs from gas price, heuristic gas units and native token price.

    Without a price source (or when any live read fails) a per-chain table
    of typical transaction costs is used instead. Never raises.

    Parameters
    ----------
    price_source : PriceSource | None
        USD prices keyed by price-feed id

    """

    def __init__(self, price_source: PriceSource | None = None) -> None:
        self.price_source = price_source

    @staticmethod
    def fallback_cost(chain_id: str) -> Decimal:
        return FALLBACK_GAS_COST_USD.get(chain_id, DEFAULT_FALLBACK_GAS_COST_USD)

    def estimate_gas_cost_usd(self, chain_id: str, operation: str, context: "PluginContext") -> Decimal:
        """
        Estimate the USD cost of one operation on a chain.

        Parameters
        ----------
        chain_id : str
            Chain id
        operation : str
            Operation key (e.g. 'erc20_approve', 'protocol_deposit')
        context : PluginContext
            Registry view used to reach the chain adapter

        Returns
        -------
        Decimal
            Estimated cost in USD (0 for non-EVM chains)

        """
        try:
            adapter = context.get_chain_adapter_for_chain(chain_id)
        except ChainNotSupportedError:
            return Decimal(0)
        chain = adapter.get_chain(chain_id)
        if chain is None or not isinstance(adapter, EvmChainAdapter):
            return Decimal(0)

        try:
            if self.price_source is None or not chain.native_token.price_feed_id:
                return self.fallback_cost(chain_id)

            gas_units = GAS_ESTIMATES.get(operation, DEFAULT_GAS_UNITS)
            gas_price = adapter.get_gas_price(chain_id)
            feed_id = chain.native_token.price_feed_id
            native_price = self.price_source.get_prices_usd([feed_id]).get(feed_id)
            if native_price is None:
                return self.fallback_cost(chain_id)

            return Decimal(gas_price * gas_units) / WEI_PER_NATIVE * Decimal(str(native_price))
        except Exception as e:
            logger.warning("Gas estimate for %s on %s failed, using fallback: %s", operation, chain_id, e)
            return self.fallback_cost(chain_id)

    def estimate_bridge_cost_usd(
        self,
        from_chain_id: str,
        to_chain_id: str,
        token_symbol: str,
        amount: Decimal,
        context: "PluginContext",
    ) -> Decimal:
        """
        Estimate the USD cost of moving funds between chains.

        Modeled as one ``bridge_transfer`` transaction on the source chain.
        Returns 0 for same-chain moves or when the token is unknown on either side.

        """
        if from_chain_id == to_chain_id:
            return Decimal(0)
        try:
            source = context.get_chain_adapter_for_chain(from_chain_id).resolve_token(from_chain_id, token_symbol)
            target = context.get_chain_adapter_for_chain(to_chain_id).resolve_token(to_chain_id, token_symbol)
        except Exception as e:
            logger.warning("Bridge estimate %s->%s failed: %s", from_chain_id, to_chain_id, e)
            return Decimal(0)
        if source is None or target is None:
            return Decimal(0)
        return self.estimate_gas_cost_usd(from_chain_id, "bridge_transfer", context)
