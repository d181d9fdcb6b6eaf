"""Interfaces the aggregation engines consume from surrounding providers."""

from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from defi_intel.core.models import ProtocolPosition, YieldOpportunity

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext


@runtime_checkable
class ProtocolScanner(Protocol):
    """
    Inspects one protocol's state for one wallet on one chain.

    Attributes
    ----------
    protocol_name : str
        Protocol name used for filtering and reporting (e.g. 'Aave V3')
    supported_chains : Sequence[str]
        Chain ids the scanner can run on; empty means every chain

    Methods
    -------
    scan_positions(chain_id, wallet_address, context)
        Return zero or more positions. Must not raise when the wallet simply
        has no position; may raise on infrastructure failure.

    """

    protocol_name: str
    supported_chains: Sequence[str]

    def scan_positions(self, chain_id: str, wallet_address: str, context: "PluginContext") -> list[ProtocolPosition]: ...


@runtime_checkable
class YieldSource(Protocol):
    """
    Reports yield opportunities for a token across the chains it supports.

    Same failure contract as :class:`ProtocolScanner`.

    """

    protocol_name: str
    supported_chains: Sequence[str]

    def get_yield_opportunities(self, token_symbol: str, context: "PluginContext") -> list[YieldOpportunity]: ...


class CostEstimator(Protocol):
    """
    Best-effort entry cost lookups, in USD.

    Implementations return ``Decimal(0)`` rather than raising when an
    estimate is unavailable.

    """

    def estimate_gas_cost_usd(self, chain_id: str, operation: str, context: "PluginContext") -> Decimal: ...

    def estimate_bridge_cost_usd(
        self,
        from_chain_id: str,
        to_chain_id: str,
        token_symbol: str,
        amount: Decimal,
        context: "PluginContext",
    ) -> Decimal: ...


class PriceSource(Protocol):
    """USD prices keyed by price-feed identifier (e.g. CoinGecko id)."""

    def get_prices_usd(self, price_feed_ids: list[str]) -> dict[str, Decimal]: ...
