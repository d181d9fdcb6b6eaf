"""Base scanner and yield source classes with common functionality."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar

from defi_intel.core.models import ProtocolPosition, TokenBalance, YieldOpportunity
from defi_intel.core.providers import PriceSource

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext

logger = logging.getLogger(__name__)


class BaseProtocolScanner(ABC):
    """
    Abstract base class for protocol scanners.

    Attributes
    ----------
    protocol_name : str
        Protocol name used for filtering and reporting (must be set in subclass)
    supported_chains : Sequence[str]
        Chain ids the scanner runs on; empty means every chain

    Parameters
    ----------
    price_source : PriceSource | None
        USD prices for valuing balances (values are 0 without one)

    """

    protocol_name: ClassVar[str] = ""
    supported_chains: Sequence[str] = ()

    def __init__(self, price_source: PriceSource | None = None) -> None:
        if not self.protocol_name:
            msg = f"{self.__class__.__name__} must define 'protocol_name' attribute"
            raise ValueError(msg)
        self.price_source = price_source

    def supports_chain(self, chain_id: str) -> bool:
        """Return True if the scanner should run on ``chain_id``."""
        return not self.supported_chains or chain_id in self.supported_chains

    def value_balances(self, balances: list[TokenBalance]) -> list[Decimal]:
        """
        Value balances in USD with one batched price lookup.

        Tokens without a price-feed id or a quote are valued at 0. A failing
        price source is logged and treated the same way, so holdings are
        still reported.

        Parameters
        ----------
        balances : list[TokenBalance]
            Balances to value

        Returns
        -------
        list[Decimal]
            USD value per balance, in input order

        """
        feed_ids = sorted({b.token.price_feed_id for b in balances if b.token.price_feed_id})
        prices: dict[str, Decimal] = {}
        if self.price_source is not None and feed_ids:
            try:
                prices = self.price_source.get_prices_usd(feed_ids)
            except Exception as e:
                logger.warning("%s: price lookup failed, valuing at 0: %s", self.protocol_name, e)

        return [
            b.amount * Decimal(str(prices.get(b.token.price_feed_id, 0))) if b.token.price_feed_id else Decimal(0)
            for b in balances
        ]

    @abstractmethod
    def scan_positions(self, chain_id: str, wallet_address: str, context: "PluginContext") -> list[ProtocolPosition]:
        """
        Find the wallet's positions on one chain.

        Parameters
        ----------
        chain_id : str
            Chain id
        wallet_address : str
            Wallet address
        context : PluginContext
            Registry view for adapter access

        Returns
        -------
        list[ProtocolPosition]
            Positions found (empty when the wallet has none)

        """
        ...


class BaseYieldSource(ABC):
    """
    Abstract base class for yield sources.

    Attributes
    ----------
    protocol_name : str
        Protocol name (must be set in subclass)
    supported_chains : Sequence[str]
        Chain ids with opportunities; empty means every chain

    """

    protocol_name: ClassVar[str] = ""
    supported_chains: Sequence[str] = ()

    def __init__(self) -> None:
        if not self.protocol_name:
            msg = f"{self.__class__.__name__} must define 'protocol_name' attribute"
            raise ValueError(msg)

    def supports_chain(self, chain_id: str) -> bool:
        return not self.supported_chains or chain_id in self.supported_chains

    @abstractmethod
    def get_yield_opportunities(self, token_symbol: str, context: "PluginContext") -> list[YieldOpportunity]:
        """Return the opportunities for ``token_symbol`` on every supported chain."""
        ...
