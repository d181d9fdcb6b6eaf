"""Data models for chains, tokens, positions, yield opportunities, and engine results."""

from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from defi_intel.core.units import format_percent, format_token_amount, format_usd


class Ecosystem(StrEnum):
    """Family of chains sharing an address format and execution model."""

    EVM = "evm"
    SOLANA = "solana"
    COSMOS = "cosmos"


class TokenInfo(BaseModel):
    """
    Token metadata.

    Attributes
    ----------
    symbol : str
        Token symbol (e.g. 'USDC')
    name : str
        Display name
    decimals : int
        Number of decimal places
    address : str
        Contract address (EVM), mint address (Solana) or denom (Cosmos)
    chain_id : str
        Owning chain id
    price_feed_id : str, optional
        CoinGecko-style identifier used for USD pricing
    logo_url : str, optional
        Token logo

    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    decimals: int = Field(ge=0)
    address: str
    chain_id: str
    price_feed_id: str | None = None
    logo_url: str | None = None


class ChainInfo(BaseModel):
    """
    Immutable chain descriptor built from the static chain table.

    Attributes
    ----------
    id : str
        Chain id used throughout the system (e.g. 'ethereum', 'osmosis-1')
    name : str
        Display name
    ecosystem : Ecosystem
        Ecosystem tag
    native_chain_id : int | str
        Ecosystem-native identifier (EVM chain id, Solana cluster, Cosmos chain id)
    native_token : TokenInfo
        Native asset descriptor
    rpc_url : str
        Default RPC / REST endpoint
    explorer_url : str, optional
        Block explorer

    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    ecosystem: Ecosystem
    native_chain_id: int | str
    native_token: TokenInfo
    rpc_url: str
    explorer_url: str | None = None


class TokenBalance(BaseModel):
    """
    Token balance with exact raw and formatted representations.

    ``balance_formatted`` is always the exact decimal expansion of
    ``balance_raw`` scaled by ``10**-decimals``; build with :meth:`from_raw`.

    """

    token: TokenInfo
    balance_raw: str
    balance_formatted: str
    balance_usd: Decimal | None = None

    @classmethod
    def from_raw(cls, token: TokenInfo, raw: str | int) -> "TokenBalance":
        """Build a balance, deriving the formatted amount from the raw integer."""
        raw = str(raw)
        return cls(token=token, balance_raw=raw, balance_formatted=format_token_amount(raw, token.decimals))

    @property
    def amount(self) -> Decimal:
        """Balance in whole-token units."""
        return Decimal(self.balance_formatted)


class PositionKind(StrEnum):
    """Kind of exposure a wallet holds in a protocol."""

    LENDING_SUPPLY = "lending-supply"
    LENDING_BORROW = "lending-borrow"
    LIQUIDITY = "lp"
    STAKING = "staking"
    NATIVE = "native"
    PREDICTION_MARKET = "prediction-market"
    TOKEN = "token"


class PositionAsset(BaseModel):
    """
    One asset inside a position.

    Attributes
    ----------
    symbol : str
        Asset symbol
    address : str
        Asset address / mint / denom
    balance : str
        Human-readable balance
    balance_usd : Decimal
        USD value (positive even for debt; see ``is_debt``)
    apy : Decimal, optional
        Current APY in percent
    is_debt : bool
        True for borrowed assets

    """

    symbol: str
    address: str
    balance: str
    balance_usd: Decimal = Decimal("0")
    apy: Decimal | None = None
    is_debt: bool = False


class ProtocolPosition(BaseModel):
    """
    A wallet's exposure to one protocol on one chain.

    Debt positions carry a negative ``total_value_usd`` so that summing
    positions yields net exposure.

    """

    protocol: str
    kind: PositionKind
    chain_id: str
    chain_name: str
    assets: list[PositionAsset] = Field(default_factory=list)
    total_value_usd: Decimal = Decimal("0")
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"total_value_usd", "assets"})
        data["total_value_usd"] = format_usd(self.total_value_usd)
        data["assets"] = [
            {**asset.model_dump(mode="json", exclude={"balance_usd"}), "balance_usd": format_usd(asset.balance_usd)}
            for asset in self.assets
        ]
        return data


class ApyType(StrEnum):
    """How an APY is determined."""

    VARIABLE = "variable"
    STABLE = "stable"
    FIXED = "fixed"


class RiskLevel(StrEnum):
    """Risk tier with a total order low < medium < high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


class YieldOpportunity(BaseModel):
    """
    A yield opportunity reported by a yield source.

    Attributes
    ----------
    protocol : str
        Protocol name (e.g. 'Aave V3')
    chain_id : str
        Chain the opportunity lives on
    chain_name : str
        Display name of the chain
    asset : str
        Asset symbol deposited
    asset_address : str
        Asset address on that chain
    apy : Decimal
        Annual percentage yield, in percent (4 means 4%)
    apy_type : ApyType
        Variable, stable or fixed
    tvl : Decimal, optional
        Total value locked in USD
    risk_level : RiskLevel
        Risk tier
    category : str
        lending, staking, lp, vault...

    """

    protocol: str
    chain_id: str
    chain_name: str
    asset: str
    asset_address: str = ""
    apy: Decimal
    apy_type: ApyType = ApyType.VARIABLE
    tvl: Decimal | None = None
    risk_level: RiskLevel = RiskLevel.MEDIUM
    category: str = "lending"
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProtocolSummary(BaseModel):
    """Net USD total and position count for one protocol."""

    total_usd: Decimal = Decimal("0")
    position_count: int = 0


class ChainSummary(BaseModel):
    """Net USD total and position count for one chain."""

    name: str
    total_usd: Decimal = Decimal("0")
    position_count: int = 0


class WalletScanReport(BaseModel):
    """
    Aggregated result of a wallet scan.

    Attributes
    ----------
    address : str
        Scanned wallet
    total_value_usd : Decimal
        Net value over every position found
    protocols_scanned : list[str]
        Protocol names of the scanners that were eligible
    chains_scanned : list[str]
        Candidate chain ids
    by_protocol : dict[str, ProtocolSummary]
        Totals keyed by protocol name
    by_chain : dict[str, ChainSummary]
        Totals keyed by chain id
    positions : list[ProtocolPosition]
        Flat position list

    """

    address: str
    total_value_usd: Decimal = Decimal("0")
    protocols_scanned: list[str] = Field(default_factory=list)
    chains_scanned: list[str] = Field(default_factory=list)
    by_protocol: dict[str, ProtocolSummary] = Field(default_factory=dict)
    by_chain: dict[str, ChainSummary] = Field(default_factory=dict)
    positions: list[ProtocolPosition] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Render the report the way tools return it, with USD strings."""
        return {
            "address": self.address,
            "totalValueUsd": format_usd(self.total_value_usd),
            "protocolsScanned": self.protocols_scanned,
            "chainsScanned": self.chains_scanned,
            "summary": {
                "byProtocol": {
                    name: {"totalUsd": format_usd(s.total_usd), "positionCount": s.position_count}
                    for name, s in self.by_protocol.items()
                },
                "byChain": {
                    chain_id: {"name": s.name, "totalUsd": format_usd(s.total_usd), "positionCount": s.position_count}
                    for chain_id, s in self.by_chain.items()
                },
            },
            "positions": [position.to_payload() for position in self.positions],
        }


class RankedOpportunity(BaseModel):
    """A yield opportunity with its entry costs and cost-adjusted APY."""

    opportunity: YieldOpportunity
    gas_cost_usd: Decimal
    bridge_cost_usd: Decimal
    gross_yield_usd: Decimal
    net_yield_usd: Decimal
    net_apy: Decimal
    execution_steps: list[str] = Field(default_factory=list)

    @property
    def total_entry_cost_usd(self) -> Decimal:
        return self.gas_cost_usd + self.bridge_cost_usd

    def to_payload(self) -> dict[str, Any]:
        opp = self.opportunity
        return {
            "protocol": opp.protocol,
            "chainId": opp.chain_id,
            "chainName": opp.chain_name,
            "asset": opp.asset,
            "category": opp.category,
            "riskLevel": opp.risk_level.value,
            "grossApy": format_percent(opp.apy),
            "gasCostUsd": format_usd(self.gas_cost_usd),
            "bridgeCostUsd": format_usd(self.bridge_cost_usd),
            "totalEntryCostUsd": format_usd(self.total_entry_cost_usd),
            "netApy": format_percent(self.net_apy),
            "estimatedGrossYieldUsd": format_usd(self.gross_yield_usd),
            "estimatedNetYieldUsd": format_usd(self.net_yield_usd),
            "tvl": f"${opp.tvl / Decimal(1_000_000):.1f}M" if opp.tvl else None,
            "executionSteps": self.execution_steps,
            "metadata": opp.metadata,
        }


class YieldRanking(BaseModel):
    """Ranked yield opportunities for one token and amount."""

    token: str
    amount: Decimal
    current_chain_id: str | None = None
    time_horizon_days: int
    risk_tolerance: RiskLevel
    opportunities: list[RankedOpportunity] = Field(default_factory=list)

    @property
    def best(self) -> RankedOpportunity | None:
        return self.opportunities[0] if self.opportunities else None

    def to_payload(self) -> dict[str, Any]:
        ranked = [opportunity.to_payload() for opportunity in self.opportunities]
        return {
            "token": self.token,
            "amount": str(self.amount),
            "currentChainId": self.current_chain_id or "not specified",
            "timeHorizonDays": self.time_horizon_days,
            "riskTolerance": self.risk_tolerance.value,
            "opportunitiesFound": len(ranked),
            "bestOpportunity": ranked[0] if ranked else None,
            "allOpportunities": ranked,
        }
