"""Yield ranking: gather opportunities, net out entry costs, rank by net APY."""

import logging
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from functools import partial
from typing import TYPE_CHECKING, Any

from defi_intel.core.errors import InvalidInputError
from defi_intel.core.fanout import IsolatedTask, gather_isolated
from defi_intel.core.models import RankedOpportunity, RiskLevel, YieldOpportunity, YieldRanking
from defi_intel.core.providers import CostEstimator

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = Decimal(365)
APPROVE_OPERATION = "erc20_approve"
DEPOSIT_OPERATION = "protocol_deposit"

_ACTION_VERBS = {"staking": "Stake", "lending": "Supply"}


def _to_amount(value: str | int | float | Decimal) -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        msg = f"Amount must be a number, got {value!r}"
        raise InvalidInputError(msg, amount=str(value)) from e
    if not amount.is_finite() or amount <= 0:
        msg = "Amount must be greater than 0"
        raise InvalidInputError(msg, amount=str(value))
    return amount


class YieldRanker:
    """
    Ranks yield opportunities for a token by cost-adjusted APY.

    Parameters
    ----------
    context : PluginContext
        Registry view providing yield sources and adapters
    cost_estimator : CostEstimator
        Gas and bridge cost lookups
    max_workers : int | None
        Fan-out width (defaults to ``config.max_workers``)
    timeout : float | None
        Join deadline per fan-out phase (defaults to ``config.task_timeout_seconds``)

    """

    def __init__(
        self,
        context: "PluginContext",
        cost_estimator: CostEstimator,
        max_workers: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.context = context
        self.cost_estimator = cost_estimator
        self.max_workers = max_workers or context.config.max_workers
        self.timeout = timeout if timeout is not None else context.config.task_timeout_seconds

    def find_best_yield(
        self,
        token: str,
        amount: str | int | float | Decimal,
        current_chain_id: str | None = None,
        risk_tolerance: RiskLevel | str = RiskLevel.MEDIUM,
        time_horizon_days: int = 365,
    ) -> YieldRanking:
        """
        Find and rank yield opportunities for a token.

        Net APY subtracts one-off entry costs (approve + deposit gas, plus a
        bridge when the funds sit on another chain) from the yield earned
        over the horizon, then annualizes the result.

        Parameters
        ----------
        token : str
            Token symbol (e.g. 'USDC')
        amount : str | int | float | Decimal
            Amount to deposit, in whole tokens (USD-equivalent for stablecoins)
        current_chain_id : str | None
            Chain holding the funds; enables bridge costs
        risk_tolerance : RiskLevel | str
            Highest acceptable risk tier
        time_horizon_days : int
            Holding period used to amortize entry costs

        Returns
        -------
        YieldRanking
            Opportunities sorted by net APY, best first

        Raises
        ------
        InvalidInputError
            If amount or horizon is not positive, or risk tolerance is unknown
        ChainNotSupportedError
            If ``current_chain_id`` is not registered

        """
        amount_dec = _to_amount(amount)
        if time_horizon_days <= 0:
            msg = "Time horizon must be greater than 0 days"
            raise InvalidInputError(msg, time_horizon_days=time_horizon_days)
        try:
            tolerance = RiskLevel(risk_tolerance)
        except ValueError as e:
            msg = f"Unknown risk tolerance {risk_tolerance!r}"
            raise InvalidInputError(msg, risk_tolerance=str(risk_tolerance)) from e
        if current_chain_id is not None:
            self.context.get_chain_adapter_for_chain(current_chain_id)

        opportunities = [opp for opp in self._gather_opportunities(token) if opp.risk_level.rank <= tolerance.rank]

        cost_tasks = [
            IsolatedTask(
                label=f"costs {opp.protocol}@{opp.chain_id}",
                fn=partial(self._entry_costs, opp, token, amount_dec, current_chain_id),
                default=lambda: (Decimal(0), Decimal(0)),
            )
            for opp in opportunities
        ]
        costs = gather_isolated(cost_tasks, max_workers=self.max_workers, timeout=self.timeout)

        ranked = [
            self._rank(opp, gas, bridge, token, amount_dec, current_chain_id, time_horizon_days)
            for opp, (gas, bridge) in zip(opportunities, costs, strict=True)
        ]
        # sorted() is stable with reverse=True, so ties keep source order.
        ranked = sorted(ranked, key=lambda r: r.net_apy, reverse=True)

        return YieldRanking(
            token=token,
            amount=amount_dec,
            current_chain_id=current_chain_id,
            time_horizon_days=time_horizon_days,
            risk_tolerance=tolerance,
            opportunities=ranked,
        )

    def _gather_opportunities(self, token: str) -> list[YieldOpportunity]:
        tasks = [
            IsolatedTask(
                label=f"yields {source.protocol_name}",
                fn=partial(source.get_yield_opportunities, token, self.context),
            )
            for source in self.context.get_yield_sources()
        ]
        results = gather_isolated(tasks, max_workers=self.max_workers, timeout=self.timeout)
        return [opp for batch in results for opp in batch]

    def _safe_estimate(self, label: str, estimate: Callable[..., Decimal], *args: Any) -> Decimal:
        try:
            return Decimal(str(estimate(*args)))
        except Exception as e:
            logger.warning("%s estimate failed, using 0: %s", label, e)
            return Decimal(0)

    def _entry_costs(
        self,
        opp: YieldOpportunity,
        token: str,
        amount: Decimal,
        current_chain_id: str | None,
    ) -> tuple[Decimal, Decimal]:
        estimate_gas = self.cost_estimator.estimate_gas_cost_usd
        gas = self._safe_estimate(
            f"{APPROVE_OPERATION}@{opp.chain_id}", estimate_gas, opp.chain_id, APPROVE_OPERATION, self.context
        ) + self._safe_estimate(
            f"{DEPOSIT_OPERATION}@{opp.chain_id}", estimate_gas, opp.chain_id, DEPOSIT_OPERATION, self.context
        )

        bridge = Decimal(0)
        if current_chain_id and current_chain_id != opp.chain_id:
            bridge = self._safe_estimate(
                f"bridge {current_chain_id}->{opp.chain_id}",
                self.cost_estimator.estimate_bridge_cost_usd,
                current_chain_id,
                opp.chain_id,
                token,
                amount,
                self.context,
            )
        return gas, bridge

    @staticmethod
    def _rank(
        opp: YieldOpportunity,
        gas: Decimal,
        bridge: Decimal,
        token: str,
        amount: Decimal,
        current_chain_id: str | None,
        horizon_days: int,
    ) -> RankedOpportunity:
        horizon = Decimal(horizon_days)
        gross = amount * opp.apy * horizon / (100 * DAYS_PER_YEAR)
        net = gross - (gas + bridge)
        net_apy = net * 100 * DAYS_PER_YEAR / (amount * horizon)

        steps = []
        if current_chain_id and current_chain_id != opp.chain_id:
            steps.append(f"Bridge {amount} {token} from {current_chain_id} to {opp.chain_id}")
        steps.append(f"Approve {token} for {opp.protocol} on {opp.chain_id}")
        verb = _ACTION_VERBS.get(opp.category, "Deposit")
        steps.append(f"{verb} {amount} {token} to {opp.protocol} on {opp.chain_id}")

        return RankedOpportunity(
            opportunity=opp,
            gas_cost_usd=gas,
            bridge_cost_usd=bridge,
            gross_yield_usd=gross,
            net_yield_usd=net,
            net_apy=net_apy,
            execution_steps=steps,
        )
