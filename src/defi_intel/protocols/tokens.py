"""Well-known token holdings scanner."""

from decimal import Decimal
from functools import partial
from typing import TYPE_CHECKING

from defi_intel.core.fanout import IsolatedTask, gather_isolated
from defi_intel.core.models import PositionAsset, PositionKind, ProtocolPosition, TokenBalance
from defi_intel.core.providers import PriceSource
from defi_intel.data import get_all_supported_chains, load_known_tokens
from defi_intel.protocols.base import BaseProtocolScanner

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext


class TokenHoldingsScanner(BaseProtocolScanner):
    """
    Reports non-zero balances of the chain's well-known tokens.

    Runs only on chains that have a known-token table. Tokens aliasing the
    native asset (e.g. wrapped SOL's mint) are skipped so native balances
    are not counted twice. Each token is read as its own isolated task: a
    token whose read fails is logged and left out, and the other holdings
    are still reported.

    """

    protocol_name = "Token Holdings"

    def __init__(self, price_source: PriceSource | None = None) -> None:
        super().__init__(price_source)
        self.supported_chains = tuple(
            chain_id for chain_id in get_all_supported_chains() if load_known_tokens(chain_id)
        )

    def scan_positions(self, chain_id: str, wallet_address: str, context: "PluginContext") -> list[ProtocolPosition]:
        adapter = context.get_chain_adapter_for_chain(chain_id)
        chain = adapter.get_chain(chain_id)
        if chain is None or not adapter.is_valid_address(chain_id, wallet_address):
            return []

        tokens = [token for token in adapter.known_tokens(chain_id) if not adapter.is_native_token(chain_id, token.address)]
        if not tokens:
            return []

        tasks = [
            IsolatedTask(
                label=f"{self.protocol_name}@{chain_id}:{token.symbol}",
                fn=partial(adapter.get_token_balance, chain_id, wallet_address, token.address),
                default=lambda: None,
            )
            for token in tokens
        ]
        balances: list[TokenBalance | None] = gather_isolated(
            tasks,
            max_workers=context.config.max_workers,
            timeout=context.config.task_timeout_seconds,
        )
        held = [balance for balance in balances if balance is not None and int(balance.balance_raw) > 0]
        if not held:
            return []

        values = self.value_balances(held)
        assets = [
            PositionAsset(
                symbol=balance.token.symbol,
                address=balance.token.address,
                balance=balance.balance_formatted,
                balance_usd=value,
            )
            for balance, value in zip(held, values, strict=True)
        ]
        return [
            ProtocolPosition(
                protocol=self.protocol_name,
                kind=PositionKind.TOKEN,
                chain_id=chain_id,
                chain_name=chain.name,
                assets=assets,
                total_value_usd=sum(values, Decimal(0)),
            )
        ]
