"""Native asset balance scanner (ETH, SOL, OSMO, ...)."""

from typing import TYPE_CHECKING

from defi_intel.core.models import PositionAsset, PositionKind, ProtocolPosition
from defi_intel.protocols.base import BaseProtocolScanner

if TYPE_CHECKING:
    from defi_intel.core.registry import PluginContext


class NativeBalanceScanner(BaseProtocolScanner):
    """Reports a wallet's native-asset balance on every chain."""

    protocol_name = "Native Tokens"

    def scan_positions(self, chain_id: str, wallet_address: str, context: "PluginContext") -> list[ProtocolPosition]:
        adapter = context.get_chain_adapter_for_chain(chain_id)
        chain = adapter.get_chain(chain_id)
        if chain is None or not adapter.is_valid_address(chain_id, wallet_address):
            return []

        balance = adapter.get_native_balance(chain_id, wallet_address)
        if int(balance.balance_raw) == 0:
            return []

        (value_usd,) = self.value_balances([balance])
        return [
            ProtocolPosition(
                protocol=self.protocol_name,
                kind=PositionKind.NATIVE,
                chain_id=chain_id,
                chain_name=chain.name,
                assets=[
                    PositionAsset(
                        symbol=balance.token.symbol,
                        address=balance.token.address,
                        balance=balance.balance_formatted,
                        balance_usd=value_usd,
                    )
                ],
                total_value_usd=value_usd,
            )
        ]
