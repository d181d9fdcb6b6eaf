"""Cosmos SDK chain adapter reading bank balances from LCD REST endpoints."""

import logging
import re
from collections.abc import Callable
from typing import Any

import bech32

from defi_intel.chains.base import ChainAdapter
from defi_intel.config import AppConfig
from defi_intel.core.errors import ChainNotSupportedError, RPCError
from defi_intel.core.models import ChainInfo, Ecosystem, TokenBalance, TokenInfo
from defi_intel.data import load_chains
from defi_intel.rpc import RestClient

logger = logging.getLogger(__name__)

# Cosmos SDK coin denom rule.
DENOM_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9/:._-]{2,127}$")
DEFAULT_DENOM_DECIMALS = 6


class CosmosChainAdapter(ChainAdapter):
    """
    Adapter for Cosmos SDK chains (Osmosis, Cosmos Hub, ...).

    Each chain's native denom (e.g. ``uosmo``) plays the native-sentinel role.
    Denoms without metadata are assumed to use 6 decimals.

    Parameters
    ----------
    chains : list[ChainInfo] | None
        Chains to serve (defaults to the static Cosmos entries)
    config : AppConfig | None
        REST overrides and timeouts
    client_factory : Callable[[ChainInfo, str], RestClient] | None
        Builds a client for a chain and URL (tests inject mock transports)

    """

    ecosystem = Ecosystem.COSMOS

    def __init__(
        self,
        chains: list[ChainInfo] | None = None,
        config: AppConfig | None = None,
        client_factory: Callable[[ChainInfo, str], RestClient] | None = None,
    ) -> None:
        super().__init__(chains if chains is not None else load_chains(Ecosystem.COSMOS), config)
        factory = client_factory or self._make_client
        self._clients = {chain.id: factory(chain, self.config.rpc_url_for(chain)) for chain in self.get_supported_chains()}

    def _make_client(self, chain: ChainInfo, rest_url: str) -> RestClient:
        return RestClient(
            chain.id,
            rest_url,
            timeout=self.config.rpc_timeout_seconds,
            retry_config=self.retry_config,
        )

    def _client(self, chain_id: str) -> RestClient:
        client = self._clients.get(chain_id)
        if client is None:
            raise ChainNotSupportedError(chain_id)
        return client

    def is_valid_address(self, chain_id: str, address: str) -> bool:
        if not isinstance(address, str) or not address:
            return False
        try:
            hrp, data = bech32.bech32_decode(address)
        except (ValueError, TypeError):
            return False
        return bool(hrp) and data is not None

    def is_native_token(self, chain_id: str, token: str) -> bool:
        chain = self.get_chain(chain_id)
        return chain is not None and token == chain.native_token.address

    def is_token_identifier(self, chain_id: str, value: str) -> bool:
        return bool(DENOM_PATTERN.match(value))

    def get_native_balance(self, chain_id: str, address: str) -> TokenBalance:
        chain = self._chain_or_raise(chain_id)
        self._require_address(chain_id, address)
        return TokenBalance.from_raw(chain.native_token, self._bank_balance(chain, address, chain.native_token.address))

    def _get_fungible_balance(self, chain: ChainInfo, address: str, token: str) -> TokenBalance:
        token_info = (
            self._known_by_address(chain.id, token)
            or self.metadata_cache.get(chain.id, token)
            or self._default_denom_info(chain, token)
        )
        return TokenBalance.from_raw(token_info, self._bank_balance(chain, address, token))

    def _bank_balance(self, chain: ChainInfo, address: str, denom: str) -> int:
        body = self._client(chain.id).get_json(
            f"/cosmos/bank/v1beta1/balances/{address}/by_denom",
            params={"denom": denom},
        )
        balance = body.get("balance") or {}
        try:
            return int(balance.get("amount") or 0)
        except (TypeError, ValueError) as e:
            raise RPCError(chain.id, f"balance for {denom}: malformed amount") from e

    @staticmethod
    def _default_denom_info(chain: ChainInfo, denom: str) -> TokenInfo:
        symbol = denom.rsplit("/", 1)[-1][:12].upper()
        return TokenInfo(
            symbol=symbol,
            name=denom,
            decimals=DEFAULT_DENOM_DECIMALS,
            address=denom,
            chain_id=chain.id,
        )

    def _load_denom_metadata(self, chain: ChainInfo, denom: str) -> TokenInfo:
        body = self._client(chain.id).get_json(f"/cosmos/bank/v1beta1/denoms_metadata/{denom}")
        metadata: dict[str, Any] = body.get("metadata") or {}
        if not metadata:
            raise RPCError(chain.id, f"no bank metadata for {denom}")

        units = metadata.get("denom_units") or []
        display = metadata.get("display")
        exponents = {unit.get("denom"): int(unit.get("exponent") or 0) for unit in units}
        if display in exponents:
            decimals = exponents[display]
        elif exponents:
            decimals = max(exponents.values())
        else:
            decimals = DEFAULT_DENOM_DECIMALS

        fallback = self._default_denom_info(chain, denom)
        return TokenInfo(
            symbol=metadata.get("symbol") or (display or "").upper() or fallback.symbol,
            name=metadata.get("name") or fallback.name,
            decimals=decimals,
            address=denom,
            chain_id=chain.id,
        )

    def _read_token_metadata(self, chain: ChainInfo, token: str) -> TokenInfo | None:
        return self.metadata_cache.get_or_load(chain.id, token, lambda: self._load_denom_metadata(chain, token))

    def close(self) -> None:
        for client in self._clients.values():
            client.close()
