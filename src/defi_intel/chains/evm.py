"""EVM chain adapter backed by web3.py HTTP clients."""

import logging
import re
from collections.abc import Callable
from typing import Any, TypeVar

from web3 import Web3

from defi_intel.chains.base import ChainAdapter
from defi_intel.config import AppConfig
from defi_intel.core.errors import ChainNotSupportedError, InvalidAddressError, RPCError
from defi_intel.core.models import ChainInfo, Ecosystem, TokenBalance, TokenInfo
from defi_intel.data import get_native_sentinel, load_chains
from defi_intel.rpc import call_with_retry

T = TypeVar("T")

logger = logging.getLogger(__name__)

HEX_ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")

# Minimal ERC-20 surface: metadata and balance reads only.
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "name",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]

NATIVE_TOKEN_ADDRESS = get_native_sentinel(Ecosystem.EVM)


class EvmChainAdapter(ChainAdapter):
    """
    Adapter for EVM chains (Ethereum, Base, Arbitrum, Polygon, ...).

    Native assets are addressed by the pseudo-address
    ``0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE``.

    Parameters
    ----------
    chains : list[ChainInfo] | None
        Chains to serve (defaults to every EVM chain in the static table)
    config : AppConfig | None
        RPC overrides and timeouts
    web3_factory : Callable[[str], Web3] | None
        Builds a client for an RPC URL (tests inject mocks)

    """

    ecosystem = Ecosystem.EVM

    def __init__(
        self,
        chains: list[ChainInfo] | None = None,
        config: AppConfig | None = None,
        web3_factory: Callable[[str], Web3] | None = None,
    ) -> None:
        super().__init__(chains if chains is not None else load_chains(Ecosystem.EVM), config)
        factory = web3_factory or self._make_web3
        self._clients = {chain.id: factory(self.config.rpc_url_for(chain)) for chain in self.get_supported_chains()}

    def _make_web3(self, rpc_url: str) -> Web3:
        return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": self.config.rpc_timeout_seconds}))

    def _client(self, chain_id: str) -> Web3:
        client = self._clients.get(chain_id)
        if client is None:
            raise ChainNotSupportedError(chain_id)
        return client

    def _read(self, chain_id: str, description: str, func: Callable[[], T]) -> T:
        """Run a chain read with retries on transport errors, surfacing failures as RPCError."""
        try:
            return call_with_retry(
                func,
                self.retry_config,
                description=f"{chain_id} {description}",
                retry_on=(OSError,),
            )
        except Exception as e:
            raise RPCError(chain_id, f"{description}: {e}") from e

    def _erc20(self, chain_id: str, token_address: str) -> Any:
        return self._client(chain_id).eth.contract(address=token_address, abi=ERC20_ABI)

    def is_valid_address(self, chain_id: str, address: str) -> bool:
        if not isinstance(address, str) or not HEX_ADDRESS_PATTERN.fullmatch(address):
            return False
        if address == address.lower():
            return True
        # Any upper-case hex digit must carry a valid EIP-55 checksum.
        return Web3.is_checksum_address(address)

    def is_native_token(self, chain_id: str, token: str) -> bool:
        return token.lower() == NATIVE_TOKEN_ADDRESS.lower()

    def _same_address(self, a: str, b: str) -> bool:
        return a.lower() == b.lower()

    def get_native_balance(self, chain_id: str, address: str) -> TokenBalance:
        chain = self._chain_or_raise(chain_id)
        self._require_address(chain_id, address)

        owner = Web3.to_checksum_address(address)
        balance = self._read(chain_id, "eth_getBalance", lambda: self._client(chain_id).eth.get_balance(owner))
        return TokenBalance.from_raw(chain.native_token, int(balance))

    def _get_fungible_balance(self, chain: ChainInfo, address: str, token: str) -> TokenBalance:
        if not self.is_valid_address(chain.id, token):
            raise InvalidAddressError(token, chain.id)

        token_address = Web3.to_checksum_address(token)
        token_info = self._known_by_address(chain.id, token_address) or self.metadata_cache.get_or_load(
            chain.id,
            token_address,
            lambda: self._load_erc20_metadata(chain, token_address),
        )

        owner = Web3.to_checksum_address(address)
        contract = self._erc20(chain.id, token_address)
        balance = self._read(chain.id, f"balanceOf({token_address})", lambda: contract.functions.balanceOf(owner).call())
        return TokenBalance.from_raw(token_info, int(balance))

    def _load_erc20_metadata(self, chain: ChainInfo, token_address: str) -> TokenInfo:
        contract = self._erc20(chain.id, token_address)
        symbol = self._read(chain.id, f"symbol({token_address})", lambda: contract.functions.symbol().call())
        name = self._read(chain.id, f"name({token_address})", lambda: contract.functions.name().call())
        decimals = self._read(chain.id, f"decimals({token_address})", lambda: contract.functions.decimals().call())
        return TokenInfo(
            symbol=symbol,
            name=name,
            decimals=int(decimals),
            address=token_address,
            chain_id=chain.id,
        )

    def _read_token_metadata(self, chain: ChainInfo, token: str) -> TokenInfo | None:
        token_address = Web3.to_checksum_address(token)
        return self.metadata_cache.get_or_load(
            chain.id,
            token_address,
            lambda: self._load_erc20_metadata(chain, token_address),
        )

    def get_gas_price(self, chain_id: str) -> int:
        """
        Fetch the current gas price.

        Parameters
        ----------
        chain_id : str
            Chain id

        Returns
        -------
        int
            Gas price in wei

        """
        self._chain_or_raise(chain_id)
        return int(self._read(chain_id, "eth_gasPrice", lambda: self._client(chain_id).eth.gas_price))
