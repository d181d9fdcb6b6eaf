"""Pytest configuration and shared fakes for defi-intel tests."""

import threading
from decimal import Decimal

import pytest

from defi_intel.chains.base import ChainAdapter
from defi_intel.config import AppConfig
from defi_intel.core.errors import RPCError
from defi_intel.core.models import (
    ChainInfo,
    Ecosystem,
    PositionAsset,
    PositionKind,
    ProtocolPosition,
    TokenBalance,
    TokenInfo,
    YieldOpportunity,
)
from defi_intel.core.registry import Registry
from defi_intel.data import get_native_sentinel, load_chains

WALLET = "0x" + "ab" * 20
EVM_NATIVE = get_native_sentinel(Ecosystem.EVM)


class StaticEvmAdapter(ChainAdapter):
    """In-memory EVM adapter; balances keyed by (chain_id, token address)."""

    ecosystem = Ecosystem.EVM

    def __init__(self, chains: list[ChainInfo], balances: dict | None = None, fail_tokens=()) -> None:
        super().__init__(chains, AppConfig())
        self.balances = balances or {}
        self.fail_tokens = set(fail_tokens)

    def is_valid_address(self, chain_id, address):
        return isinstance(address, str) and address.startswith("0x") and len(address) == 42

    def is_native_token(self, chain_id, token):
        return token.lower() == EVM_NATIVE.lower()

    def get_native_balance(self, chain_id, address):
        chain = self._chain_or_raise(chain_id)
        self._require_address(chain_id, address)
        return TokenBalance.from_raw(chain.native_token, self.balances.get((chain_id, EVM_NATIVE), 0))

    def _get_fungible_balance(self, chain, address, token):
        if token in self.fail_tokens:
            raise RPCError(chain.id, f"balanceOf {token}: execution reverted")
        info = self._known_by_address(chain.id, token)
        return TokenBalance.from_raw(info, self.balances.get((chain.id, token), 0))

    def _read_token_metadata(self, chain, token):
        return None


class FakeScanner:
    """Scanner returning canned positions per chain."""

    def __init__(self, protocol_name, positions=None, supported_chains=None, fail_on=(), block_on=(), release=None):
        self.protocol_name = protocol_name
        self.supported_chains = supported_chains or []
        self.positions = positions or {}
        self.fail_on = set(fail_on)
        self.block_on = set(block_on)
        self.release = release or threading.Event()
        self.calls = []

    def scan_positions(self, chain_id, wallet_address, context):
        self.calls.append(chain_id)
        if chain_id in self.fail_on:
            msg = f"{self.protocol_name} exploded on {chain_id}"
            raise RuntimeError(msg)
        if chain_id in self.block_on:
            self.release.wait(5)
        return list(self.positions.get(chain_id, []))


class FakeYieldSource:
    """Yield source returning canned opportunities."""

    def __init__(self, protocol_name, opportunities=None, error=None):
        self.protocol_name = protocol_name
        self.supported_chains = []
        self.opportunities = opportunities or []
        self.error = error

    def get_yield_opportunities(self, token_symbol, context):
        if self.error:
            raise self.error
        return [opp for opp in self.opportunities if opp.asset == token_symbol]


class FakeCostEstimator:
    """Per-chain cost per operation and flat bridge cost."""

    def __init__(self, per_operation=None, bridge=Decimal(0), fail_chains=()):
        self.per_operation = per_operation or {}
        self.bridge = bridge
        self.fail_chains = set(fail_chains)
        self.operations = []
        self.bridges = []

    def estimate_gas_cost_usd(self, chain_id, operation, context):
        self.operations.append((chain_id, operation))
        if chain_id in self.fail_chains:
            msg = "gas oracle down"
            raise RuntimeError(msg)
        return self.per_operation.get(chain_id, Decimal(0))

    def estimate_bridge_cost_usd(self, from_chain_id, to_chain_id, token_symbol, amount, context):
        self.bridges.append((from_chain_id, to_chain_id, token_symbol, amount))
        return self.bridge


def make_position(protocol, chain_id, usd, kind=PositionKind.TOKEN, chain_name=None):
    value = Decimal(usd)
    return ProtocolPosition(
        protocol=protocol,
        kind=kind,
        chain_id=chain_id,
        chain_name=chain_name or chain_id.title(),
        assets=[PositionAsset(symbol="USDC", address="0x", balance=str(abs(value)), balance_usd=abs(value))],
        total_value_usd=value,
    )


def make_opportunity(protocol, chain_id, apy, risk="medium", category="lending", asset="USDC"):
    return YieldOpportunity(
        protocol=protocol,
        chain_id=chain_id,
        chain_name=chain_id.title(),
        asset=asset,
        apy=Decimal(apy),
        risk_level=risk,
        category=category,
    )


@pytest.fixture
def evm_chains():
    return [chain for chain in load_chains(Ecosystem.EVM) if chain.id in ("ethereum", "base")]


@pytest.fixture
def evm_adapter(evm_chains):
    return StaticEvmAdapter(evm_chains)


@pytest.fixture
def registry(evm_adapter):
    registry = Registry(AppConfig(task_timeout_seconds=5))
    registry.register_chain_adapter(evm_adapter)
    return registry


@pytest.fixture
def usdc():
    return TokenInfo(
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        chain_id="ethereum",
        price_feed_id="usd-coin",
    )
