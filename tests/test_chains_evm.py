"""Tests for the EVM chain adapter with mocked web3 clients."""

from unittest.mock import MagicMock

import pytest
from web3 import Web3

from defi_intel.chains.evm import NATIVE_TOKEN_ADDRESS, EvmChainAdapter
from defi_intel.config import AppConfig
from defi_intel.core.errors import ChainNotSupportedError, InvalidAddressError, RPCError

OWNER = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
UNKNOWN_TOKEN = "0x" + "12" * 20


def make_contract(symbol=None, name=None, decimals=None, balance=None, error=None):
    contract = MagicMock()
    functions = contract.functions
    for fn, value in (("symbol", symbol), ("name", name), ("decimals", decimals), ("balanceOf", balance)):
        call = getattr(functions, fn).return_value.call
        if error is not None:
            call.side_effect = error
        else:
            call.return_value = value
    return contract


@pytest.fixture
def w3():
    return MagicMock()


@pytest.fixture
def adapter(w3):
    return EvmChainAdapter(config=AppConfig(rpc_max_retries=0), web3_factory=lambda url: w3)


def use_contracts(w3, contracts):
    w3.eth.contract.side_effect = lambda address, abi: contracts[Web3.to_checksum_address(address)]


def test_one_client_per_chain():
    """Test clients are built once per chain with the configured URL."""
    urls = []
    EvmChainAdapter(
        config=AppConfig(rpc_urls={"base": "https://base.example"}),
        web3_factory=lambda url: urls.append(url) or MagicMock(),
    )

    assert "https://base.example" in urls
    assert "https://eth.llamarpc.com" in urls
    assert len(urls) == len(set(urls))


@pytest.mark.parametrize(
    ("address", "expected"),
    [
        (OWNER, True),
        (OWNER.lower(), True),
        (OWNER[:-1] + "6", False),
        ("0x" + OWNER[2:].upper(), False),
        ("ab" * 20, False),
        (OWNER[2:], False),
        (OWNER + "\n", False),
        ("0x" + "g" * 40, False),
        ("0x1234", False),
        ("not an address", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_address_without_io(adapter, w3, address, expected):
    """Test validation is syntactic and never touches the network."""
    assert adapter.is_valid_address("ethereum", address) is expected
    assert w3.method_calls == []


def test_native_sentinel_redirects_to_native_balance(adapter, w3):
    """Test the pseudo-address is served by eth_getBalance, case-insensitively."""
    w3.eth.get_balance.return_value = 1_500_000_000_000_000_000

    for sentinel in (NATIVE_TOKEN_ADDRESS, NATIVE_TOKEN_ADDRESS.lower()):
        balance = adapter.get_token_balance("ethereum", OWNER, sentinel)
        assert balance.token.symbol == "ETH"
        assert balance.balance_formatted == "1.5"

    w3.eth.contract.assert_not_called()


def test_known_token_balance_uses_static_metadata(adapter, w3):
    """Test ERC-20 balances for known tokens skip metadata reads."""
    usdc = make_contract(balance=2_500_000)
    use_contracts(w3, {USDC: usdc})

    balance = adapter.get_token_balance("ethereum", OWNER, USDC.lower())

    assert balance.token.symbol == "USDC"
    assert balance.balance_raw == "2500000"
    assert balance.balance_formatted == "2.5"
    usdc.functions.symbol.assert_not_called()


def test_invalid_owner_and_unknown_chain(adapter):
    """Test owner validation and chain lookup errors."""
    with pytest.raises(InvalidAddressError):
        adapter.get_native_balance("ethereum", "0x1234")
    with pytest.raises(InvalidAddressError):
        adapter.get_token_balance("ethereum", OWNER, "USDC")
    with pytest.raises(ChainNotSupportedError):
        adapter.get_native_balance("solana-mainnet", OWNER)


def test_transport_failure_is_rpc_error(adapter, w3):
    """Test client failures surface as RPCError."""
    w3.eth.get_balance.side_effect = ConnectionError("connection refused")

    with pytest.raises(RPCError):
        adapter.get_native_balance("base", OWNER)


def test_batch_fails_as_a_whole(adapter, w3):
    """Test one failing token fails the batch rather than reporting zero."""
    use_contracts(w3, {USDC: make_contract(balance=1), DAI: make_contract(error=ValueError("execution reverted"))})

    with pytest.raises(RPCError):
        adapter.get_token_balances("ethereum", OWNER, [USDC, DAI])


def test_batch_preserves_order(adapter, w3):
    """Test batch results follow input order."""
    w3.eth.get_balance.return_value = 10**18
    use_contracts(w3, {USDC: make_contract(balance=1_000_000), DAI: make_contract(balance=3 * 10**18)})

    balances = adapter.get_token_balances("ethereum", OWNER, [DAI, NATIVE_TOKEN_ADDRESS, USDC])

    assert [b.token.symbol for b in balances] == ["DAI", "ETH", "USDC"]
    assert [b.balance_formatted for b in balances] == ["3", "1", "1"]


def test_resolve_token_order(adapter, w3):
    """Test native, then known symbol, then known address resolution."""
    assert adapter.resolve_token("ethereum", "eth").address == NATIVE_TOKEN_ADDRESS
    assert adapter.resolve_token("ethereum", NATIVE_TOKEN_ADDRESS.lower()).symbol == "ETH"
    assert adapter.resolve_token("ethereum", "usdc").address == USDC
    assert adapter.resolve_token("ethereum", USDC.lower()).symbol == "USDC"
    assert adapter.resolve_token("ethereum", "NOPE") is None
    w3.eth.contract.assert_not_called()


def test_resolve_unknown_address_reads_and_caches_metadata(adapter, w3):
    """Test on-chain metadata reads for unknown tokens are cached."""
    contract = make_contract(symbol="FOO", name="Foo Token", decimals=9)
    use_contracts(w3, {Web3.to_checksum_address(UNKNOWN_TOKEN): contract})

    first = adapter.resolve_token("ethereum", UNKNOWN_TOKEN)
    second = adapter.resolve_token("ethereum", UNKNOWN_TOKEN)

    assert first == second
    assert first.symbol == "FOO"
    assert first.decimals == 9
    assert contract.functions.symbol.call_count == 1


def test_resolve_metadata_failure_is_none(adapter, w3):
    """Test a failing metadata read resolves to None instead of raising."""
    use_contracts(w3, {Web3.to_checksum_address(UNKNOWN_TOKEN): make_contract(error=ValueError("no code"))})

    assert adapter.resolve_token("ethereum", UNKNOWN_TOKEN) is None


def test_resolve_unknown_chain_raises(adapter):
    """Test resolution on an unknown chain raises."""
    with pytest.raises(ChainNotSupportedError):
        adapter.resolve_token("fantom", "USDC")


def test_gas_price(adapter, w3):
    """Test gas price passthrough in wei."""
    w3.eth.gas_price = 30_000_000_000

    assert adapter.get_gas_price("ethereum") == 30_000_000_000
