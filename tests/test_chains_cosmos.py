"""Tests for the Cosmos chain adapter against a mocked LCD endpoint."""

import httpx
import pytest

from defi_intel.chains.cosmos import CosmosChainAdapter
from defi_intel.config import AppConfig
from defi_intel.core.errors import ChainNotSupportedError, InvalidAddressError, RPCError
from defi_intel.rpc import RestClient, RetryConfig

# BIP-173 reference vectors: valid bech32 with a non-empty prefix.
OWNER = "abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw"
OTHER_OWNER = "split1checkupstagehandshakeupstreamerranterredcaperred2y9e3w"
IBC_ATOM = "ibc/27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2"
BALANCES_PATH = f"/cosmos/bank/v1beta1/balances/{OWNER}/by_denom"


class FakeLcd:
    """Serves bank balances and denom metadata; records request paths."""

    def __init__(self, balances=None, metadata=None, status=None):
        self.balances = balances or {}
        self.metadata = metadata or {}
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status:
            return httpx.Response(self.status)

        path = request.url.path
        if path == BALANCES_PATH:
            denom = request.url.params["denom"]
            return httpx.Response(200, json={"balance": {"denom": denom, "amount": self.balances.get(denom, "0")}})

        prefix = "/cosmos/bank/v1beta1/denoms_metadata/"
        if path.startswith(prefix):
            denom = path[len(prefix) :]
            if denom in self.metadata:
                return httpx.Response(200, json={"metadata": self.metadata[denom]})
            return httpx.Response(404, json={"code": 5, "message": "client metadata for denom not found"})

        return httpx.Response(501)


def make_adapter(lcd):
    def factory(chain, url):
        client = httpx.Client(transport=httpx.MockTransport(lcd))
        return RestClient(chain.id, url, retry_config=RetryConfig(max_retries=0), client=client)

    return CosmosChainAdapter(config=AppConfig(rpc_max_retries=0), client_factory=factory)


@pytest.mark.parametrize(
    ("address", "expected"),
    [
        (OWNER, True),
        (OTHER_OWNER, True),
        (OWNER[:-1] + "x", False),
        ("1pzry9x0s0muk", False),
        ("0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_address_without_io(address, expected):
    """Test bech32 validation with a required prefix makes no requests."""
    lcd = FakeLcd()

    assert make_adapter(lcd).is_valid_address("osmosis-1", address) is expected
    assert lcd.requests == []


def test_native_balance_and_denom_redirect():
    """Test the native denom is served as the native balance."""
    lcd = FakeLcd(balances={"uosmo": "2500000"})
    adapter = make_adapter(lcd)

    native = adapter.get_native_balance("osmosis-1", OWNER)
    via_denom = adapter.get_token_balance("osmosis-1", OWNER, "uosmo")

    assert native.token.symbol == "OSMO"
    assert native.balance_formatted == "2.5"
    assert via_denom == native
    assert adapter.is_native_token("osmosis-1", "uosmo")
    assert not adapter.is_native_token("cosmoshub-4", "uosmo")


def test_known_ibc_token_balance():
    """Test IBC denoms from the known table keep their symbol."""
    adapter = make_adapter(FakeLcd(balances={IBC_ATOM: "1234567"}))

    balance = adapter.get_token_balance("osmosis-1", OWNER, IBC_ATOM)

    assert balance.token.symbol == "ATOM"
    assert balance.balance_formatted == "1.234567"


def test_unknown_denom_defaults_to_six_decimals():
    """Test denoms without metadata assume 6 decimals."""
    adapter = make_adapter(FakeLcd(balances={"factory/osmo1creator/foo": "7000000"}))

    balance = adapter.get_token_balance("osmosis-1", OWNER, "factory/osmo1creator/foo")

    assert balance.token.decimals == 6
    assert balance.token.symbol == "FOO"
    assert balance.balance_formatted == "7"


def test_missing_balance_is_zero():
    """Test an absent balance entry reads as zero."""
    adapter = make_adapter(FakeLcd())

    assert adapter.get_native_balance("osmosis-1", OWNER).balance_raw == "0"


def test_errors():
    """Test address, chain and transport errors."""
    with pytest.raises(InvalidAddressError):
        make_adapter(FakeLcd()).get_native_balance("osmosis-1", "osmo1broken")
    with pytest.raises(ChainNotSupportedError):
        make_adapter(FakeLcd()).get_native_balance("juno-1", OWNER)
    with pytest.raises(RPCError):
        make_adapter(FakeLcd(status=500)).get_native_balance("osmosis-1", OWNER)


def test_resolve_token_order():
    """Test native and known-token resolution without requests."""
    lcd = FakeLcd()
    adapter = make_adapter(lcd)

    assert adapter.resolve_token("osmosis-1", "osmo").address == "uosmo"
    assert adapter.resolve_token("osmosis-1", "uosmo").symbol == "OSMO"
    assert adapter.resolve_token("osmosis-1", "atom").address == IBC_ATOM
    assert adapter.resolve_token("osmosis-1", IBC_ATOM).symbol == "ATOM"
    assert adapter.resolve_token("osmosis-1", "not a denom!") is None
    assert lcd.requests == []


def test_resolve_reads_denom_metadata():
    """Test unknown denoms resolve through bank metadata."""
    metadata = {
        "uion": {
            "base": "uion",
            "display": "ion",
            "name": "Ion",
            "symbol": "ION",
            "denom_units": [{"denom": "uion", "exponent": 0}, {"denom": "ion", "exponent": 6}],
        }
    }
    adapter = make_adapter(FakeLcd(metadata=metadata))

    token = adapter.resolve_token("osmosis-1", "uion")

    assert token.symbol == "ION"
    assert token.decimals == 6
    assert token.address == "uion"


def test_resolve_missing_metadata_is_none():
    """Test a 404 from the metadata endpoint resolves to None."""
    assert make_adapter(FakeLcd()).resolve_token("osmosis-1", "uunknown") is None
