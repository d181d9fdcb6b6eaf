"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from defi_intel.config import AppConfig
from defi_intel.data import load_chains


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("DEFI_INTEL_TASK_TIMEOUT_SECONDS", "DEFI_INTEL_RPC_URLS", "DEFI_INTEL_RPC_URLS__BASE"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = AppConfig()

    assert config.rpc_urls == {}
    assert config.api_keys.coingecko is None
    assert config.default_slippage_bps == 50
    assert config.task_timeout_seconds == 30.0
    assert config.rpc_max_retries == 2


def test_environment_overrides(monkeypatch):
    """Test DEFI_INTEL_ variables, including nested RPC overrides."""
    monkeypatch.setenv("DEFI_INTEL_TASK_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("DEFI_INTEL_RPC_URLS__BASE", "https://base.example")

    config = AppConfig()

    assert config.task_timeout_seconds == 2.5
    assert config.rpc_urls == {"base": "https://base.example"}


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("DEFI_INTEL_MAX_WORKERS=4\n")

    assert AppConfig().max_workers == 4


def test_rpc_url_for():
    """Test per-chain overrides win over the static endpoint."""
    chains = {chain.id: chain for chain in load_chains()}
    config = AppConfig(rpc_urls={"base": "https://base.example"})

    assert config.rpc_url_for(chains["base"]) == "https://base.example"
    assert config.rpc_url_for(chains["ethereum"]) == chains["ethereum"].rpc_url


def test_frozen_and_validated():
    config = AppConfig()

    with pytest.raises(ValidationError):
        config.task_timeout_seconds = 1
    with pytest.raises(ValidationError):
        AppConfig(task_timeout_seconds=0)
    with pytest.raises(ValidationError):
        AppConfig(default_slippage_bps=10_000)
