"""
Tests for configuration loading and chain settings.
"""

import pytest

from core.exceptions import ConfigurationError
from events_sync.config import ChainSettings, SyncConfig, parse_exchange_overrides


class TestSyncConfig:
    """Tests for SyncConfig."""

    def test_defaults_are_valid(self):
        config = SyncConfig()

        assert config.validate() == []
        assert config.reorg_check_frequency == [1, 5, 10, 30, 60]
        assert config.enable_reorg_check is True

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RPC_URL", "http://node:8545")
        monkeypatch.setenv("CHAIN_ID", "5")
        monkeypatch.setenv("ENABLE_REORG_CHECK", "false")
        monkeypatch.setenv("REORG_CHECK_FREQUENCY", "2, 4")
        monkeypatch.setenv("NATIVE_USD_PRICE", "1800.5")

        config = SyncConfig.from_env()

        assert config.rpc_url == "http://node:8545"
        assert config.chain_id == 5
        assert config.enable_reorg_check is False
        assert config.reorg_check_frequency == [2, 4]
        assert config.native_usd_price == "1800.5"

    def test_from_env_rejects_non_numeric_values(self, monkeypatch):
        monkeypatch.setenv("PREWARM_MAX_BLOCKS", "many")

        with pytest.raises(ConfigurationError):
            SyncConfig.from_env()

    def test_validate_reports_every_problem(self):
        config = SyncConfig(prewarm_concurrency=0, max_validate_calls=0, reorg_check_frequency=[5, 0])

        errors = config.validate()

        assert len(errors) == 3


class TestChainSettings:
    """Tests for per-chain address resolution."""

    def test_mainnet(self):
        settings = ChainSettings.for_chain(1)

        assert settings.weth == "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
        assert settings.is_deployed("element")
        assert settings.addresses_for("universe") is None

    def test_goerli_has_no_element(self):
        settings = ChainSettings.for_chain(5)

        assert not settings.is_deployed("element")

    def test_unknown_chain(self):
        with pytest.raises(ConfigurationError):
            ChainSettings.for_chain(999)

    def test_overrides_replace_allow_lists(self):
        settings = ChainSettings.for_chain(1, parse_exchange_overrides("element=0xAA|0xbb"))

        assert settings.addresses_for("element") == frozenset({"0xaa", "0xbb"})


class TestExchangeOverrides:

    def test_empty(self):
        assert parse_exchange_overrides(None) == {}
        assert parse_exchange_overrides("") == {}

    def test_key_without_addresses_accepts_any_address(self):
        assert parse_exchange_overrides("forward=") == {"forward": None}

    def test_malformed_item(self):
        with pytest.raises(ConfigurationError):
            parse_exchange_overrides("seaport")
