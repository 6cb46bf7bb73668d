"""
Test suite for the configuration system.

Tests environment loading, validation, and conversion into engine settings.
"""
import pytest

from .. import (
    MULTICALL3_ADDRESS,
    BaseConfig,
    ChainConfig,
    ConfigError,
    ConfigManager,
    MulticallConfig,
    get_config,
    reload_config,
)
from ...batchers.base import ResultMode

MULTICALL_VARS = [
    "MULTICALL_ADDRESS",
    "MULTICALL_CODEC",
    "MULTICALL_SLICE_SIZE",
    "MULTICALL_BATCH_SIZE",
    "MULTICALL_CONCURRENCY",
    "MULTICALL_RESULT_MODE",
    "MULTICALL_TIMEOUT",
    "MULTICALL_MAX_RETRIES",
    "MULTICALL_RETRY_DELAY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test from the built-in defaults."""
    for key in MULTICALL_VARS + ["ENVIRONMENT", "LOG_LEVEL", "DEFAULT_CHAIN"]:
        monkeypatch.delenv(key, raising=False)


class TestBaseConfig:
    """Test environment helpers and base validation."""

    def test_defaults(self):
        config = BaseConfig()
        assert config.ENVIRONMENT == "local"
        assert config.LOG_LEVEL == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ConfigError, match="Invalid environment"):
            BaseConfig(ENVIRONMENT="moon")

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError, match="Invalid log level"):
            BaseConfig(LOG_LEVEL="LOUD")

    def test_get_env_required(self):
        with pytest.raises(ConfigError, match="is not set"):
            BaseConfig.get_env("MULTICALL_ADDRESS", required=True)

    def test_get_env_int(self, monkeypatch):
        monkeypatch.setenv("MULTICALL_BATCH_SIZE", "abc")
        with pytest.raises(ConfigError, match="must be an integer"):
            BaseConfig.get_env_int("MULTICALL_BATCH_SIZE", 1000)

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("off", False), ("no", False)])
    def test_get_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("MULTICALL_FLAG", raw)
        assert BaseConfig.get_env_bool("MULTICALL_FLAG") is expected

    def test_get_env_list(self, monkeypatch):
        monkeypatch.setenv("MULTICALL_CHAINS", "ethereum, base,,arbitrum")
        assert BaseConfig.get_env_list("MULTICALL_CHAINS") == ["ethereum", "base", "arbitrum"]
        assert BaseConfig.get_env_list("MULTICALL_MISSING", ["a", "b"]) == ["a", "b"]


class TestChainConfig:
    """Test chain lookups."""

    def test_supported_chains(self):
        config = ChainConfig()
        for chain_name in ["ethereum", "base", "arbitrum"]:
            chain_config = config.get_chain_config(chain_name)
            assert chain_config["chain_id"] > 0
            assert chain_config["rpc_url"].startswith(("http://", "https://"))

    def test_case_insensitive(self):
        assert ChainConfig().get_chain_id("Base") == 8453

    def test_rpc_url_from_env(self, monkeypatch):
        monkeypatch.setenv("ARBITRUM_RPC_URL", "https://arb.example.org")
        assert ChainConfig().get_rpc_url("arbitrum") == "https://arb.example.org"

    def test_chain_config_invalid_chain(self):
        with pytest.raises(ValueError, match="Unsupported chain"):
            ChainConfig().get_chain_config("invalid_chain")


class TestMulticallConfig:
    """Test multicall engine settings."""

    def test_defaults(self):
        config = MulticallConfig()
        assert config.MULTICALL_ADDRESS == MULTICALL3_ADDRESS
        assert config.CODEC == "aggregate3"
        assert config.SLICE_SIZE == 300_000
        assert config.BATCH_SIZE == 1000
        assert config.CONCURRENCY_LIMIT == 5
        assert config.RESULT_MODE == "positional"
        assert config.MAX_RETRIES == 1

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("MULTICALL_BATCH_SIZE", "1500")
        monkeypatch.setenv("MULTICALL_CONCURRENCY", "8")
        monkeypatch.setenv("MULTICALL_TIMEOUT", "2.5")

        config = MulticallConfig()

        assert config.BATCH_SIZE == 1500
        assert config.CONCURRENCY_LIMIT == 8
        assert config.TIMEOUT == 2.5

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("MULTICALL_CONCURRENCY", "five")
        with pytest.raises(ConfigError, match="MULTICALL_CONCURRENCY"):
            MulticallConfig()

    def test_to_batch_config(self):
        batch_config = MulticallConfig(BATCH_SIZE=200, RESULT_MODE="COMPACTED").to_batch_config()

        assert batch_config.batch_size == 200
        assert batch_config.slice_size == 300_000
        assert batch_config.result_mode is ResultMode.COMPACTED
        assert batch_config.timeout == 30.0

    def test_to_batch_config_override_and_no_timeout(self):
        batch_config = MulticallConfig(TIMEOUT=0).to_batch_config(result_mode="compacted")

        assert batch_config.result_mode is ResultMode.COMPACTED
        assert batch_config.timeout is None

    def test_invalid_result_mode(self):
        with pytest.raises(ConfigError, match="Invalid result mode"):
            MulticallConfig(RESULT_MODE="sparse").to_batch_config()

    @pytest.mark.parametrize("field", ["SLICE_SIZE", "BATCH_SIZE", "CONCURRENCY_LIMIT", "MAX_RETRIES"])
    def test_non_positive_values(self, field):
        with pytest.raises(ConfigError):
            MulticallConfig(**{field: 0}).to_batch_config()


class TestConfigManager:
    """Test the combined configuration."""

    def test_initialization(self):
        config = ConfigManager(environment="test")

        assert config.environment == "test"
        assert isinstance(config.chains, ChainConfig)
        assert isinstance(config.multicall, MulticallConfig)
        assert repr(config) == "ConfigManager(environment=test)"

    def test_invalid_environment(self):
        with pytest.raises(ConfigError):
            ConfigManager(environment="moon")

    def test_validate_configuration(self):
        assert ConfigManager(environment="test").validate_configuration() is True

    def test_invalid_default_chain(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_CHAIN", "solana")
        with pytest.raises(ConfigError, match="Invalid default chain"):
            ConfigManager(environment="test").validate_configuration()

    def test_invalid_address(self, monkeypatch):
        monkeypatch.setenv("MULTICALL_ADDRESS", "0x1234")
        with pytest.raises(ConfigError, match="Invalid multicall address"):
            ConfigManager(environment="test").validate_configuration()

    def test_invalid_codec(self, monkeypatch):
        monkeypatch.setenv("MULTICALL_CODEC", "aggregate9")
        with pytest.raises(ConfigError, match="No codec available"):
            ConfigManager(environment="test").validate_configuration()

    def test_invalid_batch_size(self, monkeypatch):
        monkeypatch.setenv("MULTICALL_BATCH_SIZE", "0")
        with pytest.raises(ConfigError):
            ConfigManager(environment="test").validate_configuration()

    def test_to_dict(self):
        data = ConfigManager(environment="test").to_dict()

        assert data["environment"] == "test"
        assert data["multicall"]["BATCH_SIZE"] == 1000
        assert "ETHEREUM_RPC_URL" in data["chains"]


class TestGlobalConfig:
    """Test the shared configuration instance."""

    def test_get_config_is_cached(self):
        first = reload_config(environment="test")
        assert get_config() is first

    def test_reload_picks_up_env(self, monkeypatch):
        reload_config(environment="test")
        monkeypatch.setenv("MULTICALL_BATCH_SIZE", "42")

        assert get_config().multicall.BATCH_SIZE == 1000
        assert reload_config(environment="test").multicall.BATCH_SIZE == 42
