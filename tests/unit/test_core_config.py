"""Tests for settlement configuration."""

import pytest

from utxosettle.core.config import SettlementConfig, SettlementPolicy
from utxosettle.errors.exceptions import ConfigurationError


class TestSettlementPolicy:
    """Test SettlementPolicy parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (SettlementPolicy.MAX_FEE, SettlementPolicy.MAX_FEE),
            ("first_fit", SettlementPolicy.FIRST_FIT),
            ("MAX_FEE", SettlementPolicy.MAX_FEE),
            ("Max_Fee", SettlementPolicy.MAX_FEE),
        ],
    )
    def test_parse(self, value, expected):
        assert SettlementPolicy.parse(value) is expected

    @pytest.mark.parametrize("value", ["optimal", 1, None])
    def test_parse_unknown(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            SettlementPolicy.parse(value)
        assert exc_info.value.config_key == "policy"


class TestSettlementConfig:
    """Test SettlementConfig."""

    def test_defaults(self):
        config = SettlementConfig()
        assert config.policy is SettlementPolicy.FIRST_FIT
        assert config.skip_malformed is True
        assert config.log_rejections is True
        assert config.max_batch_size is None
        config.validate()

    @pytest.mark.parametrize("size", [0, -1, 2.5, "10"])
    def test_bad_batch_size(self, size):
        with pytest.raises(ConfigurationError) as exc_info:
            SettlementConfig(max_batch_size=size).validate()
        assert exc_info.value.config_key == "max_batch_size"

    def test_bad_policy(self):
        with pytest.raises(ConfigurationError):
            SettlementConfig(policy="max_fee").validate()

    def test_from_dict(self):
        config = SettlementConfig.from_dict(
            {"policy": "max_fee", "skip_malformed": False, "max_batch_size": 100}
        )
        assert config.policy is SettlementPolicy.MAX_FEE
        assert config.skip_malformed is False
        assert config.max_batch_size == 100

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown settlement configuration"):
            SettlementConfig.from_dict({"policy": "first_fit", "retries": 3})

    def test_from_dict_validates(self):
        with pytest.raises(ConfigurationError):
            SettlementConfig.from_dict({"max_batch_size": 0})

    def test_to_dict_round_trip(self):
        config = SettlementConfig(policy=SettlementPolicy.MAX_FEE, max_batch_size=10)
        assert config.to_dict()["policy"] == "max_fee"
        assert SettlementConfig.from_dict(config.to_dict()) == config
