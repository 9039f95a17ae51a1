"""Tests for configuration loading and vault construction from config."""

import pytest
import yaml
from pydantic import ValidationError

from yieldvault.config.loader import CONFIG_ENV_VAR, config_from_dict, load_config
from yieldvault.config.schema import Config
from yieldvault.engine.asset import InMemoryAsset
from yieldvault.engine.clock import ManualClock
from yieldvault.engine.fixed_point import SCALE
from yieldvault.vault import Vault


def minimal_dict(**vault_overrides):
    vault = {"asset_id": "USDV", "owner": "owner", "rate_per_second": 10}
    vault.update(vault_overrides)
    return {
        "vault": vault,
        "simulation": {
            "num_holders": 2,
            "num_steps": 3,
            "step_seconds": 60,
            "holder_funding": 10 * SCALE,
            "max_deposit": SCALE,
            "deposit_probability": 0.5,
            "withdraw_probability": 0.25,
            "random_seed": 7,
        },
    }


class TestConfigLoading:
    """Default config and YAML handling."""

    def test_load_default_config(self):
        """Default config loads without errors."""
        config = load_config()
        assert isinstance(config, Config)
        assert config.vault.asset_id == "USDV"
        assert config.vault.annual_rate == 0.05

    def test_annual_rate_derives_rate_per_second(self):
        """5% annual rate converts to the floored per-second rate."""
        config = load_config()
        assert config.vault.rate_per_second == 1_585_489_599

    def test_config_hash_is_deterministic(self):
        """Same config gives the same hash."""
        assert load_config().compute_hash() == load_config().compute_hash()

    def test_hash_changes_with_values(self):
        """Different values give a different hash."""
        a = config_from_dict(minimal_dict())
        b = config_from_dict(minimal_dict(rate_per_second=11))
        assert a.compute_hash() != b.compute_hash()

    def test_env_var_override(self, tmp_path, monkeypatch):
        """Environment variable points the loader at another file."""
        path = tmp_path / "vault.yaml"
        path.write_text(yaml.safe_dump(minimal_dict(owner="ops")))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().vault.owner == "ops"

    def test_empty_file_rejected(self, tmp_path):
        """Empty YAML is not a config."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError):
            load_config(path)

    def test_round_trip_dict(self):
        """to_dict/from_dict preserves the config."""
        config = config_from_dict(minimal_dict())
        assert Config.from_dict(config.to_dict()) == config


class TestConfigValidation:
    """Schema constraints."""

    def test_rate_required(self):
        """A vault needs some rate setting."""
        data = minimal_dict()
        del data["vault"]["rate_per_second"]
        with pytest.raises(ValidationError):
            config_from_dict(data)

    def test_negative_rate_rejected(self):
        """Negative rate per second fails validation."""
        with pytest.raises(ValidationError):
            config_from_dict(minimal_dict(rate_per_second=-1))

    def test_conflicting_rates_rejected(self):
        """rate_per_second that disagrees with annual_rate fails validation."""
        with pytest.raises(ValidationError):
            config_from_dict(minimal_dict(rate_per_second=42, annual_rate=0.5))

    def test_consistent_rates_accepted(self):
        """Both rates set and agreeing (as in a dumped config) is fine."""
        config = config_from_dict(minimal_dict(rate_per_second=1_585_489_599, annual_rate=0.05))
        assert config.vault.rate_per_second == 1_585_489_599

    def test_default_config_round_trips(self):
        """A loaded config with a derived rate survives to_dict/from_dict."""
        config = load_config()
        assert Config.from_dict(config.to_dict()) == config

    def test_probabilities_bounded(self):
        """Deposit plus withdraw probability cannot exceed one."""
        data = minimal_dict()
        data["simulation"]["deposit_probability"] = 0.8
        data["simulation"]["withdraw_probability"] = 0.4
        with pytest.raises(ValidationError):
            config_from_dict(data)

    def test_float_amounts_coerced(self):
        """Scientific-notation amounts become exact integers."""
        data = minimal_dict()
        data["simulation"]["max_deposit"] = 1.0e+20
        config = config_from_dict(data)
        assert config.simulation.max_deposit == 10 ** 20


class TestVaultFromConfig:
    """Vault.from_config wiring."""

    def test_builds_vault(self):
        """Vault picks up owner, address, pause flag and rate from config."""
        config = config_from_dict(minimal_dict(address="pool", paused=True))
        clock = ManualClock(500)
        vault = Vault.from_config(config, InMemoryAsset("USDV"), clock)

        assert vault.owner == "owner"
        assert vault.address == "pool"
        assert vault.paused
        assert vault.rate_per_second == 10
        assert vault.exchange_rate == SCALE
        assert vault.last_accrual_timestamp == 500

    def test_asset_mismatch(self):
        """Asset that differs from the configured one is refused."""
        config = config_from_dict(minimal_dict())
        with pytest.raises(ValueError):
            Vault.from_config(config, InMemoryAsset("OTHER"), ManualClock(0))
