"""Test simulation options and settings loading."""
import json
import pytest
from cubestack.core.config import (
    DEFAULT_SETTINGS_FILE, InvalidConfiguration, SimulationConfig, load_config,
)


class TestSimulationConfig:
    """Tests for SimulationConfig validation."""

    def test_defaults_are_valid(self):
        config = SimulationConfig().validate()
        assert config.size == 4
        assert config.speed == 0.25
        assert config.count == 64

    @pytest.mark.parametrize("options", [
        {'size': 1},
        {'size': 0},
        {'size': 2.5},
        {'size': True},
        {'speed': -0.1},
        {'speed': 'fast'},
        {'seed': 'abc'},
        {'shuffle': 'yes'},
        {'sound': 1},
    ])
    def test_invalid_options(self, options):
        with pytest.raises(InvalidConfiguration):
            SimulationConfig(**options).validate()

    def test_invalid_configuration_is_a_value_error(self):
        with pytest.raises(ValueError):
            SimulationConfig(size=1).validate()

    def test_from_dict(self):
        config = SimulationConfig.from_dict({'size': 3, 'seed': 9, 'verbose': True})
        assert (config.size, config.seed, config.verbose) == (3, 9, True)

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(InvalidConfiguration, match="colour"):
            SimulationConfig.from_dict({'colour': 'red'})

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(InvalidConfiguration):
            SimulationConfig.from_dict([1, 2, 3])

    def test_to_dict_round_trip(self):
        config = SimulationConfig(size=5, seed=1)
        assert SimulationConfig.from_dict(config.to_dict()) == config

    def test_simulation_rejects_bad_config(self):
        from cubestack.main import Simulation
        with pytest.raises(InvalidConfiguration):
            Simulation(SimulationConfig(size=1))


class TestLoadConfig:
    """Tests for load_config."""

    def test_bundled_settings_load(self):
        assert DEFAULT_SETTINGS_FILE.exists()
        assert load_config().validate() is not None

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({'size': 3, 'speed': 0.1, 'sound': False}))
        config = load_config(path)
        assert config.size == 3
        assert config.sound is False

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{size: 3")
        with pytest.raises(InvalidConfiguration):
            load_config(path)

    def test_invalid_values_in_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({'size': -2}))
        with pytest.raises(InvalidConfiguration):
            load_config(path)
