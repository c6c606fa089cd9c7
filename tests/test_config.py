"""Tests for biograte.simulation.config — YAML config loading."""

from pathlib import Path

import pytest

from biograte.errors import ConfigError
from biograte.simulation.config import SimulationConfig
from biograte.simulation.session import Session
from biograte.world.cell import Biome
from biograte.world.environment import Ambient

_DEFAULT_YAML = Path(__file__).resolve().parent.parent / "config" / "default.yaml"


class TestSimulationConfig:
    """Tests for config defaults and YAML loading."""

    def test_defaults(self, default_config: SimulationConfig) -> None:
        assert default_config.seed is None
        assert default_config.world_width == 60
        assert default_config.world_height == 60
        assert default_config.tick_interval_ms == 200
        assert default_config.rescore_after_replacement is False

    def test_ambient(self, default_config: SimulationConfig) -> None:
        assert default_config.ambient == Ambient(15.0, 50.0, 50.0)

    def test_ticks_per_second(self) -> None:
        assert SimulationConfig(tick_interval_ms=200).ticks_per_second == 5.0

    def test_from_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "test.yaml"
        yaml_file.write_text(
            "seed: 99\n"
            "world_width: 16\n"
            "world_height: 12\n"
            "ambient_humidity: 80\n"
            "rescore_after_replacement: true\n",
        )
        cfg = SimulationConfig.from_yaml(yaml_file)
        assert cfg.seed == 99
        assert cfg.world_width == 16
        assert cfg.world_height == 12
        assert cfg.ambient_humidity == 80
        assert cfg.ambient_temperature == 15.0
        assert cfg.rescore_after_replacement is True

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        assert SimulationConfig.from_yaml(yaml_file) == SimulationConfig()

    def test_shipped_default_loads(self) -> None:
        cfg = SimulationConfig.from_yaml(_DEFAULT_YAML)
        assert cfg.world_width == 60
        assert cfg.build_catalog().biome(Biome.DESERT).aggression == 0.9

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            SimulationConfig.from_yaml(tmp_path / "nope.yaml")

    def test_catalog_overrides(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "catalog.yaml"
        yaml_file.write_text(
            "biomes:\n"
            "  desert:\n"
            "    aggression: 0.4\n"
            "species:\n"
            "  moss:\n"
            "    biomes: [tundra]\n"
            "    growth: 0.3\n"
            "    competitiveness: 0.2\n",
        )
        catalog = SimulationConfig.from_yaml(yaml_file).build_catalog()
        assert catalog.biome(Biome.DESERT).aggression == 0.4
        assert catalog.species["moss"].hosted_by(Biome.TUNDRA)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            SimulationConfig.from_yaml(yaml_file)

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("biomes: [desert]\n")
        with pytest.raises(ConfigError, match="biomes"):
            SimulationConfig.from_yaml(yaml_file)

    @pytest.mark.parametrize(
        "text",
        [
            "world_width: 0\n",
            "world_height: -3\n",
            "tick_interval_ms: 0\n",
            "world_width: wide\n",
            "world_height: 12.5\n",
            "tick_interval_ms: yes\n",
            "ambient_temperature: hot\n",
            "ambient_humidity: [50]\n",
            "ambient_altitude: .nan\n",
            "ambient_temperature: .inf\n",
            "seed: abc\n",
            "seed: 1.5\n",
            "rescore_after_replacement: 'false'\n",
            "rescore_after_replacement: 1\n",
        ],
    )
    def test_rejects_bad_scalars(self, tmp_path: Path, text: str) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text(text)
        with pytest.raises(ConfigError):
            SimulationConfig.from_yaml(yaml_file)

    def test_integer_ambient_becomes_float(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "ints.yaml"
        yaml_file.write_text("ambient_temperature: 20\n")
        cfg = SimulationConfig.from_yaml(yaml_file)
        assert cfg.ambient_temperature == 20.0
        assert isinstance(cfg.ambient_temperature, float)

    def test_session_rejects_unvalidated_config(self) -> None:
        cfg = SimulationConfig(ambient_temperature="hot")  # type: ignore[arg-type]
        with pytest.raises(ConfigError, match="ambient_temperature"):
            Session.from_config(cfg)
