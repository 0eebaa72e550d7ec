"""
Tests for the YAML band configuration.
"""

from pathlib import Path

import pytest

from moving_band.core.config import (
    AirgapConfig,
    BandConfig,
    RegionsConfig,
    SymmetryConfig,
    ToleranceConfig,
    TriangulationSourceType,
    parse_coefficient,
)


@pytest.fixture
def config_dict():
    return {
        "mesh": {"path": "machine.msh"},
        "regions": {
            "stator": ["stator"],
            "rotor": ["rotor"],
            "airgap": "airgap",
        },
        "symmetry": {"sectors": 4, "periodicity_coeff": "1j"},
        "output": {"path": "band.h5"},
    }


class TestParseCoefficient:
    def test_numbers(self):
        assert parse_coefficient(-1) == -1.0
        assert isinstance(parse_coefficient(-1), float)
        assert parse_coefficient(0.5) == 0.5
        assert parse_coefficient(None) is None

    def test_strings(self):
        assert parse_coefficient("1j") == 1j
        assert parse_coefficient("0 + 1i") == 1j
        assert parse_coefficient("-1") == -1.0

    def test_mapping(self):
        assert parse_coefficient({"real": 0, "imag": -1}) == -1j
        assert parse_coefficient({"real": 2}) == 2.0

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_coefficient("minus one")
        with pytest.raises(ValueError):
            parse_coefficient(True)
        with pytest.raises(ValueError):
            parse_coefficient([1, 0])


class TestSections:
    def test_regions_accept_single_name(self):
        regions = RegionsConfig(stator="stator", rotor="rotor")
        assert regions.stator == ["stator"]
        assert regions.airgap == []

    def test_regions_require_rotor(self):
        with pytest.raises(ValueError):
            RegionsConfig(stator=["stator"])

    def test_airgap_source(self):
        assert AirgapConfig(source="AUTO").source == TriangulationSourceType.AUTO
        with pytest.raises(ValueError, match="Invalid air-gap source"):
            AirgapConfig(source="mesh")

    def test_symmetry(self):
        symmetry = SymmetryConfig(sectors=6.0, periodicity_coeff={"real": -1})
        assert symmetry.sectors == 6
        assert symmetry.periodicity_coeff == -1.0
        with pytest.raises(ValueError):
            SymmetryConfig(sectors=0)
        with pytest.raises(ValueError):
            SymmetryConfig(sectors=2.5)

    def test_tolerance_must_be_positive(self):
        assert ToleranceConfig("1e-8").duplicate_rtol == 1e-8
        with pytest.raises(ValueError):
            ToleranceConfig(0.0)


class TestBandConfig:
    def test_from_dict(self, config_dict):
        config = BandConfig.from_dict(config_dict)
        assert config.mesh.path == "machine.msh"
        assert config.mesh.format == "auto"
        assert config.regions.airgap == ["airgap"]
        assert config.airgap.source == TriangulationSourceType.EXPLICIT
        assert config.symmetry.periodicity_coeff == 1j
        assert config.output.plot is None

    def test_relative_paths_resolved(self, config_dict, tmp_path):
        config = BandConfig.from_dict(config_dict, base_path=tmp_path)
        assert Path(config.mesh.path) == tmp_path / "machine.msh"
        assert Path(config.output.path) == tmp_path / "band.h5"

    def test_mesh_path_required(self, config_dict):
        del config_dict["mesh"]
        with pytest.raises(ValueError, match="mesh path"):
            BandConfig.from_dict(config_dict)

    def test_invalid_mesh_format(self, config_dict):
        config_dict["mesh"]["format"] = "stl"
        with pytest.raises(ValueError):
            BandConfig.from_dict(config_dict)

    def test_yaml_roundtrip(self, config_dict, tmp_path):
        (tmp_path / "machine.msh").write_text("")
        config = BandConfig.from_dict(config_dict, base_path=tmp_path)
        yaml_path = tmp_path / "band.yaml"
        config.save_yaml(yaml_path)

        loaded = BandConfig.from_yaml(yaml_path)
        assert loaded.mesh.path == config.mesh.path
        assert loaded.regions == config.regions
        assert loaded.symmetry == config.symmetry
        assert loaded.tolerances == config.tolerances
        assert loaded.output.path == config.output.path

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BandConfig.from_yaml(tmp_path / "missing.yaml")

    def test_validate_clean(self, config_dict, tmp_path):
        (tmp_path / "machine.msh").write_text("")
        config = BandConfig.from_dict(config_dict, base_path=tmp_path)
        assert config.validate() == []

    def test_validate_warnings(self, config_dict, tmp_path):
        config_dict["regions"] = {"rotor": ["rotor"], "stator": ["rotor"]}
        config_dict["symmetry"] = {"sectors": 4}
        config = BandConfig.from_dict(config_dict, base_path=tmp_path)
        warnings = config.validate()

        assert any("airgap element set" in w for w in warnings)
        assert any("more than one region" in w for w in warnings)
        assert any("periodicity_coeff" in w for w in warnings)
        assert any("Mesh file not found" in w for w in warnings)

    def test_validate_auto_source(self, config_dict):
        config_dict["airgap"] = {"source": "auto", "dimensions": {"D_ro": 0.08}}
        config = BandConfig.from_dict(config_dict)
        assert config.airgap.dimensions == {"D_ro": 0.08}
        assert any("not implemented" in w for w in config.validate())

    def test_str(self, config_dict):
        text = str(BandConfig.from_dict(config_dict))
        assert "Moving-Band Configuration" in text
        assert "4 sectors" in text
