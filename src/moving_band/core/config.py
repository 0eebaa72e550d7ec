"""
Moving-Band Configuration Module.

This module provides a YAML-based configuration for building the air-gap
moving-band descriptor of a meshed electrical machine.

Example YAML configuration:
    mesh:
      path: "machine.msh"

    regions:
      stator: ["stator_iron", "slots"]
      rotor: ["rotor_iron", "magnets"]
      airgap: ["airgap"]

    symmetry:
      sectors: 4
      periodicity_coeff: -1

    output:
      path: "band.h5"
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from moving_band.band.symmetry import DUPLICATE_RTOL


class TriangulationSourceType(str, Enum):
    """Where the air-gap triangulation comes from."""

    EXPLICIT = "explicit"
    AUTO = "auto"


def parse_coefficient(value: Any) -> Optional[Union[float, complex]]:
    """
    Parse a periodicity coefficient from YAML.

    Accepts numbers, strings understood by ``complex()`` (``"1j"``,
    ``"-0.5+0.866j"``) and ``{real: .., imag: ..}`` mappings. Values with a
    zero imaginary part are returned as float.
    """
    if value is None:
        return None
    if isinstance(value, dict):
        value = complex(float(value.get("real", 0.0)), float(value.get("imag", 0.0)))
    elif isinstance(value, str):
        try:
            value = complex(value.replace(" ", "").replace("i", "j"))
        except ValueError:
            raise ValueError(f"Invalid periodicity coefficient: '{value}'")
    elif isinstance(value, bool) or not isinstance(value, (int, float, complex)):
        raise ValueError(f"Invalid periodicity coefficient: {value!r}")
    value = complex(value)
    return value.real if value.imag == 0 else value


# =============================================================================
# Configuration Data Classes
# =============================================================================


@dataclass
class MeshFileConfig:
    """Configuration for loading the machine mesh from file."""

    path: str
    format: str = "auto"

    def __post_init__(self):
        if self.format not in ("auto", "hdf5", "meshio"):
            raise ValueError(f"Invalid mesh format: {self.format}")


@dataclass
class RegionsConfig:
    """Element set names making up each region of the machine."""

    stator: List[str] = field(default_factory=list)
    rotor: List[str] = field(default_factory=list)
    airgap: List[str] = field(default_factory=list)

    def __post_init__(self):
        for name in ("stator", "rotor", "airgap"):
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, [value])
        if not self.rotor:
            raise ValueError("At least one rotor element set must be given")


@dataclass
class AirgapConfig:
    """Air-gap triangulation source."""

    source: str = TriangulationSourceType.EXPLICIT.value
    dimensions: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        try:
            self.source = TriangulationSourceType(str(self.source).lower())
        except ValueError:
            valid = [s.value for s in TriangulationSourceType]
            raise ValueError(f"Invalid air-gap source: '{self.source}'. Must be one of {valid}.")


@dataclass
class SymmetryConfig:
    """Overrides for the symmetry metadata stored with the mesh."""

    sectors: Optional[int] = None
    periodicity_coeff: Optional[Union[float, complex]] = None

    def __post_init__(self):
        if self.sectors is not None:
            if int(self.sectors) != self.sectors or self.sectors < 1:
                raise ValueError(f"symmetry sectors must be an integer >= 1, got {self.sectors}")
            self.sectors = int(self.sectors)
        self.periodicity_coeff = parse_coefficient(self.periodicity_coeff)


@dataclass
class ToleranceConfig:
    """Numerical tolerances."""

    duplicate_rtol: float = DUPLICATE_RTOL

    def __post_init__(self):
        self.duplicate_rtol = float(self.duplicate_rtol)
        if self.duplicate_rtol <= 0:
            raise ValueError(f"duplicate_rtol must be positive, got {self.duplicate_rtol}")


@dataclass
class OutputConfig:
    """Output files."""

    path: Optional[str] = None
    plot: Optional[str] = None


@dataclass
class BandConfig:
    """Complete moving-band configuration."""

    mesh: MeshFileConfig
    regions: RegionsConfig
    airgap: AirgapConfig = field(default_factory=AirgapConfig)
    symmetry: SymmetryConfig = field(default_factory=SymmetryConfig)
    tolerances: ToleranceConfig = field(default_factory=ToleranceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "BandConfig":
        """Load configuration from YAML file.

        Parameters
        ----------
        yaml_path : str or Path
            Path to the YAML configuration file.

        Returns
        -------
        BandConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError
            If the YAML file does not exist.
        ValueError
            If the configuration is invalid.
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {}, base_path=yaml_path.parent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_path: Optional[Path] = None) -> "BandConfig":
        """Create configuration from dictionary.

        Parameters
        ----------
        data : dict
            Configuration dictionary.
        base_path : Path, optional
            Base path for resolving relative file paths.
        """

        def resolve(path):
            if path is None or base_path is None or Path(path).is_absolute():
                return path
            return str(Path(base_path) / path)

        mesh_data = dict(data.get("mesh") or {})
        if "path" not in mesh_data:
            raise ValueError("Configuration needs a mesh path (mesh.path)")
        mesh_data["path"] = resolve(mesh_data["path"])

        airgap_data = data.get("airgap") or {}
        output_data = dict(data.get("output") or {})
        output_data["path"] = resolve(output_data.get("path"))
        output_data["plot"] = resolve(output_data.get("plot"))

        return cls(
            mesh=MeshFileConfig(**mesh_data),
            regions=RegionsConfig(**(data.get("regions") or {})),
            airgap=AirgapConfig(
                source=airgap_data.get("source", TriangulationSourceType.EXPLICIT.value),
                dimensions=dict(airgap_data.get("dimensions") or {}),
            ),
            symmetry=SymmetryConfig(**(data.get("symmetry") or {})),
            tolerances=ToleranceConfig(**(data.get("tolerances") or {})),
            output=OutputConfig(**output_data),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a YAML-friendly dictionary."""
        result: Dict[str, Any] = {
            "mesh": {"path": self.mesh.path, "format": self.mesh.format},
            "regions": {
                "stator": list(self.regions.stator),
                "rotor": list(self.regions.rotor),
                "airgap": list(self.regions.airgap),
            },
            "airgap": {"source": self.airgap.source.value},
            "tolerances": {"duplicate_rtol": self.tolerances.duplicate_rtol},
        }
        if self.airgap.dimensions:
            result["airgap"]["dimensions"] = dict(self.airgap.dimensions)

        symmetry: Dict[str, Any] = {}
        if self.symmetry.sectors is not None:
            symmetry["sectors"] = self.symmetry.sectors
        kappa = self.symmetry.periodicity_coeff
        if kappa is not None:
            symmetry["periodicity_coeff"] = (
                {"real": kappa.real, "imag": kappa.imag} if isinstance(kappa, complex) else kappa
            )
        if symmetry:
            result["symmetry"] = symmetry

        output = {k: v for k, v in (("path", self.output.path), ("plot", self.output.plot)) if v}
        if output:
            result["output"] = output

        return result

    def save_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        with open(yaml_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate the complete configuration.

        Returns
        -------
        list of str
            List of validation warnings (empty if all OK).
        """
        warnings = []

        if self.airgap.source == TriangulationSourceType.EXPLICIT and not self.regions.airgap:
            warnings.append("Explicit air-gap source requires at least one airgap element set")
        if self.airgap.source == TriangulationSourceType.AUTO:
            warnings.append("Automatic air-gap triangulation is not implemented")
        if not self.regions.stator:
            warnings.append("No stator element sets given")

        overlap = set(self.regions.rotor) & (set(self.regions.stator) | set(self.regions.airgap))
        if overlap:
            warnings.append(f"Element sets assigned to more than one region: {sorted(overlap)}")

        sectors = self.symmetry.sectors
        if sectors is not None and sectors > 1 and self.symmetry.periodicity_coeff is None:
            warnings.append("Symmetry sectors given without periodicity_coeff; the mesh value or 1 is used")
        if not Path(self.mesh.path).exists():
            warnings.append(f"Mesh file not found: {self.mesh.path}")

        return warnings

    def __str__(self) -> str:
        """Human-readable string representation."""
        lines = [
            "Moving-Band Configuration",
            "=" * 40,
            f"Mesh: {self.mesh.path} ({self.mesh.format})",
            f"Stator sets: {', '.join(self.regions.stator) or '-'}",
            f"Rotor sets: {', '.join(self.regions.rotor)}",
            f"Air-gap: {self.airgap.source.value} ({', '.join(self.regions.airgap) or '-'})",
        ]
        if self.symmetry.sectors is not None:
            lines.append(
                f"Symmetry: {self.symmetry.sectors} sectors, κ={self.symmetry.periodicity_coeff}"
            )
        if self.output.path:
            lines.append(f"Output: {self.output.path}")
        return "\n".join(lines)
