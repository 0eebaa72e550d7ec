#!/usr/bin/env python3
"""
Moving-Band CLI Runner.

This script builds the air-gap moving-band descriptor of a meshed machine
from a YAML configuration file.

Usage:
    python -m moving_band.cli.build_band config.yaml [options]

Examples:
    # Build and print the descriptor summary
    python -m moving_band.cli.build_band band.yaml

    # Build and save the descriptor
    python -m moving_band.cli.build_band band.yaml --output band.h5

    # Validate configuration without building
    python -m moving_band.cli.build_band band.yaml --validate

    # Generate template configuration
    python -m moving_band.cli.build_band --template > band.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Template YAML configuration
TEMPLATE_CONFIG = """# Moving-Band Configuration
# =========================

#============================================================================
# MESH
#============================================================================
mesh:
  path: "machine.msh"  # gmsh/meshio formats, or .h5/.hdf5 (native)
  format: "auto"       # "auto", "hdf5" or "meshio"

#============================================================================
# REGIONS (element set / physical group names)
#============================================================================
regions:
  stator: ["stator_iron", "slots"]
  rotor: ["rotor_iron", "magnets"]
  airgap: ["airgap"]   # triangles of the moving band

#============================================================================
# AIR-GAP TRIANGULATION
#============================================================================
airgap:
  source: "explicit"   # "explicit" (from regions.airgap) or "auto" (not implemented)
  # dimensions:
  #   D_ro: 0.080
  #   D_si: 0.081

#============================================================================
# SYMMETRY (overrides the values stored with the mesh)
#============================================================================
# symmetry:
#   sectors: 4
#   periodicity_coeff: -1   # number, "1j", or {real: 0, imag: 1}

tolerances:
  duplicate_rtol: 1.0e-6

output:
  path: "band.h5"
  # plot: "band.png"
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def validate_config(config_path: str) -> bool:
    """Validate configuration file without building."""
    from moving_band.core.config import BandConfig

    try:
        config = BandConfig.from_yaml(config_path)
    except (ValueError, TypeError) as e:
        print(f"\n✗ Validation failed: {e}")
        return False

    warnings = config.validate()

    print("Configuration validation:")
    print("=" * 50)
    print(config)

    if warnings:
        print("\nWarnings:")
        for w in warnings:
            print(f"  ⚠️  {w}")
        return False
    print("\n✓ Configuration is valid")
    return True


def build(config_path: str, output: Optional[str] = None, plot: Optional[str] = None) -> int:
    """Build the descriptor, report it and write the requested outputs."""
    from moving_band.band import BandError, build_from_config, write_band_hdf5
    from moving_band.core.config import BandConfig
    from moving_band.core.io import load_mesh

    try:
        config = BandConfig.from_yaml(config_path)
        mesh = load_mesh(config.mesh.path, format=config.mesh.format)
        band = build_from_config(config, mesh=mesh)
    except (BandError, ValueError, FileNotFoundError) as e:
        logging.getLogger(__name__).error("Band construction failed: %s", e)
        print(f"\nError: {e}")
        return 1

    print(band.summary())

    problems = band.validate()
    if problems:
        print("\nInconsistencies:")
        for problem in problems:
            print(f"  ✗ {problem}")
        return 1

    output = output or config.output.path
    if output:
        write_band_hdf5(band, output)

    plot = plot or config.output.plot
    if plot:
        from moving_band.band.viewer import plot_band

        fig, _ = plot_band(band, mesh.p)
        fig.savefig(plot, dpi=150)
        print(f"Plot written to {plot}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Build air-gap moving-band descriptors from YAML configuration files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s band.yaml                      Build and print summary
  %(prog)s band.yaml --output band.h5     Build and save descriptor
  %(prog)s band.yaml --validate           Validate configuration
  %(prog)s --template > band.yaml         Generate template
        """,
    )

    parser.add_argument(
        "config",
        nargs="?",
        help="Path to YAML configuration file",
    )

    parser.add_argument(
        "--output",
        "-o",
        help="Write the descriptor to this HDF5 file (overrides output.path)",
    )

    parser.add_argument(
        "--plot",
        help="Save a plot of the air-gap band to this image file",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration file",
    )

    parser.add_argument(
        "--template",
        "-t",
        action="store_true",
        help="Print template configuration to stdout",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    if args.template:
        print(TEMPLATE_CONFIG)
        return 0

    # Require config file for other operations
    if not args.config:
        parser.print_help()
        return 1

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}")
        return 1

    setup_logging(args.verbose)

    if args.validate:
        return 0 if validate_config(str(config_path)) else 1

    return build(str(config_path), output=args.output, plot=args.plot)


if __name__ == "__main__":
    sys.exit(main())
