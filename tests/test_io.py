"""
Tests for mesh and band descriptor file I/O.
"""

import meshio
import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from moving_band.band import (
    ExplicitTriangulation,
    SymmetricBandDescriptor,
    build_band_descriptor,
    load_band_hdf5,
    write_band_hdf5,
)
from moving_band.core.io import load_hdf5, load_mesh, write_hdf5, write_meshio


def build(mesh):
    return build_band_descriptor(
        mesh,
        mesh.get_element_set("stator"),
        mesh.get_element_set("rotor"),
        ExplicitTriangulation(mesh.t[mesh.get_element_set("airgap")]),
    )


def write_gmsh(mesh, path):
    """Write ``mesh`` as a gmsh 2.2 file with one physical group per element set."""
    tags = np.zeros(mesh.n_elements, dtype=np.int32)
    field_data = {}
    for tag, (name, elements) in enumerate(sorted(mesh.element_sets.items()), start=1):
        tags[elements] = tag
        field_data[name] = np.array([tag, 2])

    points = np.column_stack([mesh.p, np.zeros(mesh.n_nodes)])
    mio = meshio.Mesh(
        points,
        [("triangle", mesh.t)],
        cell_data={"gmsh:physical": [tags], "gmsh:geometrical": [tags]},
        field_data=field_data,
    )
    meshio.write(path, mio, file_format="gmsh22", binary=False)


class TestMeshIO:
    def test_hdf5_roundtrip(self, quarter_mesh, tmp_path):
        path = tmp_path / "mesh.h5"
        write_hdf5(quarter_mesh, path)
        loaded = load_mesh(path)

        assert_allclose(loaded.p, quarter_mesh.p)
        assert_array_equal(loaded.t, quarter_mesh.t)
        assert loaded.symmetry_sectors == 4
        assert loaded.periodicity_coeff == 1j
        for name, elements in quarter_mesh.element_sets.items():
            assert_array_equal(loaded.get_element_set(name), elements)

    def test_hdf5_real_coefficient(self, annulus_factory, tmp_path):
        mesh = annulus_factory(
            rotor_angles=[0.0, np.pi / 2],
            stator_angles=[0.0, np.pi / 2],
            closed=False,
            symmetry_sectors=4,
            periodicity_coeff=-1,
        )
        path = tmp_path / "mesh.hdf5"
        write_hdf5(mesh, path, compression=None)
        loaded = load_hdf5(path)
        assert loaded.periodicity_coeff == -1.0
        assert isinstance(loaded.periodicity_coeff, float)

    def test_gmsh_physical_groups(self, toy_mesh, tmp_path):
        path = tmp_path / "machine.msh"
        write_gmsh(toy_mesh, path)
        loaded = load_mesh(path)

        assert loaded.n_nodes == toy_mesh.n_nodes
        assert_array_equal(loaded.t, toy_mesh.t)
        assert set(loaded.element_sets) == {"airgap", "rotor", "stator"}
        for name in ("airgap", "rotor", "stator"):
            assert_array_equal(loaded.get_element_set(name), toy_mesh.get_element_set(name))

        band = build(loaded)
        assert band.n_rotor == 4
        assert np.isclose(band.shift_tol, np.pi / 2)

    def test_meshio_geometry_only(self, toy_mesh, tmp_path):
        path = tmp_path / "machine.vtu"
        write_meshio(toy_mesh, str(path))
        loaded = load_mesh(path)
        assert_allclose(loaded.p, toy_mesh.p)
        assert_array_equal(loaded.t, toy_mesh.t)
        assert loaded.element_sets == {}

    def test_writers_import_meshio_lazily(self):
        from moving_band.core.io import writers

        assert "meshio" not in vars(writers)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_mesh(tmp_path / "missing.msh")

    def test_unknown_format(self, quarter_mesh, tmp_path):
        path = tmp_path / "mesh.h5"
        write_hdf5(quarter_mesh, path)
        with pytest.raises(ValueError):
            load_mesh(path, format="stl")


class TestBandStorage:
    def test_plain_roundtrip(self, toy_mesh, tmp_path):
        band = build(toy_mesh)
        path = tmp_path / "band.h5"
        write_band_hdf5(band, path)
        loaded = load_band_hdf5(path)

        assert type(loaded) is type(band)
        assert loaded.n_stator == band.n_stator
        assert loaded.n_rotor == band.n_rotor
        assert loaded.shift_tol == pytest.approx(band.shift_tol)
        assert_array_equal(loaded.t_ag, band.t_ag)
        assert_array_equal(loaded.inds_r, band.inds_r)
        assert_array_equal(loaded.sorted_nodes_rotor, band.sorted_nodes_rotor)
        assert loaded.validate() == []

    def test_symmetric_roundtrip(self, quarter_mesh, tmp_path):
        band = build(quarter_mesh)
        path = tmp_path / "band.h5"
        write_band_hdf5(band, path)
        loaded = load_band_hdf5(path)

        assert isinstance(loaded, SymmetricBandDescriptor)
        assert loaded.symmetry_sectors == 4
        assert loaded.periodicity_coeff == 1j
        assert_allclose(loaded.el_table, band.el_table)
        assert_allclose(loaded.p_ag_virt, band.p_ag_virt)
        assert_array_equal(loaded.virt_identities, band.virt_identities)
        assert loaded.validate() == []
