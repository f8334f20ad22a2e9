"""
Tests for Mesh I/O
==================
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

meshio = pytest.importorskip("meshio")

from fieldpost.mesh.mesh_generators import create_rectangle_mesh
from fieldpost.mesh.mesh_io import read_mesh, write_vtk


class TestMeshIO:
    """Round trip through meshio files."""

    @pytest.fixture
    def mesh(self):
        mesh = create_rectangle_mesh(2.0, 1.0, 4, 2,
                                     label_func=lambda x, y: 1 if x > 1 else 0)
        mesh.node_mask[:3] = 1
        return mesh

    def test_write_fields(self, mesh, tmp_path):
        filename = str(tmp_path / "fields.vtu")
        flux = np.arange(mesh.n_elements) * (1 + 2j)
        write_vtk(mesh, filename,
                  node_data={"potential": mesh.nodes[:, 1]},
                  cell_data={"D": flux})

        data = meshio.read(filename)
        assert np.allclose(data.point_data["mask"][:3], 1.0)
        assert np.allclose(data.point_data["potential"], mesh.nodes[:, 1])
        D = data.cell_data["D"][0]
        assert D.shape == (mesh.n_elements, 3)
        assert np.allclose(D[:, 0], flux.real)
        assert np.allclose(D[:, 1], flux.imag)

    def test_read_back(self, mesh, tmp_path):
        filename = str(tmp_path / "mesh.vtu")
        write_vtk(mesh, filename)

        loaded = read_mesh(filename)
        assert loaded.n_nodes == mesh.n_nodes
        assert loaded.n_elements == mesh.n_elements
        assert np.allclose(loaded.nodes, mesh.nodes)
        assert np.array_equal(loaded.labels, mesh.labels)
        assert np.array_equal(loaded.blocks, mesh.labels)
        assert np.array_equal(loaded.neighbor_markers, mesh.neighbor_markers)

    def test_missing_label_key(self, mesh, tmp_path):
        filename = str(tmp_path / "mesh.vtu")
        write_vtk(mesh, filename)

        with pytest.raises(ValueError):
            read_mesh(filename, label_key="material")

    def test_no_triangles(self, tmp_path):
        filename = str(tmp_path / "lines.vtu")
        points = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        meshio.write(filename, meshio.Mesh(points, [("line", np.array([[0, 1]]))]))

        with pytest.raises(ValueError):
            read_mesh(filename)

    def test_tags_renumbered(self, mesh, tmp_path):
        """Physical group tags starting at 1 become 0-based block labels."""
        filename = str(tmp_path / "tagged.vtu")
        tags = np.where(mesh.labels == 1, 7, 3)
        points = np.column_stack([mesh.nodes, np.zeros(mesh.n_nodes)])
        meshio.write(filename, meshio.Mesh(points, [("triangle", mesh.elements)],
                                           cell_data={"region": [tags]}))

        loaded = read_mesh(filename, label_key="region")
        assert np.array_equal(loaded.labels, mesh.labels)
        assert np.array_equal(loaded.blocks, mesh.labels)
