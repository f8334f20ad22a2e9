"""
Tests for PostProcessor
=======================

End-to-end use of the front end on a small electrostatic problem.
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fieldpost import PostProcessor, PostProcessorConfig
from fieldpost.config import EPS0
from fieldpost.mesh.mesh_generators import create_rectangle_mesh
from fieldpost.problem.problem import (
    ProblemDescription, ProblemKind, BlockLabel, GeometryNode, Segment
)
from fieldpost.problem.materials import ElectrostaticMaterial, MagneticMaterial
from fieldpost.problem.solution import FieldSolution
from fieldpost.postprocess.postprocessor import print_warning


def capacitor_setup():
    """
    Air gap between two plates: V = 10 y on [0, 4] x [0, 2], with an air
    block on [1, 3] x [0.5, 1.5] that can be selected.
    """
    mesh = create_rectangle_mesh(4.0, 2.0, 8, 4,
                                 label_func=lambda x, y: 1 if 1 < x < 3 and 0.5 < y < 1.5 else 0)
    x, y = mesh.nodes.T
    mesh.node_q[np.isclose(y, 0.0) | np.isclose(y, 2.0)] = 0.0
    mesh.node_conductor[np.isclose(y, 2.0)] = 0

    problem = ProblemDescription(
        materials=[ElectrostaticMaterial(name="air"), ElectrostaticMaterial(name="gap")],
        labels=[BlockLabel(0.2, 0.2, block_type=0), BlockLabel(2.0, 1.0, block_type=1)],
        nodes=[GeometryNode(0.0, 0.0), GeometryNode(4.0, 0.0),
               GeometryNode(4.0, 2.0, in_conductor=0), GeometryNode(0.0, 2.0, in_conductor=0)],
        segments=[Segment(0, 1), Segment(1, 2), Segment(2, 3, in_conductor=0), Segment(3, 0)],
    )
    solution = FieldSolution(ProblemKind.ELECTROSTATICS, 10.0 * y)
    return mesh, problem, solution


@pytest.fixture
def post():
    mesh, problem, solution = capacitor_setup()
    return PostProcessor(mesh, problem, solution)


class TestAccessors:
    """Tests for sizes and configuration."""

    def test_sizes(self, post):
        assert post.num_nodes == 45
        assert post.num_elements == 64
        assert post.mesh.n_nodes == post.num_nodes
        assert len(post.problem.labels) == 2
        assert post.contour == []

    def test_nodal_fields_smoothed_at_start(self, post):
        nodal = post.solution.element_nodal_flux
        assert nodal.shape == (64, 3)
        assert np.allclose(nodal, -10.0j * EPS0, rtol=1e-8, atol=1e-20)

    def test_bad_label_reference(self):
        mesh, problem, solution = capacitor_setup()
        problem.labels.pop()
        with pytest.raises(ValueError):
            PostProcessor(mesh, problem, solution)

    def test_message_callback(self):
        mesh, problem, _ = capacitor_setup()
        messages = []
        post = PostProcessor(mesh, problem)
        post.set_message_callback(messages.append)
        post.set_message_callback(None)

        problem.materials[1] = ElectrostaticMaterial(ex=3.0, ey=3.0)
        post.select_block_label(0.2, 0.2)
        assert not post.make_mask()
        assert len(messages) == 1

    def test_default_warning(self, capsys):
        print_warning("selection problem")
        assert "WARNING: selection problem" in capsys.readouterr().err


class TestQueries:
    """Tests for location and flux queries."""

    def test_locate(self, post):
        e = post.locate(2.1, 1.05)
        assert e is not None
        assert post.in_triangle_test(2.1, 1.05, e)
        assert post.locate(10.0, 10.0) is None

    def test_point_flux(self, post):
        D = post.get_point_d(2.1, 1.05)
        assert np.isclose(D, -10.0j * EPS0, rtol=1e-8, atol=0)

    def test_point_flux_outside(self, post):
        assert post.get_point_d(-1.0, 1.0) is None

    def test_smoothing_switch(self, post):
        post.solution.element_flux[:] = 1.0
        post.set_smoothing(False)
        assert post.get_point_d(2.1, 1.05) == 1.0
        post.set_smoothing(True)
        assert np.isclose(post.get_point_d(2.1, 1.05), -10.0j * EPS0, rtol=1e-8, atol=0)

    def test_smoothing_not_shared(self):
        """Instances built from one config switch smoothing independently."""
        config = PostProcessorConfig()
        mesh, problem, solution = capacitor_setup()
        first = PostProcessor(mesh, problem, solution, config)
        second = PostProcessor(*capacitor_setup(), config=config)

        first.set_smoothing(False)
        assert not first.config.smooth
        assert second.config.smooth
        assert config.smooth

    def test_plate_nodes_fitted(self, post):
        """Nodes on the straight fixed plates are smoothed, corners are not."""
        mesh = post.mesh
        post.solution.element_flux[:] = 0.0
        post.smooth_nodal_fields()

        plate_node = 4
        assert np.allclose(mesh.nodes[plate_node], [2.0, 0.0])
        e = mesh.con_list(plate_node)[0]
        i = list(mesh.elements[e]).index(plate_node)
        assert np.isclose(post.get_nodal_d(e)[i], -10.0j * EPS0, rtol=1e-8, atol=0)

    def test_primitives(self, post):
        assert post.aecf(0) == 1.0
        assert post.is_same_material(0, 1)
        assert np.isclose(post.elm_area(0), 0.125)
        assert np.isclose(post.ctr(0), post.mesh.element_center(0))


class TestSelectionAndMask:
    """Tests for the selection workflow."""

    def test_select_outside(self, post):
        assert not post.select_block_label(-5.0, 0.0)
        assert not post.problem.labels[0].is_selected

    def test_select_and_mask(self, post):
        assert post.select_block_label(2.0, 1.0)
        assert post.problem.labels[1].is_selected
        assert post.make_mask()

        x, y = post.mesh.nodes.T
        inside = (x >= 1) & (x <= 3) & (y >= 0.5) & (y <= 1.5)
        assert np.all(post.mesh.node_mask[inside] == 1)
        assert np.all(post.mesh.node_mask[post.mesh.boundary_nodes] == 0)

    def test_henrotte_vector_after_mask(self, post):
        """The mask gradient vanishes away from the selection edge."""
        post.select_block_label(2.0, 1.0)
        assert post.make_mask()

        mesh = post.mesh
        for e in range(mesh.n_elements):
            msk = mesh.node_mask[mesh.elements[e]]
            v = post.henrotte_vector(e)
            if np.all(msk == msk[0]):
                assert v == 0
            else:
                assert abs(v) > 0

    def test_conductor_toggle(self, post):
        problem = post.problem
        post.select_conductor(0)

        assert problem.nodes[2].is_selected and problem.nodes[3].is_selected
        assert not problem.nodes[0].is_selected
        assert problem.segments[2].is_selected
        assert not problem.segments[0].is_selected
        assert np.array_equal(post.mesh.node_selected, post.mesh.node_conductor == 0)
        assert not post.has_mask

        post.select_conductor(0)
        assert not post.mesh.node_selected.any()

    def test_axis_queries_planar(self, post):
        post.select_block_label(2.0, 1.0)
        assert not post.is_selection_on_axis()
        assert post.is_kosher(0)


class TestContour:
    """Tests for contour editing through the front end."""

    def test_contour_workflow(self, post):
        post.add_contour_point_from_node(0.1, 0.1)
        post.add_contour_point_from_node(3.9, 0.2)
        assert post.contour == [0j, 4 + 0j]

        post.bend_contour(90, 30)
        assert len(post.contour) == 4
        assert abs(post.contour[-1] - 4) < 1e-12

        post.add_contour_point(4 + 2j)
        post.add_contour_point(4 + 2j)
        assert len(post.contour) == 5

        post.clear_contour()
        assert post.contour == []


class TestOtherKinds:
    """Front end behaviour without a scalar field."""

    def test_magnetics(self):
        mesh = create_rectangle_mesh(1.0, 1.0, 2, 2)
        problem = ProblemDescription(kind=ProblemKind.MAGNETICS,
                                     materials=[MagneticMaterial()], labels=[BlockLabel()])
        post = PostProcessor(mesh, problem, FieldSolution(ProblemKind.MAGNETICS))

        assert post.get_nodal_d(0) is None
        assert post.get_point_d(0.3, 0.2) is None
        assert not post.smooth_nodal_fields()

        post.toggle_selection_for_group(0)
        assert post.make_mask()

    def test_geometry_only(self):
        mesh, problem, _ = capacitor_setup()
        post = PostProcessor(mesh, problem, config=PostProcessorConfig(smooth=False))

        assert post.get_nodal_d(0) is None
        assert post.get_point_d(2.0, 1.0) is None
        assert post.aecf(3) == 1.0
