"""
Tests for Contour Builder
=========================
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fieldpost.contour.contour_builder import ContourBuilder
from fieldpost.problem.problem import (
    ProblemDescription, GeometryNode, Segment, ArcSegment
)
from fieldpost.problem.materials import ElectrostaticMaterial


@pytest.fixture
def geometry():
    """Quarter circle from (1, 0) to (0, 1) and a line from (1, 0) to (2, 0)."""
    return ProblemDescription(
        materials=[ElectrostaticMaterial()],
        nodes=[GeometryNode(1.0, 0.0), GeometryNode(0.0, 1.0), GeometryNode(2.0, 0.0)],
        segments=[Segment(0, 2)],
        arcs=[ArcSegment(0, 1, arc_length=90.0, max_side_length=30.0)],
    )


class TestAddPoint:
    """Tests for free contour points."""

    def test_duplicate_point(self):
        builder = ContourBuilder(ProblemDescription())
        builder.add_point(1 + 2j)
        builder.add_point(1 + 2j)
        assert len(builder) == 1

    def test_non_consecutive_duplicates_kept(self):
        builder = ContourBuilder(ProblemDescription())
        for p in (0, 1, 0):
            builder.add_point(p)
        assert builder.points == [0j, 1 + 0j, 0j]

    def test_clear(self):
        builder = ContourBuilder(ProblemDescription())
        builder.add_point(0)
        builder.add_point(1)
        builder.clear()
        assert len(builder) == 0


class TestBend:
    """Tests for arc bending of the last segment."""

    @pytest.fixture
    def builder(self):
        builder = ContourBuilder(ProblemDescription())
        builder.add_point(0)
        builder.add_point(1)
        return builder

    def test_zero_angle_noop(self, builder):
        builder.bend(0, 5)
        assert builder.points == [0j, 1 + 0j]

    @pytest.mark.parametrize("angle", [180.5, -200.0, 360.0])
    def test_out_of_range_noop(self, builder, angle):
        builder.bend(angle, 5)
        assert builder.points == [0j, 1 + 0j]

    def test_single_point_noop(self):
        builder = ContourBuilder(ProblemDescription())
        builder.add_point(0)
        builder.bend(90, 10)
        assert builder.points == [0j]

    def test_half_circle_single_step(self, builder):
        """One sub-step of 180 degrees lands back on the chord end."""
        builder.bend(180, 180)

        assert len(builder) == 2
        assert builder.points[0] == 0
        assert abs(builder.points[1] - 1) < 1e-12

    @pytest.mark.parametrize("angle", [90.0, -90.0, 45.0, -170.0])
    def test_arc_geometry(self, builder, angle):
        """Arc points share one circle of radius d / (2 sin(|angle|/2))."""
        step = 10.0
        builder.bend(angle, step)

        n = int(np.ceil(abs(angle) / step))
        pts = np.array(builder.points)
        assert len(pts) == n + 1
        assert pts[0] == 0
        assert abs(pts[-1] - 1) < 1e-12

        R = 1.0 / (2 * np.sin(np.radians(abs(angle)) / 2))
        # Center from the first three points
        c = circle_center(pts[0], pts[1], pts[2])
        assert np.allclose(np.abs(pts - c), R)

    def test_bend_direction(self, builder):
        """Positive angles bend to the right of 0 -> 1, negative to the left."""
        builder.bend(90, 10)
        assert np.all(np.array(builder.points).imag <= 1e-12)

        builder = ContourBuilder(ProblemDescription())
        builder.add_point(0)
        builder.add_point(1)
        builder.bend(-90, 10)
        assert np.all(np.array(builder.points).imag >= -1e-12)

    def test_zero_step_defaults_to_one_degree(self, builder):
        builder.bend(30, 0)
        assert len(builder) == 31

    def test_only_last_segment_bent(self):
        builder = ContourBuilder(ProblemDescription())
        for p in (0, 1, 1 + 1j):
            builder.add_point(p)
        builder.bend(90, 45)

        assert builder.points[:2] == [0j, 1 + 0j]
        assert len(builder) == 4
        assert abs(builder.points[-1] - (1 + 1j)) < 1e-12


def circle_center(a, b, c):
    """Circumcenter of three complex points."""
    d = 2 * (a.real * (b.imag - c.imag) + b.real * (c.imag - a.imag) + c.real * (a.imag - b.imag))
    ux = ((abs(a) ** 2) * (b.imag - c.imag) + (abs(b) ** 2) * (c.imag - a.imag) +
          (abs(c) ** 2) * (a.imag - b.imag)) / d
    uy = ((abs(a) ** 2) * (c.real - b.real) + (abs(b) ** 2) * (a.real - c.real) +
          (abs(c) ** 2) * (b.real - a.real)) / d
    return complex(ux, uy)


class TestAddPointFromNode:
    """Tests for snapping to the input geometry."""

    def test_seed_snaps_to_node(self, geometry):
        builder = ContourBuilder(geometry)
        builder.add_point_from_node(1.1, 0.1)
        assert builder.points == [1 + 0j]

    def test_same_node_noop(self, geometry):
        builder = ContourBuilder(geometry)
        builder.add_point_from_node(1.1, 0.1)
        builder.add_point_from_node(0.9, -0.05)
        assert len(builder) == 1

    def test_empty_geometry_noop(self):
        builder = ContourBuilder(ProblemDescription())
        builder.add_point_from_node(0.0, 0.0)
        assert len(builder) == 0

    def test_follow_line(self, geometry):
        builder = ContourBuilder(geometry)
        builder.add_point_from_node(1.0, 0.0)
        builder.add_point_from_node(1.9, 0.05)
        assert builder.points == [1 + 0j, 2 + 0j]

    def test_step_back_along_line(self, geometry):
        """Returning along the segment just drawn adds nothing."""
        builder = ContourBuilder(geometry)
        builder.add_point_from_node(1.0, 0.0)
        builder.add_point_from_node(2.0, 0.0)
        builder.add_point_from_node(1.1, 0.0)
        assert builder.points == [1 + 0j, 2 + 0j]

    def test_follow_arc_forward(self, geometry):
        """Arc from its start node is walked counterclockwise."""
        builder = ContourBuilder(geometry)
        builder.add_point_from_node(1.0, 0.0)
        builder.add_point_from_node(0.1, 1.1)

        pts = np.array(builder.points)
        assert len(pts) == 4
        assert np.allclose(np.abs(pts), 1.0)
        assert np.allclose(np.degrees(np.angle(pts)), [0, 30, 60, 90])

    def test_follow_arc_reverse(self, geometry):
        """Arc from its end node is walked clockwise."""
        builder = ContourBuilder(geometry)
        builder.add_point_from_node(0.0, 1.0)
        builder.add_point_from_node(1.1, 0.1)

        pts = np.array(builder.points)
        assert len(pts) == 4
        assert np.allclose(np.abs(pts), 1.0)
        assert np.allclose(np.degrees(np.angle(pts)), [90, 60, 30, 0], atol=1e-9)

    def test_unconnected_nodes(self, geometry):
        """Nodes with no segment between them are joined directly."""
        builder = ContourBuilder(geometry)
        builder.add_point_from_node(0.0, 1.0)
        builder.add_point_from_node(2.0, 0.0)
        assert builder.points == [1j, 2 + 0j]

    def test_last_point_off_node(self, geometry):
        """Geometry is only followed from a point sitting on a node."""
        builder = ContourBuilder(geometry)
        builder.add_point(0.9 + 0.1j)
        builder.add_point_from_node(0.0, 1.0)
        assert builder.points == [0.9 + 0.1j, 1j]

    def test_nearest_connection_wins(self):
        """With a line and an arc joining the same nodes, the closer one is used."""
        problem = ProblemDescription(
            materials=[ElectrostaticMaterial()],
            nodes=[GeometryNode(1.0, 0.0), GeometryNode(0.0, 1.0)],
            segments=[Segment(0, 1)],
            arcs=[ArcSegment(0, 1, arc_length=90.0, max_side_length=45.0)],
        )

        builder = ContourBuilder(problem)
        builder.add_point_from_node(1.0, 0.0)
        builder.add_point_from_node(0.45, 0.55)
        assert builder.points == [1 + 0j, 1j]

        builder.clear()
        builder.add_point_from_node(1.0, 0.0)
        builder.add_point_from_node(0.2, 0.99)
        assert len(builder) == 3

    def test_arc_walk_back_stops(self, geometry):
        """Clicking back on the start of an arc just walked adds nothing."""
        builder = ContourBuilder(geometry)
        builder.add_point_from_node(1.0, 0.0)
        builder.add_point_from_node(0.1, 1.1)
        walked = list(builder.points)
        assert len(walked) == 4

        builder.add_point_from_node(1.1, 0.1)
        assert builder.points == walked

    def test_equal_distance_segments(self):
        """Two identical segments: the first one listed is followed."""
        problem = ProblemDescription(
            materials=[ElectrostaticMaterial()],
            nodes=[GeometryNode(1.0, 0.0), GeometryNode(0.0, 1.0)],
            segments=[Segment(0, 1), Segment(1, 0)],
        )
        builder = ContourBuilder(problem)

        lineno, arcno, _ = builder._find_connection(1, 0, 1 + 0j, 1 + 0j, 0.45 + 0.55j)
        assert (lineno, arcno) == (0, None)

        builder.add_point_from_node(1.0, 0.0)
        builder.add_point_from_node(0.45, 0.55)
        assert builder.points == [1 + 0j, 1j]

    def test_equal_distance_arcs(self):
        """Two arcs on one circle: the first one listed sets the discretization."""
        problem = ProblemDescription(
            materials=[ElectrostaticMaterial()],
            nodes=[GeometryNode(1.0, 0.0), GeometryNode(0.0, 1.0)],
            arcs=[ArcSegment(0, 1, arc_length=90.0, max_side_length=30.0),
                  ArcSegment(0, 1, arc_length=90.0, max_side_length=45.0)],
        )
        builder = ContourBuilder(problem)
        builder.add_point_from_node(1.0, 0.0)
        builder.add_point_from_node(0.1, 1.1)

        pts = np.array(builder.points)
        assert len(pts) == 4
        assert np.allclose(np.degrees(np.angle(pts)), [0, 30, 60, 90])
