"""
Problem Description
===================

The parts of a solved problem definition the post-processor reads: problem
kind and type, block labels with their materials, and the input geometry
(points, segments, arcs) used to snap user contours.
"""

import cmath
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from ..config import LengthUnit


class ProblemKind(Enum):
    """Physics of the solved problem."""
    ELECTROSTATICS = "electrostatics"
    HEAT_FLOW = "heatflow"
    MAGNETICS = "magnetics"

    @property
    def has_scalar_field(self) -> bool:
        """Whether nodes carry a scalar potential or temperature."""
        return self in (ProblemKind.ELECTROSTATICS, ProblemKind.HEAT_FLOW)


class ProblemType(Enum):
    """Geometry of the 2D cross-section."""
    PLANAR = "planar"
    AXISYMMETRIC = "axisymmetric"


@dataclass
class BlockLabel:
    """
    Selectable region marker.

    Attributes:
        x, y: label position
        block_type: index of the label's material
        max_area: maximum element area (<= 0 for automatic)
        in_group: group number
        is_external: axisymmetric external region flag
        is_selected: selection flag
    """
    x: float = 0.0
    y: float = 0.0
    block_type: int = 0
    max_area: float = 0.0
    in_group: int = 0
    is_external: bool = False
    is_selected: bool = False

    def toggle_select(self) -> None:
        self.is_selected = not self.is_selected


@dataclass
class GeometryNode:
    """Input geometry point."""
    x: float
    y: float
    point_property: int = -1      # index of an applied point source, -1 for none
    in_conductor: int = -1
    is_selected: bool = False

    def cc(self) -> complex:
        return complex(self.x, self.y)

    def toggle_select(self) -> None:
        self.is_selected = not self.is_selected


@dataclass
class Segment:
    """Straight input segment between two geometry nodes."""
    n0: int
    n1: int
    in_conductor: int = -1
    is_selected: bool = False

    def toggle_select(self) -> None:
        self.is_selected = not self.is_selected


@dataclass
class ArcSegment:
    """
    Circular input arc, running counterclockwise from n0 to n1.

    Attributes:
        n0, n1: geometry node indices
        arc_length: subtended angle [degrees]
        max_side_length: discretization step along the arc [degrees]
    """
    n0: int
    n1: int
    arc_length: float = 90.0
    max_side_length: float = 10.0
    in_conductor: int = -1
    is_selected: bool = False

    def __post_init__(self):
        if not 0 < self.arc_length <= 180:
            raise ValueError(f"arc_length must be in (0, 180], got {self.arc_length}")
        if self.max_side_length <= 0:
            raise ValueError(f"max_side_length must be positive, got {self.max_side_length}")

    def toggle_select(self) -> None:
        self.is_selected = not self.is_selected


@dataclass
class ProblemDescription:
    """
    Solved problem definition.

    Attributes:
        kind: physics of the problem
        problem_type: planar or axisymmetric
        length_units: unit of all coordinates
        materials: block materials, indexed by BlockLabel.block_type
        labels: block labels, indexed by element label
        nodes, segments, arcs: input geometry
        ext_ro, ext_ri, ext_zo: outer radius, inner radius and axial center
            of the axisymmetric external region
    """
    kind: ProblemKind = ProblemKind.ELECTROSTATICS
    problem_type: ProblemType = ProblemType.PLANAR
    length_units: LengthUnit = LengthUnit.METERS
    materials: List = field(default_factory=list)
    labels: List[BlockLabel] = field(default_factory=list)
    nodes: List[GeometryNode] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)
    arcs: List[ArcSegment] = field(default_factory=list)
    ext_ro: float = 1.0
    ext_ri: float = 1.0
    ext_zo: float = 0.0

    def __post_init__(self):
        """Validate label and geometry references."""
        for label in self.labels:
            if not 0 <= label.block_type < len(self.materials):
                raise ValueError(f"Label references unknown material {label.block_type}")
        n_nodes = len(self.nodes)
        for seg in list(self.segments) + list(self.arcs):
            if not (0 <= seg.n0 < n_nodes and 0 <= seg.n1 < n_nodes):
                raise ValueError(f"Segment references unknown node ({seg.n0}, {seg.n1})")
        if self.ext_ro <= 0 or self.ext_ri <= 0:
            raise ValueError("ext_ro and ext_ri must be positive")

    @property
    def is_axisymmetric(self) -> bool:
        return self.problem_type == ProblemType.AXISYMMETRIC

    @property
    def length_conversion(self) -> float:
        """Meters per coordinate unit."""
        return LengthUnit(self.length_units).to_meters

    def label_material(self, label_idx: int):
        return self.materials[self.labels[label_idx].block_type]

    def closest_node(self, x: float, y: float) -> int:
        """
        Index of the geometry node nearest to (x, y).

        Returns:
            node index, -1 when there are no geometry nodes
        """
        if not self.nodes:
            return -1
        d = [(n.x - x) ** 2 + (n.y - y) ** 2 for n in self.nodes]
        return min(range(len(d)), key=d.__getitem__)

    def shortest_distance_from_segment(self, x: float, y: float, k: int) -> float:
        """Distance from (x, y) to straight segment k."""
        p0 = self.nodes[self.segments[k].n0]
        p1 = self.nodes[self.segments[k].n1]
        dx, dy = p1.x - p0.x, p1.y - p0.y
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            return math.hypot(x - p0.x, y - p0.y)
        t = ((x - p0.x) * dx + (y - p0.y) * dy) / length_sq
        t = min(max(t, 0.0), 1.0)
        return math.hypot(x - (p0.x + t * dx), y - (p0.y + t * dy))

    def get_circle(self, arc: ArcSegment) -> Tuple[complex, float]:
        """
        Center and radius of the circle an arc lies on.

        Returns:
            center: complex
            R: radius
        """
        a0 = self.nodes[arc.n0].cc()
        a1 = self.nodes[arc.n1].cc()
        d = abs(a1 - a0)
        t = (a1 - a0) / d
        tta = math.radians(arc.arc_length)
        R = d / (2. * math.sin(tta / 2.))
        h = math.sqrt(max(R * R - d * d / 4., 0.0))
        center = a0 + complex(d / 2., h) * t
        return center, R

    def shortest_distance_from_arc(self, p: complex, arc: ArcSegment) -> float:
        """
        Distance from point p to an arc.

        The distance to the circle is used when the nearest circle point lies
        within the arc's sweep, otherwise the distance to the nearer endpoint.
        """
        center, R = self.get_circle(arc)
        d = abs(p - center)
        if d == 0:
            return R

        t = (p - center) / d
        on_circle = center + R * t
        a0 = self.nodes[arc.n0].cc()
        a1 = self.nodes[arc.n1].cc()
        z = math.degrees(cmath.phase((on_circle - center) / (a0 - center)))
        if 0 < z < arc.arc_length:
            return abs(d - R)

        return min(abs(p - a0), abs(p - a1))

    def unselect_all(self) -> None:
        """Clear the selection flags of all labels and geometry."""
        for item in list(self.labels) + list(self.nodes) + list(self.segments) + list(self.arcs):
            item.is_selected = False
