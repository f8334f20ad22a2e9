"""
Contour Builder
===============

User-drawn polyline over the problem geometry, stored as complex points
x + iy.
"""

import cmath
import math
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..problem.problem import ProblemDescription


class ContourBuilder:
    """
    Ordered, open polyline with no consecutive duplicate points.

    Attributes:
        problem: ProblemDescription whose geometry nodes, segments and arcs
            points are snapped to
        tol: coincidence tolerance for snapped points
        points: the contour
    """

    def __init__(self, problem: 'ProblemDescription', tol: float = 1e-8):
        self.problem = problem
        self.tol = tol
        self.points: List[complex] = []

    def __len__(self) -> int:
        return len(self.points)

    def clear(self) -> None:
        """Empty the contour."""
        self.points.clear()

    def add_point(self, p: complex) -> None:
        """Append p unless it equals the current last point."""
        p = complex(p)
        if not self.points or p != self.points[-1]:
            self.points.append(p)

    def add_point_from_node(self, mx: float, my: float) -> None:
        """
        Append the geometry node nearest to a click at (mx, my).

        When the previous contour point sits on a geometry node joined to
        the new one by an input segment, the segment nearest to the click is
        followed: a straight segment adds the new node, an arc adds all of
        its discretization points. Ties keep the lowest-indexed segment.

        Args:
            mx, my: click position
        """
        problem = self.problem
        if not problem.nodes:
            return

        n0 = problem.closest_node(mx, my)
        z = problem.nodes[n0].cc()
        if not self.points:
            self.points.append(z)
            return

        y = self.points[-1]
        if abs(y - z) < self.tol:
            return

        n1 = problem.closest_node(y.real, y.imag)
        x = problem.nodes[n1].cc()
        if abs(x - z) < self.tol:
            return

        lineno, arcno, forward = self._find_connection(n0, n1, x, y, complex(mx, my))

        if lineno is None and arcno is None:
            self.points.append(z)
        elif arcno is None:
            # Stepping straight back along the last segment
            if len(self.points) > 1 and abs(self.points[-2] - z) < self.tol:
                return
            self.points.append(z)
        else:
            self._follow_arc(problem.arcs[arcno], y, forward)

    def _find_connection(self, n0: int, n1: int, x: complex, y: complex,
                         click: complex):
        """
        Segment or arc joining geometry nodes n1 (previous) and n0 (new).

        Returns:
            lineno: segment index or None
            arcno: arc index or None
            forward: True if the arc runs from the previous node to the new one
        """
        problem = self.problem
        lineno = arcno = None
        forward = True

        # Only follow input geometry if the last point is on a node
        if abs(x - y) >= self.tol:
            return lineno, arcno, forward

        d1 = 1.e08
        for k, seg in enumerate(problem.segments):
            if {seg.n0, seg.n1} == {n0, n1}:
                d2 = problem.shortest_distance_from_segment(click.real, click.imag, k)
                if d2 < d1:
                    lineno = k
                    d1 = d2

        for k, arc in enumerate(problem.arcs):
            if (arc.n0, arc.n1) in ((n1, n0), (n0, n1)):
                d2 = problem.shortest_distance_from_arc(click, arc)
                if d2 < d1:
                    arcno = k
                    lineno = None
                    forward = arc.n0 == n1
                    d1 = d2

        return lineno, arcno, forward

    def _follow_arc(self, arc, y: complex, forward: bool) -> None:
        """Append the discretization points of an arc, starting after y."""
        center, _ = self.problem.get_circle(arc)
        n_segments = int(math.ceil(arc.arc_length / arc.max_side_length))
        step = math.radians(arc.arc_length) / n_segments
        rot = cmath.exp(1j * step) if forward else cmath.exp(-1j * step)

        for _ in range(n_segments):
            y = (y - center) * rot + center
            if len(self.points) > 1 and abs(self.points[-2] - y) < self.tol:
                return
            self.points.append(y)

    def bend(self, angle: float, angle_step: float = 1.0) -> None:
        """
        Replace the last segment with a circular arc.

        Args:
            angle: angle subtended by the arc [degrees], in [-180, 180];
                positive angles run counterclockwise about the arc center
            angle_step: maximum angle between arc points [degrees], 0 for 1
        """
        if angle == 0:
            return
        if angle_step == 0:
            angle_step = 1

        k = len(self.points) - 1
        if k < 1:
            return

        if angle < -180. or angle > 180.:
            return

        n = int(math.ceil(abs(angle / angle_step)))
        tta = math.radians(angle)
        dtta = tta / n

        a1 = self.points.pop()
        a0 = self.points[-1]

        # Arc center and radius from the chord
        d = abs(a1 - a0)
        R = d / (2. * math.sin(abs(tta / 2.)))

        if tta > 0:
            c = a0 + (R / d) * (a1 - a0) * cmath.exp(1j * (math.pi - tta) / 2.)
        else:
            c = a0 + (R / d) * (a1 - a0) * cmath.exp(-1j * (math.pi + tta) / 2.)

        for k in range(1, n + 1):
            self.points.append(c + (a0 - c) * cmath.exp(k * 1j * dtta))
