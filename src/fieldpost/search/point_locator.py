"""
Point Location
==============

Find the mesh element containing a point.
"""

from typing import Optional

from ..errors import GeometryNotFound
from ..mesh.triangle_mesh import TriangleMesh


def in_triangle_test(mesh: TriangleMesh, x: float, y: float, i: int) -> bool:
    """
    Check whether (x, y) lies inside or on the boundary of element i.

    Each edge cross product is always evaluated from the lower-numbered to
    the higher-numbered node, so the two elements sharing an edge compute
    exactly the same value for it.

    Args:
        mesh: TriangleMesh instance
        x, y: point coordinates
        i: element index

    Returns:
        True if the point is inside element i
    """
    if i < 0 or i >= mesh.n_elements:
        return False

    p = mesh.elements[i]
    nodes = mesh.nodes
    for j in range(3):
        k = (j + 1) % 3
        p_j, p_k = p[j], p[k]
        if p_k > p_j:
            z = ((nodes[p_k, 0] - nodes[p_j, 0]) * (y - nodes[p_j, 1]) -
                 (nodes[p_k, 1] - nodes[p_j, 1]) * (x - nodes[p_j, 0]))
            if z < 0:
                return False
        else:
            z = ((nodes[p_j, 0] - nodes[p_k, 0]) * (y - nodes[p_k, 1]) -
                 (nodes[p_j, 1] - nodes[p_k, 1]) * (x - nodes[p_k, 0]))
            if z > 0:
                return False

    return True


class PointLocator:
    """
    Element search with a "last found" cursor.

    Successive queries tend to be near each other, and elements are
    numbered in a banded order, so the search starts at the last element
    found and walks outward in both directions. The cursor only affects
    how quickly an element is found, never which one.

    Attributes:
        mesh: TriangleMesh instance
        last_found: element index the next search starts from
    """

    def __init__(self, mesh: TriangleMesh, start: int = 0):
        self.mesh = mesh
        self.last_found = start

    def reset(self, start: int = 0) -> None:
        """Move the cursor to a given element."""
        self.last_found = start

    def contains(self, x: float, y: float, i: int) -> bool:
        """Check whether element i contains (x, y)."""
        return in_triangle_test(self.mesh, x, y, i)

    def locate(self, x: float, y: float) -> Optional[int]:
        """
        Find the element containing (x, y).

        Args:
            x, y: point coordinates

        Returns:
            element index, or None if no element contains the point
        """
        mesh = self.mesh
        sz = mesh.n_elements
        if sz == 0:
            return None

        k = self.last_found
        if k < 0 or k >= sz:
            k = 0
        self.last_found = k

        if in_triangle_test(mesh, x, y, k):
            return k

        ctr = mesh.centroids
        rsqr = mesh.rsqr
        hi = lo = k
        for _ in range(0, sz, 2):
            hi += 1
            if hi >= sz:
                hi = 0
            lo -= 1
            if lo < 0:
                lo = sz - 1

            # Circumscribed circle rejection before the exact test
            z = (ctr[hi, 0] - x) ** 2 + (ctr[hi, 1] - y) ** 2
            if z <= rsqr[hi] and in_triangle_test(mesh, x, y, hi):
                self.last_found = hi
                return hi

            z = (ctr[lo, 0] - x) ** 2 + (ctr[lo, 1] - y) ** 2
            if z <= rsqr[lo] and in_triangle_test(mesh, x, y, lo):
                self.last_found = lo
                return lo

        return None

    def find(self, x: float, y: float) -> int:
        """
        Like locate, but raise GeometryNotFound for points off the mesh.
        """
        elem = self.locate(x, y)
        if elem is None:
            raise GeometryNotFound(x, y)
        return elem
