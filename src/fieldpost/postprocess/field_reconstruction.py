"""
Field Reconstruction
====================

Raw element flux, smoothed nodal flux and point interpolation for problems
carrying a scalar potential (electrostatics) or temperature (heat flow).

The nodal value at a vertex is found by fitting a plane through the
vertex and its neighbours in the same material:

    V_j - V_q ≈ c + Ex*(x_q - x_j) + Ey*(y_q - y_j)

so (Ex, Ey) is directly the negative gradient. The flux then follows from
the material law of the element the vertex is viewed from.
"""

import cmath
import math
import numpy as np
from typing import Optional, TYPE_CHECKING

from ..config import EPS0, FREE_NODE, SHALLOW_ANGLE_SLACK_DEG, PostProcessorConfig
from ..errors import UnsupportedProblemKind
from ..problem.problem import ProblemKind

if TYPE_CHECKING:
    from ..mesh.triangle_mesh import TriangleMesh
    from ..problem.problem import ProblemDescription
    from ..problem.solution import FieldSolution


# Relative size below which the plane-fit determinant counts as zero
DEGENERATE_FIT_TOL = 1e-12


class FieldReconstructor:
    """
    Flux density reconstruction over a solved mesh.

    Attributes:
        mesh: TriangleMesh instance
        problem: ProblemDescription instance
        solution: FieldSolution instance, or None for geometry-only use;
            element_flux is filled in here when the solution did not
            provide it
        config: PostProcessorConfig instance
    """

    def __init__(self, mesh: 'TriangleMesh', problem: 'ProblemDescription',
                 solution: Optional['FieldSolution'] = None,
                 config: Optional[PostProcessorConfig] = None):
        """
        Initialize reconstructor.

        Args:
            mesh: TriangleMesh instance
            problem: ProblemDescription instance
            solution: FieldSolution matching the mesh
            config: PostProcessorConfig (default values if None)
        """
        if solution is not None:
            if solution.kind != problem.kind:
                raise ValueError(f"Solution kind {solution.kind.value} does not match "
                                 f"problem kind {problem.kind.value}")
            solution.validate(mesh.n_nodes, mesh.n_elements)

        self.mesh = mesh
        self.problem = problem
        self.solution = solution
        self.config = config or PostProcessorConfig()

        if self.has_scalar_field and solution.element_flux is None:
            solution.element_flux = self.compute_element_flux()

    @property
    def has_scalar_field(self) -> bool:
        return self.solution is not None and self.solution.has_scalar_field

    # =========================================================================
    # Element primitives
    # =========================================================================

    def elm_area(self, elem_idx: int) -> float:
        """Signed element area in coordinate units."""
        return self.mesh.element_area(elem_idx)

    def ctr(self, elem_idx: int) -> complex:
        """Element centroid as x + iy."""
        return self.mesh.element_center(elem_idx)

    def material(self, elem_idx: int):
        return self.problem.materials[self.mesh.blocks[elem_idx]]

    def is_same_material(self, e1: int, e2: int) -> bool:
        """Whether two elements share one material record."""
        return self.material(e1).is_same_material_as(self.material(e2))

    def aecf(self, elem_idx: int, point: Optional[complex] = None) -> float:
        """
        Axisymmetric external region correction factor.

        Exterior blocks of an axisymmetric problem map an unbounded region
        onto a finite one by scaling the material property. The factor is
        r² / (Ro·Ri), with r the distance from the evaluation point to the
        exterior region center (0, ext_zo).

        Args:
            elem_idx: element index
            point: evaluation point x + iy (element centroid if None)

        Returns:
            1 for planar problems and ordinary blocks, else the factor
        """
        problem = self.problem
        if not problem.is_axisymmetric:
            return 1.
        if not problem.labels[self.mesh.labels[elem_idx]].is_external:
            return 1.

        p = self.ctr(elem_idx) if point is None else complex(point)
        r = abs(p - 1j * problem.ext_zo)
        if r == 0 and point is not None:
            return self.aecf(elem_idx)
        return (r * r) / (problem.ext_ro * problem.ext_ri)

    def henrotte_vector(self, elem_idx: int) -> complex:
        """
        Gradient of the region mask over an element, per meter.

        v = -sum_i msk_i (b_i + i c_i) / (da * length_conversion)

        Used as the weighting vector of weighted-stress-tensor force
        integrals.
        """
        _, b, c, da = self.mesh.shape_parameters(elem_idx)
        msk = self.mesh.node_mask[self.mesh.elements[elem_idx]]
        lc = self.problem.length_conversion

        v = 0j
        for i in range(3):
            v -= msk[i] * (b[i] + 1j * c[i]) / (da * lc)
        return v

    def _check_kind(self) -> None:
        if not self.has_scalar_field:
            raise UnsupportedProblemKind(
                f"{self.problem.kind.value} problems carry no scalar field")

    def _flux_from_field(self, elem_idx: int, Ex: float, Ey: float,
                         node_idx: Optional[int] = None) -> complex:
        """
        Apply the material law of an element to a field (Ex, Ey) [per m].

        Args:
            elem_idx: element whose material applies
            Ex, Ey: negative gradient of the scalar field
            node_idx: node the field belongs to, None for the element itself
        """
        mat = self.material(elem_idx)
        if self.problem.kind == ProblemKind.ELECTROSTATICS:
            D = mat.ex * Ex * EPS0 + 1j * mat.ey * Ey * EPS0
            if node_idx is None:
                return D / self.aecf(elem_idx)
            x, y = self.mesh.nodes[node_idx]
            return D / self.aecf(elem_idx, complex(x, y))

        values = self.solution.node_values
        if node_idx is None:
            t = float(np.mean(values[self.mesh.elements[elem_idx]]))
        else:
            t = float(values[node_idx])
        k = mat.get_k(t)
        return k.real * Ex + 1j * k.imag * Ey

    # =========================================================================
    # Raw element flux
    # =========================================================================

    def compute_element_flux(self) -> np.ndarray:
        """
        Flux density of every element from its linear field.

        Returns:
            flux: shape (n_elements,), complex Dx + i Dy

        Raises:
            UnsupportedProblemKind: problem carries no scalar field
        """
        self._check_kind()
        mesh = self.mesh
        lc = self.problem.length_conversion
        values = self.solution.node_values

        flux = np.zeros(mesh.n_elements, dtype=np.complex128)
        for i in range(mesh.n_elements):
            _, b, c, da = mesh.shape_parameters(i)
            v = values[mesh.elements[i]]
            Ex = -np.dot(b, v) / (da * lc)
            Ey = -np.dot(c, v) / (da * lc)
            flux[i] = self._flux_from_field(i, Ex, Ey)

        return flux

    # =========================================================================
    # Nodal smoothing
    # =========================================================================

    def _ring_scan(self, elem_idx: int, j: int, ccw: bool, q: list):
        """
        Walk the elements around node j starting at elem_idx.

        Nodes met along the way are appended to q (up to max_ring_nodes).
        The walk stops at the first element of another material, or at a
        neighbour that is fixed when j is fixed too.

        Returns:
            index of the fixed neighbour that stopped the walk, or -1
        """
        mesh = self.mesh
        ring = mesh.con_list(j)
        num = len(ring)
        node_q = mesh.node_q
        j_fixed = node_q[j] != FREE_NODE
        cap = self.config.max_ring_nodes

        m = int(np.nonzero(ring == elem_idx)[0][0])
        for _ in range(num):
            n = ring[m]
            if not self.is_same_material(elem_idx, n):
                break

            p = mesh.elements[n]
            nos = int(np.nonzero(p == j)[0][0])
            # ccw walks take the node before j in the element, cw the one after
            nxt = p[(nos + 2) % 3] if ccw else p[(nos + 1) % 3]

            if len(q) < cap:
                q.append(nxt)

            if j_fixed and node_q[nxt] != FREE_NODE:
                return int(nxt)

            m = (m + 1) % num if ccw else (m - 1) % num

        return -1

    def _punt(self, j: int, lf: int, rt: int) -> bool:
        """
        Whether node j must use the raw element value.

        True at the end of a conductor, at an isolated fixed node, and at
        fixed-boundary corners sharper than the shallow-angle limit.
        """
        if self.mesh.node_is_free(j):
            return False
        if lf == -1 or rt == -1 or lf == rt:
            return True

        nodes = self.mesh.nodes
        zj = complex(*nodes[j])
        x = complex(*nodes[lf]) - zj
        y = zj - complex(*nodes[rt])
        x /= abs(x)
        y /= abs(y)
        limit = math.radians(self.config.shallow_angle_deg + SHALLOW_ANGLE_SLACK_DEG)
        return abs(cmath.phase(x / y)) > limit

    def _fit_plane(self, j: int, q: list) -> Optional[tuple]:
        """
        Least-squares plane through node j and its ring nodes q.

        Returns:
            (Ex, Ey) per meter, or None if the fit is degenerate
        """
        nodes = self.mesh.nodes
        values = self.solution.node_values
        idx = np.array(q + [j], dtype=np.int64)

        dx = nodes[idx, 0] - nodes[j, 0]
        dy = nodes[idx, 1] - nodes[j, 1]
        dv = values[j] - values[idx]

        A = np.array([
            [len(idx), dx.sum(), dy.sum()],
            [dx.sum(), np.dot(dx, dx), np.dot(dx, dy)],
            [dy.sum(), np.dot(dx, dy), np.dot(dy, dy)]
        ])
        rhs = np.array([dv.sum(), np.dot(dx, dv), np.dot(dy, dv)])

        scale = A[0, 0] * A[1, 1] * A[2, 2]
        if scale == 0 or abs(np.linalg.det(A)) <= DEGENERATE_FIT_TOL * scale:
            return None

        _, Ex, Ey = np.linalg.solve(A, rhs)
        lc = self.problem.length_conversion
        return Ex / lc, Ey / lc

    def get_nodal_d(self, elem_idx: int) -> np.ndarray:
        """
        Smoothed flux density at the three vertices of an element.

        Args:
            elem_idx: element index

        Returns:
            d: shape (3,), complex flux at p[0], p[1], p[2]

        Raises:
            UnsupportedProblemKind: problem carries no scalar field
        """
        self._check_kind()
        raw = self.solution.element_flux[elem_idx]
        d = np.full(3, raw, dtype=np.complex128)

        for i, j in enumerate(self.mesh.elements[elem_idx]):
            q = []
            rt = self._ring_scan(elem_idx, j, True, q)
            lf = self._ring_scan(elem_idx, j, False, q)

            if self._punt(j, lf, rt):
                continue

            field = self._fit_plane(j, q)
            if field is None:
                continue
            d[i] = self._flux_from_field(elem_idx, field[0], field[1], node_idx=j)

        return d

    def smooth_nodal_fields(self) -> np.ndarray:
        """
        Smoothed vertex flux of every element.

        Returns:
            nodal_flux: shape (n_elements, 3), also stored in
                solution.element_nodal_flux
        """
        self._check_kind()
        nodal = np.zeros((self.mesh.n_elements, 3), dtype=np.complex128)
        for i in range(self.mesh.n_elements):
            nodal[i] = self.get_nodal_d(i)
        self.solution.element_nodal_flux = nodal
        return nodal

    def get_point_d(self, x: float, y: float, elem_idx: int) -> complex:
        """
        Flux density at a point inside a known element.

        With smoothing off this is the raw element value; otherwise the
        smoothed vertex values are interpolated with the linear shape
        functions N_i = (a_i + b_i x + c_i y) / da.

        Args:
            x, y: point coordinates
            elem_idx: element containing the point

        Returns:
            D: complex flux density
        """
        self._check_kind()
        if not self.config.smooth:
            return complex(self.solution.element_flux[elem_idx])

        if self.solution.element_nodal_flux is not None:
            d = self.solution.element_nodal_flux[elem_idx]
        else:
            d = self.get_nodal_d(elem_idx)

        a, b, c, da = self.mesh.shape_parameters(elem_idx)
        D = 0j
        for i in range(3):
            D += d[i] * (a[i] + b[i] * x + c[i] * y) / da
        return complex(D)
