"""
Mask Assembly
=============

Fixed values and weighted-Laplacian system for the region mask.

The mask is the solution of a Laplace problem that is 1 on the selected
blocks and 0 on the outer boundary and on every other non-air block. Solving
for it instead of marking elements directly gives a smooth indicator that
does not follow the jagged element boundaries.
"""

import numpy as np
from typing import TYPE_CHECKING

from ..config import FREE_NODE
from ..errors import InvalidSelection
from ..mesh.adjacency import PLUS1MOD3, MINUS1MOD3
from ..problem.problem import ProblemKind

if TYPE_CHECKING:
    from ..mesh.triangle_mesh import TriangleMesh
    from ..problem.problem import ProblemDescription
    from ..solvers.linear_system import SparseLinearSystem


def air_label_flags(problem: 'ProblemDescription') -> np.ndarray:
    """
    Classify every block label by its material.

    Returns:
        flags: shape (n_labels,), 0 for air labels, 1 for all others
    """
    return np.array([0 if problem.label_material(i).is_air() else 1
                     for i in range(len(problem.labels))], dtype=np.int64)


def is_selection_on_axis(mesh: 'TriangleMesh', problem: 'ProblemDescription',
                         axis_tol: float = 1e-6) -> bool:
    """Whether a selected block of an axisymmetric problem touches r = 0."""
    if not problem.is_axisymmetric:
        return False

    for i in range(mesh.n_elements):
        if problem.labels[mesh.labels[i]].is_selected:
            if np.any(mesh.nodes[mesh.elements[i], 0] < axis_tol):
                return True
    return False


def is_kosher(mesh: 'TriangleMesh', problem: 'ProblemDescription', k: int,
              axis_tol: float = 1e-6) -> bool:
    """
    Whether node k may be fixed to zero as an outer boundary node.

    In an axisymmetric problem whose selection lies along r = 0, a node on
    the axis is only an end of the axis span if at most one other axis node
    shares an element with it. Interior axis nodes must stay free.

    Returns:
        True if it is OK to fix the node to zero
    """
    if not problem.is_axisymmetric or mesh.nodes[k, 0] > axis_tol:
        return True

    score = 0
    for e in mesh.con_list(k):
        for n in mesh.elements[e]:
            if n != k and mesh.nodes[n, 0] < axis_tol:
                score += 1
                if score > 1:
                    return False
    return True


def classify_fixed_values(mesh: 'TriangleMesh', problem: 'ProblemDescription',
                          lbl_flags: np.ndarray, axis_tol: float = 1e-6,
                          coincidence_tol: float = 1e-8) -> np.ndarray:
    """
    Prescribed mask values for every node.

    Args:
        mesh: TriangleMesh instance
        problem: ProblemDescription instance
        lbl_flags: air classification from air_label_flags
        axis_tol: on-axis radius tolerance
        coincidence_tol: distance for matching point sources to nodes

    Returns:
        V: shape (n_nodes,), -1 for free nodes, otherwise the fixed value
    """
    V = np.where(mesh.node_q != FREE_NODE, 0.0, -1.0)

    on_axis = is_selection_on_axis(mesh, problem, axis_tol)

    # Outer boundary nodes are zero
    for i, j in zip(*np.nonzero(mesh.neighbor_markers)):
        for k in (mesh.elements[i, PLUS1MOD3[j]], mesh.elements[i, MINUS1MOD3[j]]):
            if not on_axis or is_kosher(mesh, problem, k, axis_tol):
                V[k] = 0.0

    # Non-air blocks first, so that a selected block sharing nodes with one
    # is always detected by check_selection
    selected = np.array([problem.labels[l].is_selected for l in mesh.labels], dtype=bool)
    non_air = lbl_flags[mesh.labels] != 0
    for i in np.nonzero(~selected & non_air)[0]:
        V[mesh.elements[i]] = 0.0
    for i in np.nonzero(selected)[0]:
        V[mesh.elements[i]] = 1.0

    # Point sources outside the selection would spoil the integrals
    sources = [n.cc() for n in problem.nodes if n.point_property >= 0]
    if sources:
        z = mesh.nodes[:, 0] + 1j * mesh.nodes[:, 1]
        for p in sources:
            hits = np.nonzero(np.abs(z - p) < coincidence_tol)[0]
            for i in hits:
                if V[i] < 0:
                    V[i] = 0.0

    if problem.kind == ProblemKind.ELECTROSTATICS:
        V[mesh.node_selected] = 1.0

    return V


def check_selection(mesh: 'TriangleMesh', problem: 'ProblemDescription',
                    lbl_flags: np.ndarray, V: np.ndarray) -> None:
    """
    Reject a selection that abuts a region which is not free space.

    Every node of an unselected non-air element must be fixed at zero.

    Raises:
        InvalidSelection
    """
    for i in range(mesh.n_elements):
        lbl = mesh.labels[i]
        if not problem.labels[lbl].is_selected and lbl_flags[lbl]:
            if np.count_nonzero(V[mesh.elements[i]] == 0) < 3:
                raise InvalidSelection(
                    "The selected region is invalid. A valid selection\n"
                    "cannot abut a region which is not free space.")


def element_mask_matrix(mesh: 'TriangleMesh', problem: 'ProblemDescription',
                        elem_idx: int) -> np.ndarray:
    """
    Weighted Laplacian of one element.

    Me_jk = v * (p_j p_k + q_j q_k) / A, where p and q are the shape
    function parameters and v is the square root of the region's maximum
    element area, or of the element area itself when the region has none.

    Returns:
        Me: shape (3, 3)
    """
    _, p, q, da = mesh.shape_parameters(elem_idx)
    area = abs(da) / 2.

    v = problem.labels[mesh.labels[elem_idx]].max_area
    v = np.sqrt(area) if v <= 0 else np.sqrt(v)

    return v * (np.outer(p, p) + np.outer(q, q)) / area


def assemble_mask_system(mesh: 'TriangleMesh', problem: 'ProblemDescription',
                         system: 'SparseLinearSystem') -> None:
    """
    Assemble the mask problem into a linear system.

    Prescribed values in system.V are condensed out element by element:
    their couplings move to the right-hand side and only the diagonal is
    kept, so the solve returns exactly the prescribed value for them.

    Args:
        mesh: TriangleMesh instance
        problem: ProblemDescription instance
        system: SparseLinearSystem with V holding the prescribed values
    """
    V = system.V

    for i in range(mesh.n_elements):
        n = mesh.elements[i]
        Me = element_mask_matrix(mesh, problem, i)
        be = np.zeros(3)

        for j in range(3):
            if V[n[j]] >= 0:
                for k in range(3):
                    if j != k:
                        be[k] -= Me[k, j] * V[n[j]]
                        Me[k, j] = 0
                        Me[j, k] = 0
                be[j] = V[n[j]] * Me[j, j]

        for j in range(3):
            for k in range(j, 3):
                if Me[j, k] != 0:
                    system.put(system.get(n[j], n[k]) + Me[j, k], n[j], n[k])
            system.b[n[j]] += be[j]
