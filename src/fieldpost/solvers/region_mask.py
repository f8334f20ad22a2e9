"""
Region Mask Solver
==================

Classifies mesh nodes as inside (1) or outside (0) the selected blocks by
thresholding a smooth harmonic indicator field.
"""

import numpy as np
from typing import Optional, TYPE_CHECKING

from ..assembly.mask_assembly import (
    air_label_flags,
    classify_fixed_values,
    check_selection,
    assemble_mask_system,
)
from ..config import PostProcessorConfig
from ..errors import SolverDivergence
from .linear_system import SparseLinearSystem

if TYPE_CHECKING:
    from ..mesh.triangle_mesh import TriangleMesh
    from ..problem.problem import ProblemDescription


class RegionMaskSolver:
    """
    Cached region mask of a mesh.

    At most one mask is valid at a time. Any change of the block or group
    selection must call invalidate(); the next compute() then rebuilds the
    mask from scratch.

    Attributes:
        mesh: TriangleMesh instance (node_mask is written here)
        problem: ProblemDescription instance
        config: PostProcessorConfig instance
        valid: whether mesh.node_mask holds the mask of the current selection
        solution: raw indicator field of the last successful solve
    """

    def __init__(self, mesh: 'TriangleMesh', problem: 'ProblemDescription',
                 config: Optional[PostProcessorConfig] = None):
        self.mesh = mesh
        self.problem = problem
        self.config = config or PostProcessorConfig()
        self.valid = False
        self.solution: Optional[np.ndarray] = None

    def invalidate(self) -> None:
        """Mark the mask as out of date."""
        self.valid = False

    def compute(self) -> None:
        """
        Compute the mask unless a valid one exists.

        Algorithm:
            1. Classify labels as air / non-air
            2. Fix outer boundary, non-air and point-source nodes to 0 and
               selected-block nodes to 1
            3. Reject selections that abut non-air blocks
            4. Assemble the weighted Laplacian and solve with PCG
            5. Threshold the solution

        Raises:
            InvalidSelection: selection abuts a non-air block
            SolverDivergence: the sparse solve did not converge
        """
        if self.valid:
            return

        mesh, problem, config = self.mesh, self.problem, self.config

        lbl_flags = air_label_flags(problem)
        V = classify_fixed_values(mesh, problem, lbl_flags,
                                  axis_tol=config.axis_tol,
                                  coincidence_tol=config.coincidence_tol)
        check_selection(mesh, problem, lbl_flags, V)

        bw = mesh.bandwidth()
        system = SparseLinearSystem(mesh.n_nodes, bw, tol=config.solver_tol,
                                    max_iter=config.solver_max_iter)
        system.V = V

        if config.verbose:
            n_fixed = int(np.count_nonzero(V >= 0))
            print(f"Mask: {mesh.n_nodes} nodes, {n_fixed} fixed, bandwidth {bw}")

        assemble_mask_system(mesh, problem, system)

        if not system.solve():
            raise SolverDivergence(
                f"Mask solve did not converge after {system.n_iterations} iterations")

        if config.verbose:
            print(f"  Converged in {system.n_iterations} iterations")

        self.solution = system.V
        mesh.node_mask[:] = np.where(system.V > config.mask_threshold, 1, 0)
        self.valid = True
