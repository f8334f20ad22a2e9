"""
Solvers Module
==============

Sparse linear system and region mask solver.
"""

from .linear_system import SparseLinearSystem
from .region_mask import RegionMaskSolver

__all__ = ["SparseLinearSystem", "RegionMaskSolver"]
