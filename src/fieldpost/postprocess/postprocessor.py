"""
PostProcessor
=============

Front end of the analysis engine. Owns the point locator, the region mask
solver, the user contour and the field reconstructor for one solved mesh,
and turns their failures into return values and warnings.
"""

import sys
from dataclasses import replace
import numpy as np
from typing import Callable, List, Optional

from ..assembly.mask_assembly import is_kosher, is_selection_on_axis
from ..config import PostProcessorConfig
from ..contour.contour_builder import ContourBuilder
from ..errors import (
    GeometryNotFound, InvalidSelection, SolverDivergence, UnsupportedProblemKind
)
from ..mesh.triangle_mesh import TriangleMesh
from ..problem.problem import ProblemDescription
from ..problem.solution import FieldSolution
from ..search.point_locator import PointLocator, in_triangle_test
from ..solvers.region_mask import RegionMaskSolver
from .field_reconstruction import FieldReconstructor


def print_warning(message: str) -> None:
    """Default warning channel."""
    print(f"WARNING: {message}", file=sys.stderr)


class PostProcessor:
    """
    Queries, selections and derived fields over a solved mesh.

    Example:
        >>> post = PostProcessor(mesh, problem, solution)
        >>> post.select_block_label(0.5, 0.5)
        >>> if post.make_mask():
        ...     v = post.henrotte_vector(0)

    Attributes:
        config: PostProcessorConfig instance
        locator: PointLocator
        mask_solver: RegionMaskSolver
        contour_builder: ContourBuilder
        reconstructor: FieldReconstructor
    """

    def __init__(self, mesh: TriangleMesh, problem: ProblemDescription,
                 solution: Optional[FieldSolution] = None,
                 config: Optional[PostProcessorConfig] = None,
                 warn: Optional[Callable[[str], None]] = None):
        """
        Initialize post-processor.

        Args:
            mesh: solved mesh
            problem: problem description the mesh was generated from
            solution: solved field values (None for geometry-only use)
            config: PostProcessorConfig, copied so that later changes stay
                local to this instance (default values if None)
            warn: warning callback (prints to stderr if None)
        """
        n_labels = len(problem.labels)
        if mesh.n_elements and (mesh.labels.min() < 0 or mesh.labels.max() >= n_labels):
            raise ValueError("Mesh element labels reference unknown block labels")
        n_materials = len(problem.materials)
        if mesh.n_elements and (mesh.blocks.min() < 0 or mesh.blocks.max() >= n_materials):
            raise ValueError("Mesh element blocks reference unknown materials")

        self._mesh = mesh
        self._problem = problem
        self.config = replace(config) if config is not None else PostProcessorConfig()
        self._warn = warn or print_warning

        self.locator = PointLocator(mesh)
        self.mask_solver = RegionMaskSolver(mesh, problem, self.config)
        self.contour_builder = ContourBuilder(problem, tol=self.config.coincidence_tol)

        self.solution = solution
        self.reconstructor = FieldReconstructor(mesh, problem, solution, self.config)
        if self.reconstructor.has_scalar_field:
            self.smooth_nodal_fields()

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def mesh(self) -> TriangleMesh:
        return self._mesh

    @property
    def problem(self) -> ProblemDescription:
        return self._problem

    @property
    def num_nodes(self) -> int:
        return self._mesh.n_nodes

    @property
    def num_elements(self) -> int:
        return self._mesh.n_elements

    @property
    def contour(self) -> List[complex]:
        return self.contour_builder.points

    @property
    def has_mask(self) -> bool:
        """Whether the node mask matches the current selection."""
        return self.mask_solver.valid

    def set_smoothing(self, value: bool) -> None:
        self.config.smooth = bool(value)

    def set_message_callback(self, warn: Optional[Callable[[str], None]]) -> None:
        """Replace the warning callback; None keeps the current one."""
        if warn is not None:
            self._warn = warn

    # =========================================================================
    # Point location
    # =========================================================================

    def locate(self, x: float, y: float) -> Optional[int]:
        """Element containing (x, y), or None."""
        return self.locator.locate(x, y)

    def in_triangle_test(self, x: float, y: float, elem_idx: int) -> bool:
        return in_triangle_test(self._mesh, x, y, elem_idx)

    # =========================================================================
    # Selection
    # =========================================================================

    def select_block_label(self, x: float, y: float) -> bool:
        """
        Toggle the selection of the block containing (x, y).

        Returns:
            True if an element contains the point
        """
        elem = self.locate(x, y)
        if elem is None:
            return False

        self.mask_solver.invalidate()
        self._problem.labels[self._mesh.labels[elem]].toggle_select()
        return True

    def select_conductor(self, idx: int) -> None:
        """Toggle the selection of every entity in conductor idx."""
        problem = self._problem
        for item in list(problem.nodes) + list(problem.segments) + list(problem.arcs):
            if item.in_conductor == idx:
                item.toggle_select()

        in_conductor = self._mesh.node_conductor == idx
        self._mesh.node_selected[in_conductor] = ~self._mesh.node_selected[in_conductor]
        self.mask_solver.invalidate()

    def clear_selection(self) -> None:
        """Unselect everything."""
        self._problem.unselect_all()
        self._mesh.node_selected[:] = False
        self.mask_solver.invalidate()

    def clear_block_selection(self) -> None:
        self.mask_solver.invalidate()
        for label in self._problem.labels:
            label.is_selected = False

    def toggle_selection_for_group(self, group: int) -> None:
        """Toggle the selection of all labels in a group (0 for all labels)."""
        for label in self._problem.labels:
            if group == 0 or label.in_group == group:
                label.toggle_select()
        self.mask_solver.invalidate()

    def is_selection_on_axis(self) -> bool:
        return is_selection_on_axis(self._mesh, self._problem, self.config.axis_tol)

    def is_kosher(self, node_idx: int) -> bool:
        return is_kosher(self._mesh, self._problem, node_idx, self.config.axis_tol)

    # =========================================================================
    # Region mask
    # =========================================================================

    def make_mask(self) -> bool:
        """
        Compute the node mask of the selected blocks.

        Returns:
            True on success; False if the selection is invalid (a warning is
            issued) or the solve did not converge
        """
        try:
            self.mask_solver.compute()
        except InvalidSelection as e:
            self._warn(str(e))
            return False
        except SolverDivergence as e:
            if self.config.verbose:
                print(f"Mask solve failed: {e}")
            return False
        return True

    def henrotte_vector(self, elem_idx: int) -> complex:
        return self.reconstructor.henrotte_vector(elem_idx)

    # =========================================================================
    # Contour
    # =========================================================================

    def add_contour_point(self, p: complex) -> None:
        self.contour_builder.add_point(p)

    def add_contour_point_from_node(self, x: float, y: float) -> None:
        self.contour_builder.add_point_from_node(x, y)

    def bend_contour(self, angle: float, angle_step: float) -> None:
        self.contour_builder.bend(angle, angle_step)

    def clear_contour(self) -> None:
        self.contour_builder.clear()

    # =========================================================================
    # Field reconstruction
    # =========================================================================

    def elm_area(self, elem_idx: int) -> float:
        return self._mesh.element_area(elem_idx)

    def ctr(self, elem_idx: int) -> complex:
        return self._mesh.element_center(elem_idx)

    def aecf(self, elem_idx: int, point: Optional[complex] = None) -> float:
        return self.reconstructor.aecf(elem_idx, point)

    def is_same_material(self, e1: int, e2: int) -> bool:
        return self.reconstructor.is_same_material(e1, e2)

    def smooth_nodal_fields(self) -> bool:
        """
        Recompute the smoothed vertex flux of every element.

        Returns:
            False if there is no scalar field to smooth
        """
        try:
            self.reconstructor.smooth_nodal_fields()
        except UnsupportedProblemKind:
            return False
        return True

    def get_nodal_d(self, elem_idx: int) -> Optional[np.ndarray]:
        """
        Smoothed flux density at the vertices of an element.

        Returns:
            shape (3,) complex array, or None without a scalar field
        """
        try:
            return self.reconstructor.get_nodal_d(elem_idx)
        except UnsupportedProblemKind:
            return None

    def get_point_d(self, x: float, y: float,
                    elem_idx: Optional[int] = None) -> Optional[complex]:
        """
        Flux density at (x, y).

        Args:
            x, y: point coordinates
            elem_idx: element containing the point (located if None)

        Returns:
            complex flux density, or None without a scalar field or when
            the point lies outside the mesh
        """
        try:
            if elem_idx is None:
                elem_idx = self.locator.find(x, y)
            return self.reconstructor.get_point_d(x, y, elem_idx)
        except (GeometryNotFound, UnsupportedProblemKind):
            return None
