"""
Solved Field Payload
====================

Per-node scalar solution and per-element flux of a solved problem. The
payload kind is fixed when the solution is loaded.
"""

import numpy as np
from typing import Optional

from .problem import ProblemKind


class FieldSolution:
    """
    Solution values attached to a mesh.

    Attributes:
        kind: problem kind the values belong to
        node_values: shape (n_nodes,), potential [V] or temperature [K];
            empty for problem kinds without a scalar field
        element_flux: shape (n_elements,), complex raw element flux
            density Dx + i Dy (None until computed)
        element_nodal_flux: shape (n_elements, 3), complex smoothed flux
            at each element vertex (None until computed)
    """

    def __init__(self, kind: ProblemKind,
                 node_values: Optional[np.ndarray] = None,
                 element_flux: Optional[np.ndarray] = None):
        """
        Initialize solution payload.

        Args:
            kind: problem kind
            node_values: per-node scalar values (required for scalar kinds)
            element_flux: per-element raw flux; derived from the nodal
                values when omitted
        """
        self.kind = kind

        if kind.has_scalar_field and node_values is None:
            raise ValueError(f"{kind.value} solutions need node_values")
        if node_values is None:
            self.node_values = np.zeros(0)
        else:
            self.node_values = np.asarray(node_values, dtype=np.float64)
            if self.node_values.ndim != 1:
                raise ValueError("node_values must be one-dimensional")

        self.element_flux = (None if element_flux is None
                             else np.asarray(element_flux, dtype=np.complex128))
        self.element_nodal_flux = None

    @property
    def has_scalar_field(self) -> bool:
        return self.kind.has_scalar_field

    def validate(self, n_nodes: int, n_elements: int) -> None:
        """Check array sizes against a mesh."""
        if self.has_scalar_field and len(self.node_values) != n_nodes:
            raise ValueError(f"node_values has wrong size: {len(self.node_values)} != {n_nodes}")
        if self.element_flux is not None and len(self.element_flux) != n_elements:
            raise ValueError(f"element_flux has wrong size: {len(self.element_flux)} != {n_elements}")
