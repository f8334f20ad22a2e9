"""
Triangle Mesh
=============

Node and element storage of a solved mesh, with node adjacency rings and
boundary edge markers.
"""

import numpy as np
from typing import Optional

from ..config import FREE_NODE
from .adjacency import build_node_adjacency, find_boundary_edges


class TriangleMesh:
    """
    Solved triangular mesh.

    Node and element indices are stable for the life of the mesh. Only the
    mask values and node selection flags change after construction.

    Attributes:
        nodes: np.ndarray, shape (n_nodes, 2)
            Node coordinates
        elements: np.ndarray, shape (n_elements, 3)
            Node indices for each element (counterclockwise)
        labels: np.ndarray, shape (n_elements,)
            Block label index of each element
        blocks: np.ndarray, shape (n_elements,)
            Material index of each element
        node_q: np.ndarray, shape (n_nodes,)
            FREE_NODE for unconstrained nodes, anything else for nodes
            with a prescribed value
        node_conductor: np.ndarray, shape (n_nodes,)
            Conductor index of each node, -1 for none
        node_mask: np.ndarray, shape (n_nodes,)
            Region mask value (0 or 1), written by the mask solver
        node_selected: np.ndarray, shape (n_nodes,)
            Node selection flags
        centroids: np.ndarray, shape (n_elements, 2)
        rsqr: np.ndarray, shape (n_elements,)
            Squared radius of the circle about the centroid enclosing the element
        element_areas: np.ndarray, shape (n_elements,)
            Signed element areas (positive for counterclockwise elements)
        neighbor_markers: np.ndarray, shape (n_elements, 3)
            1 where the edge opposite local node j is on the boundary

    Edge Convention:
        Edge j of element (n0, n1, n2) runs from p[(j+1) % 3] to p[(j+2) % 3],
        i.e. edge j is opposite to node j.
    """

    def __init__(self, nodes: np.ndarray, elements: np.ndarray,
                 labels: Optional[np.ndarray] = None,
                 blocks: Optional[np.ndarray] = None,
                 node_q: Optional[np.ndarray] = None,
                 node_conductor: Optional[np.ndarray] = None):
        """
        Initialize mesh and compute all connectivity.

        Args:
            nodes: shape (n_nodes, 2), node coordinates
            elements: shape (n_elements, 3), node indices for each element
            labels: shape (n_elements,), block label of each element (default 0)
            blocks: shape (n_elements,), material of each element (default 0)
            node_q: shape (n_nodes,), fixed-value markers (default all free)
            node_conductor: shape (n_nodes,), conductor indices (default -1)
        """
        self.nodes = np.asarray(nodes, dtype=np.float64)
        self.elements = np.asarray(elements, dtype=np.int64)

        # Validate input
        if self.nodes.ndim != 2 or self.nodes.shape[1] != 2:
            raise ValueError("nodes must have shape (n_nodes, 2)")
        if self.elements.ndim != 2 or self.elements.shape[1] != 3:
            raise ValueError("elements must have shape (n_elements, 3)")
        if self.elements.size and (self.elements.min() < 0 or
                                   self.elements.max() >= self.n_nodes):
            raise ValueError("elements reference nodes that do not exist")

        self.labels = self._per_element(labels, "labels")
        self.blocks = self._per_element(blocks, "blocks")

        if node_q is None:
            self.node_q = np.full(self.n_nodes, FREE_NODE, dtype=np.float64)
        else:
            self.node_q = np.asarray(node_q, dtype=np.float64)
        if node_conductor is None:
            self.node_conductor = np.full(self.n_nodes, -1, dtype=np.int64)
        else:
            self.node_conductor = np.asarray(node_conductor, dtype=np.int64)
        if len(self.node_q) != self.n_nodes or len(self.node_conductor) != self.n_nodes:
            raise ValueError("node arrays must have length n_nodes")

        self.node_mask = np.zeros(self.n_nodes, dtype=np.int8)
        self.node_selected = np.zeros(self.n_nodes, dtype=bool)

        self._compute_geometric_quantities()
        self._build_adjacency()
        self.rebuild_boundary_markers()

    def _per_element(self, values: Optional[np.ndarray], name: str) -> np.ndarray:
        if values is None:
            return np.zeros(self.n_elements, dtype=np.int64)
        values = np.asarray(values, dtype=np.int64)
        if values.shape != (self.n_elements,):
            raise ValueError(f"{name} must have shape (n_elements,)")
        return values

    @property
    def n_nodes(self) -> int:
        """Number of nodes in the mesh."""
        return len(self.nodes)

    @property
    def n_elements(self) -> int:
        """Number of elements in the mesh."""
        return len(self.elements)

    def _compute_geometric_quantities(self) -> None:
        """Compute centroids, enclosing radii and areas."""
        X = self.nodes[self.elements]            # (n_elements, 3, 2)
        self.centroids = X.mean(axis=1)
        self.rsqr = np.max(np.sum((X - self.centroids[:, None, :]) ** 2, axis=2), axis=1)
        self.element_areas = np.array([self.element_area(i)
                                       for i in range(self.n_elements)])

    def _build_adjacency(self) -> None:
        """Build node-to-element rings."""
        self.adjacency_offsets, self.adjacency_indices = build_node_adjacency(
            self.nodes, self.elements, self.centroids)

    def rebuild_boundary_markers(self) -> None:
        """
        Recompute the boundary edge markers from the adjacency rings.

        Idempotent; markers are reset before recomputation.
        """
        self.neighbor_markers = find_boundary_edges(
            self.elements, self.adjacency_offsets, self.adjacency_indices)

    @property
    def num_list(self) -> np.ndarray:
        """Number of elements around each node."""
        return np.diff(self.adjacency_offsets)

    def con_list(self, node_idx: int) -> np.ndarray:
        """
        Return the elements around a node, counterclockwise.

        Args:
            node_idx: node index

        Returns:
            element_indices: view into the contiguous adjacency storage
        """
        return self.adjacency_indices[self.adjacency_offsets[node_idx]:
                                      self.adjacency_offsets[node_idx + 1]]

    def element_area(self, elem_idx: int) -> float:
        """
        Signed area of an element.

        A = (b0*c1 - b1*c0) / 2 with b_i, c_i the shape function parameters.
        """
        n = self.elements[elem_idx]
        b0 = self.nodes[n[1], 1] - self.nodes[n[2], 1]
        b1 = self.nodes[n[2], 1] - self.nodes[n[0], 1]
        c0 = self.nodes[n[2], 0] - self.nodes[n[1], 0]
        c1 = self.nodes[n[0], 0] - self.nodes[n[2], 0]
        return (b0 * c1 - b1 * c0) / 2.

    def element_center(self, elem_idx: int) -> complex:
        """Centroid of an element as a complex number x + iy."""
        cx, cy = self.centroids[elem_idx]
        return complex(cx, cy)

    def shape_parameters(self, elem_idx: int):
        """
        Linear shape function parameters of an element.

        N_i = (a_i + b_i*x + c_i*y) / da, for cyclic (i, j, k):
            a_i = x_j*y_k - x_k*y_j
            b_i = y_j - y_k
            c_i = x_k - x_j
        and da = b_0*c_1 - b_1*c_0 (twice the signed area).

        Returns:
            a, b, c: shape (3,) each
            da: float
        """
        X = self.nodes[self.elements[elem_idx]]
        a = np.array([
            X[1, 0] * X[2, 1] - X[2, 0] * X[1, 1],
            X[2, 0] * X[0, 1] - X[0, 0] * X[2, 1],
            X[0, 0] * X[1, 1] - X[1, 0] * X[0, 1]
        ])
        b = np.array([
            X[1, 1] - X[2, 1],
            X[2, 1] - X[0, 1],
            X[0, 1] - X[1, 1]
        ])
        c = np.array([
            X[2, 0] - X[1, 0],
            X[0, 0] - X[2, 0],
            X[1, 0] - X[0, 0]
        ])
        da = b[0] * c[1] - b[1] * c[0]
        return a, b, c, da

    @property
    def boundary_nodes(self) -> np.ndarray:
        """Indices of nodes lying on a boundary edge."""
        boundary_node_set = set()
        for i, j in zip(*np.nonzero(self.neighbor_markers)):
            boundary_node_set.add(self.elements[i, (j + 1) % 3])
            boundary_node_set.add(self.elements[i, (j + 2) % 3])
        return np.array(sorted(boundary_node_set), dtype=np.int64)

    def node_is_free(self, node_idx: int) -> bool:
        """Check if a node carries no prescribed value."""
        return self.node_q[node_idx] == FREE_NODE

    def bandwidth(self) -> int:
        """Largest node index difference along any element edge, plus one."""
        if self.n_elements == 0:
            return 1
        e = self.elements
        d = np.abs(e - np.roll(e, -1, axis=1))
        return int(d.max()) + 1
