"""
Node Adjacency and Boundary Edges
=================================

Derives the node-to-element rings and the per-edge boundary markers from
raw triangle connectivity.
"""

import numpy as np
from typing import Tuple


# Local edge j of an element runs from p[(j+1) % 3] to p[(j+2) % 3]
PLUS1MOD3 = (1, 2, 0)
MINUS1MOD3 = (2, 0, 1)


def build_node_adjacency(nodes: np.ndarray, elements: np.ndarray,
                         centroids: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build the incident-element ring of every node.

    The rings are stored contiguously (CSR layout): the elements around node
    i are ``indices[offsets[i]:offsets[i+1]]``, ordered counter-clockwise by
    the angle of each element centroid seen from the node.

    Args:
        nodes: shape (n_nodes, 2), node coordinates
        elements: shape (n_elements, 3), node indices for each element
        centroids: shape (n_elements, 2), element centroids

    Returns:
        offsets: shape (n_nodes + 1,)
        indices: shape (3 * n_elements,), element indices
    """
    n_nodes = len(nodes)
    flat_nodes = elements.ravel()
    elem_ids = np.arange(flat_nodes.size, dtype=np.int64) // 3

    d = centroids[elem_ids] - nodes[flat_nodes]
    angles = np.arctan2(d[:, 1], d[:, 0])

    # Primary key node, secondary key angle
    order = np.lexsort((angles, flat_nodes))
    indices = elem_ids[order]

    counts = np.bincount(flat_nodes, minlength=n_nodes)
    offsets = np.zeros(n_nodes + 1, dtype=np.int64)
    offsets[1:] = np.cumsum(counts)

    return offsets, indices


def find_boundary_edges(elements: np.ndarray, offsets: np.ndarray,
                        indices: np.ndarray) -> np.ndarray:
    """
    Mark the boundary edges of every element.

    Edge j of element i is interior (0) when another element around the
    edge's origin node also contains the edge's destination node, and a
    boundary edge (1) otherwise. All markers are reset before the search.

    Args:
        elements: shape (n_elements, 3), node indices for each element
        offsets, indices: node adjacency from build_node_adjacency

    Returns:
        markers: shape (n_elements, 3), 1 for boundary edges
    """
    n_elements = len(elements)
    markers = np.zeros((n_elements, 3), dtype=np.int8)

    for i in range(n_elements):
        for j in range(3):
            org = elements[i, PLUS1MOD3[j]]
            dest = elements[i, MINUS1MOD3[j]]
            done = False
            for ei in indices[offsets[org]:offsets[org + 1]]:
                if ei == i:
                    continue
                if dest in elements[ei]:
                    done = True
                    break
            if not done:
                markers[i, j] = 1

    return markers
