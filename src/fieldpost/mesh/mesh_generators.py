"""
Mesh Generators
===============

Structured triangle meshes of a rectangle, used by the tests and examples
as stand-ins for solver output.
"""

import numpy as np
from typing import Callable, Optional, Tuple

from .triangle_mesh import TriangleMesh


def _split_quads(n00, n10, n11, n01, flip):
    """
    Two counterclockwise triangles per grid cell.

    Cells with flip set are cut along the n10-n01 diagonal, the others
    along n00-n11.
    """
    lower = np.where(flip[:, None],
                     np.column_stack([n00, n10, n01]),
                     np.column_stack([n00, n10, n11]))
    upper = np.where(flip[:, None],
                     np.column_stack([n10, n11, n01]),
                     np.column_stack([n00, n11, n01]))
    return np.stack([lower, upper], axis=1).reshape(-1, 3)


def create_rectangle_mesh(Lx: float, Ly: float, nx: int, ny: int,
                          pattern: str = 'right',
                          origin: Tuple[float, float] = (0.0, 0.0),
                          label_func: Optional[Callable[[float, float], int]] = None,
                          block_func: Optional[Callable[[float, float], int]] = None
                          ) -> TriangleMesh:
    """
    Triangulate the rectangle [x0, x0 + Lx] x [y0, y0 + Ly].

    Grid nodes are numbered row by row from the lower-left corner, and the
    triangles of each cell are numbered together, so element and node
    bandwidth stays at about one grid row.

    Args:
        Lx, Ly: rectangle size
        nx, ny: number of cells along x and y
        pattern: how cells are cut
            'right': along the lower-left to upper-right diagonal
            'left': along the lower-right to upper-left diagonal
            'alternating': checkerboard of the two
            'crossed': four triangles around an added cell-center node
        origin: lower-left corner (x0, y0)
        label_func: function(cx, cy) -> block label index, evaluated at
            each element centroid (default: label 0 everywhere)
        block_func: function(cx, cy) -> material index (default: same as
            the label)

    Returns:
        TriangleMesh instance
    """
    x0, y0 = origin
    xs = x0 + np.arange(nx + 1) * Lx / nx
    ys = y0 + np.arange(ny + 1) * Ly / ny
    X, Y = np.meshgrid(xs, ys)
    nodes = np.column_stack([X.ravel(), Y.ravel()])

    # Cell corners, cells in row-major order
    ci, cj = np.meshgrid(np.arange(nx), np.arange(ny))
    ci, cj = ci.ravel(), cj.ravel()
    n00 = cj * (nx + 1) + ci
    n10 = n00 + 1
    n01 = n00 + nx + 1
    n11 = n01 + 1

    if pattern == 'right':
        elements = _split_quads(n00, n10, n11, n01, np.zeros(len(n00), dtype=bool))
    elif pattern == 'left':
        elements = _split_quads(n00, n10, n11, n01, np.ones(len(n00), dtype=bool))
    elif pattern == 'alternating':
        elements = _split_quads(n00, n10, n11, n01, (ci + cj) % 2 == 1)
    elif pattern == 'crossed':
        centers = np.column_stack([x0 + (ci + 0.5) * Lx / nx,
                                   y0 + (cj + 0.5) * Ly / ny])
        mid = len(nodes) + np.arange(len(n00))
        nodes = np.vstack([nodes, centers])
        elements = np.stack([
            np.column_stack([n00, n10, mid]),
            np.column_stack([n10, n11, mid]),
            np.column_stack([n11, n01, mid]),
            np.column_stack([n01, n00, mid]),
        ], axis=1).reshape(-1, 3)
    else:
        raise ValueError(f"Unknown pattern: {pattern}")

    centroids = nodes[elements].mean(axis=1)
    labels = blocks = None
    if label_func is not None:
        labels = np.array([label_func(cx, cy) for cx, cy in centroids], dtype=np.int64)
        blocks = labels.copy()
    if block_func is not None:
        blocks = np.array([block_func(cx, cy) for cx, cy in centroids], dtype=np.int64)

    return TriangleMesh(nodes, elements.astype(np.int64), labels=labels, blocks=blocks)


def create_single_element(node_coords: Optional[np.ndarray] = None) -> TriangleMesh:
    """One triangle, (0,0), (1,0), (0,1) unless other corners are given."""
    if node_coords is None:
        node_coords = [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]
    return TriangleMesh(np.asarray(node_coords, dtype=np.float64), [[0, 1, 2]])


def create_two_element_patch() -> TriangleMesh:
    """Unit square cut along (0,0)-(1,1): elements (0,1,2) and (0,2,3)."""
    square = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]
    return TriangleMesh(np.array(square), [[0, 1, 2], [0, 2, 3]])


def perturb_interior_nodes(mesh: TriangleMesh, magnitude: float = 0.1,
                           seed: Optional[int] = None) -> TriangleMesh:
    """
    Copy of a mesh with its interior nodes moved at random.

    Each coordinate moves by at most magnitude times the shortest element
    edge. Labels, blocks and node markers are carried over.

    Args:
        mesh: input mesh
        magnitude: largest shift as a fraction of the shortest edge
        seed: random seed

    Returns:
        new TriangleMesh
    """
    rng = np.random.default_rng(seed)

    X = mesh.nodes[mesh.elements]
    h = np.linalg.norm(X - np.roll(X, -1, axis=1), axis=2).min()

    interior = np.ones(mesh.n_nodes, dtype=bool)
    interior[mesh.boundary_nodes] = False

    nodes = mesh.nodes.copy()
    nodes[interior] += rng.uniform(-magnitude * h, magnitude * h,
                                   size=(int(interior.sum()), 2))

    return TriangleMesh(nodes, mesh.elements.copy(),
                        labels=mesh.labels.copy(), blocks=mesh.blocks.copy(),
                        node_q=mesh.node_q.copy(),
                        node_conductor=mesh.node_conductor.copy())
