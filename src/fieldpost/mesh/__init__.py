"""
Mesh Module
===========

Triangle mesh with node adjacency rings and boundary edge markers.
"""

from .triangle_mesh import TriangleMesh
from .adjacency import build_node_adjacency, find_boundary_edges
from .mesh_io import read_mesh, write_vtk
from .mesh_generators import (
    create_rectangle_mesh,
    create_single_element,
    create_two_element_patch,
    perturb_interior_nodes,
)

__all__ = [
    "TriangleMesh",
    "build_node_adjacency",
    "find_boundary_edges",
    "read_mesh",
    "write_vtk",
    "create_rectangle_mesh",
    "create_single_element",
    "create_two_element_patch",
    "perturb_interior_nodes",
]
