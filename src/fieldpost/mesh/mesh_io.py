"""
Mesh I/O Functions
==================

Read solved meshes and write derived fields through meshio.
"""

import numpy as np
from typing import Dict, Optional

from .triangle_mesh import TriangleMesh


def read_mesh(filename: str, label_key: Optional[str] = None) -> TriangleMesh:
    """
    Read a triangle mesh file and return TriangleMesh.

    Any format meshio understands is accepted. Block labels are taken from
    the triangle cell data named ``label_key``; when it is not given,
    "label" and then "gmsh:physical" are tried.

    A "label" array, as written by write_vtk, is used as is. Tags from any
    other array (gmsh physical groups usually start at 1) are renumbered
    0, 1, ... in ascending tag order, so block label k is the k-th
    smallest tag.

    Args:
        filename: path to mesh file
        label_key: cell data array holding block labels

    Returns:
        TriangleMesh instance
    """
    import meshio

    mesh_data = meshio.read(filename)
    nodes = mesh_data.points[:, :2]

    elements = None
    block_idx = None
    for idx, cell_block in enumerate(mesh_data.cells):
        if cell_block.type == "triangle":
            elements = cell_block.data
            block_idx = idx
            break

    if elements is None:
        raise ValueError("No triangle elements found in mesh file")

    keys = [label_key] if label_key else ["label", "gmsh:physical"]
    labels = None
    for key in keys:
        if key in mesh_data.cell_data:
            labels = np.asarray(mesh_data.cell_data[key][block_idx], dtype=np.int64)
            if key != "label":
                _, labels = np.unique(labels, return_inverse=True)
                labels = labels.astype(np.int64)
            break
    if label_key and labels is None:
        raise ValueError(f"Cell data '{label_key}' not found in mesh file")

    return TriangleMesh(nodes, elements, labels=labels, blocks=labels)


def write_vtk(mesh: TriangleMesh, filename: str,
              node_data: Optional[Dict[str, np.ndarray]] = None,
              cell_data: Optional[Dict[str, np.ndarray]] = None) -> None:
    """
    Write mesh and fields for ParaView.

    Complex-valued fields (flux densities) are written as 2-component
    vectors. Block labels and the region mask are always written.

    Args:
        mesh: TriangleMesh instance
        filename: output filename (should end with .vtk or .vtu)
        node_data: dict of node-based scalar fields
        cell_data: dict of element-based scalar or complex fields
    """
    import meshio

    points = np.column_stack([mesh.nodes, np.zeros(mesh.n_nodes)])
    cells = [("triangle", mesh.elements)]

    point_data = {"mask": mesh.node_mask.astype(np.float64)}
    for name, data in (node_data or {}).items():
        point_data[name] = _as_vtk_array(data)

    cell_data_dict = {"label": [mesh.labels]}
    for name, data in (cell_data or {}).items():
        cell_data_dict[name] = [_as_vtk_array(data)]

    meshio_mesh = meshio.Mesh(
        points=points,
        cells=cells,
        point_data=point_data,
        cell_data=cell_data_dict
    )
    meshio.write(filename, meshio_mesh)


def _as_vtk_array(data: np.ndarray) -> np.ndarray:
    data = np.asarray(data)
    if np.iscomplexobj(data):
        return np.column_stack([data.real, data.imag, np.zeros(len(data))])
    return data.astype(np.float64)
