"""
Mask and Flux Example
=====================

Parallel plate capacitor with a dielectric block between the plates.
Shows point flux queries, region mask construction for the block and
the Henrotte weighting vectors used by weighted stress tensor
integrals.
"""

import numpy as np
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fieldpost import PostProcessor, PostProcessorConfig
from fieldpost.config import LengthUnit
from fieldpost.mesh import create_rectangle_mesh
from fieldpost.problem import (
    ProblemDescription, BlockLabel, GeometryNode, Segment,
    ElectrostaticMaterial, FieldSolution, ProblemKind
)


def build_capacitor(nx=40, ny=20, voltage=100.0):
    """Plates at y = 0 and y = 1 cm, dielectric block in the middle."""
    Lx, Ly = 4.0, 1.0
    mesh = create_rectangle_mesh(
        Lx, Ly, nx, ny,
        label_func=lambda x, y: 1 if 1.5 < x < 2.5 and 0.25 < y < 0.75 else 0
    )

    x, y = mesh.nodes.T
    bottom = np.isclose(y, 0.0)
    top = np.isclose(y, Ly)
    mesh.node_q[bottom | top] = 0.0
    mesh.node_conductor[top] = 0

    problem = ProblemDescription(
        materials=[ElectrostaticMaterial(name="air"),
                   ElectrostaticMaterial(name="dielectric", ex=4.0, ey=4.0)],
        labels=[BlockLabel(0.1, 0.1, block_type=0), BlockLabel(2.0, 0.5, block_type=1)],
        nodes=[GeometryNode(0.0, 0.0), GeometryNode(Lx, 0.0),
               GeometryNode(Lx, Ly, in_conductor=0), GeometryNode(0.0, Ly, in_conductor=0)],
        segments=[Segment(0, 1), Segment(1, 2), Segment(2, 3, in_conductor=0), Segment(3, 0)],
        length_units=LengthUnit.CENTIMETERS,
    )

    # Uniform field between the plates as a stand-in for a solved potential
    solution = FieldSolution(ProblemKind.ELECTROSTATICS, voltage * y / Ly)
    return mesh, problem, solution


def run_example():
    """Run the capacitor example."""
    print("=" * 60)
    print("Field post-processing: parallel plate capacitor")
    print("=" * 60)

    mesh, problem, solution = build_capacitor()
    post = PostProcessor(mesh, problem, solution, PostProcessorConfig(verbose=True))
    print(f"\nMesh: {post.num_nodes} nodes, {post.num_elements} elements")

    # Flux density along the vertical center line
    print("\nD along x = 1.0 cm:")
    for yq in np.linspace(0.05, 0.95, 5):
        D = post.get_point_d(1.0, yq)
        print(f"  y={yq:.2f}  Dx={D.real:+.4e}  Dy={D.imag:+.4e} C/m^2")

    # Mask for the dielectric block
    if not post.select_block_label(2.0, 0.5):
        print("No block label found")
        return
    if not post.make_mask():
        print("Mask construction failed")
        return

    node_mask = mesh.node_mask
    print(f"\nMask: {np.count_nonzero(node_mask == 1)} nodes at 1, "
          f"{np.count_nonzero(node_mask == 0)} nodes at 0")

    # Henrotte vectors are non-zero only in the band around the block
    weights = np.array([post.henrotte_vector(e) for e in range(mesh.n_elements)])
    band = np.flatnonzero(np.abs(weights) > 0)
    print(f"Henrotte band: {len(band)} elements, "
          f"max |v| = {np.abs(weights).max():.3e} 1/m")

    # Contour along the bottom plate, then bent into an arc
    post.add_contour_point_from_node(0.0, 0.0)
    post.add_contour_point_from_node(4.0, 0.0)
    post.bend_contour(60.0, 10.0)
    print(f"\nContour: {len(post.contour)} points")

    return post


if __name__ == "__main__":
    run_example()
