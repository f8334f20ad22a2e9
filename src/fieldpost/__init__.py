"""
fieldpost
=========

Post-solution analysis of solved 2D triangular finite-element field problems.

Modules:
    mesh: Triangle mesh, node adjacency and boundary edge markers
    problem: Problem description, materials and solved field payload
    search: Point location over the mesh
    assembly: Region mask fixed values and weighted-Laplacian assembly
    solvers: Sparse linear system and region mask solver
    contour: User contour construction and bending
    postprocess: Flux reconstruction and the PostProcessor front end
"""

from . import config
from . import errors
from . import mesh
from . import problem
from . import search
from . import assembly
from . import solvers
from . import contour
from . import postprocess

from .postprocess import PostProcessor
from .config import PostProcessorConfig

__version__ = "0.1.0"
__all__ = [
    "config",
    "errors",
    "mesh",
    "problem",
    "search",
    "assembly",
    "solvers",
    "contour",
    "postprocess",
    "PostProcessor",
    "PostProcessorConfig",
]
