"""
Problem Module
==============

Problem description, block materials and solved field payload.
"""

from .problem import (
    ProblemKind,
    ProblemType,
    BlockLabel,
    GeometryNode,
    Segment,
    ArcSegment,
    ProblemDescription,
)
from .materials import ElectrostaticMaterial, HeatFlowMaterial, MagneticMaterial
from .solution import FieldSolution

__all__ = [
    "ProblemKind",
    "ProblemType",
    "BlockLabel",
    "GeometryNode",
    "Segment",
    "ArcSegment",
    "ProblemDescription",
    "ElectrostaticMaterial",
    "HeatFlowMaterial",
    "MagneticMaterial",
    "FieldSolution",
]
