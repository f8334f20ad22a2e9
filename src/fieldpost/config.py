"""
Configuration
=============

Tunable constants for point location, mask computation and flux
reconstruction.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


# Marker value of MeshNode.Q for a node without a prescribed value
FREE_NODE = -2

# Boundary corners sharper than this (degrees) are not smoothed across
SHALLOW_ANGLE_DEG = 10.0
# Slack added to the shallow-angle test so exactly 10 degrees still passes
SHALLOW_ANGLE_SLACK_DEG = 1e-4
# Upper bound on ring nodes gathered around a vertex (usually 6 to 8)
MAX_RING_NODES = 20

# Vacuum permittivity [F/m]
EPS0 = 8.85418781762e-12


class LengthUnit(IntEnum):
    """Length unit of the mesh coordinates."""
    INCHES = 0
    MILLIMETERS = 1
    CENTIMETERS = 2
    METERS = 3
    MILS = 4
    MICROMETERS = 5

    @property
    def to_meters(self) -> float:
        """Conversion factor from this unit to meters."""
        return LENGTH_CONVERSION[self]


LENGTH_CONVERSION = {
    LengthUnit.INCHES: 0.0254,
    LengthUnit.MILLIMETERS: 0.001,
    LengthUnit.CENTIMETERS: 0.01,
    LengthUnit.METERS: 1.0,
    LengthUnit.MILS: 2.54e-05,
    LengthUnit.MICROMETERS: 1.e-06,
}


@dataclass
class PostProcessorConfig:
    """Configuration for the post-processor."""
    smooth: bool = True                       # Use smoothed nodal flux in get_point_d
    shallow_angle_deg: float = SHALLOW_ANGLE_DEG
    max_ring_nodes: int = MAX_RING_NODES
    axis_tol: float = 1e-6                    # r below this counts as on the axis
    coincidence_tol: float = 1e-8             # Point coincidence tolerance
    mask_threshold: float = 0.5               # Solution value above which msk = 1
    solver_tol: float = 1e-10                 # Relative residual for the CG solve
    solver_max_iter: Optional[int] = None     # None lets scipy choose
    verbose: bool = False                     # Print mask solve progress

    def __post_init__(self):
        """Validate configuration values."""
        if not 0 < self.shallow_angle_deg < 180:
            raise ValueError(f"shallow_angle_deg must be in (0, 180), got {self.shallow_angle_deg}")
        if self.max_ring_nodes < 3:
            raise ValueError(f"max_ring_nodes must be at least 3, got {self.max_ring_nodes}")
        if self.axis_tol <= 0:
            raise ValueError(f"axis_tol must be positive, got {self.axis_tol}")
        if self.coincidence_tol <= 0:
            raise ValueError(f"coincidence_tol must be positive, got {self.coincidence_tol}")
        if not 0 < self.mask_threshold < 1:
            raise ValueError(f"mask_threshold must be in (0, 1), got {self.mask_threshold}")
        if self.solver_tol <= 0:
            raise ValueError(f"solver_tol must be positive, got {self.solver_tol}")
        if self.solver_max_iter is not None and self.solver_max_iter <= 0:
            raise ValueError(f"solver_max_iter must be positive, got {self.solver_max_iter}")
