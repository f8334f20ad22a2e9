"""
Errors
======

Failure kinds raised by the analysis components. The PostProcessor front
end turns them into return values and warnings.
"""


class PostProcessingError(Exception):
    """Base class for post-processing failures."""


class GeometryNotFound(PostProcessingError):
    """No mesh element contains the requested point."""

    def __init__(self, x: float, y: float):
        super().__init__(f"No element contains point ({x}, {y})")
        self.x = x
        self.y = y


class InvalidSelection(PostProcessingError):
    """The selected region abuts a region which is not free space."""


class SolverDivergence(PostProcessingError):
    """The sparse solve did not converge."""


class UnsupportedProblemKind(PostProcessingError):
    """The problem kind carries no scalar field for reconstruction."""
