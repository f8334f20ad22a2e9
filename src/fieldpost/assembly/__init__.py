"""
Assembly Module
===============

Fixed values and weighted-Laplacian assembly of the region mask problem.
"""

from .mask_assembly import (
    air_label_flags,
    is_selection_on_axis,
    is_kosher,
    classify_fixed_values,
    check_selection,
    element_mask_matrix,
    assemble_mask_system,
)

__all__ = [
    "air_label_flags",
    "is_selection_on_axis",
    "is_kosher",
    "classify_fixed_values",
    "check_selection",
    "element_mask_matrix",
    "assemble_mask_system",
]
