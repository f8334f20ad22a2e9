"""
Contour Module
==============

User contour construction, geometry snapping and arc bending.
"""

from .contour_builder import ContourBuilder

__all__ = ["ContourBuilder"]
