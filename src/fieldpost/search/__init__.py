"""
Search Module
=============

Point location over the mesh.
"""

from .point_locator import PointLocator, in_triangle_test

__all__ = ["PointLocator", "in_triangle_test"]
