"""
Postprocess Module
==================

Flux reconstruction and the PostProcessor front end.
"""

from .field_reconstruction import FieldReconstructor
from .postprocessor import PostProcessor, print_warning

__all__ = ["FieldReconstructor", "PostProcessor", "print_warning"]
