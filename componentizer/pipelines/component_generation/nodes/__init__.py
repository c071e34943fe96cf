"""
Component generation pipeline nodes.
"""

from .initialize import InitializeNode
from .detect import DetectNode
from .capture import CaptureNode
from .generate_variants import GenerateVariantsNode
from .save import SaveNode

__all__ = [
    "InitializeNode",
    "DetectNode",
    "CaptureNode",
    "GenerateVariantsNode",
    "SaveNode",
]
