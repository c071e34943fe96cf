"""
Section detection: structural queries with generic and viewport fallbacks.
"""

from .detector import (
    DetectionResult,
    GenericContainerStage,
    SectionDetector,
    StageOutcome,
    StructuralStage,
    ViewportPartitionStage,
    detect_regions,
)
from .selectors import SECTION_SELECTORS, build_selector_table

__all__ = [
    'DetectionResult',
    'GenericContainerStage',
    'SectionDetector',
    'StageOutcome',
    'StructuralStage',
    'ViewportPartitionStage',
    'detect_regions',
    'SECTION_SELECTORS',
    'build_selector_table',
]
