"""
Services layer for Componentizer.

Detection (page -> regions), synthesis (region -> variants), recovery
(failure classification and retries) and the storage/capture adapters
the generation pipeline composes.
"""

from .models import (
    SectionType,
    BoundingBox,
    RegionContent,
    Region,
    VariantStrategy,
    Variant,
    ComponentStatus,
    GeneratedComponent,
    GenerationPhase,
    GenerationProgress,
    GenerationError,
    GenerationMetadata,
    GenerationResult,
)
from .normalizer import normalize_markup
