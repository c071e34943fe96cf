"""
Variant synthesis: pixel-faithful, semantic and accessible component source.
"""

from .enhancements import EnhancementContext, GradientAccent, SectionEnhancement, build_enhancement_context
from .strategies import StrategyOptions, StrategyResult, VARIANT_CONFIGS, synthesize_strategy
from .synthesizer import (
    VariantGenerationMetadata,
    VariantGenerationResult,
    VariantSynthesizer,
    get_variant_by_strategy,
    has_valid_variants,
)
from .vision_generator import VisionCodeGenerator, VisionGenerationResult
from .refinement import RefinementResult, refine_components

__all__ = [
    'EnhancementContext',
    'GradientAccent',
    'SectionEnhancement',
    'build_enhancement_context',
    'StrategyOptions',
    'StrategyResult',
    'VARIANT_CONFIGS',
    'synthesize_strategy',
    'VariantGenerationMetadata',
    'VariantGenerationResult',
    'VariantSynthesizer',
    'get_variant_by_strategy',
    'has_valid_variants',
    'VisionCodeGenerator',
    'VisionGenerationResult',
    'RefinementResult',
    'refine_components',
]
