"""
VariantSynthesizer - turns one detected region into up to three variants.

Each strategy runs in isolation; whichever succeed are returned and the
rest are reported in the generation metadata.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from ..models import GeneratedComponent, Region, SectionType, Variant, VariantStrategy
from .enhancements import EnhancementContext
from .strategies import STRATEGY_ORDER, StrategyOptions, synthesize_strategy

logger = logging.getLogger(__name__)


class VariantGenerationMetadata(BaseModel):
    component_type: SectionType
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    strategies_attempted: List[VariantStrategy] = Field(default_factory=list)
    strategies_succeeded: List[VariantStrategy] = Field(default_factory=list)
    errors: Dict[VariantStrategy, str] = Field(default_factory=dict)


class VariantGenerationResult(BaseModel):
    variants: List[Variant] = Field(default_factory=list)
    metadata: VariantGenerationMetadata

    @property
    def succeeded(self) -> bool:
        return bool(self.variants)

    def error_summary(self) -> Optional[str]:
        """Combined per-strategy error text, or None when nothing failed."""
        if not self.metadata.errors:
            return None
        return "; ".join(f"{strategy.value}: {error}" for strategy, error in self.metadata.errors.items())

    def to_component(self, region: Region) -> GeneratedComponent:
        """GeneratedComponent for this result; failed when no variant survived."""
        error = None
        if not self.variants:
            error = self.error_summary() or "All variant strategies failed"
        return GeneratedComponent.from_variants(region, self.variants, error_message=error)


class VariantSynthesizer:
    """
    Produces pixel-faithful, semantic and accessible variants for a region.

    Features:
    - One interface for every strategy (synthesize_strategy)
    - Fault isolation: a failing strategy never blocks the others
    - Optional vision-based generation for the pixel-faithful variant
    """

    def __init__(self, vision_generator: Optional[Any] = None, use_vision: bool = False):
        """
        Args:
            vision_generator: Object with an async generate(screenshot_path, region, design_tokens)
            use_vision: Use the vision generator for pixel-faithful variants when a screenshot exists
        """
        self.vision_generator = vision_generator
        self.use_vision = use_vision and vision_generator is not None

    async def synthesize(
        self,
        region: Region,
        design_tokens: Optional[Dict[str, Any]] = None,
        enhancement_context: Optional[EnhancementContext] = None,
        skip_strategies: Iterable[VariantStrategy] = (),
    ) -> VariantGenerationResult:
        """
        Generate every non-skipped variant for a region.

        Args:
            region: Detected region (may have empty markup)
            design_tokens: Optional design tokens passed to the vision generator
            enhancement_context: Optional decorative accents per section type
            skip_strategies: Strategies not to attempt

        Returns:
            VariantGenerationResult with 0-3 variants and per-strategy errors
        """
        skipped = {VariantStrategy(s) for s in skip_strategies}
        options = StrategyOptions(
            design_tokens=design_tokens,
            enhancement_context=enhancement_context,
            vision_generator=self.vision_generator,
            use_vision=self.use_vision,
        )
        metadata = VariantGenerationMetadata(component_type=region.type)
        variants: List[Variant] = []

        for strategy in STRATEGY_ORDER:
            if strategy in skipped:
                continue
            metadata.strategies_attempted.append(strategy)
            result = await synthesize_strategy(region, strategy, options)
            if result.ok:
                variants.append(result.variant)
                metadata.strategies_succeeded.append(strategy)
            else:
                metadata.errors[strategy] = result.error or "unknown error"

        logger.info(
            f"Synthesized {len(variants)}/{len(metadata.strategies_attempted)} variants "
            f"for {region.type.value}"
        )
        return VariantGenerationResult(variants=variants, metadata=metadata)


def get_variant_by_strategy(variants: Iterable[Variant], strategy: VariantStrategy) -> Optional[Variant]:
    strategy = VariantStrategy(strategy)
    return next((v for v in variants if v.strategy == strategy), None)


def has_valid_variants(result: VariantGenerationResult) -> bool:
    return any(v.code.strip() for v in result.variants)
