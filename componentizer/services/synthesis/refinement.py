"""
Batch refinement of pixel-faithful variants with the vision generator.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from ...core.config import Config
from ..models import GeneratedComponent, Region, VariantStrategy
from .vision_generator import VisionGenerationResult

logger = logging.getLogger(__name__)


@dataclass
class RefinementResult:
    component_id: str
    success: bool
    component: GeneratedComponent
    error: Optional[str] = None
    tokens_used: Optional[int] = None


async def _refine_one(
    component: GeneratedComponent,
    region: Region,
    generator: Any,
    design_tokens: Optional[Dict[str, Any]],
) -> RefinementResult:
    try:
        result: VisionGenerationResult = await generator.generate(region.screenshot_path, region, design_tokens)
    except Exception as e:
        logger.error(f"Refinement raised for {component.name}: {e}")
        return RefinementResult(component_id=component.id, success=False, component=component, error=str(e))

    if not result.success or not result.code:
        return RefinementResult(component_id=component.id, success=False, component=component, error=result.error)

    updated = component.replace_variant(VariantStrategy.PIXEL_FAITHFUL, result.code)
    return RefinementResult(
        component_id=component.id,
        success=True,
        component=updated,
        tokens_used=result.tokens_used,
    )


async def refine_components(
    components: Sequence[GeneratedComponent],
    regions: Sequence[Region],
    generator: Any,
    max_concurrent: Optional[int] = None,
    on_progress: Optional[Callable[[int, int], Any]] = None,
    design_tokens: Optional[Dict[str, Any]] = None,
) -> List[RefinementResult]:
    """
    Regenerate pixel-faithful variants from screenshots, a batch at a time.

    Only components whose region has a screenshot and which have a
    pixel-faithful variant are refined.

    Args:
        components: Generated components to refine
        regions: Regions the components came from (matched by region_id)
        generator: VisionCodeGenerator or compatible object
        max_concurrent: Batch size (default Config.REFINE_MAX_CONCURRENT)
        on_progress: Optional callback(completed, total), sync or async
        design_tokens: Optional design tokens forwarded to the generator

    Returns:
        One RefinementResult per refined component, in input order
    """
    batch_size = max(1, max_concurrent or Config.REFINE_MAX_CONCURRENT)
    by_id = {region.id: region for region in regions}

    jobs = []
    for component in components:
        region = by_id.get(component.region_id)
        if region is None or not region.screenshot_path:
            continue
        if not any(v.strategy == VariantStrategy.PIXEL_FAITHFUL for v in component.variants):
            continue
        jobs.append((component, region))

    results: List[RefinementResult] = []
    total = len(jobs)
    logger.info(f"Refining {total} components in batches of {batch_size}")

    for start in range(0, total, batch_size):
        batch = jobs[start:start + batch_size]
        batch_results = await asyncio.gather(
            *(_refine_one(component, region, generator, design_tokens) for component, region in batch)
        )
        results.extend(batch_results)

        if on_progress:
            outcome = on_progress(len(results), total)
            if inspect.isawaitable(outcome):
                await outcome

    refined = sum(1 for r in results if r.success)
    logger.info(f"Refinement complete: {refined}/{total} succeeded")
    return results
