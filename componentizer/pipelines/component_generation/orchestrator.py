"""
Component Generation Orchestrator - Graph definition and convenience functions.

Defines the pydantic-graph pipeline that turns a navigated landing page
into saved React components, and provides run_component_generation()
as the main entry point.

Phases (each reports progress):
    initializing -> detecting -> capturing_screenshots ->
    generating_variants -> saving -> complete
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic_graph import Graph

from .dependencies import ComponentGenerationDeps, ProgressCallback
from .state import ComponentGenerationState
from .nodes.initialize import InitializeNode
from .nodes.detect import DetectNode
from .nodes.capture import CaptureNode
from .nodes.generate_variants import GenerateVariantsNode
from .nodes.save import SaveNode
from ...core.config import Config
from ...core.observability import get_logfire
from ...services.models import (
    GeneratedComponent,
    GenerationError,
    GenerationMetadata,
    GenerationPhase,
    GenerationResult,
    SectionType,
    VariantStrategy,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Graph Definition
# ============================================================================

PIPELINE_NODES = (
    InitializeNode,
    DetectNode,
    CaptureNode,
    GenerateVariantsNode,
    SaveNode,
)

component_generation_graph = Graph(
    nodes=PIPELINE_NODES,
    name="component_generation_pipeline"
)


# ============================================================================
# Convenience Functions
# ============================================================================

async def run_component_generation(
    page: Any,
    website_id: str,
    *,
    max_regions: Optional[int] = None,
    min_height: Optional[int] = None,
    design_tokens: Optional[Dict[str, Any]] = None,
    output_dir: Optional[str] = None,
    save_metadata: bool = False,
    skip_screenshots: bool = False,
    skip_strategies: Optional[Iterable[VariantStrategy]] = None,
    use_vision: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    deps: Optional[ComponentGenerationDeps] = None,
) -> GenerationResult:
    """
    Run the complete component generation pipeline.

    Args:
        page: Navigated Playwright page (caller owns its lifecycle)
        website_id: Run owner; used for output paths and error records
        max_regions: Cap on detected regions (default Config.MAX_SECTIONS)
        min_height: Minimum structural match height (default Config.MIN_SECTION_HEIGHT)
        design_tokens: Optional design tokens for vision generation
        output_dir: Output root (default {WEBSITES_DIR}/{website_id}/generated)
        save_metadata: Record components and variants in Supabase
        skip_screenshots: Skip the capture phase
        skip_strategies: Variant strategies not to attempt
        use_vision: Use Claude vision for the pixel-faithful variant
        on_progress: Callback receiving GenerationProgress, sync or async
        deps: Optional ComponentGenerationDeps (created if not provided)

    Returns:
        GenerationResult. Unexpected failures are reported in the result
        as an initializing-phase error rather than raised.
    """
    logger.info(f"=== STARTING COMPONENT GENERATION for {website_id} ===")

    state = ComponentGenerationState(
        website_id=website_id,
        max_regions=max_regions or Config.MAX_SECTIONS,
        min_height=Config.MIN_SECTION_HEIGHT if min_height is None else min_height,
        design_tokens=design_tokens,
        skip_screenshots=skip_screenshots,
        save_metadata=save_metadata,
        skip_strategies=[VariantStrategy(s) for s in (skip_strategies or [])],
    )

    lf = get_logfire()
    with lf.span("component_generation", website_id=website_id, max_regions=state.max_regions) as span:
        try:
            if deps is None:
                deps = ComponentGenerationDeps.create(
                    page,
                    website_id,
                    output_dir=output_dir,
                    save_metadata=save_metadata,
                    use_vision=use_vision,
                    on_progress=on_progress,
                )
            elif on_progress is not None and deps.on_progress is None:
                deps.on_progress = on_progress

            result = await component_generation_graph.run(
                InitializeNode(),
                state=state,
                deps=deps,
            )
            span.set_attributes({
                "success": result.output.success,
                "generated_count": result.output.metadata.generated_count,
                "failed_count": result.output.metadata.failed_count,
            })
            return result.output

        except Exception as e:
            logger.error(f"Component generation failed at {state.error_step or 'setup'}: {e}")
            return GenerationResult(
                success=False,
                components=list(state.components),
                errors=[GenerationError(
                    phase=GenerationPhase.INITIALIZING,
                    message=f"Component generation failed: {e}",
                    recoverable=True,
                )],
                metadata=GenerationMetadata(output_dir=state.output_dir),
            )


async def retry_component(
    page: Any,
    section_type: SectionType,
    *,
    website_id: Optional[str] = None,
    design_tokens: Optional[Dict[str, Any]] = None,
    skip_strategies: Optional[Iterable[VariantStrategy]] = None,
    deps: Optional[ComponentGenerationDeps] = None,
) -> Optional[GeneratedComponent]:
    """
    Regenerate a single section type.

    Runs detection constrained to `section_type`, then synthesis.

    Returns:
        The new component, or None when the type is not found on the page
        or no variant could be produced
    """
    section_type = SectionType(section_type)
    if deps is None:
        deps = ComponentGenerationDeps.create(page, website_id or "retry", persist_errors=False)

    try:
        region = await deps.detector.detect_section(page, section_type)
    except Exception as e:
        logger.warning(f"Retry detection for {section_type.value} failed: {e}")
        return None

    if region is None:
        logger.info(f"Retry: no {section_type.value} section found")
        return None

    result = await deps.synthesizer.synthesize(
        region,
        design_tokens=design_tokens,
        enhancement_context=deps.enhancement_context,
        skip_strategies=skip_strategies or (),
    )
    if not result.succeeded:
        logger.info(f"Retry: no variants produced for {section_type.value}")
        return None

    return result.to_component(region)


# ============================================================================
# Output helpers
# ============================================================================

def get_output_directories(website_id: str) -> Dict[str, str]:
    """Default components and sections directories for a website."""
    root = Config.website_dir(website_id) / "generated"
    return {
        "components_dir": str(root / "src" / "components"),
        "sections_dir": str(root / "sections"),
    }


def has_generated_components(website_id: str) -> bool:
    index = Path(get_output_directories(website_id)["components_dir"]) / "index.ts"
    return index.exists()


def list_generated_components(website_id: str) -> List[str]:
    """Names of component directories already written for a website."""
    components_dir = Path(get_output_directories(website_id)["components_dir"])
    if not components_dir.exists():
        return []
    return sorted(p.name for p in components_dir.iterdir() if p.is_dir())
