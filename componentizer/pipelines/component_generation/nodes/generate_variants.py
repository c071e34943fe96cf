"""
GenerateVariantsNode - Synthesize the three variants for every region.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..dependencies import ComponentGenerationDeps
from ..state import ComponentGenerationState
from ...metadata import NodeMetadata
from ....services.models import GenerationError, GenerationPhase, display_name_for
from ....services.recovery import ErrorCode, create_pipeline_error, create_variant_error
from ....services.synthesis import VARIANT_CONFIGS, build_enhancement_context

logger = logging.getLogger(__name__)


@dataclass
class GenerateVariantsNode(BaseNode[ComponentGenerationState]):
    """
    Step 4: Run the synthesizer per region, in page order.

    A region with zero surviving variants becomes a failed component;
    the run carries on with the rest.

    Reads: regions, design_tokens, skip_strategies
    Writes: components, errors
    Services: VariantSynthesizer.synthesize()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        phase="generating_variants",
        inputs=["regions", "design_tokens", "skip_strategies"],
        outputs=["components", "errors"],
        services=["synthesizer.synthesize"],
        llm="Claude (optional)",
        llm_purpose="Vision-based pixel-faithful variant when enabled",
    )

    async def run(
        self,
        ctx: GraphRunContext[ComponentGenerationState, ComponentGenerationDeps]
    ) -> "SaveNode":
        from .save import SaveNode

        regions = ctx.state.regions
        logger.info(f"Step 4: Generating variants for {len(regions)} regions...")
        ctx.state.current_step = "generate_variants"

        try:
            await ctx.deps.report_progress(
                GenerationPhase.GENERATING_VARIANTS, 40, "Generating component variants..."
            )

            enhancement_context = ctx.deps.enhancement_context
            if enhancement_context is None and regions:
                enhancement_context = build_enhancement_context(regions)

            total = len(regions)
            for index, region in enumerate(regions):
                display_name = display_name_for(region.type)
                await ctx.deps.report_progress(
                    GenerationPhase.GENERATING_VARIANTS,
                    40 + 30 * index / total,
                    f"Generating variants for {display_name}",
                    current_item=index + 1,
                    total_items=total,
                )

                result = await ctx.deps.synthesizer.synthesize(
                    region,
                    design_tokens=ctx.state.design_tokens,
                    enhancement_context=enhancement_context,
                    skip_strategies=ctx.state.skip_strategies,
                )
                component = result.to_component(region)
                ctx.state.components.append(component)

                for strategy, message in result.metadata.errors.items():
                    ctx.deps.record_error(create_variant_error(
                        region.type,
                        VARIANT_CONFIGS[strategy].name,
                        message,
                        website_id=ctx.state.website_id,
                        component_id=component.id,
                    ))

                if component.is_failed:
                    logger.warning(f"{display_name}: {component.error_message}")
                    ctx.deps.record_error(create_pipeline_error(
                        component.error_message or "All variant strategies failed",
                        region.type,
                        website_id=ctx.state.website_id,
                        component_id=component.id,
                        code=ErrorCode.ALL_VARIANTS_FAILED,
                    ))
                    ctx.state.errors.append(GenerationError(
                        phase=GenerationPhase.GENERATING_VARIANTS,
                        message=f"Failed to generate variants for {display_name}",
                        recoverable=True,
                        component_id=component.id,
                        component_type=region.type,
                    ))

            logger.info(
                f"Generated {ctx.state.generated_count} components, "
                f"{ctx.state.failed_count} failed"
            )
            ctx.state.mark_step_complete("generate_variants")
            return SaveNode()

        except Exception as e:
            ctx.state.error = str(e)
            ctx.state.error_step = "generate_variants"
            logger.error(f"Variant generation failed: {e}")
            raise
