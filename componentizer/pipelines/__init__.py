"""
Pydantic Graph pipelines for Componentizer.

- component_generation: detect sections, capture screenshots, synthesize
  variants and save them
"""

from .component_generation import (
    component_generation_graph,
    run_component_generation,
    retry_component,
    ComponentGenerationState,
    ComponentGenerationDeps,
)

__all__ = [
    "component_generation_graph",
    "run_component_generation",
    "retry_component",
    "ComponentGenerationState",
    "ComponentGenerationDeps",
]
