"""
Component generation pipeline.

Detect sections on a navigated page, screenshot them, synthesize three
React variants per section and save the results.
"""

from .dependencies import ComponentGenerationDeps
from .orchestrator import (
    PIPELINE_NODES,
    component_generation_graph,
    get_output_directories,
    has_generated_components,
    list_generated_components,
    retry_component,
    run_component_generation,
)
from .state import ComponentGenerationState

__all__ = [
    "PIPELINE_NODES",
    "ComponentGenerationDeps",
    "ComponentGenerationState",
    "component_generation_graph",
    "get_output_directories",
    "has_generated_components",
    "list_generated_components",
    "retry_component",
    "run_component_generation",
]
