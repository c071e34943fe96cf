"""
Static description of pipeline nodes.

Each node class carries a NodeMetadata naming the progress phase it
reports under, the state fields it reads and writes, and the services it
calls. describe_pipeline() turns a node sequence into plain dicts for the
CLI's `pipeline` command.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass
class NodeMetadata:
    """
    Attributes:
        phase: GenerationPhase value the node reports progress under
        inputs: State fields read
        outputs: State fields written
        services: Dependency calls, e.g. "synthesizer.synthesize"
        ends_run_on_failure: A failure here ends the run with no components
        llm: Model used, if any
        llm_purpose: What the model does in this node
    """

    phase: str = ""
    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    services: List[str] = field(default_factory=list)
    ends_run_on_failure: bool = False
    llm: Optional[str] = None
    llm_purpose: Optional[str] = None


def describe_pipeline(node_classes: Sequence[type]) -> List[Dict[str, Any]]:
    """One dict per node, in run order; nodes without metadata get only their name."""
    described = []
    for node_class in node_classes:
        metadata = getattr(node_class, "metadata", None)
        entry: Dict[str, Any] = {"node": node_class.__name__}
        if isinstance(metadata, NodeMetadata):
            entry.update(asdict(metadata))
        described.append(entry)
    return described
