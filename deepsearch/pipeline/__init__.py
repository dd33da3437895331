"""Deep search pipeline.

Exports:
- DeepSearchOrchestrator: run state machine and supplementary queries
- build_dependencies: wires the orchestrator from settings
"""

from deepsearch.pipeline.dependencies import DeepSearchDependencies, build_dependencies
from deepsearch.pipeline.models import DeepSearchOptions, DeepSearchResult, RunStage
from deepsearch.pipeline.orchestrator import DeepSearchOrchestrator

__all__ = [
    "DeepSearchOrchestrator",
    "DeepSearchDependencies",
    "build_dependencies",
    "DeepSearchOptions",
    "DeepSearchResult",
    "RunStage",
]
