"""Application services."""

from longform_engine.services.chunk_assembler import ChunkAssembler
from longform_engine.services.chunk_dispatcher import (
    ChunkRenderDispatcher,
    ChunkStatusReport,
    RetryPolicy,
    classify_render_error,
)
from longform_engine.services.chunk_planner import (
    ChunkPlanner,
    plan_chunks,
    should_use_chunked_rendering,
)
from longform_engine.services.complexity import ComplexityAnalyzer
from longform_engine.services.provider_router import ProviderRouter, SceneRequirements
from longform_engine.services.regeneration import (
    RegenerationStrategyEngine,
    StrategyContext,
    analyze_failures,
)
from longform_engine.services.regeneration_loop import (
    ClipEvaluation,
    RegenerationOutcome,
    SceneRegenerationLoop,
)
from longform_engine.services.render_orchestrator import RenderOrchestrator

__all__ = [
    "ChunkAssembler",
    "ChunkPlanner",
    "ChunkRenderDispatcher",
    "ChunkStatusReport",
    "ClipEvaluation",
    "ComplexityAnalyzer",
    "ProviderRouter",
    "RegenerationOutcome",
    "RegenerationStrategyEngine",
    "RenderOrchestrator",
    "RetryPolicy",
    "SceneRegenerationLoop",
    "SceneRequirements",
    "StrategyContext",
    "analyze_failures",
    "classify_render_error",
    "plan_chunks",
    "should_use_chunked_rendering",
]
