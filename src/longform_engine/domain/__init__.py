"""Domain models and enumerations."""

from longform_engine.domain.enums import (
    AttemptOutcome,
    ComplexityCategory,
    RegenerationApproach,
    RenderErrorKind,
    RenderPhase,
    SceneType,
)
from longform_engine.domain.models import (
    ChunkPlan,
    ChunkRenderResult,
    ChunkScene,
    ComplexityAnalysis,
    RegenerationAttempt,
    RegenerationStrategy,
    RenderProgress,
    RoutingDecision,
    Scene,
)
from longform_engine.domain.render_request import (
    ChunkRenderRequest,
    CompositionProps,
    SoundDesignConfig,
    build_chunk_request,
    without_ambient_audio,
)

__all__ = [
    "AttemptOutcome",
    "ChunkPlan",
    "ChunkRenderRequest",
    "ChunkRenderResult",
    "ChunkScene",
    "ComplexityAnalysis",
    "ComplexityCategory",
    "CompositionProps",
    "RegenerationApproach",
    "RegenerationAttempt",
    "RegenerationStrategy",
    "RenderErrorKind",
    "RenderPhase",
    "RenderProgress",
    "RoutingDecision",
    "Scene",
    "SceneType",
    "SoundDesignConfig",
    "build_chunk_request",
    "without_ambient_audio",
]
