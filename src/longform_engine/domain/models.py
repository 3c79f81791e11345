"""Domain models - pure Python classes independent of any backend."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from longform_engine.domain.enums import (
    AlternativeApproach,
    AttemptOutcome,
    ComplexityCategory,
    Difficulty,
    RegenerationApproach,
    RenderPhase,
    SceneType,
)

# Keys of a scene payload that map onto Scene fields; everything else is
# carried through untouched in Scene.props.
_SCENE_KEYS = {"id", "duration", "type", "visualDirection", "mediaUrl"}


@dataclass(frozen=True)
class Scene:
    """One narrative unit of the video.

    Scenes are immutable inputs; the chunk planner only reads duration and order.
    ``props`` holds composition-specific fields (overlays, narration, assets)
    that are forwarded to the renderer verbatim.
    """

    id: str
    duration_seconds: float
    scene_type: SceneType = SceneType.B_ROLL
    visual_direction: str = ""
    media_url: str | None = None
    props: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Build a Scene from a composition scene payload."""
        scene_type = data.get("type") or SceneType.B_ROLL
        try:
            scene_type = SceneType(scene_type)
        except ValueError:
            scene_type = SceneType.B_ROLL

        return cls(
            id=str(data["id"]),
            duration_seconds=float(data.get("duration") or 0),
            scene_type=scene_type,
            visual_direction=data.get("visualDirection") or "",
            media_url=data.get("mediaUrl"),
            props={k: v for k, v in data.items() if k not in _SCENE_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to a composition scene payload."""
        payload: dict[str, Any] = {
            **self.props,
            "id": self.id,
            "duration": self.duration_seconds,
            "type": str(self.scene_type),
            "visualDirection": self.visual_direction,
        }
        if self.media_url:
            payload["mediaUrl"] = self.media_url
        return payload


@dataclass(frozen=True)
class ChunkScene:
    """A scene placed inside a chunk, with its chunk-relative start frame."""

    scene: Scene
    chunk_start_frame: int

    def to_dict(self) -> dict[str, Any]:
        return {**self.scene.to_dict(), "chunkStartFrame": self.chunk_start_frame}


@dataclass
class ChunkPlan:
    """A contiguous, time-bounded run of scenes rendered as one unit."""

    chunk_index: int
    start_frame: int
    end_frame: int
    start_time_seconds: float
    end_time_seconds: float
    scenes: list[ChunkScene] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        return sum(s.scene.duration_seconds for s in self.scenes)

    @property
    def frame_count(self) -> int:
        return self.end_frame - self.start_frame + 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "chunkIndex": self.chunk_index,
            "startFrame": self.start_frame,
            "endFrame": self.end_frame,
            "startTimeSeconds": self.start_time_seconds,
            "endTimeSeconds": self.end_time_seconds,
            "scenes": [s.to_dict() for s in self.scenes],
        }


@dataclass
class ChunkRenderResult:
    """Outcome of rendering one chunk."""

    chunk_index: int
    success: bool
    remote_url: str | None = None
    local_path: Path | None = None
    render_time_seconds: float | None = None
    error: str | None = None
    attempts: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "chunk_index": self.chunk_index,
            "success": self.success,
            "remote_url": self.remote_url,
            "render_time_seconds": self.render_time_seconds,
            "error": self.error,
            "attempts": self.attempts,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChunkRenderResult":
        return cls(
            chunk_index=int(data["chunk_index"]),
            success=bool(data.get("success", True)),
            remote_url=data.get("remote_url"),
            render_time_seconds=data.get("render_time_seconds"),
            error=data.get("error"),
            attempts=int(data.get("attempts", 0)),
        )


@dataclass(frozen=True)
class RenderProgress:
    """Transient status snapshot emitted to a progress callback."""

    phase: RenderPhase
    total_chunks: int
    completed_chunks: int
    overall_percent: int
    message: str
    current_chunk: int | None = None
    error: str | None = None


@dataclass
class RegenerationAttempt:
    """One historical generation try for a scene."""

    attempt_number: int
    provider: str
    prompt: str
    result: AttemptOutcome
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    quality_score: float | None = None
    issues: list[str] = field(default_factory=list)
    output_url: str | None = None


@dataclass(frozen=True)
class MotionSettings:
    """Motion parameters passed to an image-to-video backend."""

    style: str
    intensity: str


@dataclass(frozen=True)
class StrategyChanges:
    """Concrete parameter changes for the next generation attempt."""

    prompt: str | None = None
    provider: str | None = None
    use_reference: bool = False
    reference_url: str | None = None
    motion_settings: MotionSettings | None = None


@dataclass(frozen=True)
class RegenerationStrategy:
    """Decision produced by the regeneration strategy engine."""

    approach: RegenerationApproach
    changes: StrategyChanges
    reasoning: str
    confidence: float
    warning: str | None = None


@dataclass(frozen=True)
class FactorAnalysis:
    """Detection result for one complexity factor."""

    detected: bool
    difficulty: Difficulty = Difficulty.EASY
    matches: tuple[str, ...] = ()

    @property
    def description(self) -> str:
        return ", ".join(self.matches)


@dataclass(frozen=True)
class ComplexityFactors:
    """Individual factors feeding the complexity score."""

    specific_action: FactorAnalysis
    material_properties: FactorAnalysis
    motion_requirements: FactorAnalysis
    element_count: int
    temporal_sequence: bool


@dataclass(frozen=True)
class ComplexityRecommendations:
    """Remediation suggested for a visual direction."""

    best_providers: tuple[str, ...] = ()
    avoid_providers: tuple[str, ...] = ()
    simplified_prompt: str | None = None
    alternative_approach: AlternativeApproach | None = None


@dataclass(frozen=True)
class ComplexityAnalysis:
    """How hard a visual direction is for a generation backend to satisfy."""

    score: float
    category: ComplexityCategory
    factors: ComplexityFactors
    recommendations: ComplexityRecommendations
    user_warning: str | None = None


@dataclass(frozen=True)
class ProviderAlternative:
    """A ranked runner-up backend with the reason it matched."""

    provider: str
    reason: str


@dataclass(frozen=True)
class RoutingDecision:
    """Backend recommendation for a scene."""

    recommended_provider: str
    confidence: float
    reasoning: list[str]
    alternatives: list[ProviderAlternative]
    warnings: list[str]
    complexity: ComplexityAnalysis
