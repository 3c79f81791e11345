"""Video generation backend catalog.

Each backend declares the content it handles well, the content it struggles
with, and its motion/consistency tiers. The provider router scores backends
against a visual direction using these capabilities. The catalog is immutable
and passed to the router explicitly, so tests can supply their own tables.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from longform_engine.domain.enums import MotionQuality, TemporalConsistency


@dataclass(frozen=True)
class BackendCapabilities:
    """What a generation backend can do.

    Attributes:
        strengths: Content categories the backend renders well
        weaknesses: Content categories the backend struggles with
        max_duration_seconds: Longest clip one request can produce
        motion_quality: Motion quality tier
        temporal_consistency: Frame-to-frame consistency tier
        image_to_video: Accepts a reference image
        text_to_video: Accepts a text-only prompt
        native_audio: Generates synchronized audio
        lip_sync: Supports lip-synced speech
    """

    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...] = ()
    max_duration_seconds: int = 10
    motion_quality: MotionQuality = MotionQuality.GOOD
    temporal_consistency: TemporalConsistency = TemporalConsistency.MEDIUM
    image_to_video: bool = True
    text_to_video: bool = True
    native_audio: bool = False
    lip_sync: bool = False


@dataclass(frozen=True)
class VideoBackend:
    """A generation backend the router can choose."""

    id: str
    name: str
    capabilities: BackendCapabilities
    cost_per_10_seconds: float


class ProviderCatalog:
    """Immutable, ordered collection of generation backends.

    Order matters: it is the tie-break order when two backends score equally.
    """

    def __init__(self, backends: Iterable[VideoBackend]) -> None:
        self._backends: tuple[VideoBackend, ...] = tuple(backends)
        self._by_id = {b.id: b for b in self._backends}
        if len(self._by_id) != len(self._backends):
            raise ValueError("Duplicate backend id in catalog")

    def __iter__(self) -> Iterator[VideoBackend]:
        return iter(self._backends)

    def __len__(self) -> int:
        return len(self._backends)

    def __contains__(self, backend_id: object) -> bool:
        return backend_id in self._by_id

    def get(self, backend_id: str) -> VideoBackend | None:
        """Get a backend by id."""
        return self._by_id.get(backend_id)

    def all(self) -> tuple[VideoBackend, ...]:
        return self._backends

    def ids(self) -> list[str]:
        return [b.id for b in self._backends]

    def display_name(self, backend_id: str) -> str:
        """Human-readable name, falling back to the id for unknown backends."""
        backend = self._by_id.get(backend_id)
        return backend.name if backend else backend_id


# =============================================================================
# BACKEND DEFINITIONS
# =============================================================================

KLING_25_TURBO = VideoBackend(
    id="kling-2.5-turbo",
    name="Kling 2.5 Turbo",
    capabilities=BackendCapabilities(
        strengths=("human-faces", "human-motion", "hand-actions", "food-content", "camera-movement"),
        weaknesses=("text-in-video",),
        motion_quality=MotionQuality.EXCELLENT,
        temporal_consistency=TemporalConsistency.HIGH,
    ),
    cost_per_10_seconds=0.33,
)

KLING_21 = VideoBackend(
    id="kling-2.1",
    name="Kling 2.1",
    capabilities=BackendCapabilities(
        strengths=("human-faces", "product-shots", "b-roll"),
        weaknesses=("text-in-video", "fast-motion"),
        motion_quality=MotionQuality.GOOD,
        temporal_consistency=TemporalConsistency.HIGH,
    ),
    cost_per_10_seconds=0.28,
)

KLING_20 = VideoBackend(
    id="kling-2.0",
    name="Kling 2.0",
    capabilities=BackendCapabilities(
        strengths=("cinematic", "camera-movement", "human-motion"),
        weaknesses=("text-in-video", "specific-actions"),
        motion_quality=MotionQuality.EXCELLENT,
        temporal_consistency=TemporalConsistency.MEDIUM,
    ),
    cost_per_10_seconds=0.45,
)

KLING_26 = VideoBackend(
    id="kling-2.6",
    name="Kling 2.6",
    capabilities=BackendCapabilities(
        strengths=("human-faces", "talking-heads", "human-motion"),
        weaknesses=("text-in-video",),
        motion_quality=MotionQuality.EXCELLENT,
        temporal_consistency=TemporalConsistency.HIGH,
        native_audio=True,
        lip_sync=True,
    ),
    cost_per_10_seconds=0.50,
)

KLING_26_PRO = VideoBackend(
    id="kling-2.6-pro",
    name="Kling 2.6 Pro",
    capabilities=BackendCapabilities(
        strengths=("human-faces", "talking-heads", "cinematic"),
        weaknesses=("text-in-video",),
        motion_quality=MotionQuality.CINEMATIC,
        temporal_consistency=TemporalConsistency.HIGH,
        native_audio=True,
        lip_sync=True,
    ),
    cost_per_10_seconds=0.90,
)

KLING_26_MOTION_CONTROL = VideoBackend(
    id="kling-2.6-motion-control",
    name="Kling 2.6 Motion Control",
    capabilities=BackendCapabilities(
        strengths=("human-motion",),
        weaknesses=("text-in-video", "multiple-subjects"),
        max_duration_seconds=30,
        motion_quality=MotionQuality.EXCELLENT,
        temporal_consistency=TemporalConsistency.HIGH,
        text_to_video=False,
    ),
    cost_per_10_seconds=0.70,
)

KLING_26_MOTION_CONTROL_PRO = VideoBackend(
    id="kling-2.6-motion-control-pro",
    name="Kling 2.6 Motion Control Pro",
    capabilities=BackendCapabilities(
        strengths=("human-motion", "cinematic"),
        weaknesses=("text-in-video",),
        max_duration_seconds=30,
        motion_quality=MotionQuality.CINEMATIC,
        temporal_consistency=TemporalConsistency.HIGH,
        text_to_video=False,
    ),
    cost_per_10_seconds=1.10,
)

KLING_AVATAR = VideoBackend(
    id="kling-avatar",
    name="Kling Avatar",
    capabilities=BackendCapabilities(
        strengths=("talking-heads", "human-faces"),
        weaknesses=("human-motion", "camera-movement", "multiple-subjects"),
        max_duration_seconds=60,
        motion_quality=MotionQuality.GOOD,
        temporal_consistency=TemporalConsistency.HIGH,
        native_audio=True,
        lip_sync=True,
    ),
    cost_per_10_seconds=0.60,
)

RUNWAY_GEN3 = VideoBackend(
    id="runway-gen3",
    name="Runway Gen-3 Alpha",
    capabilities=BackendCapabilities(
        strengths=("cinematic", "camera-movement", "stylized", "hand-actions"),
        weaknesses=("text-in-video", "physics-accuracy"),
        motion_quality=MotionQuality.CINEMATIC,
        temporal_consistency=TemporalConsistency.HIGH,
    ),
    cost_per_10_seconds=0.50,
)

VEO_31 = VideoBackend(
    id="veo-3.1",
    name="Veo 3.1",
    capabilities=BackendCapabilities(
        strengths=("cinematic", "nature-scenes", "product-shots", "camera-movement"),
        weaknesses=("text-in-video",),
        max_duration_seconds=8,
        motion_quality=MotionQuality.CINEMATIC,
        temporal_consistency=TemporalConsistency.HIGH,
        native_audio=True,
    ),
    cost_per_10_seconds=0.75,
)

VEO_2 = VideoBackend(
    id="veo-2",
    name="Veo 2",
    capabilities=BackendCapabilities(
        strengths=("nature-scenes", "b-roll", "slow-motion"),
        weaknesses=("text-in-video", "hand-actions"),
        max_duration_seconds=8,
        motion_quality=MotionQuality.EXCELLENT,
        temporal_consistency=TemporalConsistency.MEDIUM,
    ),
    cost_per_10_seconds=0.50,
)

LUMA_DREAM_MACHINE = VideoBackend(
    id="luma-dream-machine",
    name="Luma Dream Machine",
    capabilities=BackendCapabilities(
        strengths=("product-shots", "food-content", "camera-movement", "slow-motion"),
        weaknesses=("fast-motion", "multiple-subjects"),
        motion_quality=MotionQuality.GOOD,
        temporal_consistency=TemporalConsistency.MEDIUM,
    ),
    cost_per_10_seconds=0.40,
)

HAILUO_MINIMAX = VideoBackend(
    id="hailuo-minimax",
    name="Hailuo MiniMax",
    capabilities=BackendCapabilities(
        strengths=("nature-scenes", "b-roll", "stylized"),
        weaknesses=("hand-actions", "specific-actions", "fine-details"),
        max_duration_seconds=6,
        motion_quality=MotionQuality.GOOD,
        temporal_consistency=TemporalConsistency.MEDIUM,
    ),
    cost_per_10_seconds=0.20,
)

WAN_21 = VideoBackend(
    id="wan-2.1",
    name="Wan 2.1",
    capabilities=BackendCapabilities(
        strengths=("b-roll", "animated"),
        weaknesses=("hand-actions", "fine-details", "complex-motion"),
        max_duration_seconds=5,
        motion_quality=MotionQuality.BASIC,
        temporal_consistency=TemporalConsistency.LOW,
    ),
    cost_per_10_seconds=0.10,
)

WAN_26 = VideoBackend(
    id="wan-2.6",
    name="Wan 2.6",
    capabilities=BackendCapabilities(
        strengths=("b-roll", "nature-scenes", "animated"),
        weaknesses=("fine-details", "translucent-materials"),
        motion_quality=MotionQuality.GOOD,
        temporal_consistency=TemporalConsistency.MEDIUM,
    ),
    cost_per_10_seconds=0.15,
)

SEEDANCE_10 = VideoBackend(
    id="seedance-1.0",
    name="Seedance 1.0",
    capabilities=BackendCapabilities(
        strengths=("human-motion", "fast-motion", "stylized"),
        weaknesses=("food-content", "translucent-materials", "physics-accuracy"),
        motion_quality=MotionQuality.GOOD,
        temporal_consistency=TemporalConsistency.MEDIUM,
    ),
    cost_per_10_seconds=0.25,
)

DEFAULT_BACKENDS: tuple[VideoBackend, ...] = (
    KLING_25_TURBO,
    KLING_21,
    KLING_20,
    KLING_26,
    KLING_26_PRO,
    KLING_26_MOTION_CONTROL,
    KLING_26_MOTION_CONTROL_PRO,
    KLING_AVATAR,
    RUNWAY_GEN3,
    VEO_31,
    VEO_2,
    LUMA_DREAM_MACHINE,
    HAILUO_MINIMAX,
    WAN_21,
    WAN_26,
    SEEDANCE_10,
)


def default_catalog() -> ProviderCatalog:
    """Get the production backend catalog."""
    return ProviderCatalog(DEFAULT_BACKENDS)
