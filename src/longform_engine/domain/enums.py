"""Domain enumerations."""

from enum import StrEnum


class SceneType(StrEnum):
    """Narrative archetype of a scene."""

    B_ROLL = "b-roll"
    TALKING_HEAD = "talking-head"
    PRODUCT = "product"
    LIFESTYLE = "lifestyle"
    CINEMATIC = "cinematic"
    HOOK = "hook"
    CTA = "cta"
    TESTIMONIAL = "testimonial"
    EXPLANATION = "explanation"


class RenderPhase(StrEnum):
    """Phase of a long-video render."""

    PREPARING = "preparing"
    RENDERING = "rendering"
    DOWNLOADING = "downloading"
    CONCATENATING = "concatenating"
    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"


class RenderErrorKind(StrEnum):
    """Classification of a failed remote render attempt."""

    RATE_LIMITED = "rate_limited"
    AUDIO_PLAYBACK = "audio_playback"
    TRANSIENT = "transient"
    UNKNOWN = "unknown"


class ChunkStatus(StrEnum):
    """Status of a chunk render on the remote backend."""

    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    FAILED = "failed"
    NOT_FOUND = "not_found"


class ComplexityCategory(StrEnum):
    """How hard a visual direction is for a generation backend."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    IMPOSSIBLE = "impossible"


class Difficulty(StrEnum):
    """Difficulty of a single complexity factor."""

    EASY = "easy"
    HARD = "hard"
    VERY_HARD = "very-hard"


class AlternativeApproach(StrEnum):
    """Non-generative fallback suggested by complexity analysis."""

    REFERENCE_IMAGE = "reference-image"
    STOCK_FOOTAGE = "stock-footage"
    MOTION_GRAPHICS = "motion-graphics"


class MotionQuality(StrEnum):
    """Motion quality tier of a generation backend."""

    BASIC = "basic"
    GOOD = "good"
    EXCELLENT = "excellent"
    CINEMATIC = "cinematic"


class TemporalConsistency(StrEnum):
    """Temporal consistency tier of a generation backend."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AttemptOutcome(StrEnum):
    """Outcome of one generation attempt for a scene."""

    SUCCESS = "success"
    FAILURE = "failure"
    PARTIAL = "partial"


class RegenerationApproach(StrEnum):
    """What the regeneration engine decided to try next."""

    RETRY = "retry"
    SIMPLIFY = "simplify"
    REFERENCE = "reference"
    ALTERNATIVE_PROVIDER = "alternative-provider"
    STOCK_FOOTAGE = "stock-footage"


class QualityTier(StrEnum):
    """Requested quality tier for requirement-based routing."""

    STANDARD = "standard"
    PREMIUM = "premium"
