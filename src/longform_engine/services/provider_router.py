"""Generation backend routing.

Ranks the backends of a ProviderCatalog for a scene's visual direction.
Scoring is deterministic and stateless:

- baseline 0.5
- +0.15 per declared strength whose keywords appear in the text
- -0.2 per declared weakness whose keywords appear in the text
- complex/impossible content: +0.2 cinematic motion (+0.1 excellent),
  +0.1 high temporal consistency
- +0.25 on the complexity analysis' recommended list, -0.3 on its avoid list
- +0.1 for the caller's preferred backend
- +0.05 * (1 - cost per 10s)

Scores are clamped to [0, 1]; ties keep catalog order.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from longform_engine.domain.enums import (
    ComplexityCategory,
    MotionQuality,
    QualityTier,
    SceneType,
    TemporalConsistency,
)
from longform_engine.domain.models import (
    ComplexityAnalysis,
    ProviderAlternative,
    RoutingDecision,
)
from longform_engine.logging import get_logger
from longform_engine.providers.catalog import ProviderCatalog, VideoBackend, default_catalog
from longform_engine.services.complexity import ComplexityAnalyzer

logger = get_logger(__name__)

STRENGTH_KEYWORDS: dict[str, tuple[str, ...]] = {
    "human-faces": ("face", "person", "people", "man", "woman", "portrait", "expression"),
    "human-motion": ("walking", "running", "dancing", "moving", "gesture", "motion"),
    "hand-actions": ("hand", "hands", "finger", "holding", "touching", "grabbing"),
    "food-content": ("food", "cooking", "kitchen", "recipe", "ingredient", "dough", "pizza", "baking"),
    "product-shots": ("product", "bottle", "package", "item", "display", "showcase", "reveal"),
    "nature-scenes": ("nature", "forest", "ocean", "mountain", "landscape", "outdoor", "sky", "sunset"),
    "cinematic": ("cinematic", "dramatic", "epic", "film", "movie"),
    "b-roll": ("b-roll", "background", "ambient", "establishing", "supplementary"),
    "camera-movement": ("pan", "zoom", "dolly", "tracking", "orbit", "sweeping"),
    "talking-heads": ("talking", "speaking", "interview", "presenter", "host"),
    "stylized": ("stylized", "artistic", "creative", "unique"),
    "animated": ("animated", "animation", "cartoon", "motion graphic"),
    "fast-motion": ("fast", "quick", "rapid", "speed"),
    "slow-motion": ("slow motion", "slow-mo", "slow", "graceful"),
}

WEAKNESS_KEYWORDS: dict[str, tuple[str, ...]] = {
    "specific-actions": ("stretching", "pulling", "kneading", "precise", "exactly", "specific"),
    "text-in-video": ("text", "title", "subtitle", "logo", "writing", "words"),
    "complex-motion": ("complex", "intricate", "detailed motion", "elaborate"),
    "translucent-materials": ("translucent", "transparent", "see-through", "glass", "crystal"),
    "fine-details": ("detail", "intricate", "precise", "exact", "fine"),
    "multiple-subjects": ("multiple", "several", "many", "group of"),
    "physics-accuracy": ("physics", "realistic", "accurate", "gravity"),
}

AUDIO_VOICE_KEYWORDS = (
    "speaking", "talking", "says", "dialogue", "conversation",
    "interview", "narrator", "announcer", "presenter", "host",
)  # fmt: skip

AUDIO_SFX_KEYWORDS = (
    "splash", "pour", "sizzle", "crunch", "click", "footsteps",
    "door", "applause", "music", "knock", "bell", "ring",
)  # fmt: skip

AUDIO_AMBIENT_KEYWORDS = (
    "outdoor", "forest", "ocean", "city", "cafe", "restaurant",
    "office", "nature", "street", "crowd", "park", "beach",
)  # fmt: skip

ALTERNATIVE_APPROACH_NAMES = {
    "stock-footage": "stock footage",
    "reference-image": "a reference image",
    "motion-graphics": "motion graphics",
}


@dataclass(frozen=True)
class AudioRequirements:
    """Audio needs detected in a visual direction."""

    needs_audio: bool
    needs_voice: bool
    audio_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class SceneRequirements:
    """Explicit requirements that short-circuit scoring."""

    needs_audio: bool = False
    needs_voice: bool = False
    has_motion_reference: bool = False
    quality_tier: QualityTier = QualityTier.STANDARD
    audio_types: tuple[str, ...] = field(default_factory=tuple)


@dataclass
class _Scored:
    backend: VideoBackend
    score: float
    reason: str


def _matches(keywords: Iterable[str], text: str) -> bool:
    return any(k in text for k in keywords)


class ProviderRouter:
    """Ranks generation backends for scene visual directions."""

    def __init__(
        self,
        catalog: ProviderCatalog | None = None,
        analyzer: ComplexityAnalyzer | None = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()
        self.analyzer = analyzer or ComplexityAnalyzer()

    def route(
        self,
        visual_direction: str,
        scene_type: SceneType = SceneType.B_ROLL,
        preferred_provider: str | None = None,
    ) -> RoutingDecision:
        """Pick the best backend for a visual direction.

        Raises:
            ValueError: If no catalog backend is eligible
        """
        complexity = self.analyzer.analyze(visual_direction)
        candidates = self._candidates(complexity)
        if not candidates:
            raise ValueError("No generation backends available for routing")

        scored = self._score(candidates, visual_direction.lower(), complexity, preferred_provider)
        best = scored[0]

        decision = RoutingDecision(
            recommended_provider=best.backend.id,
            confidence=best.score,
            reasoning=self._reasoning(best.backend, visual_direction.lower(), complexity),
            alternatives=[
                ProviderAlternative(provider=s.backend.id, reason=s.reason) for s in scored[1:4]
            ],
            warnings=self._warnings(complexity, best.backend),
            complexity=complexity,
        )

        logger.info(
            "provider_routed",
            provider=best.backend.id,
            confidence=round(best.score, 2),
            scene_type=str(scene_type),
            category=str(complexity.category),
            direction=visual_direction[:50],
        )
        return decision

    def route_many(
        self,
        scenes: Iterable[tuple[str, SceneType]],
    ) -> list[RoutingDecision]:
        """Route several (visual direction, scene type) pairs independently."""
        return [self.route(direction, scene_type) for direction, scene_type in scenes]

    def route_with_requirements(
        self,
        visual_direction: str,
        scene_type: SceneType = SceneType.B_ROLL,
        requirements: SceneRequirements | None = None,
        preferred_provider: str | None = None,
    ) -> RoutingDecision:
        """Route with explicit audio or motion-reference requirements.

        Native-audio needs go to the Kling 2.6 family and motion references to
        Kling motion control, when those backends are in the catalog. Anything
        else falls back to ``route``.
        """
        if requirements is not None:
            premium = requirements.quality_tier == QualityTier.PREMIUM

            if requirements.needs_audio or requirements.needs_voice:
                backend = self.catalog.get("kling-2.6-pro" if premium else "kling-2.6")
                if backend is not None:
                    alternatives = [
                        ProviderAlternative("kling-2.6", "Standard audio quality at lower cost")
                        if premium
                        else ProviderAlternative("kling-2.6-pro", "Premium audio quality"),
                        ProviderAlternative("kling-avatar", "For longer talking head content"),
                    ]
                    audio = ", ".join(requirements.audio_types) or "detected"
                    logger.info("provider_routed_for_audio", provider=backend.id)
                    return RoutingDecision(
                        recommended_provider=backend.id,
                        confidence=0.95,
                        reasoning=[
                            f"{backend.name} selected for native audio generation",
                            f"Audio requirements: {audio}",
                            "Eliminates need for separate audio sync",
                            f"Cost: ${backend.cost_per_10_seconds:.2f}/10s",
                        ],
                        alternatives=alternatives,
                        warnings=[],
                        complexity=self.analyzer.analyze(visual_direction),
                    )

            if requirements.has_motion_reference:
                backend = self.catalog.get(
                    "kling-2.6-motion-control-pro" if premium else "kling-2.6-motion-control"
                )
                if backend is not None:
                    if premium:
                        alternatives = [
                            ProviderAlternative(
                                "kling-2.6-motion-control", "Standard motion control at lower cost"
                            ),
                            ProviderAlternative(
                                "kling-2.6-pro", "Standard video with audio (no motion transfer)"
                            ),
                        ]
                    else:
                        alternatives = [
                            ProviderAlternative(
                                "kling-2.6-motion-control-pro",
                                "Premium motion control for complex choreography",
                            ),
                            ProviderAlternative(
                                "kling-2.6", "Standard video with audio (no motion transfer)"
                            ),
                        ]
                    logger.info("provider_routed_for_motion_transfer", provider=backend.id)
                    return RoutingDecision(
                        recommended_provider=backend.id,
                        confidence=0.95,
                        reasoning=[
                            f"{backend.name} selected for motion transfer",
                            "Transfers motion from reference video to character",
                            f"Supports up to {backend.capabilities.max_duration_seconds} seconds duration",
                            f"Cost: ${backend.cost_per_10_seconds:.2f}/10s",
                        ],
                        alternatives=alternatives,
                        warnings=["Motion Control requires a reference video (3-30 seconds)"],
                        complexity=self.analyzer.analyze(visual_direction),
                    )

        if not preferred_provider:
            detected = self.detect_audio_requirements(visual_direction)
            if detected.needs_audio:
                logger.debug("audio_requirements_detected", audio_types=list(detected.audio_types))

        return self.route(visual_direction, scene_type, preferred_provider)

    @staticmethod
    def detect_audio_requirements(visual_direction: str) -> AudioRequirements:
        lower = visual_direction.lower()
        audio_types: list[str] = []

        needs_voice = _matches(AUDIO_VOICE_KEYWORDS, lower)
        if needs_voice:
            audio_types.append("voice")
        if _matches(AUDIO_SFX_KEYWORDS, lower):
            audio_types.append("sound-effect")
        if _matches(AUDIO_AMBIENT_KEYWORDS, lower):
            audio_types.append("ambient")

        return AudioRequirements(
            needs_audio=bool(audio_types),
            needs_voice=needs_voice,
            audio_types=tuple(audio_types),
        )

    def _candidates(self, complexity: ComplexityAnalysis) -> list[VideoBackend]:
        backends = list(self.catalog)
        if complexity.category == ComplexityCategory.IMPOSSIBLE:
            return [
                b
                for b in backends
                if b.capabilities.motion_quality in (MotionQuality.EXCELLENT, MotionQuality.CINEMATIC)
            ]
        return backends

    def _score(
        self,
        candidates: list[VideoBackend],
        text: str,
        complexity: ComplexityAnalysis,
        preferred_provider: str | None,
    ) -> list[_Scored]:
        hard = complexity.category in (ComplexityCategory.COMPLEX, ComplexityCategory.IMPOSSIBLE)
        recommendations = complexity.recommendations
        scored = []

        for backend in candidates:
            caps = backend.capabilities
            score = 0.5
            reason = ""

            for strength in caps.strengths:
                if _matches(STRENGTH_KEYWORDS.get(strength, ()), text):
                    score += 0.15
                    reason = f"Good for {strength}"

            for weakness in caps.weaknesses:
                if _matches(WEAKNESS_KEYWORDS.get(weakness, ()), text):
                    score -= 0.2

            if hard:
                if caps.motion_quality == MotionQuality.CINEMATIC:
                    score += 0.2
                elif caps.motion_quality == MotionQuality.EXCELLENT:
                    score += 0.1
                if caps.temporal_consistency == TemporalConsistency.HIGH:
                    score += 0.1

            if backend.id in recommendations.best_providers:
                score += 0.25
                reason = "Recommended for this content type"
            if backend.id in recommendations.avoid_providers:
                score -= 0.3

            if preferred_provider and backend.id == preferred_provider:
                score += 0.1
                reason = "User preferred provider"

            score += (1 - backend.cost_per_10_seconds) * 0.05
            scored.append(_Scored(backend, max(0.0, min(1.0, score)), reason))

        # sorted() is stable, so equal scores keep catalog order
        return sorted(scored, key=lambda s: s.score, reverse=True)

    def _reasoning(
        self,
        backend: VideoBackend,
        text: str,
        complexity: ComplexityAnalysis,
    ) -> list[str]:
        caps = backend.capabilities
        reasons = [f"{backend.name} selected as best match"]

        if complexity.category != ComplexityCategory.SIMPLE:
            reasons.append(f"Prompt complexity: {complexity.category}")

        matching = [s for s in caps.strengths if _matches(STRENGTH_KEYWORDS.get(s, ()), text)]
        if matching:
            reasons.append(f"Strengths match: {', '.join(matching)}")

        if caps.motion_quality in (MotionQuality.CINEMATIC, MotionQuality.EXCELLENT):
            reasons.append(f"Motion quality: {caps.motion_quality}")

        reasons.append(f"Cost: ${backend.cost_per_10_seconds:.2f}/10s")
        return reasons

    @staticmethod
    def _warnings(complexity: ComplexityAnalysis, backend: VideoBackend) -> list[str]:
        warnings: list[str] = []
        recommendations = complexity.recommendations

        if complexity.user_warning:
            warnings.append(complexity.user_warning)
        if complexity.category == ComplexityCategory.IMPOSSIBLE:
            warnings.append(f"Even {backend.name} may struggle with this prompt. Consider simplifying.")
        if recommendations.simplified_prompt:
            warnings.append(f'Suggested simplified prompt: "{recommendations.simplified_prompt}"')
        if recommendations.alternative_approach:
            name = ALTERNATIVE_APPROACH_NAMES[str(recommendations.alternative_approach)]
            warnings.append(f"Consider using {name} for better results.")

        return warnings
