"""Per-scene regeneration strategy engine.

A pure decision function over a scene's attempt history. It never generates
anything itself; SceneRegenerationLoop (or any other caller) invokes the
chosen backend, records a RegenerationAttempt and asks again.

Decisions by number of prior attempts:

    0   impossible -> simplify; otherwise router's pick
    1   partial result -> refine from reference; otherwise switch backend
    2   artifact available -> reference with minimal motion; otherwise
        drastic simplification on the stable backend
    3+  exactly 3 with artifact -> last reference attempt on the premium
        backend; otherwise give up in favour of stock footage
"""

import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from longform_engine.domain.enums import (
    AttemptOutcome,
    ComplexityCategory,
    Difficulty,
    RegenerationApproach,
    SceneType,
)
from longform_engine.domain.models import (
    ComplexityAnalysis,
    MotionSettings,
    RegenerationAttempt,
    RegenerationStrategy,
    StrategyChanges,
)
from longform_engine.logging import get_logger
from longform_engine.providers.catalog import ProviderCatalog, default_catalog
from longform_engine.services.provider_router import ProviderRouter

logger = get_logger(__name__)

STABLE_BACKEND = "kling-2.5-turbo"
PREMIUM_BACKEND = "veo-3.1"

DEFAULT_PROVIDER_PRIORITY = (
    "kling-2.5-turbo",
    "runway-gen3",
    "veo-3.1",
    "luma-dream-machine",
    "kling-2.1",
)
FALLBACK_PROVIDER_ORDER = ("kling-2.5-turbo", "veo-2", "wan-2.6", "hailuo-minimax")

SIMPLIFY_PATTERNS = (
    re.compile(r"\b(slowly|quickly|carefully|precisely|exactly)\b", re.IGNORECASE),
    re.compile(
        r"\b(from left to right|from top to bottom|clockwise|counter-clockwise)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b(translucent|transparent|glossy|matte|viscous)\b", re.IGNORECASE),
)

# Checked in order; first match names the subject of a drastically simplified prompt
DRASTIC_SUBJECTS = (
    (("hand", "finger"), "hands working"),
    (("food", "dough", "cooking"), "food preparation"),
    (("person", "people"), "person"),
    (("nature", "forest", "outdoor"), "nature scene"),
    (("product", "bottle", "package"), "product shot"),
)

SUGGESTIONS = {
    RegenerationApproach.REFERENCE: "Try using the current result as a reference to refine further.",
    RegenerationApproach.SIMPLIFY: "Consider simplifying the visual direction for better results.",
    RegenerationApproach.STOCK_FOOTAGE: (
        "AI generation may not be suitable for this shot. Consider searching for stock footage."
    ),
}

_SEVERITY_TAG = re.compile(r"\[major\]|\[minor\]")


@dataclass
class StrategyContext:
    """Everything the engine needs to decide the next attempt for one scene."""

    attempts: Sequence[RegenerationAttempt]
    complexity: ComplexityAnalysis
    current_prompt: str
    current_media_url: str | None = None
    scene_type: SceneType = SceneType.B_ROLL
    scene_id: str | None = None
    original_prompt: str | None = None


@dataclass(frozen=True)
class FailurePattern:
    """Summary of a scene's attempt history."""

    same_issues_repeating: bool
    has_partial_success: bool
    common_issues: tuple[str, ...]
    failed_providers: tuple[str, ...]


def normalize_issue(issue: str) -> str:
    """Lowercase an issue and strip its severity tag."""
    return _SEVERITY_TAG.sub("", issue.lower()).strip()


def analyze_failures(attempts: Sequence[RegenerationAttempt]) -> FailurePattern:
    """Find recurring issues (seen at least twice) across all attempts."""
    counts = Counter(normalize_issue(issue) for a in attempts for issue in a.issues)
    common = tuple(issue for issue, count in counts.items() if count >= 2)

    return FailurePattern(
        same_issues_repeating=bool(common),
        has_partial_success=any(a.result == AttemptOutcome.PARTIAL for a in attempts),
        common_issues=common,
        failed_providers=tuple(a.provider for a in attempts),
    )


def simplify_prompt(prompt: str) -> str:
    """Remove adverbs, directions and material terms models struggle with."""
    simplified = prompt
    for pattern in SIMPLIFY_PATTERNS:
        simplified = pattern.sub("", simplified).strip()

    simplified = re.sub(r"\s+", " ", simplified)
    simplified = re.sub(r",\s*,", ",", simplified).strip()
    return simplified or prompt


def drastically_simplify(prompt: str) -> str:
    """Reduce a prompt to a generic subject plus lighting description."""
    lower = prompt.lower()
    subject = "scene"
    for keywords, name in DRASTIC_SUBJECTS:
        if any(k in lower for k in keywords):
            subject = name
            break
    return f"{subject}, natural lighting, cinematic quality"


class RegenerationStrategyEngine:
    """Decides what to try next after a scene's generation attempts fail."""

    def __init__(
        self,
        router: ProviderRouter | None = None,
        catalog: ProviderCatalog | None = None,
    ) -> None:
        if catalog is None:
            catalog = router.catalog if router is not None else default_catalog()
        self.catalog = catalog
        self.router = router or ProviderRouter(self.catalog)

    def determine_strategy(self, context: StrategyContext) -> RegenerationStrategy:
        attempt_count = len(context.attempts)

        if attempt_count == 0:
            strategy = self._first_attempt(context)
        else:
            pattern = analyze_failures(context.attempts)
            logger.debug(
                "failure_pattern_analyzed",
                scene_id=context.scene_id,
                recurring=pattern.same_issues_repeating,
                partial=pattern.has_partial_success,
            )
            if attempt_count == 1:
                strategy = self._second_attempt(context, pattern)
            elif attempt_count == 2:
                strategy = self._third_attempt(context)
            else:
                strategy = self._fallback(context)

        logger.info(
            "regeneration_strategy_determined",
            scene_id=context.scene_id,
            attempt=attempt_count + 1,
            approach=str(strategy.approach),
            provider=strategy.changes.provider,
            confidence=strategy.confidence,
            category=str(context.complexity.category),
        )
        return strategy

    def _first_attempt(self, context: StrategyContext) -> RegenerationStrategy:
        complexity = context.complexity
        routing = self.router.route(context.current_prompt, context.scene_type)

        if complexity.category == ComplexityCategory.IMPOSSIBLE:
            return RegenerationStrategy(
                approach=RegenerationApproach.SIMPLIFY,
                changes=StrategyChanges(
                    prompt=complexity.recommendations.simplified_prompt
                    or simplify_prompt(context.current_prompt),
                    provider=routing.recommended_provider,
                ),
                reasoning="Prompt is extremely specific. Simplifying for better results.",
                confidence=0.4,
                warning=(
                    "This prompt may be impossible for current AI models. "
                    "Consider using stock footage."
                ),
            )

        provider = routing.recommended_provider
        return RegenerationStrategy(
            approach=RegenerationApproach.RETRY,
            changes=StrategyChanges(provider=provider),
            reasoning=f"Using {self.catalog.display_name(provider)} - best match for this content.",
            confidence=0.6 if complexity.category == ComplexityCategory.COMPLEX else 0.8,
            warning=complexity.user_warning,
        )

    def _second_attempt(
        self,
        context: StrategyContext,
        pattern: FailurePattern,
    ) -> RegenerationStrategy:
        last = context.attempts[-1]

        if context.current_media_url and last.result == AttemptOutcome.PARTIAL:
            return RegenerationStrategy(
                approach=RegenerationApproach.REFERENCE,
                changes=StrategyChanges(
                    provider=self._image_to_video_provider(context.complexity),
                    use_reference=True,
                    reference_url=context.current_media_url,
                ),
                reasoning="Previous result was close. Using it as a reference to refine.",
                confidence=0.7,
            )

        provider = self._alternative_provider(
            last.provider, context.complexity, pattern.failed_providers
        )
        prompt = None
        reasoning = f"Trying {self.catalog.display_name(provider)} for a different interpretation."
        if pattern.same_issues_repeating:
            prompt = context.complexity.recommendations.simplified_prompt or simplify_prompt(
                context.current_prompt
            )
            if prompt == context.current_prompt:
                prompt = None
            else:
                reasoning += f" Recurring issues: {', '.join(pattern.common_issues)}."

        return RegenerationStrategy(
            approach=RegenerationApproach.ALTERNATIVE_PROVIDER,
            changes=StrategyChanges(prompt=prompt, provider=provider),
            reasoning=reasoning,
            confidence=0.6,
        )

    def _third_attempt(self, context: StrategyContext) -> RegenerationStrategy:
        if context.current_media_url:
            return RegenerationStrategy(
                approach=RegenerationApproach.REFERENCE,
                changes=StrategyChanges(
                    provider=STABLE_BACKEND,
                    use_reference=True,
                    reference_url=context.current_media_url,
                    motion_settings=MotionSettings(style="environmental", intensity="minimal"),
                ),
                reasoning="Using current image with minimal motion for better consistency.",
                confidence=0.5,
            )

        return RegenerationStrategy(
            approach=RegenerationApproach.SIMPLIFY,
            changes=StrategyChanges(
                prompt=drastically_simplify(context.current_prompt),
                provider=STABLE_BACKEND,
            ),
            reasoning="Drastically simplified prompt for maximum compatibility.",
            confidence=0.4,
            warning="Prompt has been heavily simplified. Result may not match original intent.",
        )

    def _fallback(self, context: StrategyContext) -> RegenerationStrategy:
        if len(context.attempts) == 3 and context.current_media_url:
            return RegenerationStrategy(
                approach=RegenerationApproach.REFERENCE,
                changes=StrategyChanges(
                    provider=PREMIUM_BACKEND,
                    use_reference=True,
                    reference_url=context.current_media_url,
                    motion_settings=MotionSettings(style="subtle", intensity="low"),
                ),
                reasoning="Final AI attempt with premium provider using reference.",
                confidence=0.35,
                warning="This is the last AI attempt. If it fails, stock footage is recommended.",
            )

        return RegenerationStrategy(
            approach=RegenerationApproach.STOCK_FOOTAGE,
            changes=StrategyChanges(),
            reasoning="Multiple AI generation attempts have failed. Stock footage is recommended.",
            confidence=0.8,
            warning="AI generation is unsuitable for this shot. Please search for stock footage.",
        )

    def _alternative_provider(
        self,
        current: str,
        complexity: ComplexityAnalysis,
        exclude: Sequence[str] = (),
    ) -> str:
        priority = complexity.recommendations.best_providers or DEFAULT_PROVIDER_PRIORITY
        for provider in priority:
            if provider != current and provider not in exclude:
                return provider

        for provider in FALLBACK_PROVIDER_ORDER:
            if provider != current and provider not in exclude:
                return provider
        return STABLE_BACKEND

    def _image_to_video_provider(self, complexity: ComplexityAnalysis) -> str:
        if complexity.factors.specific_action.difficulty == Difficulty.VERY_HARD:
            return STABLE_BACKEND

        for provider in complexity.recommendations.best_providers:
            backend = self.catalog.get(provider)
            if backend is not None and backend.capabilities.image_to_video:
                return provider
        return STABLE_BACKEND

    @staticmethod
    def next_suggestion(strategy: RegenerationStrategy) -> str:
        """User-facing hint for the chosen approach."""
        if strategy.approach == RegenerationApproach.ALTERNATIVE_PROVIDER:
            return f"Try {strategy.changes.provider} for a different interpretation."
        return SUGGESTIONS.get(strategy.approach, "Try regenerating with adjusted settings.")
