"""Scene regeneration loop.

Drives RegenerationStrategyEngine for one scene: ask for a strategy, generate
with the chosen backend, evaluate the clip, record the attempt, repeat until
the clip is accepted, the engine gives up in favour of stock footage, or the
attempt budget runs out. Attempt history lives only for the loop's lifetime.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from longform_engine.adapters.video_gen import (
    VideoGenProvider,
    VideoGenRequest,
    VideoGenResult,
    get_video_gen_provider,
)
from longform_engine.config import settings
from longform_engine.domain.enums import AttemptOutcome, RegenerationApproach
from longform_engine.domain.models import RegenerationAttempt, RegenerationStrategy, Scene
from longform_engine.logging import get_logger
from longform_engine.services.complexity import ComplexityAnalyzer
from longform_engine.services.regeneration import (
    STABLE_BACKEND,
    RegenerationStrategyEngine,
    StrategyContext,
)

logger = get_logger(__name__)


@dataclass
class ClipEvaluation:
    """Quality verdict for a generated clip."""

    outcome: AttemptOutcome
    quality_score: float | None = None
    issues: list[str] = field(default_factory=list)


ClipEvaluator = Callable[[Scene, VideoGenResult], Awaitable[ClipEvaluation]]


@dataclass
class RegenerationOutcome:
    """Final state of a scene's regeneration loop."""

    scene_id: str
    success: bool
    output_url: str | None
    attempts: list[RegenerationAttempt]
    last_strategy: RegenerationStrategy | None = None
    used_stock_footage: bool = False


class SceneRegenerationLoop:
    """Regenerates one scene's clip until it passes evaluation."""

    def __init__(
        self,
        engine: RegenerationStrategyEngine | None = None,
        provider: VideoGenProvider | None = None,
        analyzer: ComplexityAnalyzer | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.engine = engine or RegenerationStrategyEngine()
        self.provider = provider or get_video_gen_provider()
        self.analyzer = analyzer or ComplexityAnalyzer()
        self.max_attempts = max_attempts or settings.regeneration_max_attempts

    async def run(
        self,
        scene: Scene,
        evaluate: ClipEvaluator,
        prior_attempts: Sequence[RegenerationAttempt] = (),
    ) -> RegenerationOutcome:
        """Regenerate a scene's clip.

        Args:
            scene: Scene whose clip needs (re)generation
            evaluate: Caller-supplied quality check for a generated clip
            prior_attempts: History from earlier runs, if any

        Returns:
            RegenerationOutcome with the accepted clip URL, or the history
            of failed attempts
        """
        attempts = list(prior_attempts)
        original_prompt = scene.visual_direction or f"{scene.scene_type} scene"
        prompt = original_prompt
        media_url = scene.media_url
        strategy: RegenerationStrategy | None = None

        while len(attempts) < self.max_attempts:
            context = StrategyContext(
                attempts=attempts,
                complexity=self.analyzer.analyze(prompt),
                current_prompt=prompt,
                current_media_url=media_url,
                scene_type=scene.scene_type,
                scene_id=scene.id,
                original_prompt=original_prompt,
            )
            strategy = self.engine.determine_strategy(context)

            if strategy.approach == RegenerationApproach.STOCK_FOOTAGE:
                logger.info("scene_regeneration_abandoned", scene_id=scene.id, attempts=len(attempts))
                return RegenerationOutcome(
                    scene_id=scene.id,
                    success=False,
                    output_url=None,
                    attempts=attempts,
                    last_strategy=strategy,
                    used_stock_footage=True,
                )

            changes = strategy.changes
            if changes.prompt:
                prompt = changes.prompt
            provider = changes.provider or STABLE_BACKEND

            result = await self.provider.generate(
                VideoGenRequest(
                    prompt=prompt,
                    provider=provider,
                    duration_seconds=scene.duration_seconds,
                    reference_url=changes.reference_url if changes.use_reference else None,
                    motion_settings=changes.motion_settings,
                )
            )

            if result.success and result.output_url:
                evaluation = await evaluate(scene, result)
            else:
                evaluation = ClipEvaluation(
                    outcome=AttemptOutcome.FAILURE,
                    issues=[result.error_message or "Generation failed"],
                )

            attempts.append(
                RegenerationAttempt(
                    attempt_number=len(attempts) + 1,
                    provider=provider,
                    prompt=prompt,
                    result=evaluation.outcome,
                    quality_score=evaluation.quality_score,
                    issues=list(evaluation.issues),
                    output_url=result.output_url,
                )
            )
            logger.info(
                "scene_regeneration_attempt_recorded",
                scene_id=scene.id,
                attempt=len(attempts),
                provider=provider,
                outcome=str(evaluation.outcome),
                quality_score=evaluation.quality_score,
            )

            if evaluation.outcome == AttemptOutcome.SUCCESS:
                return RegenerationOutcome(
                    scene_id=scene.id,
                    success=True,
                    output_url=result.output_url,
                    attempts=attempts,
                    last_strategy=strategy,
                )
            if evaluation.outcome == AttemptOutcome.PARTIAL and result.output_url:
                media_url = result.output_url

        logger.warning("scene_regeneration_exhausted", scene_id=scene.id, attempts=len(attempts))
        return RegenerationOutcome(
            scene_id=scene.id,
            success=False,
            output_url=None,
            attempts=attempts,
            last_strategy=strategy,
        )
