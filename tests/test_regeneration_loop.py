"""Tests for the scene regeneration loop."""

import pytest

from longform_engine.adapters.video_gen import VideoGenResult
from longform_engine.adapters.video_gen.stub import StubVideoGenProvider
from longform_engine.domain.enums import AttemptOutcome, RegenerationApproach
from longform_engine.domain.models import RegenerationAttempt, Scene
from longform_engine.services.regeneration import STABLE_BACKEND
from longform_engine.services.regeneration_loop import ClipEvaluation, SceneRegenerationLoop


class ScriptedEvaluator:
    """Evaluator returning queued verdicts, then repeating the last one."""

    def __init__(self, *verdicts: ClipEvaluation) -> None:
        self.verdicts = list(verdicts)
        self.calls: list[tuple[Scene, VideoGenResult]] = []

    async def __call__(self, scene: Scene, result: VideoGenResult) -> ClipEvaluation:
        self.calls.append((scene, result))
        if len(self.verdicts) > 1:
            return self.verdicts.pop(0)
        return self.verdicts[0]


FAIL = ClipEvaluation(outcome=AttemptOutcome.FAILURE, quality_score=0.2, issues=["blurry horizon"])
PARTIAL = ClipEvaluation(outcome=AttemptOutcome.PARTIAL, quality_score=0.6)
PASS = ClipEvaluation(outcome=AttemptOutcome.SUCCESS, quality_score=0.9)


@pytest.fixture
def scene() -> Scene:
    return Scene(id="scene-1", duration_seconds=6, visual_direction="A sunset over the ocean")


class TestSceneRegenerationLoop:
    """Tests for SceneRegenerationLoop.run."""

    @pytest.mark.asyncio
    async def test_accepts_first_good_clip(self, scene, video_gen_provider):
        provider = video_gen_provider
        loop = SceneRegenerationLoop(provider=provider)

        outcome = await loop.run(scene, ScriptedEvaluator(PASS))

        assert outcome.success is True
        assert outcome.output_url.startswith("https://stub-clips.local/")
        assert len(outcome.attempts) == 1
        assert outcome.attempts[0].result == AttemptOutcome.SUCCESS
        assert outcome.attempts[0].quality_score == 0.9
        assert provider.requests[0].duration_seconds == 6
        assert provider.requests[0].reference_url is None

    @pytest.mark.asyncio
    async def test_partial_clip_becomes_reference(self, scene, video_gen_provider):
        provider = video_gen_provider
        loop = SceneRegenerationLoop(provider=provider)

        outcome = await loop.run(scene, ScriptedEvaluator(PARTIAL, PASS))

        assert outcome.success is True
        assert outcome.last_strategy.approach == RegenerationApproach.REFERENCE
        assert provider.requests[1].reference_url == outcome.attempts[0].output_url
        assert provider.requests[1].provider == STABLE_BACKEND
        assert outcome.output_url == outcome.attempts[1].output_url

    @pytest.mark.asyncio
    async def test_repeated_failures_end_in_stock_footage(self, scene):
        provider = StubVideoGenProvider()
        loop = SceneRegenerationLoop(provider=provider)

        outcome = await loop.run(scene, ScriptedEvaluator(FAIL))

        assert outcome.success is False
        assert outcome.used_stock_footage is True
        assert outcome.output_url is None
        assert [a.attempt_number for a in outcome.attempts] == [1, 2, 3]
        assert outcome.last_strategy.approach == RegenerationApproach.STOCK_FOOTAGE
        # Second attempt switches backend, third drastically simplifies
        assert provider.requests[1].provider != provider.requests[0].provider
        assert provider.requests[2].prompt == "scene, natural lighting, cinematic quality"

    @pytest.mark.asyncio
    async def test_generation_failure_is_recorded_without_evaluation(self, scene):
        provider = StubVideoGenProvider(failures=["Quota exceeded"])
        evaluator = ScriptedEvaluator(PASS)
        loop = SceneRegenerationLoop(provider=provider)

        outcome = await loop.run(scene, evaluator)

        assert outcome.success is True
        assert len(evaluator.calls) == 1
        assert outcome.attempts[0].result == AttemptOutcome.FAILURE
        assert outcome.attempts[0].issues == ["Quota exceeded"]
        assert outcome.attempts[0].output_url is None

    @pytest.mark.asyncio
    async def test_attempt_budget(self, scene, video_gen_provider):
        loop = SceneRegenerationLoop(provider=video_gen_provider, max_attempts=2)

        outcome = await loop.run(scene, ScriptedEvaluator(FAIL))

        assert outcome.success is False
        assert outcome.used_stock_footage is False
        assert len(outcome.attempts) == 2

    @pytest.mark.asyncio
    async def test_prior_attempts_count_towards_history(self, scene):
        provider = StubVideoGenProvider()
        prior = [
            RegenerationAttempt(
                attempt_number=i,
                provider=STABLE_BACKEND,
                prompt=scene.visual_direction,
                result=AttemptOutcome.FAILURE,
            )
            for i in (1, 2, 3, 4)
        ]

        outcome = await SceneRegenerationLoop(provider=provider).run(
            scene, ScriptedEvaluator(PASS), prior_attempts=prior
        )

        assert outcome.used_stock_footage is True
        assert provider.requests == []
        assert len(outcome.attempts) == 4
