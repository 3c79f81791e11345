"""Tests for generation backend routing."""

import pytest

from longform_engine.domain.enums import MotionQuality, QualityTier, SceneType
from longform_engine.providers.catalog import (
    BackendCapabilities,
    ProviderCatalog,
    VideoBackend,
    default_catalog,
)
from longform_engine.services.provider_router import ProviderRouter, SceneRequirements

IMPOSSIBLE = "Hands slowly stretching translucent pizza dough outward, then folding it carefully"


def _backend(
    backend_id: str,
    strengths: tuple[str, ...] = (),
    weaknesses: tuple[str, ...] = (),
    motion_quality: MotionQuality = MotionQuality.GOOD,
    cost: float = 0.5,
) -> VideoBackend:
    return VideoBackend(
        id=backend_id,
        name=backend_id.upper(),
        capabilities=BackendCapabilities(
            strengths=strengths,
            weaknesses=weaknesses,
            motion_quality=motion_quality,
        ),
        cost_per_10_seconds=cost,
    )


class TestCatalog:
    """Tests for the backend catalog."""

    def test_default_catalog(self):
        catalog = default_catalog()

        assert len(catalog) == 16
        assert "kling-2.5-turbo" in catalog
        assert catalog.display_name("veo-3.1") == catalog.get("veo-3.1").name
        assert catalog.display_name("unknown-backend") == "unknown-backend"

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            ProviderCatalog([_backend("a"), _backend("a")])


class TestRoute:
    """Tests for ProviderRouter.route."""

    def test_routing_is_deterministic(self):
        router = ProviderRouter()
        direction = "A chef kneading bread dough in a rustic kitchen"

        assert router.route(direction) == router.route(direction)

    def test_strength_match_wins(self):
        catalog = ProviderCatalog(
            [_backend("generalist"), _backend("foodie", strengths=("food-content",))]
        )

        decision = ProviderRouter(catalog).route("Fresh pasta in a bright kitchen")

        assert decision.recommended_provider == "foodie"
        assert decision.alternatives[0].provider == "generalist"
        assert "Strengths match: food-content" in decision.reasoning

    def test_weakness_penalized(self):
        catalog = ProviderCatalog(
            [_backend("texty", weaknesses=("text-in-video",)), _backend("plain")]
        )

        decision = ProviderRouter(catalog).route("A logo reveal with title text")

        assert decision.recommended_provider == "plain"

    def test_weakness_without_keywords_is_not_penalized(self):
        catalog = ProviderCatalog(
            [
                _backend("shaky", weaknesses=("fast-motion", "camera-movement", "human-motion")),
                _backend("plain"),
            ]
        )

        decision = ProviderRouter(catalog).route("A fast camera pan over a runner walking")

        assert decision.recommended_provider == "shaky"

    def test_ties_keep_catalog_order(self):
        catalog = ProviderCatalog([_backend("first"), _backend("second")])

        assert ProviderRouter(catalog).route("Abstract shapes").recommended_provider == "first"

    def test_preferred_provider_breaks_tie(self):
        catalog = ProviderCatalog([_backend("first"), _backend("second")])

        decision = ProviderRouter(catalog).route("Abstract shapes", preferred_provider="second")

        assert decision.recommended_provider == "second"

    def test_cheaper_backend_preferred_when_otherwise_equal(self):
        catalog = ProviderCatalog([_backend("pricey", cost=1.0), _backend("cheap", cost=0.1)])

        assert ProviderRouter(catalog).route("Abstract shapes").recommended_provider == "cheap"

    def test_impossible_prompt_only_uses_top_motion_backends(self):
        decision = ProviderRouter().route(IMPOSSIBLE)
        catalog = default_catalog()
        chosen = [decision.recommended_provider] + [a.provider for a in decision.alternatives]

        for backend_id in chosen:
            assert catalog.get(backend_id).capabilities.motion_quality in (
                MotionQuality.EXCELLENT,
                MotionQuality.CINEMATIC,
            )
        assert any("impossible" in w for w in decision.warnings)
        assert any("stock footage" in w for w in decision.warnings)

    def test_impossible_prompt_without_capable_backend(self):
        catalog = ProviderCatalog([_backend("basic", motion_quality=MotionQuality.BASIC)])

        with pytest.raises(ValueError):
            ProviderRouter(catalog).route(IMPOSSIBLE)

    def test_empty_catalog(self):
        with pytest.raises(ValueError):
            ProviderRouter(ProviderCatalog([])).route("Anything")

    def test_confidence_is_clamped(self):
        decision = ProviderRouter().route(
            "Cinematic dramatic epic film shot of a person walking through a forest at sunset"
        )

        assert 0.0 <= decision.confidence <= 1.0

    def test_route_many(self):
        decisions = ProviderRouter().route_many(
            [("A product bottle on a table", SceneType.PRODUCT), ("Mountain sunrise", SceneType.B_ROLL)]
        )

        assert len(decisions) == 2


class TestRouteWithRequirements:
    """Tests for requirement short-circuits."""

    def test_native_audio(self):
        decision = ProviderRouter().route_with_requirements(
            "A presenter talking to camera",
            SceneType.TALKING_HEAD,
            SceneRequirements(needs_audio=True, audio_types=("voice",)),
        )

        assert decision.recommended_provider == "kling-2.6"
        assert decision.confidence == 0.95
        assert "Audio requirements: voice" in decision.reasoning

    def test_native_audio_premium(self):
        decision = ProviderRouter().route_with_requirements(
            "A presenter talking to camera",
            requirements=SceneRequirements(needs_voice=True, quality_tier=QualityTier.PREMIUM),
        )

        assert decision.recommended_provider == "kling-2.6-pro"

    def test_motion_reference(self):
        decision = ProviderRouter().route_with_requirements(
            "A dancer performing a routine",
            requirements=SceneRequirements(has_motion_reference=True),
        )

        assert decision.recommended_provider == "kling-2.6-motion-control"
        assert decision.confidence == 0.95
        assert decision.warnings == ["Motion Control requires a reference video (3-30 seconds)"]

    def test_missing_backend_falls_back_to_scoring(self):
        catalog = ProviderCatalog([_backend("only")])

        decision = ProviderRouter(catalog).route_with_requirements(
            "A presenter talking", requirements=SceneRequirements(needs_audio=True)
        )

        assert decision.recommended_provider == "only"

    def test_no_requirements_matches_route(self):
        router = ProviderRouter()
        direction = "A product bottle on a marble table"

        assert router.route_with_requirements(direction) == router.route(direction)


class TestDetectAudioRequirements:
    """Tests for keyword audio detection."""

    def test_voice_and_ambient(self):
        detected = ProviderRouter.detect_audio_requirements("A presenter talking in a busy cafe")

        assert detected.needs_audio is True
        assert detected.needs_voice is True
        assert detected.audio_types == ("voice", "ambient")

    def test_silent(self):
        detected = ProviderRouter.detect_audio_requirements("Abstract shapes")

        assert detected.needs_audio is False
        assert detected.audio_types == ()
