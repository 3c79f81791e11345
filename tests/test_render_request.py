"""Tests for render request payloads."""

from longform_engine.domain.enums import SceneType
from longform_engine.domain.models import Scene
from longform_engine.domain.render_request import (
    CompositionProps,
    SoundDesignConfig,
    build_chunk_request,
    build_full_request,
    without_ambient_audio,
)
from longform_engine.services.chunk_planner import plan_chunks

INPUT_PROPS = {
    "scenes": [
        {
            "id": "intro",
            "duration": 50,
            "type": "hook",
            "visualDirection": "Sunrise over a city skyline",
            "mediaUrl": "https://cdn.example.com/intro.mp4",
            "narration": "Every morning starts somewhere.",
        },
        {"id": "body", "duration": 30, "type": "not-a-type"},
    ],
    "fps": 24,
    "soundDesignConfig": {"enabled": True, "ambientLayer": True, "impactSounds": False},
    "soundEffectsBaseUrl": "https://sfx.example.com/",
    "brandColor": "#ff6600",
}


class TestCompositionProps:
    """Tests for parsing caller input props."""

    def test_from_dict(self):
        props = CompositionProps.from_dict(INPUT_PROPS)

        assert props.fps == 24
        assert props.width == 1920
        assert props.total_duration_seconds == 80
        assert props.sound_design == SoundDesignConfig(impact_sounds=False)
        assert props.extra == {"brandColor": "#ff6600"}

        intro, body = props.scenes
        assert intro.scene_type == SceneType.HOOK
        assert intro.media_url == "https://cdn.example.com/intro.mp4"
        assert intro.props == {"narration": "Every morning starts somewhere."}
        assert body.scene_type == SceneType.B_ROLL
        assert body.visual_direction == ""

    def test_default_fps(self):
        props = CompositionProps.from_dict({"scenes": []}, default_fps=60)

        assert props.fps == 60
        assert props.scenes == []

    def test_scene_round_trip_keeps_extra_fields(self):
        scene = Scene.from_dict(INPUT_PROPS["scenes"][0])

        assert scene.to_dict()["narration"] == "Every morning starts somewhere."
        assert scene.to_dict()["type"] == "hook"


class TestChunkRequest:
    """Tests for per-chunk and full-video requests."""

    def test_chunk_input_props(self):
        props = CompositionProps.from_dict(INPUT_PROPS)
        chunk = plan_chunks(props.scenes, props.fps, 90)[0]

        payload = build_chunk_request(chunk, props, "UniversalVideo").to_input_props()

        assert payload["isChunk"] is True
        assert payload["chunkIndex"] == 0
        assert payload["fps"] == 24
        assert payload["brandColor"] == "#ff6600"
        assert payload["soundEffectsBaseUrl"] == "https://sfx.example.com/"
        assert payload["soundDesignConfig"]["impactSounds"] is False
        assert [s["chunkStartFrame"] for s in payload["scenes"]] == [0, 1200]
        assert payload["scenes"][0]["narration"] == "Every morning starts somewhere."

    def test_full_request(self):
        props = CompositionProps.from_dict(INPUT_PROPS)

        request = build_full_request(props, "UniversalVideo")
        payload = request.to_input_props()

        assert request.is_chunk is False
        assert payload["isChunk"] is False
        assert "chunkIndex" not in payload
        assert [s["chunkStartFrame"] for s in payload["scenes"]] == [0, 1200]

    def test_without_ambient_audio(self):
        props = CompositionProps.from_dict(INPUT_PROPS)
        request = build_full_request(props, "UniversalVideo")

        muted = without_ambient_audio(request)

        assert muted.sound_design.ambient_layer is False
        assert muted.sound_design.transition_sounds is True
        assert muted.sound_effects_base_url is None
        assert "soundEffectsBaseUrl" not in muted.to_input_props()
        # The original request is untouched
        assert request.sound_design.ambient_layer is True
        assert request.sound_effects_base_url == "https://sfx.example.com/"
