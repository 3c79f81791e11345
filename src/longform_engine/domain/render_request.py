"""Typed render requests sent to the remote rendering backend.

Optional feature layers (sound design) are explicit fields, and payload
variations are named transformation functions returning new requests.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from longform_engine.domain.models import ChunkPlan, ChunkScene, Scene

_PROPS_KEYS = {"scenes", "fps", "width", "height", "soundDesignConfig", "soundEffectsBaseUrl"}


@dataclass(frozen=True)
class SoundDesignConfig:
    """Sound-design layers mixed in by the composition."""

    enabled: bool = True
    ambient_layer: bool = True
    transition_sounds: bool = True
    impact_sounds: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SoundDesignConfig":
        if not data:
            return cls()
        return cls(
            enabled=bool(data.get("enabled", True)),
            ambient_layer=bool(data.get("ambientLayer", True)),
            transition_sounds=bool(data.get("transitionSounds", True)),
            impact_sounds=bool(data.get("impactSounds", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "ambientLayer": self.ambient_layer,
            "transitionSounds": self.transition_sounds,
            "impactSounds": self.impact_sounds,
        }


@dataclass
class CompositionProps:
    """Shared composition properties for a whole video."""

    scenes: list[Scene]
    fps: int = 30
    width: int = 1920
    height: int = 1080
    sound_design: SoundDesignConfig = field(default_factory=SoundDesignConfig)
    sound_effects_base_url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_fps: int = 30) -> "CompositionProps":
        """Parse composition input props as submitted by callers."""
        return cls(
            scenes=[Scene.from_dict(s) for s in data.get("scenes") or []],
            fps=int(data.get("fps") or default_fps),
            width=int(data.get("width") or 1920),
            height=int(data.get("height") or 1080),
            sound_design=SoundDesignConfig.from_dict(data.get("soundDesignConfig")),
            sound_effects_base_url=data.get("soundEffectsBaseUrl"),
            extra={k: v for k, v in data.items() if k not in _PROPS_KEYS},
        )

    @property
    def total_duration_seconds(self) -> float:
        return sum(s.duration_seconds for s in self.scenes)


@dataclass(frozen=True)
class ChunkRenderRequest:
    """Everything the remote backend needs to render one unit of video."""

    composition_id: str
    scenes: tuple[ChunkScene, ...]
    fps: int
    width: int
    height: int
    sound_design: SoundDesignConfig
    is_chunk: bool = True
    chunk_index: int | None = None
    sound_effects_base_url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def to_input_props(self) -> dict[str, Any]:
        """Serialize to the composition's input props."""
        props: dict[str, Any] = {
            **self.extra,
            "scenes": [s.to_dict() for s in self.scenes],
            "fps": self.fps,
            "width": self.width,
            "height": self.height,
            "soundDesignConfig": self.sound_design.to_dict(),
            "isChunk": self.is_chunk,
        }
        if self.chunk_index is not None:
            props["chunkIndex"] = self.chunk_index
        if self.sound_effects_base_url:
            props["soundEffectsBaseUrl"] = self.sound_effects_base_url
        return props


def build_chunk_request(
    chunk: ChunkPlan,
    props: CompositionProps,
    composition_id: str,
) -> ChunkRenderRequest:
    """Build the request for one chunk: shared props with the chunk's own scenes."""
    return ChunkRenderRequest(
        composition_id=composition_id,
        scenes=tuple(chunk.scenes),
        fps=props.fps,
        width=props.width,
        height=props.height,
        sound_design=props.sound_design,
        is_chunk=True,
        chunk_index=chunk.chunk_index,
        sound_effects_base_url=props.sound_effects_base_url,
        extra=dict(props.extra),
    )


def build_full_request(props: CompositionProps, composition_id: str) -> ChunkRenderRequest:
    """Build a request that renders the whole composition as a single unit."""
    scenes: list[ChunkScene] = []
    frame = 0
    for scene in props.scenes:
        scenes.append(ChunkScene(scene=scene, chunk_start_frame=frame))
        frame += round(scene.duration_seconds * props.fps)

    return ChunkRenderRequest(
        composition_id=composition_id,
        scenes=tuple(scenes),
        fps=props.fps,
        width=props.width,
        height=props.height,
        sound_design=props.sound_design,
        is_chunk=False,
        sound_effects_base_url=props.sound_effects_base_url,
        extra=dict(props.extra),
    )


def without_ambient_audio(request: ChunkRenderRequest) -> ChunkRenderRequest:
    """Return a copy of the request with the ambient audio layer disabled.

    Used after the renderer reports an audio playback failure; the sound
    effects base URL is dropped as well so no ambient asset is fetched.
    """
    return replace(
        request,
        sound_design=replace(request.sound_design, ambient_layer=False),
        sound_effects_base_url=None,
    )
