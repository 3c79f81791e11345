"""Base interface for scene video generation backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from longform_engine.domain.models import MotionSettings


@dataclass
class VideoGenResult:
    """Result from video generation."""

    success: bool
    output_url: str | None = None
    error_message: str | None = None
    metadata: dict[str, Any] | None = None
    duration_seconds: float | None = None


@dataclass
class VideoGenRequest:
    """Request for generating one scene clip."""

    prompt: str
    provider: str
    duration_seconds: float = 5.0
    reference_url: str | None = None
    motion_settings: MotionSettings | None = None
    aspect_ratio: str = "16:9"
    options: dict[str, Any] | None = None


class VideoGenProvider(ABC):
    """Abstract base class for video generation providers.

    Implementations:
    - StubVideoGenProvider: Returns deterministic URLs for testing

    ``request.provider`` names the backend chosen by the router or the
    regeneration engine; a provider may front several backends.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def generate(self, request: VideoGenRequest) -> VideoGenResult:
        """Generate a clip for the given request.

        Args:
            request: Prompt, target backend and optional reference image

        Returns:
            VideoGenResult with the clip URL or error information
        """
        ...

    async def health_check(self) -> bool:
        """Check if the provider is available and healthy."""
        return True
