"""HTTP render farm provider.

Submits compositions to a remote render farm (a Remotion-style distributed
renderer fronted by a small REST API) and polls the job until it finishes.

API shape:
- POST {base_url}/renders            -> {"renderId": ..., "bucketName": ...}
- GET  {base_url}/renders/{renderId} -> {"overallProgress": 0.4, "done": false,
                                         "outputFile": null, "errors": []}
"""

from typing import Any

import httpx

from longform_engine.adapters.renderer.base import RemoteRenderer, RenderHandle, RenderStatus
from longform_engine.config import settings
from longform_engine.domain.render_request import ChunkRenderRequest
from longform_engine.exceptions import (
    RenderBackendError,
    RenderConfigurationError,
    RenderNotFoundError,
)
from longform_engine.logging import get_logger

logger = get_logger(__name__)


class HttpRenderFarmProvider(RemoteRenderer):
    """Render farm provider speaking JSON over HTTP."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        poll_interval: float | None = None,
        max_poll_attempts: int | None = None,
        codec: str = "h264",
        image_format: str = "jpeg",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.render_api_key
        self.base_url = (base_url or settings.render_api_url).rstrip("/")
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.render_poll_interval
        )
        self.max_poll_attempts = max_poll_attempts or settings.render_max_poll_attempts
        self.codec = codec
        self.image_format = image_format
        self._transport = transport

        if not self.api_key:
            logger.warning("Render farm API key not configured")

    @property
    def name(self) -> str:
        return "http_render_farm"

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise RenderConfigurationError(
                "Render farm API key not configured - RENDER_API_KEY required"
            )
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def build_payload(self, request: ChunkRenderRequest) -> dict[str, Any]:
        """Build the submission payload for a render request."""
        return {
            "compositionId": request.composition_id,
            "inputProps": request.to_input_props(),
            "codec": self.codec,
            "imageFormat": self.image_format,
            "privacy": "public",
        }

    async def start_render(self, request: ChunkRenderRequest) -> RenderHandle:
        headers = self._headers()
        payload = self.build_payload(request)

        logger.info(
            "render_farm_submit",
            composition_id=request.composition_id,
            chunk_index=request.chunk_index,
            scene_count=len(request.scenes),
        )

        try:
            async with self._client(timeout=60.0) as client:
                response = await client.post(
                    f"{self.base_url}/renders",
                    headers=headers,
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise RenderBackendError(self._describe_status_error(e)) from e

        render_id = data.get("renderId") or data.get("id")
        if not render_id:
            raise RenderBackendError("No render ID returned from render farm")

        return RenderHandle(render_id=str(render_id), bucket_name=data.get("bucketName"))

    async def get_render_progress(self, handle: RenderHandle) -> RenderStatus:
        headers = self._headers()
        params = {"bucketName": handle.bucket_name} if handle.bucket_name else None

        try:
            async with self._client(timeout=30.0) as client:
                response = await client.get(
                    f"{self.base_url}/renders/{handle.render_id}",
                    headers=headers,
                    params=params,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise RenderNotFoundError(f"Render {handle.render_id} not found") from e
            raise RenderBackendError(self._describe_status_error(e)) from e

        errors = data.get("errors") or []
        return RenderStatus(
            overall_progress=float(data.get("overallProgress") or 0.0),
            done=bool(data.get("done")),
            output_file=data.get("outputFile"),
            errors=[e["message"] if isinstance(e, dict) else str(e) for e in errors],
        )

    async def health_check(self) -> bool:
        """Check if the render farm API is reachable."""
        if not self.api_key:
            return False

        try:
            async with self._client(timeout=10.0) as client:
                response = await client.get(
                    f"{self.base_url}/health",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error("render_farm_health_check_failed", error=str(e))
            return False

    @staticmethod
    def _describe_status_error(error: httpx.HTTPStatusError) -> str:
        response = error.response
        message = f"Render farm API error: {response.status_code} {response.reason_phrase}"
        body = response.text.strip()
        if body:
            message = f"{message} - {body[:500]}"
        return message
