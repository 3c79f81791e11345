"""Exception hierarchy for the rendering pipeline.

Expected, retriable remote failures (rate limits, flaky renders) are reported
through ``success=False`` result objects. The exceptions below are reserved for
conditions the caller has to act on.
"""


class LongformEngineError(Exception):
    """Base class for all pipeline errors."""


class RenderConfigurationError(LongformEngineError):
    """A backend is missing credentials or is otherwise unusable."""


class ChunkRenderError(LongformEngineError):
    """A chunk exhausted its retries; the whole render is aborted."""

    def __init__(self, chunk_index: int, total_chunks: int, attempts: int, message: str) -> None:
        self.chunk_index = chunk_index
        self.total_chunks = total_chunks
        self.attempts = attempts
        super().__init__(
            f"Chunk {chunk_index + 1}/{total_chunks} failed after {attempts} attempts: {message}"
        )


class StorageError(LongformEngineError):
    """Downloading from or uploading to object storage failed."""


class ConcatenationError(LongformEngineError):
    """Stream-copy concatenation of chunk files failed."""


class RenderCancelledError(LongformEngineError):
    """The render was cancelled by the caller."""


class RenderBackendError(LongformEngineError):
    """The remote render backend rejected or failed a request.

    Raised inside renderer adapters and converted into a failed
    ``RemoteRenderResult`` before it reaches the dispatcher.
    """


class RenderNotFoundError(RenderBackendError):
    """The backend has no record of the render being polled."""
