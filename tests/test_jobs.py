"""Tests for render Celery tasks (run eagerly, no broker needed)."""

from unittest.mock import AsyncMock, MagicMock, patch

from longform_engine.exceptions import ChunkRenderError
from longform_engine.jobs.render_tasks import plan_chunks_task, render_long_video_task

INPUT_PROPS = {
    "scenes": [
        {"id": "a", "duration": 60, "type": "hook"},
        {"id": "b", "duration": 60},
        {"id": "c", "duration": 60},
    ],
    "fps": 30,
}


def _mock_orchestrator(render_video: AsyncMock) -> MagicMock:
    orchestrator = MagicMock()
    orchestrator.render_video = render_video
    return orchestrator


class TestPlanChunksTask:
    """Tests for the render.plan_chunks task."""

    def test_plans_chunks(self):
        result = plan_chunks_task.apply(args=[INPUT_PROPS]).get()

        assert result["chunked"] is True
        assert result["total_duration_seconds"] == 180
        assert [len(c["scenes"]) for c in result["chunks"]] == [2, 1]
        assert result["chunks"][1]["startFrame"] == 3600

    def test_custom_max_duration(self):
        result = plan_chunks_task.apply(args=[INPUT_PROPS, 60]).get()

        assert len(result["chunks"]) == 3

    def test_short_video_not_chunked(self):
        result = plan_chunks_task.apply(args=[{"scenes": [{"id": "a", "duration": 30}]}]).get()

        assert result["chunked"] is False
        assert len(result["chunks"]) == 1


class TestRenderLongVideoTask:
    """Tests for the render.long_video task."""

    def test_success(self):
        render_video = AsyncMock(return_value="https://cdn.example.com/final.mp4")

        with patch(
            "longform_engine.jobs.render_tasks.RenderOrchestrator",
            return_value=_mock_orchestrator(render_video),
        ):
            result = render_long_video_task.apply(args=["proj-1", INPUT_PROPS, "Promo"]).get()

        assert result == {
            "success": True,
            "project_id": "proj-1",
            "url": "https://cdn.example.com/final.mp4",
        }
        project_id, props, composition_id = render_video.await_args.args
        assert project_id == "proj-1"
        assert [s.id for s in props.scenes] == ["a", "b", "c"]
        assert composition_id == "Promo"

    def test_render_failure_is_reported(self):
        render_video = AsyncMock(
            side_effect=ChunkRenderError(chunk_index=1, total_chunks=3, attempts=5, message="boom")
        )

        with patch(
            "longform_engine.jobs.render_tasks.RenderOrchestrator",
            return_value=_mock_orchestrator(render_video),
        ):
            result = render_long_video_task.apply(args=["proj-1", INPUT_PROPS]).get()

        assert result["success"] is False
        assert result["project_id"] == "proj-1"
        assert "Chunk 2/3 failed" in result["error"]

    def test_no_scenes(self):
        with patch("longform_engine.jobs.render_tasks.RenderOrchestrator") as orchestrator_cls:
            result = render_long_video_task.apply(args=["proj-1", {"scenes": []}]).get()

        assert result == {"success": False, "project_id": "proj-1", "error": "No scenes to render"}
        orchestrator_cls.assert_not_called()
