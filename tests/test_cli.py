"""Tests for the command-line interface."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from longform_engine import __version__
from longform_engine.cli import app
from longform_engine.exceptions import ConcatenationError

runner = CliRunner()

SCENES = [
    {"id": "intro", "duration": 60, "type": "hook"},
    {"id": "middle", "duration": 60},
    {"id": "outro", "duration": 30, "type": "cta"},
]


@pytest.fixture
def props_file(tmp_path: Path) -> Path:
    path = tmp_path / "props.json"
    path.write_text(json.dumps({"scenes": SCENES, "fps": 30}))
    return path


def _orchestrator_cls(render_video: AsyncMock) -> MagicMock:
    orchestrator = MagicMock()
    orchestrator.render_video = render_video
    return MagicMock(return_value=orchestrator)


class TestCli:
    """Tests for CLI commands."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"Longform Engine v{__version__}" in result.output

    def test_plan(self, props_file: Path):
        result = runner.invoke(app, ["plan", str(props_file)])

        assert result.exit_code == 0
        assert "Chunk Plan" in result.output
        assert "Chunked rendering: 2 chunks" in result.output

    def test_plan_accepts_scene_list(self, tmp_path: Path):
        path = tmp_path / "scenes.json"
        path.write_text(json.dumps(SCENES[:1]))

        result = runner.invoke(app, ["plan", str(path)])

        assert result.exit_code == 0
        assert "Below the chunk threshold" in result.output

    def test_plan_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["plan", str(tmp_path / "missing.json")])

        assert result.exit_code == 1

    def test_route(self):
        result = runner.invoke(app, ["route", "A product bottle on a marble table", "-s", "product"])

        assert result.exit_code == 0
        assert "Routing Decision" in result.output

    def test_route_unknown_scene_type(self):
        result = runner.invoke(app, ["route", "Anything", "--scene-type", "documentary"])

        assert result.exit_code == 1
        assert "Unknown scene type" in result.output

    def test_strategy(self):
        result = runner.invoke(
            app, ["strategy", "A sunset over the ocean", "-t", "kling-2.5-turbo", "-t", "runway-gen3"]
        )

        assert result.exit_code == 0
        assert "Attempt 3 Strategy" in result.output

    def test_render_local(self, props_file: Path):
        render_video = AsyncMock(return_value="https://cdn.example.com/final.mp4")

        with patch(
            "longform_engine.services.render_orchestrator.RenderOrchestrator",
            _orchestrator_cls(render_video),
        ):
            result = runner.invoke(app, ["render", str(props_file), "-p", "proj-cli", "--local"])

        assert result.exit_code == 0
        assert "https://cdn.example.com/final.mp4" in result.output
        assert render_video.await_args.args[0] == "proj-cli"

    def test_render_local_failure(self, props_file: Path):
        render_video = AsyncMock(side_effect=ConcatenationError("ffmpeg exited with code 1"))

        with patch(
            "longform_engine.services.render_orchestrator.RenderOrchestrator",
            _orchestrator_cls(render_video),
        ):
            result = runner.invoke(app, ["render", str(props_file), "-p", "proj-cli", "--local"])

        assert result.exit_code == 1
        assert "Render failed" in result.output

    def test_render_enqueues_task(self, props_file: Path):
        task = MagicMock()
        task.delay.return_value = MagicMock(id="task-123")

        with patch("longform_engine.jobs.render_tasks.render_long_video_task", task):
            result = runner.invoke(app, ["render", str(props_file), "-p", "proj-cli"])

        assert result.exit_code == 0
        assert "task-123" in result.output
        assert task.delay.call_args.kwargs["project_id"] == "proj-cli"
        assert task.delay.call_args.kwargs["input_props"]["scenes"] == SCENES
