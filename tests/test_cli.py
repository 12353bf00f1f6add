"""CLI 行为测试。"""

import json

from typer.testing import CliRunner

from stylerecon.cli import app
from stylerecon.core import ReconConfig
from stylerecon.sampling import VideoOpenError

runner = CliRunner()


def test_analyze_cli_writes_prompt_report_and_frames(monkeypatch, tmp_path, make_source):
    video = tmp_path / "demo.mp4"
    video.write_bytes(b"fake")
    output = tmp_path / "out" / "prompt.txt"
    report = tmp_path / "out" / "report.json"
    frames_dir = tmp_path / "frames"

    monkeypatch.setattr("stylerecon.cli.load_config", lambda *_, **__: ReconConfig())
    monkeypatch.setattr("stylerecon.pipeline.open_media", lambda path: make_source(duration=9.0))

    result = runner.invoke(
        app,
        [
            "analyze",
            str(video),
            "--count",
            "4",
            "--output",
            str(output),
            "--report",
            str(report),
            "--frames-dir",
            str(frames_dir),
        ],
    )

    assert result.exit_code == 0, result.output
    text = output.read_text()
    assert text.startswith("[CAMERA]")
    assert "0.35x (Intense Slow Motion)" in text
    data = json.loads(report.read_text())
    assert [frame["timestamp"] for frame in data["frames"]] == [0.0, 2.25, 4.5, 6.75]
    assert data["analysis"]["segments"][1]["kind"] == "Emphasis"
    assert len(list(frames_dir.glob("frame_*.jpg"))) == 4


def test_analyze_cli_prints_prompt_to_stdout(monkeypatch, tmp_path, make_source):
    video = tmp_path / "demo.mp4"
    video.write_bytes(b"fake")

    monkeypatch.setattr("stylerecon.cli.load_config", lambda *_, **__: ReconConfig())
    monkeypatch.setattr("stylerecon.pipeline.open_media", lambda path: make_source(duration=2.0))

    result = runner.invoke(app, ["analyze", str(video), "--count", "2", "--no-vision"])

    assert result.exit_code == 0, result.output
    assert "--sora-recon-v4 --broadcast-mode" in result.output


def test_analyze_cli_reports_unreadable_video(monkeypatch, tmp_path):
    video = tmp_path / "broken.mp4"
    video.write_bytes(b"fake")

    def _raise(path):
        raise VideoOpenError(f"无法打开视频: {path}")

    monkeypatch.setattr("stylerecon.cli.load_config", lambda *_, **__: ReconConfig())
    monkeypatch.setattr("stylerecon.pipeline.open_media", _raise)

    result = runner.invoke(app, ["analyze", str(video)])

    assert result.exit_code == 1
