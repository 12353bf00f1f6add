"""StyleRecon Typer CLI，便于在命令行执行分析或启动服务。"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from stylerecon.core import ReconConfig, load_config, setup_logging
from stylerecon.pipeline import AnalysisResult, analyze_video
from stylerecon.sampling import FrameCaptureError, SampleProgress, VideoOpenError

app = typer.Typer(help="StyleRecon 开发 CLI")


@app.callback()
def main() -> None:
    """StyleRecon 顶层 CLI，占位以展示子命令列表。"""

    return None


def _resolve_config(config_path: Optional[Path]) -> ReconConfig:
    return load_config(config_path) if config_path else load_config()


def _apply_overrides(
    cfg: ReconConfig,
    *,
    count: Optional[int],
    vision: Optional[bool],
    api_key: Optional[str],
) -> ReconConfig:
    updates = {}
    if count is not None:
        updates["sampling"] = cfg.sampling.model_copy(update={"count": count})
    vision_updates = {}
    if vision is not None:
        vision_updates["enabled"] = vision
    if api_key:
        vision_updates["api_key"] = api_key
    if vision_updates:
        updates["vision"] = cfg.vision.model_copy(update=vision_updates)
    if not updates:
        return cfg
    return cfg.model_copy(update=updates)


def _write_frames(result: AnalysisResult, frames_dir: Path) -> None:
    frames_dir.mkdir(parents=True, exist_ok=True)
    for frame in result.frames:
        (frames_dir / f"frame_{frame.index:03d}.jpg").write_bytes(frame.data)


@app.command("analyze")
def analyze_cmd(
    video: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True, help="待分析视频路径"),
    count: Optional[int] = typer.Option(None, "--count", "-n", min=1, help="采样帧数，默认取配置"),
    vision: Optional[bool] = typer.Option(None, "--vision/--no-vision", help="是否调用 Gemini 视觉增强"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Gemini API Key，默认读取 GEMINI_API_KEY"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="提示词输出路径，缺省打印到 stdout"),
    report: Optional[Path] = typer.Option(None, "--report", help="分析报告 JSON 输出路径"),
    frames_dir: Optional[Path] = typer.Option(None, "--frames-dir", help="采样帧 JPEG 输出目录"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="自定义配置文件"),
    log_level: str = typer.Option("INFO", "--log-level", help="日志级别"),
) -> None:
    """采样视频帧并重建视频生成提示词。"""

    setup_logging(log_level)
    cfg = _apply_overrides(_resolve_config(config_path), count=count, vision=vision, api_key=api_key)

    def progress(event: SampleProgress) -> None:
        typer.echo(f"采样 {event.completed}/{event.total} @ {event.frame.timestamp:.2f}s", err=True)

    try:
        result = analyze_video(video, cfg, progress_callback=progress)
    except (VideoOpenError, FrameCaptureError) as exc:
        typer.echo(f"无法分析视频：{exc}", err=True)
        raise typer.Exit(code=1) from exc

    if frames_dir is not None:
        _write_frames(result, frames_dir)
    if report is not None:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(json.dumps(result.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")

    if output is None:
        typer.echo(result.prompt.text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result.prompt.text, encoding="utf-8")
    suffix = "（含视觉增强）" if result.prompt.vision_augmented else ""
    typer.echo(f"采样 {len(result.frames)} 帧，提示词{suffix}输出到 {output}")


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("127.0.0.1", "--host", help="监听地址"),
    port: int = typer.Option(8000, "--port", help="监听端口"),
    log_level: str = typer.Option("INFO", "--log-level", help="日志级别"),
) -> None:
    """启动 HTTP 服务（上传视频、SSE 进度、设置管理）。"""

    import uvicorn

    setup_logging(log_level)
    uvicorn.run("stylerecon.server.app:app", host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":  # pragma: no cover
    app()
