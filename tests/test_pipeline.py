"""端到端流程测试，使用内存媒体源与替身视觉后端。"""

import threading

import pytest

from stylerecon.core import ReconConfig, VisionConfig
from stylerecon.pipeline import analyze_source, analyze_video
from stylerecon.sampling import SamplingCancelled
from stylerecon.vision import VisionRequestError


class StubBackend:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = 0

    def describe(self, frames, instruction):
        self.calls += 1
        if self.error:
            raise self.error
        return self.text


def _config(**vision) -> ReconConfig:
    return ReconConfig(vision=VisionConfig(**vision))


def test_nine_second_video_without_vision(make_source) -> None:
    backend = StubBackend(text="never used")

    result = analyze_source(make_source(duration=9.0), _config(), vision_backend=backend)

    assert [frame.timestamp for frame in result.frames] == [i * 0.75 for i in range(12)]
    assert result.frames[-1].timestamp == 8.25
    assert "0.35x (Intense Slow Motion)" in result.prompt.sections[3]
    assert "Detailed Vision Analysis" not in result.prompt.text
    assert backend.calls == 0


def test_vision_enabled_without_key_is_skipped(make_source) -> None:
    backend = StubBackend(text="never used")

    result = analyze_source(make_source(), _config(enabled=True, api_key=""), vision_backend=backend)

    assert backend.calls == 0
    assert result.descriptor.style.vision_text is None


def test_vision_augmentation_flows_into_prompt(make_source) -> None:
    backend = StubBackend(text="Natural telephoto compression and sensor grain.")

    result = analyze_source(make_source(), _config(enabled=True, api_key="k"), vision_backend=backend)

    assert backend.calls == 1
    assert result.descriptor.style.vision_text == "Natural telephoto compression and sensor grain."
    assert result.prompt.text.count("Detailed Vision Analysis:") == 1


def test_vision_failure_degrades_to_plain_prompt(make_source) -> None:
    source = make_source()
    plain = analyze_source(source, _config())
    backend = StubBackend(error=VisionRequestError("HTTP 401", status_code=401))

    degraded = analyze_source(make_source(), _config(enabled=True, api_key="bad"), vision_backend=backend)

    assert backend.calls == 1
    assert degraded.descriptor == plain.descriptor
    assert degraded.prompt.text == plain.prompt.text


def test_analyze_video_closes_source(monkeypatch, make_source) -> None:
    source = make_source(duration=3.0)
    monkeypatch.setattr("stylerecon.pipeline.open_media", lambda path: source)

    result = analyze_video("clip.mp4", ReconConfig())

    assert source.closed is True
    payload = result.to_dict()
    assert payload["media"]["duration"] == 3.0
    assert len(payload["frames"]) == 12
    assert payload["vision_augmented"] is False


def test_cancel_after_last_frame_skips_vision(make_source) -> None:
    cancel = threading.Event()
    backend = StubBackend(text="never used")

    def progress(event) -> None:
        if event.completed == event.total:
            cancel.set()

    with pytest.raises(SamplingCancelled):
        analyze_source(
            make_source(),
            _config(enabled=True, api_key="k"),
            vision_backend=backend,
            progress_callback=progress,
            cancel_event=cancel,
        )

    assert backend.calls == 0


def test_cancel_during_vision_request_is_honoured(make_source) -> None:
    cancel = threading.Event()

    class CancellingBackend(StubBackend):
        def describe(self, frames, instruction):
            cancel.set()
            return super().describe(frames, instruction)

    backend = CancellingBackend(text="late answer")

    with pytest.raises(SamplingCancelled):
        analyze_source(make_source(), _config(enabled=True, api_key="k"), vision_backend=backend, cancel_event=cancel)

    assert backend.calls == 1
