"""Gemini 客户端测试，使用 httpx.MockTransport 替代网络。"""

import base64
import json
from pathlib import Path

import httpx
import pytest

from stylerecon.analysis import ConstantDemoAnalyzer
from stylerecon.core import MediaInfo, SampledFrame, VisionConfig
from stylerecon.vision import GeminiVisionClient, VisionRequestError, augment


FRAMES = [SampledFrame(index=i, timestamp=float(i), data=f"jpeg-{i}".encode()) for i in range(3)]


def _client(handler) -> GeminiVisionClient:
    return GeminiVisionClient("test-key", model="gemini-test", transport=httpx.MockTransport(handler))


def test_describe_sends_instruction_and_inline_images() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["key"] = request.headers["x-goog-api-key"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": "Telephoto "}, {"text": "compression."}]}}]},
        )

    text = _client(handler).describe(FRAMES, "Analyze these frames.")

    assert text == "Telephoto compression."
    assert captured["url"].endswith("/models/gemini-test:generateContent")
    assert captured["key"] == "test-key"
    parts = captured["body"]["contents"][0]["parts"]
    assert parts[0] == {"text": "Analyze these frames."}
    assert len(parts) == 4
    assert parts[1]["inline_data"]["mime_type"] == "image/jpeg"
    assert base64.b64decode(parts[1]["inline_data"]["data"]) == b"jpeg-0"


@pytest.mark.parametrize("status,transient", [(401, False), (403, False), (429, True), (503, True)])
def test_http_errors_are_classified(status: int, transient: bool) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": {"message": "nope"}})

    with pytest.raises(VisionRequestError) as excinfo:
        _client(handler).describe(FRAMES, "x")

    assert excinfo.value.status_code == status
    assert excinfo.value.transient is transient
    assert "nope" in str(excinfo.value)


def test_timeout_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(VisionRequestError) as excinfo:
        _client(handler).describe(FRAMES, "x")

    assert excinfo.value.transient is True


def test_network_error_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(VisionRequestError) as excinfo:
        _client(handler).describe(FRAMES, "x")

    assert excinfo.value.transient is True


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}),
        httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": None}]}}]}),
        httpx.Response(200, json={"candidates": [{"content": {"parts": {"text": "not a list"}}}]}),
    ],
)
def test_malformed_response_is_permanent(response: httpx.Response) -> None:
    with pytest.raises(VisionRequestError) as excinfo:
        _client(lambda request: response).describe(FRAMES, "x")

    assert excinfo.value.transient is False


def test_from_config_and_missing_key() -> None:
    client = GeminiVisionClient.from_config(VisionConfig(api_key="k", model="m", base_url="https://example.test/v1/"))

    assert client.endpoint == "https://example.test/v1/models/m:generateContent"
    with pytest.raises(ValueError):
        GeminiVisionClient("")


def test_null_text_part_is_skipped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": None}, {"text": "Grain."}]}}]})

    assert _client(handler).describe(FRAMES, "x") == "Grain."


def test_augment_absorbs_null_text_response() -> None:
    descriptor = ConstantDemoAnalyzer().analyze(
        MediaInfo(path=Path("clip.mp4"), duration=9.0, width=1920, height=1080, fps=30.0)
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": None}]}}]})

    assert augment(FRAMES, descriptor, _client(handler)) is descriptor
