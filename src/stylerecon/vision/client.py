"""Gemini generateContent 的 httpx 封装。"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx

from stylerecon.core import SampledFrame, VisionConfig, get_logger

logger = get_logger(__name__)


class VisionRequestError(RuntimeError):
    """视觉接口调用失败。transient 为 True 表示超时/限流/服务端错误等可重试类。"""

    def __init__(self, message: str, *, status_code: Optional[int] = None, transient: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.transient = transient


class GeminiVisionClient:
    """向 Gemini 发送多张 JPEG 与一段指令，返回模型的自由文本。"""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_s: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Gemini API key is required")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_config(cls, config: VisionConfig, *, transport: httpx.BaseTransport | None = None) -> "GeminiVisionClient":
        return cls(
            config.api_key,
            model=config.model,
            base_url=config.base_url,
            timeout_s=config.timeout_s,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def describe(self, frames: Sequence[SampledFrame], instruction: str) -> str:
        payload = build_request_payload(frames, instruction)
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                resp = client.post(
                    self.endpoint,
                    headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.TimeoutException as exc:
            raise VisionRequestError(f"Gemini request timed out after {self.timeout_s}s", transient=True) from exc
        except httpx.HTTPError as exc:
            raise VisionRequestError(f"Gemini request failed: {exc}", transient=True) from exc

        if resp.status_code >= 400:
            transient = resp.status_code == 429 or resp.status_code >= 500
            raise VisionRequestError(
                f"Gemini returned HTTP {resp.status_code}: {_error_message(resp)}",
                status_code=resp.status_code,
                transient=transient,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise VisionRequestError("Gemini response is not valid JSON", status_code=resp.status_code) from exc

        try:
            text = extract_text(data)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise VisionRequestError("Gemini response has an unexpected shape", status_code=resp.status_code) from exc
        if not text:
            raise VisionRequestError("Gemini response carries no text", status_code=resp.status_code)
        logger.info("Gemini (%s) returned %d characters", self.model, len(text))
        return text


def build_request_payload(frames: Sequence[SampledFrame], instruction: str) -> Dict[str, Any]:
    parts: List[Dict[str, Any]] = [{"text": instruction}]
    for frame in frames:
        parts.append({"inline_data": {"mime_type": frame.mime_type, "data": frame.to_base64()}})
    return {"contents": [{"role": "user", "parts": parts}]}


def extract_text(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list):
        return None
    texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    joined = "".join(texts).strip()
    return joined or None


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return str(data["error"].get("message", ""))
    return resp.text[:200]
