"""
Remote Braille recognition through a hosted vision model.

An alternative to the local grid scanner: the image is JPEG-encoded, sent
with a fixed prompt to an OpenRouter-compatible chat completion endpoint,
and the JSON object in the reply is turned into a RecognitionResult.
The local pipeline never depends on this module.
"""

import base64
import json
import logging
import re
import time
from typing import Any, Dict, Optional

import numpy as np
import requests

from ..config import ResultStatus
from .pixels import PixelBuffer
from .result import RecognitionResult

logger = logging.getLogger(__name__)


PROMPT = (
    "You are reading a photograph of Braille. Locate every six-dot Braille "
    "cell, decode it using standard English Grade 1 Braille (a number sign "
    "makes the next a-j cell a digit) and reply with only a JSON object of "
    "the form {\"text\": string, \"brailleText\": string, \"confidence\": "
    "number between 0 and 1, \"estimatedDots\": integer, \"estimatedCells\": "
    "integer}. Use Unicode Braille characters for brailleText. If no Braille "
    "is visible, reply with an empty text and confidence 0."
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_reply(content: Any) -> Dict[str, Any]:
    """
    Extract the JSON object from a model reply.

    Accepts a plain string (optionally wrapped in a Markdown code fence) or a
    list of content parts.

    Raises:
        ValueError: If no JSON object can be parsed
    """
    if isinstance(content, list):
        content = "".join(
            part.get("text", "") for part in content if isinstance(part, dict)
        )
    if not isinstance(content, str):
        raise ValueError(f"Unexpected reply content: {type(content).__name__}")

    content = _FENCE_RE.sub("", content.strip())

    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end < start:
        raise ValueError("Reply does not contain a JSON object")

    parsed = json.loads(content[start:end + 1])
    if not isinstance(parsed, dict):
        raise ValueError("Reply JSON is not an object")
    return parsed


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class RemoteRecognizer:
    """Braille recognition using a hosted vision-language model."""

    DEFAULT_URL = "https://openrouter.ai/api/v1/chat/completions"
    DEFAULT_MODEL = "google/gemini-2.5-flash-lite"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_URL,
        timeout: float = 30.0,
        jpeg_quality: int = 80
    ):
        if not api_key:
            raise ValueError("Remote recognizer requires an API key")
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.timeout = timeout
        self.jpeg_quality = jpeg_quality

    @property
    def name(self) -> str:
        return "remote"

    def encode_image(self, buffer: PixelBuffer) -> str:
        """JPEG-encode a buffer and return it as base64 text."""
        import cv2

        bgr = cv2.cvtColor(np.ascontiguousarray(buffer.data), cv2.COLOR_RGBA2BGR)
        ok, encoded = cv2.imencode('.jpg', bgr, [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality])
        if not ok:
            raise ValueError("Could not JPEG-encode image")
        return base64.b64encode(encoded.tobytes()).decode('utf-8')

    def build_request(self, image_b64: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": 0,
            "messages": [{
                "role": "user",
                "content": [
                    {"type": "text", "text": PROMPT},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:image/jpeg;base64,{image_b64}"}
                    }
                ]
            }]
        }

    def recognize(self, buffer: PixelBuffer) -> RecognitionResult:
        """Recognize Braille text using the remote service."""
        start_time = time.perf_counter()

        try:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            }

            response = requests.post(
                self.api_url,
                headers=headers,
                json=self.build_request(self.encode_image(buffer)),
                timeout=self.timeout
            )
            response.raise_for_status()

            body = response.json()
            reply = parse_reply(body["choices"][0]["message"]["content"])

            text = str(reply.get("text") or "").strip()
            confidence = float(reply.get("confidence") or 0.0)
            confidence = min(max(confidence, 0.0), 1.0)

            return RecognitionResult(
                text=text,
                confidence=confidence,
                braille_text=str(reply.get("brailleText") or ""),
                engine_used=self.name,
                status=ResultStatus.SUCCESS if text else ResultStatus.NO_TEXT,
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
                metadata={
                    "model": self.model,
                    "estimated_dots": _as_int(reply.get("estimatedDots")),
                    "estimated_cells": _as_int(reply.get("estimatedCells")),
                }
            )

        except requests.exceptions.RequestException as e:
            logger.error(f"Remote recognition API error: {e}")
            return self._failed(f"API error: {e}", start_time)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Remote recognition reply could not be parsed: {e}")
            return self._failed(f"Parse error: {e}", start_time)

    def _failed(self, error: str, start_time: float) -> RecognitionResult:
        return RecognitionResult(
            text="",
            confidence=0.0,
            engine_used=self.name,
            status=ResultStatus.FAILED,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            metadata={"error": error, "model": self.model}
        )
