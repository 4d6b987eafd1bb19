"""
Multimodal judgment client
Sends instructions, text and key frames to an OpenAI-compatible chat
completions endpoint (OpenRouter) and returns the raw completion text
"""

from typing import Any, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from athleon.config.base import settings
from athleon.services.video_processing import ExtractedFrame
from athleon.utils.logger import get_logger

logger = get_logger(__name__)


class JudgmentError(Exception):
    """Base exception for remote judgment failures"""


class ServiceUnavailableError(JudgmentError):
    """No credential is configured for the judgment service"""


class UpstreamError(JudgmentError):
    """The remote call failed or returned an error payload"""


class EmptyResponseError(JudgmentError):
    """The remote call succeeded but carried no text"""


def build_user_content(user_text: str, frames: Sequence[ExtractedFrame] = ()) -> List[Dict[str, Any]]:
    """One text part followed by one inline image part per frame"""
    content: List[Dict[str, Any]] = [{"type": "text", "text": user_text}]
    for frame in frames:
        content.append({
            "type": "image_url",
            "image_url": {"url": f"data:{frame.mime_type};base64,{frame.base64_data}"}
        })
    return content


class JudgmentClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[Any] = None
    ):
        self.api_key = settings.OPENROUTER_API_KEY if api_key is None else api_key
        self.model = model or settings.AI_MODEL
        self.base_url = base_url or settings.OPENROUTER_BASE_URL
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def client(self):
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                default_headers={
                    "HTTP-Referer": settings.FRONTEND_URL,
                    "X-Title": settings.OPENROUTER_APP_TITLE,
                }
            )
        return self._client

    async def judge(
        self,
        system_instructions: str,
        user_text: str,
        frames: Sequence[ExtractedFrame] = (),
        temperature: Optional[float] = None
    ) -> str:
        """
        Run one system + user exchange and return the completion text.

        Args:
            system_instructions: System-role instruction block
            user_text: Text part of the user turn
            frames: Key frames sent as inline JPEG parts after the text
            temperature: Sampling temperature; service default when None

        Raises:
            ServiceUnavailableError: no credential configured
            UpstreamError: transport failure, non-2xx status or error payload
            EmptyResponseError: success without textual content
        """
        if not self.is_configured:
            raise ServiceUnavailableError("OpenRouter API key not configured")

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_instructions},
                {"role": "user", "content": build_user_content(user_text, frames)},
            ],
        }
        if temperature is not None:
            request["temperature"] = temperature

        logger.info(f"Calling {self.model} with {len(frames)} frames")

        try:
            response = await self.client.chat.completions.create(**request)
        except openai.APIStatusError as e:
            logger.error(f"Judgment service returned {e.status_code}: {e.message}")
            raise UpstreamError(f"OpenRouter API error: {e.status_code} - {e.message}") from e
        except openai.APIError as e:
            logger.error(f"Judgment service call failed: {type(e).__name__}: {e}")
            raise UpstreamError(f"OpenRouter API call failed: {e}") from e

        error_payload = getattr(response, "error", None)
        if error_payload:
            message = error_payload.get("message") if isinstance(error_payload, dict) else str(error_payload)
            logger.error(f"Judgment service embedded error: {message}")
            raise UpstreamError(message or "Unknown upstream error")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(f"Token usage - total: {getattr(usage, 'total_tokens', 'n/a')}")

        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None) if message is not None else None
        if not content:
            raise EmptyResponseError("No content in AI response")

        return content


judgment_client = JudgmentClient()
