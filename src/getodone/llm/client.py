# src/getodone/llm/client.py

from __future__ import annotations

import logging
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..core.errors import GenerationRejected, GenerationUnreachable

logger = logging.getLogger(__name__)

MAX_TOKENS = 100


def _make_timeout_obj(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(
        connect=connect_s,
        read=read_s,
        write=10.0,
        pool=connect_s,
    )


def _rejection_message(exc: openai.APIStatusError) -> str:
    """
    Pull a human-readable message out of an error response.

    The SDK unwraps {"error": {...}} into exc.body; older/odd backends may not nest,
    so both shapes are accepted. Falls back to the HTTP status line.
    """
    body: Any = exc.body
    if isinstance(body, dict):
        inner = body.get("error")
        if isinstance(inner, dict):
            body = inner
        msg = body.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg

    response = getattr(exc, "response", None)
    if response is not None:
        reason = (getattr(response, "reason_phrase", "") or "").strip()
        return f"{response.status_code} {reason}".strip()
    return f"HTTP {exc.status_code}"


def friendly_generation_error(err: Exception) -> str:
    if isinstance(err, GenerationRejected):
        return f"Error from AI: {err.message}"
    if isinstance(err, GenerationUnreachable):
        return "Failed to generate message. Check your API key and network connection."
    msg = str(err).strip()
    return msg or "Failed to generate message."


class OpenAICompatibleGenerator:
    """
    Chat-completions client for an OpenAI-compatible backend (Groq by default).

    IMPORTANT:
    - The API key comes from user preferences, so a client is built per call.
    - Automatic SDK retries are disabled; the caller owns retry policy.
    - One request per call: {model, messages:[{role:user}], max_tokens:100}.
    """

    def __init__(
        self,
        *,
        base_url: str,
        connect_timeout_seconds: float = 5.0,
        read_timeout_seconds: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = _make_timeout_obj(connect_timeout_seconds, read_timeout_seconds)
        # Injected client (tests) is never closed here.
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings) -> OpenAICompatibleGenerator:
        return cls(
            base_url=settings.llm_base_url,
            connect_timeout_seconds=settings.llm_connect_timeout_seconds,
            read_timeout_seconds=settings.llm_read_timeout_seconds,
        )

    def _make_client(self, api_key: str) -> OpenAI:
        return OpenAI(
            base_url=self._base_url,
            api_key=api_key,
            timeout=self._timeout,
            max_retries=0,
            http_client=self._http_client,
        )

    def generate(self, prompt: str, api_key: str, model_id: str) -> str:
        """
        Return the first completion's text verbatim.

        Raises:
        - GenerationRejected: backend answered with a non-2xx status
        - GenerationUnreachable: network/timeout error or malformed response body
        """
        client = self._make_client(api_key)
        logger.info("LLM: requesting nudge model=%s", model_id)
        try:
            completion = client.chat.completions.create(
                model=model_id,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=MAX_TOKENS,
            )
            content = completion.choices[0].message.content
        except openai.APIStatusError as e:
            message = _rejection_message(e)
            logger.warning("LLM: request rejected status=%s message=%s", e.status_code, message)
            raise GenerationRejected(message) from e
        except openai.APIConnectionError as e:
            logger.warning("LLM: network/timeout error (%s)", e.__class__.__name__)
            raise GenerationUnreachable() from e
        except Exception as e:
            logger.warning("LLM: malformed response (%s)", e.__class__.__name__)
            raise GenerationUnreachable("Malformed response from the text-generation service.") from e
        finally:
            if self._http_client is None:
                client.close()

        if content is None:
            return ""
        if not isinstance(content, str):
            raise GenerationUnreachable("Malformed response from the text-generation service.")

        logger.debug("LLM: completed with model=%s (%d chars)", model_id, len(content))
        return content
