"""
Completion Service Adapter
==========================

Wraps the OpenAI chat model (through `langchain_openai.ChatOpenAI`) behind a
call that never raises: every outcome is a `CompletionResult` carrying
either the generated text or the reason it is missing.

Failure reasons
---------------
- ``not_configured``: no API key in the settings; no network call is made.
- ``upstream_error``: the provider call raised.
- ``empty_response``: the provider answered with no text.

No timeout, retry or cancellation is layered on top of the client defaults.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from humanlenk.database.config.config import Settings

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "not_configured"
UPSTREAM_ERROR = "upstream_error"
EMPTY_RESPONSE = "empty_response"


@dataclass(frozen=True)
class CompletionResult:
    text: Optional[str] = None
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def lc_text_from_content(content) -> str:
    """Flatten LangChain message content (plain string or list of parts) into text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


class CompletionService:
    """
    Text-in/text-out access to the chat model.

    Parameters
    ----------
    settings : Settings
        Supplies `API_KEY` and `OPEN_AI_MODEL`.
    model : ChatOpenAI, optional
        Pre-built model, mostly for tests; built from the settings otherwise.
    """

    def __init__(self, settings: Settings, model: Optional[ChatOpenAI] = None):
        self.model_name = settings.OPEN_AI_MODEL
        if model is not None:
            self.model = model
        elif settings.API_KEY:
            self.model = ChatOpenAI(
                model=settings.OPEN_AI_MODEL,
                api_key=settings.API_KEY,
                temperature=0.7,
                max_tokens=1000,
                presence_penalty=0.1,
                frequency_penalty=0.1,
            )
        else:
            self.model = None

    @property
    def configured(self) -> bool:
        return self.model is not None

    async def complete(self, messages: list[BaseMessage]) -> CompletionResult:
        """
        Ask the model for the next assistant message.

        Args:
            messages (list[BaseMessage]): Output of `build_messages`.

        Returns:
            CompletionResult: text on success, otherwise a failure reason.
        """
        if self.model is None:
            logger.warning("Completion service not configured, using fallback response")
            return CompletionResult(failure=NOT_CONFIGURED)

        try:
            response = await self.model.ainvoke(messages)
        except Exception as e:
            logger.error("Completion service call failed: %s", e)
            return CompletionResult(failure=UPSTREAM_ERROR)

        text = lc_text_from_content(getattr(response, "content", "")).strip()
        if not text:
            logger.error("Completion service returned an empty response")
            return CompletionResult(failure=EMPTY_RESPONSE)
        return CompletionResult(text=text)
