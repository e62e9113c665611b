"""Text generation backend client."""

import openai
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from .config import Settings
from .errors import BackendError, BackendUnavailable
from .utils.logging import logger

# Transport failures get one extra attempt
TRANSPORT_ATTEMPTS = 2


def create_llm(settings: Settings) -> ChatOpenAI:
    """Create the chat model from explicit settings."""
    return ChatOpenAI(
        model=settings.model,
        temperature=settings.temperature,
        api_key=settings.require_credential(),
        timeout=settings.pipeline_timeout or None,
        max_retries=0,
    )


def _completion_text(response) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, list):
        # Content blocks: keep the text parts only
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block) for block in content
        )
    return content if isinstance(content, str) else str(content or "")


class GenerationClient:
    """Single-shot prompt → text calls against the configured chat model."""

    def __init__(self, settings: Settings, llm: ChatOpenAI | None = None):
        self.settings = settings
        self._llm = llm

    @property
    def llm(self) -> ChatOpenAI:
        if self._llm is None:
            self._llm = create_llm(self.settings)
        return self._llm

    async def generate(self, prompt: str) -> str:
        """
        Send the prompt and return the raw completion text.

        Raises:
            ConfigurationMissing: no credential configured (checked before any call).
            BackendUnavailable: the backend could not be reached after a retry.
            BackendError: the call failed, timed out or returned nothing.
        """
        self.settings.require_credential()

        messages = [HumanMessage(content=prompt)]
        for attempt in range(1, TRANSPORT_ATTEMPTS + 1):
            try:
                response = await self.llm.ainvoke(messages)
                break
            except openai.APITimeoutError as exc:
                logger.error("Generation call timed out: %s", exc)
                raise BackendError("Generation call timed out") from exc
            except openai.APIConnectionError as exc:
                if attempt < TRANSPORT_ATTEMPTS:
                    logger.warning("Generation backend unreachable (attempt %s), retrying: %s", attempt, exc)
                    continue
                logger.error("Generation backend unreachable: %s", exc)
                raise BackendUnavailable("Generation backend unreachable") from exc
            except openai.OpenAIError as exc:
                logger.error("Generation call failed: %s", exc)
                raise BackendError("Generation call failed") from exc

        text = _completion_text(response).strip()
        if not text:
            raise BackendError("Generation backend returned an empty completion")
        return text
