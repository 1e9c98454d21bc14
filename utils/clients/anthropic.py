"""
Model gateway for Site Design Advisor.

The analysis pipeline only depends on the ModelGateway contract: a prompt and
a list of screenshot references go in, raw text comes out. AnthropicGateway is
the Claude adapter, with an ordered model fallback chain and automatic retry
for transient failures.
"""

import logging
from typing import List, Optional, Sequence

import anthropic
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from config import settings
from core.exceptions import ConfigurationError, UpstreamError
from utils.images import prepare_screenshot_for_model
from utils.storage import LocalObjectStorage, get_storage

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a strict JSON generator. Output ONLY valid JSON, no prose or code fences."
)


class ModelGateway:
    """Contract for sending a prompt plus screenshots to a generative model."""

    def generate(self, prompt: str, media: Sequence[str] = ()) -> str:
        """
        Args:
            prompt: Complete instruction text
            media: Storage paths of screenshots to attach

        Returns:
            Raw text output of the first model that answers

        Raises:
            ConfigurationError: No credential is configured
            UpstreamError: Every configured model failed
        """
        raise NotImplementedError


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(
        (anthropic.APIConnectionError, anthropic.RateLimitError)
    ),
    reraise=True,
)
def call_anthropic_api_with_retry(
    client: anthropic.Anthropic,
    model: str,
    content: list,
    max_tokens: int,
):
    """
    Calls the Messages API with automatic retry logic for transient failures.

    Retries up to 3 times for:
    - APIConnectionError (network issues)
    - RateLimitError (rate limit exceeded)

    Authentication and bad-request errors are raised immediately.
    """
    return client.messages.create(
        model=model,
        max_tokens=max_tokens,
        temperature=0,
        system=SYSTEM_PROMPT,
        messages=[{"role": "user", "content": content}],
    )


def response_text(message) -> str:
    """Join the text blocks of a Messages API response."""
    parts = [
        block.text
        for block in getattr(message, "content", None) or []
        if getattr(block, "type", None) == "text"
    ]
    return "\n".join(parts).strip()


class AnthropicGateway(ModelGateway):
    """Claude adapter behind the ModelGateway contract."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        models: Optional[List[str]] = None,
        storage: Optional[LocalObjectStorage] = None,
        max_tokens: Optional[int] = None,
        client: Optional[anthropic.Anthropic] = None,
    ):
        self.api_key = settings.ANTHROPIC_API_KEY if api_key is None else api_key
        self.models = models if models is not None else settings.model_chain
        self.storage = storage
        self.max_tokens = max_tokens or settings.MAX_TOKENS
        self._client = client

    @property
    def client(self) -> anthropic.Anthropic:
        """Lazily create the Anthropic client."""
        if self._client is None:
            self._client = anthropic.Anthropic(
                api_key=self.api_key, timeout=settings.MODEL_TIMEOUT
            )
        return self._client

    def _image_blocks(self, media: Sequence[str]) -> list:
        storage = self.storage or get_storage()
        blocks = []
        for path in media:
            data = storage.read(path)
            if data is None:
                logger.warning(f"⚠️ Screenshot not found in storage, skipping: {path}")
                continue
            try:
                media_type, encoded = prepare_screenshot_for_model(
                    data, max_dimension=settings.MAX_SCREENSHOT_DIMENSION
                )
            except OSError as e:
                logger.warning(f"⚠️ Unreadable screenshot {path}, skipping: {e}")
                continue
            blocks.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": media_type,
                        "data": encoded,
                    },
                }
            )
        return blocks

    def generate(self, prompt: str, media: Sequence[str] = ()) -> str:
        if not self.api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY not set")
        if not self.models:
            raise ConfigurationError("No Anthropic model configured")

        content = self._image_blocks(media)
        content.append({"type": "text", "text": prompt})
        logger.info(
            f"🤖 Sending prompt with {len(content) - 1} screenshot(s) to {len(self.models)} model(s)"
        )

        failures = []
        for model in self.models:
            try:
                message = call_anthropic_api_with_retry(
                    self.client, model, content, self.max_tokens
                )
            except anthropic.APIError as e:
                logger.warning(f"⚠️ Model {model} failed: {e}")
                failures.append(f"{model}: {e}")
                continue

            text = response_text(message)
            logger.info(f"📝 {model} returned {len(text)} characters")
            logger.debug(f"📝 Raw response preview: {text[:500]}")
            return text

        raise UpstreamError(f"All models failed. {'; '.join(failures)}")


# Lazy initialization of the default gateway
_gateway: Optional[ModelGateway] = None


def get_model_gateway() -> ModelGateway:
    """Get or create the default model gateway."""
    global _gateway
    if _gateway is None:
        _gateway = AnthropicGateway()
    return _gateway
