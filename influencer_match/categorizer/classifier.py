"""Product categorization backed by a chat-completion model."""

from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger
from openai import OpenAI

from ..utils.config import OpenAIConfig, Settings
from .categories import CATEGORY_DESCRIPTIONS, FALLBACK_CATEGORY, Category


@dataclass
class CategorizationResult:
    """Outcome of a categorization attempt.

    ``category`` is always a valid label. ``degraded`` is set whenever the
    fallback label was substituted instead of a real classification.
    """

    category: Category
    degraded: bool = False
    reason: Optional[str] = None  # not_configured, provider_error, unrecognized_label


def build_system_prompt() -> str:
    """Build the classifier instructions listing every allowed label."""
    labels = ", ".join(Category.values())
    explained = "\n".join(
        f"  - {category.value}: {description}"
        for category, description in CATEGORY_DESCRIPTIONS.items()
    )
    return (
        "You are a product categorization expert. Given a product description, "
        f"you must categorize it into ONE of these Bitcoin/crypto-related categories: {labels}.\n\n"
        "Rules:\n"
        "- Return ONLY the category name, nothing else\n"
        "- Choose the most relevant category\n"
        f"- If the product doesn't clearly fit any category, choose '{FALLBACK_CATEGORY.value}' as default\n"
        "- Categories explained:\n"
        f"{explained}"
    )


def build_openai_client(settings: Settings, config: OpenAIConfig) -> Optional[OpenAI]:
    """Create the chat-completion client, or None when no API key is configured."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is missing. Categorization will use the fallback label.")
        return None

    return OpenAI(
        api_key=settings.openai_api_key,
        http_client=httpx.Client(timeout=config.timeout),
    )


class Categorizer:
    """Assigns one category label to a free-text product description.

    Classification problems never propagate to the caller: a missing client,
    a provider failure or an answer outside the label set all resolve to
    the fallback label with ``degraded`` set.
    """

    def __init__(self, client: Optional[Any], config: Optional[OpenAIConfig] = None):
        """Initialize categorizer.

        Args:
            client: OpenAI-compatible client exposing ``chat.completions.create``
            config: Model parameters
        """
        self.client = client
        self.config = config or OpenAIConfig()
        self.system_prompt = build_system_prompt()

    def categorize(self, description: str) -> CategorizationResult:
        """Categorize a product description.

        Args:
            description: Product description, already length-checked by the caller

        Returns:
            CategorizationResult with a label from the fixed set

        Raises:
            ValueError: If the description is blank
        """
        if not description or not description.strip():
            raise ValueError("Product description is required")

        if self.client is None:
            logger.error("Categorization requested but no language model client is configured")
            return CategorizationResult(FALLBACK_CATEGORY, degraded=True, reason="not_configured")

        try:
            completion = self.client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": f"Categorize this product: {description}"},
                ],
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
            )
            raw = self._extract_text(completion)
        except Exception as e:
            logger.error(
                f"Error categorizing product (description length {len(description)}): {e}"
            )
            return CategorizationResult(FALLBACK_CATEGORY, degraded=True, reason="provider_error")

        category = Category.parse(raw)
        if category is None:
            logger.warning(f"Model returned unknown category {raw!r}, using {FALLBACK_CATEGORY.value}")
            return CategorizationResult(
                FALLBACK_CATEGORY, degraded=True, reason="unrecognized_label"
            )

        logger.debug(f"Categorized product as {category.value}")
        return CategorizationResult(category)

    @staticmethod
    def _extract_text(completion: Any) -> Optional[str]:
        """Pull the first choice's message text out of a completion response."""
        if not completion.choices:
            return None
        return completion.choices[0].message.content
