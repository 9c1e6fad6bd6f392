"""Product categorization"""

from .categories import CATEGORY_DESCRIPTIONS, FALLBACK_CATEGORY, Category
from .classifier import CategorizationResult, Categorizer, build_openai_client

__all__ = [
    "Category",
    "CATEGORY_DESCRIPTIONS",
    "FALLBACK_CATEGORY",
    "CategorizationResult",
    "Categorizer",
    "build_openai_client",
]
