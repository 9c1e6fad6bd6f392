"""Fixed category vocabulary shared by the classifier and creator lookups."""

from enum import Enum
from typing import Optional


class Category(str, Enum):
    """Thematic labels for products and creators.

    Stored match rows reference these values, so adding or removing a
    label is a breaking change.
    """

    ART = "art"
    BITCOIN = "bitcoin"
    BUILDERS = "builders"
    DEVELOPERS = "developers"
    EDUCATION = "education"
    FEES = "fees"
    HARDWARE = "hardware"
    LIGHTNING = "lightning"
    MACRO = "macro"
    MINING = "mining"
    NODES = "nodes"
    ONCHAIN = "onchain"
    ORDINALS = "ordinals"
    PRIVACY = "privacy"
    SECURITY = "security"
    TRADING = "trading"

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["Category"]:
        """Map raw text to a category, or None if it is not an exact label."""
        if not text:
            return None
        try:
            return cls(text.strip().lower())
        except ValueError:
            return None

    @classmethod
    def values(cls) -> list[str]:
        return [c.value for c in cls]


FALLBACK_CATEGORY = Category.BITCOIN

CATEGORY_DESCRIPTIONS = {
    Category.ART: "NFTs, digital art, creative content",
    Category.BITCOIN: "General Bitcoin products/services",
    Category.BUILDERS: "Development tools, infrastructure",
    Category.DEVELOPERS: "Programming, coding tools",
    Category.EDUCATION: "Learning, tutorials, courses",
    Category.FEES: "Transaction fees, fee optimization",
    Category.HARDWARE: "Physical devices, wallets",
    Category.LIGHTNING: "Lightning Network related",
    Category.MACRO: "Economics, market analysis",
    Category.MINING: "Bitcoin mining",
    Category.NODES: "Node software, infrastructure",
    Category.ONCHAIN: "On-chain analysis, tools",
    Category.ORDINALS: "Bitcoin Ordinals, inscriptions",
    Category.PRIVACY: "Privacy tools, anonymity",
    Category.SECURITY: "Security tools, auditing",
    Category.TRADING: "Trading tools, exchanges",
}
