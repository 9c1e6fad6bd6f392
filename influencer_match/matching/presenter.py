"""Display helpers for creator cards."""

from typing import Optional

from ..storage.models import CreatorProfile

MAX_VISIBLE_CATEGORIES = 3


def format_followers(count: Optional[int]) -> str:
    """Abbreviate a follower count, e.g. 1.2M or 3.4K."""
    if not count:
        return "0"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def render_creator(creator: CreatorProfile) -> dict:
    """Serialize a creator for a match card.

    Only platforms with followers are listed, and at most three category
    tags are shown with a count of the remainder.
    """
    visible = creator.categories[:MAX_VISIBLE_CATEGORIES]
    hidden = max(0, len(creator.categories) - MAX_VISIBLE_CATEGORIES)

    return {
        "id": creator.id,
        "name": creator.display_name,
        "username": creator.username,
        "location": creator.location,
        "is_btc_only": creator.is_btc_only,
        "total_followers": creator.total_followers or 0,
        "total_followers_display": format_followers(creator.total_followers),
        "platforms": {
            platform.value: {
                "url": metrics.url,
                "followers": metrics.followers,
                "followers_display": format_followers(metrics.followers),
                "engagement_rate": metrics.engagement_rate,
                "average_views": metrics.average_views,
            }
            for platform, metrics in creator.active_platforms().items()
        },
        "links": {
            platform.value: metrics.url
            for platform, metrics in creator.platforms.items()
            if metrics.url
        },
        "categories": visible,
        "hidden_category_count": hidden,
    }
