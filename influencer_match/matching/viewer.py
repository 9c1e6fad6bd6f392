"""Read path for stored matches and the creators they point to."""

from typing import Optional

from loguru import logger

from ..storage.database import Database, PersistenceError
from ..storage.models import CreatorProfile, UserMatchRecord
from .states import Authenticating, Empty, Failed, Loading, Populated, ViewState


class MatchViewer:
    """Loads a user's latest match and resolves it to creator profiles.

    Users without a stored match see the top creators by total followers.
    Creator lists are always ordered by total followers, highest first.
    """

    def __init__(self, db: Database, fallback_limit: int = 20):
        """Initialize viewer.

        Args:
            db: Database instance
            fallback_limit: Number of creators shown when the user has no match
        """
        self.db = db
        self.fallback_limit = fallback_limit

    def get_latest_match(self, user_id: str) -> Optional[UserMatchRecord]:
        """Most recently written match for the user, or None."""
        return self.db.get_latest_user_match(user_id)

    def resolve_creators(self, creator_ids: list[str]) -> list[CreatorProfile]:
        """Fetch the creators behind a match, highest total followers first."""
        if not creator_ids:
            return []
        return self.db.get_creators_by_ids(creator_ids)

    def list_creators_by_category(
        self, category: Optional[str] = None, limit: int = 20
    ) -> list[CreatorProfile]:
        """Top creators, optionally only those tagged with exactly ``category``."""
        return self.db.query_creators(category=category, limit=limit)

    def load(self, user_id: Optional[str]) -> ViewState:
        """Run the page from its entry state to a terminal state."""
        if not user_id or not user_id.strip():
            return Authenticating()
        return self.advance(Loading(user_id=user_id))

    def advance(self, state: ViewState) -> ViewState:
        """Perform the fetches for a Loading state. Other states are returned as is."""
        if not isinstance(state, Loading):
            return state

        user_id = state.user_id
        try:
            match = self.get_latest_match(user_id)
            if match is None:
                creators = self.list_creators_by_category(limit=self.fallback_limit)
                logger.info(f"No match for user {user_id}, showing {len(creators)} top creators")
                return Empty(user_id=user_id, fallback_creators=creators)

            creators = self.resolve_creators(match.creator_ids)
            logger.info(
                f"Loaded match {match.id} for user {user_id}: "
                f"{len(creators)}/{len(match.creator_ids)} creators resolved"
            )
            return Populated(user_id=user_id, match=match, creators=creators)

        except PersistenceError as e:
            logger.error(f"Error loading matches for user {user_id}: {e}")
            return Failed(user_id=user_id, reason="Could not load your matches right now.")
