"""Persistence of the latest creator match per user and search."""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from ..storage.database import Database, DuplicateRecordError, PersistenceError
from ..storage.models import DEFAULT_SEARCH_CATEGORY, UserMatchRecord, search_key_for


@dataclass
class RecordResult:
    """Outcome of recording a match."""

    action: str  # "created" or "updated"
    record: UserMatchRecord


class MatchRecorder:
    """Upserts one match row per (user, category).

    Repeating a search with the same category replaces the stored creator
    ids and timestamp; it never adds a second row. Concurrent writers for the
    same key resolve as last write wins.
    """

    def __init__(self, db: Database):
        self.db = db

    def record_match(
        self, user_id: str, creator_ids: list[str], category: Optional[str] = None
    ) -> RecordResult:
        """Create or replace the match for a user's search.

        Args:
            user_id: Owning user identifier
            creator_ids: Creators found by the search, possibly empty
            category: Category searched, "all" when absent

        Returns:
            RecordResult with action "created" or "updated"

        Raises:
            ValueError: If user_id is blank or creator_ids is not a list
            PersistenceError: If the data store write fails
        """
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValueError("userId is required")
        if not isinstance(creator_ids, list):
            raise ValueError("creatorIds must be a list")

        category = category or DEFAULT_SEARCH_CATEGORY
        search_criteria = {"category": category}
        search_key = search_key_for(category)

        logger.info(
            f"Saving match for user {user_id}, category {category}, creators {len(creator_ids)}"
        )

        existing = self.db.find_user_match(user_id, search_key)
        if existing:
            return self._update(existing.id, user_id, category, creator_ids)

        try:
            record = self.db.insert_user_match(user_id, search_criteria, search_key, creator_ids)
        except DuplicateRecordError:
            # Another request inserted the same key after our lookup
            logger.warning(f"Match for user {user_id}, category {category} appeared concurrently")
            existing = self.db.find_user_match(user_id, search_key)
            if existing is None:
                raise
            return self._update(existing.id, user_id, category, creator_ids)

        return RecordResult(action="created", record=record)

    def _update(
        self, match_id: int, user_id: str, category: str, creator_ids: list[str]
    ) -> RecordResult:
        record = self.db.update_user_match(match_id, creator_ids)
        if record is None:
            raise PersistenceError(
                f"Match {match_id} for user {user_id}, category {category} disappeared during update"
            )
        return RecordResult(action="updated", record=record)
