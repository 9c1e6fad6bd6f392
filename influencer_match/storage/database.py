"""Database operations and management"""

from datetime import datetime
from pathlib import Path
from typing import Optional
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import logging

from ..categorizer.categories import Category
from .models import (
    Base,
    Creator,
    CreatorCategory,
    CreatorProfile,
    OnboardingAnswer,
    PLATFORM_COLUMN_PREFIX,
    UserMatch,
    UserMatchRecord,
)

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the data store rejects or fails an operation."""


class DuplicateRecordError(PersistenceError):
    """Raised when a write violates a unique constraint."""


def _is_unique_violation(error: IntegrityError) -> bool:
    """True for unique/primary key conflicts, False for NOT NULL, foreign key and check failures."""
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    message = str(error.orig).lower()
    return "unique constraint" in message or "duplicate key" in message


class Database:
    """Database management class"""

    def __init__(self, db_url: str = "sqlite:///data/db/matches.db", echo: bool = False):
        self.db_url = db_url

        engine_kwargs = {"echo": echo}
        if db_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in db_url or db_url == "sqlite://":
                # One shared connection so every thread sees the same in-memory database
                engine_kwargs["poolclass"] = StaticPool
            elif db_url.startswith("sqlite:///"):
                Path(db_url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(db_url, **engine_kwargs)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.info(f"Database initialized: {db_url}")

    @contextmanager
    def session(self):
        """Context manager for database sessions"""
        session = self.Session()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if _is_unique_violation(e):
                logger.warning(f"Duplicate record: {e.orig}")
                raise DuplicateRecordError(str(e.orig)) from e
            logger.error(f"Database constraint violation: {e.orig}")
            raise PersistenceError(str(e.orig)) from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise PersistenceError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Creators
    # ------------------------------------------------------------------

    def upsert_creator(self, profile: CreatorProfile) -> str:
        """Insert or replace a creator and its category tags.

        Raises:
            ValueError: If a category tag is not in the category vocabulary
        """
        unknown = sorted(c for c in profile.categories if Category.parse(c) is None)
        if unknown:
            raise ValueError(f"Creator {profile.id} has unknown categories: {', '.join(unknown)}")

        with self.session() as session:
            creator = session.get(Creator, profile.id)
            if creator is None:
                creator = Creator(id=profile.id)
                session.add(creator)

            creator.full_name = profile.full_name
            creator.username = profile.username
            creator.email = profile.email
            creator.location = profile.location
            creator.is_btc_only = profile.is_btc_only
            creator.total_followers = (
                profile.total_followers
                if profile.total_followers is not None
                else profile.summed_followers()
            )

            for platform, prefix in PLATFORM_COLUMN_PREFIX.items():
                metrics = profile.platforms[platform]
                for field in ("url", "bio", "followers", "engagement_rate", "average_views"):
                    setattr(creator, f"{prefix}_{field}", getattr(metrics, field))

            wanted = {Category.parse(c).value for c in profile.categories}
            creator.category_tags = [
                tag for tag in creator.category_tags if tag.category in wanted
            ]
            existing = {tag.category for tag in creator.category_tags}
            for category in sorted(wanted - existing):
                creator.category_tags.append(CreatorCategory(category=category))

            logger.debug(f"Upserted creator: {profile.id} ({len(wanted)} categories)")
            return creator.id

    def get_creators_by_ids(self, creator_ids: list[str]) -> list[CreatorProfile]:
        """Get creators with the given ids, highest total followers first"""
        with self.session() as session:
            creators = (
                session.query(Creator)
                .filter(Creator.id.in_(list(dict.fromkeys(creator_ids))))
                .order_by(Creator.total_followers.desc().nulls_last())
                .all()
            )
            return [CreatorProfile.from_record(c) for c in creators]

    def query_creators(self, category: Optional[str] = None, limit: int = 20) -> list[CreatorProfile]:
        """Query creators, optionally restricted to one exact category tag"""
        with self.session() as session:
            query = session.query(Creator)

            if category:
                query = query.join(CreatorCategory).filter(CreatorCategory.category == category)

            query = query.order_by(Creator.total_followers.desc().nulls_last()).limit(limit)

            return [CreatorProfile.from_record(c) for c in query.all()]

    def count_creators(self) -> int:
        """Count total creators"""
        with self.session() as session:
            return session.query(Creator).count()

    # ------------------------------------------------------------------
    # User matches
    # ------------------------------------------------------------------

    def find_user_match(self, user_id: str, search_key: str) -> Optional[UserMatchRecord]:
        """Get the match stored for a user under one serialized search criteria"""
        with self.session() as session:
            match = (
                session.query(UserMatch)
                .filter(UserMatch.user_id == user_id, UserMatch.search_key == search_key)
                .first()
            )
            return UserMatchRecord.from_record(match) if match else None

    def insert_user_match(
        self, user_id: str, search_criteria: dict, search_key: str, creator_ids: list[str]
    ) -> UserMatchRecord:
        """Insert a new match row"""
        with self.session() as session:
            match = UserMatch(
                user_id=user_id,
                search_criteria=search_criteria,
                search_key=search_key,
                creator_ids=list(creator_ids),
                created_at=datetime.utcnow(),
            )
            session.add(match)
            session.flush()  # Get the ID
            return UserMatchRecord.from_record(match)

    def update_user_match(self, match_id: int, creator_ids: list[str]) -> Optional[UserMatchRecord]:
        """Replace a match's creator ids and refresh its timestamp"""
        with self.session() as session:
            match = session.query(UserMatch).filter(UserMatch.id == match_id).first()
            if not match:
                return None

            match.creator_ids = list(creator_ids)
            match.created_at = datetime.utcnow()
            session.flush()
            return UserMatchRecord.from_record(match)

    def get_latest_user_match(self, user_id: str) -> Optional[UserMatchRecord]:
        """Get the most recently written match for a user"""
        with self.session() as session:
            match = (
                session.query(UserMatch)
                .filter(UserMatch.user_id == user_id)
                .order_by(UserMatch.created_at.desc(), UserMatch.id.desc())
                .first()
            )
            return UserMatchRecord.from_record(match) if match else None

    def count_user_matches(self, user_id: Optional[str] = None) -> int:
        """Count stored matches, optionally for a single user"""
        with self.session() as session:
            query = session.query(UserMatch)
            if user_id:
                query = query.filter(UserMatch.user_id == user_id)
            return query.count()

    # ------------------------------------------------------------------
    # Onboarding
    # ------------------------------------------------------------------

    def record_onboarding_answer(
        self,
        user_id: str,
        company_name: str,
        product_name: str,
        product_description: str,
        product_url: Optional[str] = None,
        category: Optional[str] = None,
    ) -> int:
        """Store one onboarding submission"""
        with self.session() as session:
            answer = OnboardingAnswer(
                user_id=user_id,
                company_name=company_name,
                product_name=product_name,
                product_url=product_url,
                product_description=product_description,
                category=category,
            )
            session.add(answer)
            session.flush()
            logger.debug(f"Recorded onboarding answer {answer.id} for user {user_id}")
            return answer.id

    def get_onboarding_answers(self, user_id: str) -> list[OnboardingAnswer]:
        """Get a user's onboarding submissions, newest first"""
        with self.session() as session:
            answers = (
                session.query(OnboardingAnswer)
                .filter(OnboardingAnswer.user_id == user_id)
                .order_by(OnboardingAnswer.created_at.desc(), OnboardingAnswer.id.desc())
                .all()
            )
            session.expunge_all()
            return answers
