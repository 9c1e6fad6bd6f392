import pytest

from influencer_match.matching import MatchRecorder, MatchViewer
from influencer_match.storage import Database, PersistenceError, UserMatch
from influencer_match.storage.models import search_key_for


def test_record_match_creates_then_updates_single_row(db):
    recorder = MatchRecorder(db)

    first = recorder.record_match("user-1", ["alice", "bob"], "lightning")
    second = recorder.record_match("user-1", ["alice", "bob"], "lightning")

    assert first.action == "created"
    assert second.action == "updated"
    assert second.record.id == first.record.id
    assert db.count_user_matches("user-1") == 1


def test_repeat_search_overwrites_creator_ids(db):
    recorder = MatchRecorder(db)

    recorder.record_match("user-1", ["alice", "bob"], "lightning")
    recorder.record_match("user-1", ["carol"], "lightning")

    with db.session() as session:
        rows = session.query(UserMatch).filter(UserMatch.user_id == "user-1").all()
        assert len(rows) == 1
        assert rows[0].creator_ids == ["carol"]
        assert rows[0].search_criteria == {"category": "lightning"}


def test_update_refreshes_timestamp(db):
    recorder = MatchRecorder(db)

    created = recorder.record_match("user-1", ["alice"], "mining").record
    updated = recorder.record_match("user-1", ["bob"], "mining").record

    assert updated.created_at >= created.created_at


def test_missing_category_defaults_to_all(db):
    result = MatchRecorder(db).record_match("user-1", [])

    assert result.action == "created"
    assert result.record.search_criteria == {"category": "all"}
    assert result.record.creator_ids == []


def test_different_categories_are_separate_matches(db):
    recorder = MatchRecorder(db)

    recorder.record_match("user-1", ["alice"], "lightning")
    recorder.record_match("user-1", ["bob"], "hardware")
    recorder.record_match("user-2", ["alice"], "lightning")

    assert db.count_user_matches("user-1") == 2
    assert db.count_user_matches() == 3
    assert db.get_latest_user_match("user-1").category == "hardware"


def test_search_key_serializes_deterministically():
    assert search_key_for("lightning") == search_key_for("lightning")
    assert search_key_for("lightning") == '{"category":"lightning"}'


@pytest.mark.parametrize(
    "user_id, creator_ids",
    [("", ["a"]), ("   ", ["a"]), (None, ["a"]), ("user-1", None), ("user-1", "alice")],
)
def test_invalid_arguments_are_rejected(db, user_id, creator_ids):
    with pytest.raises(ValueError):
        MatchRecorder(db).record_match(user_id, creator_ids, "bitcoin")


class RacingDatabase(Database):
    """Inserts a competing row between the recorder's lookup and its insert."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.raced = False

    def find_user_match(self, user_id, search_key):
        if not self.raced:
            self.raced = True
            Database.insert_user_match(
                self, user_id, {"category": "lightning"}, search_key, ["other"]
            )
            return None
        return super().find_user_match(user_id, search_key)


def test_concurrent_insert_resolves_as_last_write_wins():
    db = RacingDatabase("sqlite:///:memory:")

    result = MatchRecorder(db).record_match("user-1", ["alice"], "lightning")

    assert result.action == "updated"
    assert db.count_user_matches("user-1") == 1
    assert db.get_latest_user_match("user-1").creator_ids == ["alice"]


def test_persistence_failure_propagates(db, monkeypatch):
    def fail(*args, **kwargs):
        raise PersistenceError("database is locked")

    monkeypatch.setattr(db, "insert_user_match", fail)

    with pytest.raises(PersistenceError):
        MatchRecorder(db).record_match("user-1", ["alice"], "lightning")


def test_rerecording_older_search_makes_it_latest(db):
    recorder = MatchRecorder(db)

    recorder.record_match("user-1", ["alice"], "lightning")
    recorder.record_match("user-1", ["bob"], "hardware")
    recorder.record_match("user-1", ["carol"], "lightning")

    latest = MatchViewer(db).get_latest_match("user-1")
    assert latest.category == "lightning"
    assert latest.creator_ids == ["carol"]
    assert db.count_user_matches("user-1") == 2
