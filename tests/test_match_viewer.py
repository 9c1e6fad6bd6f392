from influencer_match.matching import (
    Authenticating,
    Empty,
    Failed,
    Loading,
    MatchRecorder,
    MatchViewer,
    Populated,
    format_followers,
    render_creator,
)
from influencer_match.storage import PersistenceError, Platform


def test_resolve_creators_orders_by_total_followers(seeded_db):
    viewer = MatchViewer(seeded_db)

    creators = viewer.resolve_creators(["dave", "alice", "bob", "alice", "missing"])

    assert [c.id for c in creators] == ["alice", "bob", "dave"]


def test_resolve_creators_with_no_ids_skips_query(db, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("should not query")

    monkeypatch.setattr(db, "get_creators_by_ids", fail)

    assert MatchViewer(db).resolve_creators([]) == []


def test_list_creators_by_category_filters_exact_tag(seeded_db):
    viewer = MatchViewer(seeded_db)

    creators = viewer.list_creators_by_category("lightning", limit=50)

    assert [c.id for c in creators] == ["alice", "carol"]
    assert all("lightning" in c.categories for c in creators)


def test_list_creators_by_category_caps_results(db, creator_factory):
    for i in range(60):
        db.upsert_creator(creator_factory(f"ln-{i:02d}", 1000 + i, ["lightning"]))
    db.upsert_creator(creator_factory("miner", 10_000_000, ["mining"]))

    creators = MatchViewer(db).list_creators_by_category("lightning", limit=50)

    assert len(creators) == 50
    followers = [c.total_followers for c in creators]
    assert followers == sorted(followers, reverse=True)
    assert creators[0].id == "ln-59"


def test_list_creators_without_category_returns_top_creators(seeded_db):
    creators = MatchViewer(seeded_db).list_creators_by_category(limit=3)

    assert [c.id for c in creators] == ["erin", "alice", "carol"]


def test_get_latest_match_returns_none_for_new_user(db):
    assert MatchViewer(db).get_latest_match("nobody") is None


def test_load_without_user_is_authenticating(db):
    state = MatchViewer(db).load(None)

    assert isinstance(state, Authenticating)
    assert state.to_dict()["state"] == "authenticating"


def test_load_new_user_falls_back_to_top_creators(seeded_db):
    state = MatchViewer(seeded_db, fallback_limit=2).load("new-user")

    assert isinstance(state, Empty)
    assert [c.id for c in state.fallback_creators] == ["erin", "alice"]
    assert state.to_dict()["match"] is None


def test_load_user_with_match_is_populated(seeded_db):
    MatchRecorder(seeded_db).record_match("user-1", ["carol", "alice"], "lightning")

    state = MatchViewer(seeded_db).load("user-1")

    assert isinstance(state, Populated)
    assert state.match.category == "lightning"
    assert [c.id for c in state.creators] == ["alice", "carol"]

    payload = state.to_dict()
    assert payload["state"] == "populated"
    assert payload["match"]["creator_ids"] == ["carol", "alice"]


def test_load_failure_becomes_failed_state(db, monkeypatch):
    def fail(*args, **kwargs):
        raise PersistenceError("connection lost")

    monkeypatch.setattr(db, "get_latest_user_match", fail)

    state = MatchViewer(db).load("user-1")

    assert isinstance(state, Failed)
    assert state.to_dict()["creators"] == []


def test_advance_leaves_terminal_states_alone(db):
    viewer = MatchViewer(db)
    terminal = Failed(user_id="user-1", reason="x")

    assert viewer.advance(terminal) is terminal
    assert isinstance(viewer.advance(Loading(user_id="user-1")), Empty)


def test_format_followers():
    assert format_followers(2_500_000) == "2.5M"
    assert format_followers(12_300) == "12.3K"
    assert format_followers(950) == "950"
    assert format_followers(None) == "0"


def test_render_creator_lists_only_active_platforms(creator_factory):
    creator = creator_factory(
        "multi",
        500_000,
        ["bitcoin", "mining", "nodes", "privacy"],
        youtube={"followers": 400_000, "url": "https://youtube.com/@multi"},
        tiktok={"followers": 0, "url": "https://tiktok.com/@multi"},
        x={"followers": 100_000},
    )

    assert set(creator.platforms) == set(Platform)

    card = render_creator(creator)

    assert set(card["platforms"]) == {"youtube", "x"}
    assert card["links"] == {
        "youtube": "https://youtube.com/@multi",
        "tiktok": "https://tiktok.com/@multi",
    }
    assert card["categories"] == ["bitcoin", "mining", "nodes"]
    assert card["hidden_category_count"] == 1
    assert card["total_followers_display"] == "500.0K"
