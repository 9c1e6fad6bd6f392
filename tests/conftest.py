from types import SimpleNamespace

import pytest

from influencer_match.storage import CreatorProfile, Database


class FakeCompletions:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """Stands in for the OpenAI client's chat.completions interface."""

    def __init__(self, reply=None, error=None):
        self.completions = FakeCompletions(reply, error)
        self.chat = SimpleNamespace(completions=self.completions)


def make_creator(creator_id, followers, categories=(), **platforms):
    if not platforms:
        platforms = {"youtube": {"followers": followers, "url": f"https://youtube.com/@{creator_id}"}}
    return CreatorProfile(
        id=creator_id,
        full_name=creator_id.replace("-", " ").title(),
        username=creator_id,
        total_followers=followers,
        categories=list(categories),
        platforms=platforms,
    )


@pytest.fixture
def fake_openai():
    return FakeOpenAI


@pytest.fixture
def creator_factory():
    return make_creator


@pytest.fixture
def db():
    return Database("sqlite:///:memory:")


@pytest.fixture
def seeded_db(db):
    for profile in [
        make_creator("alice", 1_200_000, ["bitcoin", "lightning"]),
        make_creator("bob", 300_000, ["hardware", "security"]),
        make_creator("carol", 950_000, ["lightning"]),
        make_creator("dave", 45_000, ["hardware"]),
        make_creator("erin", 2_500_000, ["macro", "trading"]),
    ]:
        db.upsert_creator(profile)
    return db
