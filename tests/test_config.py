from pathlib import Path

from influencer_match.__main__ import load_creator_file
from influencer_match.storage import Platform
from influencer_match.utils.config import ConfigManager

EXAMPLE_CREATORS = Path(__file__).parent.parent / "config" / "creators.example.yaml"


def clear_env(monkeypatch):
    for name in ("DATABASE_URL", "OPENAI_MODEL", "LOG_LEVEL", "API_HOST", "API_PORT"):
        monkeypatch.delenv(name, raising=False)


def test_missing_yaml_uses_defaults(tmp_path, monkeypatch):
    clear_env(monkeypatch)

    config = ConfigManager(tmp_path / "absent.yaml").config

    assert config.openai.model == "gpt-4o-mini"
    assert config.openai.max_tokens == 10
    assert config.matching.max_description_length == 300


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    path = tmp_path / "config.yaml"
    path.write_text(
        "database:\n  url: sqlite:///from-yaml.db\n"
        "openai:\n  model: yaml-model\n"
        "matching:\n  default_limit: 5\n"
    )
    monkeypatch.setenv("OPENAI_MODEL", "env-model")
    monkeypatch.setenv("API_PORT", "9000")

    config = ConfigManager(path).config

    assert config.database.url == "sqlite:///from-yaml.db"
    assert config.openai.model == "env-model"
    assert config.matching.default_limit == 5
    assert config.api.port == 9000


def test_example_creator_file_loads(db):
    profiles = load_creator_file(EXAMPLE_CREATORS)

    assert [p.id for p in profiles] == ["creator-001", "creator-002", "creator-003"]
    assert profiles[1].platforms[Platform.TIKTOK].followers == 420000
    assert set(profiles[1].active_platforms()) == {Platform.TIKTOK, Platform.INSTAGRAM}

    for profile in profiles:
        db.upsert_creator(profile)

    # Missing totals are summed from the platforms
    hannah = db.get_creators_by_ids(["creator-002"])[0]
    assert hannah.total_followers == 500000
    assert db.query_creators("mining")[0].id == "creator-002"
