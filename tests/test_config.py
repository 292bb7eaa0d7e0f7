import pytest

from owner_resolution.config import DEFAULT_OPEN_DATA_URL, ConfigurationError, Settings

ENV_VARS = [
    "NYC_OPEN_DATA_URL",
    "NYC_OPEN_DATA_APP_TOKEN",
    "FEED_TIMEOUT_SECONDS",
    "FEED_DEADLINE_SECONDS",
    "FEED_MAX_WORKERS",
    "ENRICHMENT_ENABLED",
    "ENRICHMENT_TIMEOUT_SECONDS",
    "APOLLO_API_KEY",
    "PDL_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    s = Settings.from_env()
    assert s.open_data_url == DEFAULT_OPEN_DATA_URL
    assert (s.feed_timeout, s.feed_deadline, s.max_workers) == (8.0, 10.0, 12)
    assert s.enrichment_enabled
    assert s.app_token is None and s.apollo_api_key is None and s.pdl_api_key is None


def test_overrides(monkeypatch):
    monkeypatch.setenv("NYC_OPEN_DATA_URL", "https://mirror.example/resource/")
    monkeypatch.setenv("FEED_TIMEOUT_SECONDS", "3")
    monkeypatch.setenv("FEED_MAX_WORKERS", "4")
    monkeypatch.setenv("ENRICHMENT_ENABLED", "0")
    monkeypatch.setenv("PDL_API_KEY", "pdl-key")
    s = Settings.from_env()
    assert s.open_data_url == "https://mirror.example/resource"
    assert s.feed_deadline == 5.0
    assert s.max_workers == 4
    assert not s.enrichment_enabled
    assert s.pdl_api_key == "pdl-key"


@pytest.mark.parametrize("raw", ["abc", "-1", "0"])
def test_bad_numbers_rejected(monkeypatch, raw):
    monkeypatch.setenv("FEED_TIMEOUT_SECONDS", raw)
    with pytest.raises(ConfigurationError, match="FEED_TIMEOUT_SECONDS"):
        Settings.from_env()
