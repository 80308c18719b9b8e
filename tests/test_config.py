"""Settings loading from QUESTIONNAIRE_* environment variables."""

import pytest

from questionnaire_engine.config import EngineSettings, load_settings


def test_defaults(monkeypatch):
    for name in (
        "QUESTIONNAIRE_DIR",
        "QUESTIONNAIRE_LOG_LEVEL",
        "QUESTIONNAIRE_SUGGESTION_MIN_CONFIDENCE",
    ):
        monkeypatch.delenv(name, raising=False)
    assert load_settings() == EngineSettings()


def test_overrides(monkeypatch):
    monkeypatch.setenv("QUESTIONNAIRE_DIR", "/srv/forms")
    monkeypatch.setenv("QUESTIONNAIRE_LOG_LEVEL", "debug")
    monkeypatch.setenv("QUESTIONNAIRE_SUGGESTION_MIN_CONFIDENCE", "0.75")
    settings = load_settings()
    assert settings.questionnaire_dir == "/srv/forms"
    assert settings.log_level == "DEBUG"
    assert settings.suggestion_min_confidence == 0.75


def test_confidence_out_of_range(monkeypatch):
    monkeypatch.setenv("QUESTIONNAIRE_SUGGESTION_MIN_CONFIDENCE", "2")
    with pytest.raises(ValueError, match="must be in"):
        load_settings()
