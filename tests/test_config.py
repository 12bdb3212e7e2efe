from __future__ import annotations

import pytest

from keyword_taxonomy.config import Settings

_ENV_NAMES = (
    "KEYWORD_LEXICON_PATH",
    "KEYWORD_INVALID_RECORD_POLICY",
    "KEYWORD_USE_ASSIGNED_CATEGORIES",
    "KEYWORD_GENERIC_CLUSTER_LABEL",
    "KEYWORD_FALLBACK_CATEGORY_LABEL",
    "OBSERVABILITY_METRICS_ENABLED",
    "OBSERVABILITY_NAMESPACE",
    "OBSERVABILITY_PROMETHEUS_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults() -> None:
    settings = Settings.from_env()

    assert settings.lexicon_path is None
    assert settings.invalid_record_policy == "raise"
    assert not settings.skip_invalid_records
    assert settings.use_assigned_categories is False
    assert settings.generic_cluster_label == "Genel"
    assert settings.fallback_category_label == "Diğer"
    assert settings.observability_metrics_enabled is True
    assert settings.observability_namespace == "keyword_taxonomy"
    assert settings.observability_prometheus_enabled is False


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYWORD_LEXICON_PATH", " /etc/keywords/lexicons.yaml ")
    monkeypatch.setenv("KEYWORD_INVALID_RECORD_POLICY", "SKIP")
    monkeypatch.setenv("KEYWORD_USE_ASSIGNED_CATEGORIES", "yes")
    monkeypatch.setenv("KEYWORD_FALLBACK_CATEGORY_LABEL", "Other")
    monkeypatch.setenv("OBSERVABILITY_METRICS_ENABLED", "off")
    monkeypatch.setenv("OBSERVABILITY_PROMETHEUS_ENABLED", "1")

    settings = Settings.from_env()

    assert settings.lexicon_path == "/etc/keywords/lexicons.yaml"
    assert settings.invalid_record_policy == "skip"
    assert settings.skip_invalid_records
    assert settings.use_assigned_categories is True
    assert settings.fallback_category_label == "Other"
    assert settings.observability_metrics_enabled is False
    assert settings.observability_prometheus_enabled is True


def test_settings_blank_lexicon_path_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYWORD_LEXICON_PATH", "   ")

    assert Settings.from_env().lexicon_path is None


def test_settings_rejects_invalid_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYWORD_USE_ASSIGNED_CATEGORIES", "sometimes")

    with pytest.raises(ValueError):
        Settings.from_env()


def test_settings_rejects_unknown_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYWORD_INVALID_RECORD_POLICY", "ignore")

    with pytest.raises(ValueError):
        Settings.from_env()


def test_settings_constructor_validates_policy() -> None:
    with pytest.raises(ValueError):
        Settings(invalid_record_policy="drop")
