"""Configuration helpers for the keyword taxonomy pipeline."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Final, Literal

from dotenv import load_dotenv

load_dotenv()

InvalidRecordPolicy = Literal["raise", "skip"]

_INVALID_RECORD_POLICIES: Final[frozenset[str]] = frozenset({"raise", "skip"})
_DEFAULT_INVALID_RECORD_POLICY: Final[str] = "raise"
_DEFAULT_GENERIC_CLUSTER_LABEL: Final[str] = "Genel"
_DEFAULT_FALLBACK_CATEGORY_LABEL: Final[str] = "Diğer"
_DEFAULT_OBSERVABILITY_NAMESPACE: Final[str] = "keyword_taxonomy"


def _env_optional_bool(name: str) -> bool | None:
    """Read an optional boolean environment variable."""

    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    msg = f"Environment variable {name} must be a boolean value (true/false)."
    raise ValueError(msg)


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable with a fallback."""

    value = _env_optional_bool(name)
    if value is None:
        return default
    return value


def _env_optional_str(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _env_policy(name: str, default: str) -> str:
    value = (_env_optional_str(name) or default).lower()
    if value not in _INVALID_RECORD_POLICIES:
        allowed = ", ".join(sorted(_INVALID_RECORD_POLICIES))
        raise ValueError(f"Environment variable {name} must be one of: {allowed}")
    return value


@dataclass(slots=True)
class Settings:
    """Runtime settings loaded from environment variables."""

    lexicon_path: str | None = None
    invalid_record_policy: str = _DEFAULT_INVALID_RECORD_POLICY
    use_assigned_categories: bool = False
    generic_cluster_label: str = _DEFAULT_GENERIC_CLUSTER_LABEL
    fallback_category_label: str = _DEFAULT_FALLBACK_CATEGORY_LABEL
    observability_metrics_enabled: bool = True
    observability_namespace: str = _DEFAULT_OBSERVABILITY_NAMESPACE
    observability_prometheus_enabled: bool = False

    def __post_init__(self) -> None:
        if self.invalid_record_policy not in _INVALID_RECORD_POLICIES:
            raise ValueError(f"Unsupported invalid record policy: {self.invalid_record_policy!r}")

    @property
    def skip_invalid_records(self) -> bool:
        return self.invalid_record_policy == "skip"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings by reading environment variables."""

        return cls(
            lexicon_path=_env_optional_str("KEYWORD_LEXICON_PATH"),
            invalid_record_policy=_env_policy(
                "KEYWORD_INVALID_RECORD_POLICY", _DEFAULT_INVALID_RECORD_POLICY
            ),
            use_assigned_categories=_env_bool("KEYWORD_USE_ASSIGNED_CATEGORIES", False),
            generic_cluster_label=os.getenv(
                "KEYWORD_GENERIC_CLUSTER_LABEL", _DEFAULT_GENERIC_CLUSTER_LABEL
            ),
            fallback_category_label=os.getenv(
                "KEYWORD_FALLBACK_CATEGORY_LABEL", _DEFAULT_FALLBACK_CATEGORY_LABEL
            ),
            observability_metrics_enabled=_env_bool("OBSERVABILITY_METRICS_ENABLED", True),
            observability_namespace=os.getenv(
                "OBSERVABILITY_NAMESPACE", _DEFAULT_OBSERVABILITY_NAMESPACE
            ),
            observability_prometheus_enabled=_env_bool("OBSERVABILITY_PROMETHEUS_ENABLED", False),
        )


__all__ = ["InvalidRecordPolicy", "Settings"]
