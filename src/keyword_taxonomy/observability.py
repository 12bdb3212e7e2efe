"""Metrics emitted as structured log lines with optional Prometheus export."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Tuple, Union

from prometheus_client import (
    CollectorRegistry,
    Counter as PromCounter,
    Gauge as PromGauge,
    Histogram as PromHistogram,
    generate_latest,
)

from .config import Settings

_PROM_NAME_RE = re.compile(r"[^a-zA-Z0-9_]")

_Collector = Union[PromCounter, PromGauge, PromHistogram]

# kind -> (collector class, help suffix, update method)
_PROM_KINDS: Dict[str, Tuple[type, str, str]] = {
    "counter": (PromCounter, "counter", "inc"),
    "gauge": (PromGauge, "gauge", "set"),
    "histogram": (PromHistogram, "duration", "observe"),
}


class MetricsRecorder:
    """Emit pipeline metrics via logging and (optionally) Prometheus.

    Every metric becomes one ``<namespace>.<metric> key=value ...`` line on the
    ``keyword_taxonomy.metrics`` logger. With Prometheus export enabled the same
    values feed collectors registered on a private registry, one collector per
    metric name and label set.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        namespace: str = "keyword_taxonomy",
        logger: logging.Logger | None = None,
        prometheus_enabled: bool = False,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self._enabled = enabled
        self._namespace = namespace.strip() or "keyword_taxonomy"
        self._logger = logger or logging.getLogger("keyword_taxonomy.metrics")
        self._prometheus_enabled = prometheus_enabled
        if registry is None and prometheus_enabled:
            registry = CollectorRegistry()
        self._prom_registry = registry
        self._collectors: dict[Tuple[str, str, Tuple[str, ...]], _Collector] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> MetricsRecorder:
        return cls(
            enabled=settings.observability_metrics_enabled,
            namespace=settings.observability_namespace,
            prometheus_enabled=settings.observability_prometheus_enabled,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def prometheus_enabled(self) -> bool:
        return self._prometheus_enabled and self._prom_registry is not None

    def render_prometheus(self) -> bytes:
        if not self.prometheus_enabled:
            raise RuntimeError("Prometheus export is disabled")
        return generate_latest(self._prom_registry)

    def increment(self, metric: str, *, value: int = 1, **tags: Any) -> None:
        """Increment a counter metric."""

        self._record("counter", metric, {"value": int(value)}, float(max(int(value), 0)), tags)

    def set_gauge(self, metric: str, value: float, **tags: Any) -> None:
        self._record("gauge", metric, {"value": value}, float(value), tags)

    def record_timing(self, metric: str, duration_seconds: float, **tags: Any) -> None:
        """Log the duration in milliseconds; Prometheus observes seconds."""

        seconds = max(duration_seconds, 0.0)
        self._record("histogram", metric, {"duration_ms": round(seconds * 1000.0, 4)}, seconds, tags)

    def record_grouping_run(
        self,
        *,
        strategy: str,
        duplicates_merged: int,
        groups: int,
        duration_seconds: float,
    ) -> None:
        """Emit the per-run metrics of one pipeline invocation."""

        self.increment("dedup.duplicates_merged", value=duplicates_merged)
        self.set_gauge("pipeline.groups", groups, strategy=strategy)
        self.record_timing("pipeline.duration", duration_seconds, strategy=strategy)

    def _record(
        self,
        kind: str,
        metric: str,
        fields: dict[str, Any],
        prom_value: float,
        tags: dict[str, Any],
    ) -> None:
        if not self._enabled:
            return
        clean_tags = {key: val for key, val in tags.items() if val is not None}
        self._log_line(metric, fields, clean_tags)
        if self.prometheus_enabled:
            self._export(kind, metric, prom_value, clean_tags)

    def _log_line(self, metric: str, fields: dict[str, Any], tags: dict[str, Any]) -> None:
        segments = [f"{key}={self._stringify(value)}" for key, value in sorted(fields.items())]
        segments += [f"{key}={self._stringify(value)}" for key, value in sorted(tags.items())]
        message = f"{self._namespace}.{metric}"
        if segments:
            message = f"{message} {' '.join(segments)}"
        self._logger.info(message)

    def _export(self, kind: str, metric: str, value: float, tags: dict[str, Any]) -> None:
        label_keys = tuple(sorted(tags))
        label_names = tuple(self._sanitize_label(name) for name in label_keys)
        collector_key = (kind, metric, label_names)
        collector = self._collectors.get(collector_key)
        factory, help_suffix, update = _PROM_KINDS[kind]
        if collector is None:
            collector = factory(
                self._prom_metric_name(metric),
                f"{metric} {help_suffix}",
                labelnames=list(label_names),
                registry=self._prom_registry,
            )
            self._collectors[collector_key] = collector
        target = collector
        if label_names:
            target = collector.labels(
                **{name: self._stringify(tags[key]) for name, key in zip(label_names, label_keys)}
            )
        getattr(target, update)(value)

    def _prom_metric_name(self, metric: str) -> str:
        cleaned = _PROM_NAME_RE.sub("_", metric)
        return f"{_PROM_NAME_RE.sub('_', self._namespace)}_{cleaned}".strip("_")

    @staticmethod
    def _sanitize_label(label: str) -> str:
        return _PROM_NAME_RE.sub("_", label) or "label"

    @staticmethod
    def _stringify(value: Any) -> str:
        if isinstance(value, float):
            return f"{value:.4f}" if not value.is_integer() else f"{int(value)}"
        return str(value)


__all__ = ["MetricsRecorder"]
