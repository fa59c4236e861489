"""
Idempotent Prometheus metric registration.

Metric modules are imported again under uvicorn --reload and by tests that
build several apps, so a metric is looked up in the registry before it is
created.
"""

from typing import TypeVar

from prometheus_client import REGISTRY, CollectorRegistry
from prometheus_client.metrics import MetricWrapperBase

M = TypeVar("M", bound=MetricWrapperBase)


def get_or_create(
    metric_cls: type[M],
    name: str,
    doc: str,
    labels: tuple[str, ...] | list[str] = (),
    registry: CollectorRegistry = REGISTRY,
    **kwargs,
) -> M:
    """
    Return the metric registered as `name`, creating it on first use.

    Extra keyword arguments (e.g. `buckets`) are passed to the metric class.

    Raises:
        ValueError: `name` is already registered as a different metric type.
    """
    existing = registry._names_to_collectors.get(name)
    if existing is None:
        return metric_cls(name, doc, labels, registry=registry, **kwargs)
    if not isinstance(existing, metric_cls):
        raise ValueError(
            f"Metric {name!r} is registered as {type(existing).__name__}, "
            f"not {metric_cls.__name__}"
        )
    return existing
