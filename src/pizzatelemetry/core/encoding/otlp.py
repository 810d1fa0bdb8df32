"""OTLP/JSON encoder for metric samples."""

from collections.abc import Iterable
from typing import Any

from pizzatelemetry.core.models import MetricSample

AGGREGATION_TEMPORALITY = {"cumulative": "AGGREGATION_TEMPORALITY_CUMULATIVE"}


def _encode_value(sample: MetricSample) -> tuple[str, int | float]:
    if sample.value_kind == "int":
        return "asInt", int(round(sample.value))
    return "asDouble", float(sample.value)


def encode_metric(sample: MetricSample) -> dict[str, Any]:
    """Encode a single sample as an OTLP metric object.

    Args:
        sample: The MetricSample to encode.

    Returns:
        Dict with name, unit and a "sum" or "gauge" section holding one
        data point. Sums also carry temporality and monotonicity.
    """
    value_key, value = _encode_value(sample)
    data_point = {
        value_key: value,
        "timeUnixNano": sample.timestamp_nanos,
        "attributes": [
            {"key": key, "value": {"stringValue": str(val)}}
            for key, val in sample.attributes.items()
        ],
    }
    section: dict[str, Any] = {"dataPoints": [data_point]}
    if sample.kind == "sum":
        section["aggregationTemporality"] = AGGREGATION_TEMPORALITY[
            sample.temporality or "cumulative"
        ]
        section["isMonotonic"] = sample.monotonic
    return {"name": sample.name, "unit": sample.unit, sample.kind: section}


def encode_metrics(samples: Iterable[MetricSample]) -> dict[str, Any]:
    """Encode a batch of samples as an OTLP resourceMetrics push body."""
    return {
        "resourceMetrics": [
            {"scopeMetrics": [{"metrics": [encode_metric(s) for s in samples]}]}
        ]
    }
