"""Wire encoders for log and metric push bodies."""

from pizzatelemetry.core.encoding.loki import encode_log_event
from pizzatelemetry.core.encoding.otlp import encode_metric, encode_metrics

__all__ = ["encode_log_event", "encode_metric", "encode_metrics"]
