"""Loki push encoder for log events."""

import json
from typing import Any

from pizzatelemetry.core.models import LogEvent


def encode_log_event(event: LogEvent) -> dict[str, Any]:
    """Encode a log event as a Loki push body.

    Args:
        event: A LogEvent with an already sanitized payload.

    Returns:
        Dict with a single stream holding one [timestamp, line] value.
        The timestamp is the nanosecond time as a string and the line is
        the JSON-encoded payload.
    """
    return {
        "streams": [
            {
                "stream": dict(event.labels),
                "values": [
                    [str(event.timestamp_nanos), json.dumps(event.payload, default=str)]
                ],
            }
        ]
    }
