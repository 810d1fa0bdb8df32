"""Host CPU and memory readings for the metrics aggregator."""

import psutil


def _clamp_percent(value: float) -> float:
    return min(100.0, max(0.0, value))


class SystemStats:
    """Reads host load and memory utilization through psutil."""

    def cpu_usage_percent(self) -> float:
        """One-minute load average per logical core, as a clamped percentage."""
        load_1min = psutil.getloadavg()[0]
        cores = psutil.cpu_count() or 1
        return _clamp_percent(load_1min / cores * 100)

    def memory_usage_percent(self) -> float:
        """Used share of total memory, as a clamped percentage."""
        mem = psutil.virtual_memory()
        if not mem.total:
            return 0.0
        return _clamp_percent((mem.total - mem.available) / mem.total * 100)
