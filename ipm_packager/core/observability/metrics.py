from __future__ import annotations

from collections import Counter
from typing import Dict

from prometheus_client import Counter as PromCounter

# Named counters (custom)
_NAMED = Counter()

_PROM_BUILDS = PromCounter(
    "ipm_package_builds_total",
    "Total package builds",
    ["status"],
)


def reset_metrics() -> None:
    """
    Test helper: clears the in-process counters to avoid cross-test leakage.
    Prometheus counters are process-wide and are not reset.
    """
    _NAMED.clear()


def inc_named(name: str, value: int = 1) -> None:
    if not name:
        return
    _NAMED[name] += int(value)


def record_build(status: str, *, stage: str = "") -> None:
    """status: "succeeded" | "failed"; stage is the failing stage, if any."""
    _PROM_BUILDS.labels(status=status).inc()
    inc_named("package_builds_total")
    inc_named(f"package_builds_{status}")
    if stage:
        inc_named(f"package_build_failed_stage_{stage}")


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)
