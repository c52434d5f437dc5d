"""Runtime resource budget for the continuous tick loop."""

from __future__ import annotations

from dataclasses import dataclass

try:
    import psutil
except Exception:  # pragma: no cover
    psutil = None


@dataclass(frozen=True)
class PerformanceTargets:
    cpu_percent_max: float = 5.0
    rss_mb_max: float = 100.0


@dataclass(frozen=True)
class BudgetStatus:
    cpu_percent: float
    rss_mb: float
    tick_s: float
    work_s: float
    overloaded: bool
    warning: str | None


class PerformanceController:
    def __init__(self, targets: PerformanceTargets | None = None) -> None:
        self.targets = targets or PerformanceTargets()
        self._process = psutil.Process() if psutil is not None else None
        if self._process is not None:
            # Prime non-blocking CPU measurement.
            self._process.cpu_percent(interval=None)

    def sample(self, work_s: float, tick_s: float) -> BudgetStatus:
        """Compare process usage and the last tick's work time against the budget."""
        if self._process is None:
            cpu = 0.0
            rss_mb = 0.0
        else:
            cpu = float(self._process.cpu_percent(interval=None))
            rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)
        overloaded = cpu > self.targets.cpu_percent_max or rss_mb > self.targets.rss_mb_max

        warning = None
        if work_s > tick_s:
            warning = "tick_overrun"
        elif overloaded:
            warning = "resource_overload"

        return BudgetStatus(
            cpu_percent=cpu,
            rss_mb=rss_mb,
            tick_s=float(tick_s),
            work_s=float(work_s),
            overloaded=overloaded,
            warning=warning,
        )
