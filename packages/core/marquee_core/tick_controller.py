"""Tick controller: drives fragments through one or many ticks."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from marquee_engine import Fragment, StateStoreError, StatusSnapshot, Template, apply_replacements, compose
from marquee_output import Emitter, TickOutput
from marquee_sources import SourceError, TextSource

from .logging_setup import get_logger
from .performance import PerformanceController
from .state import SavedPosition, StateStore


@dataclass
class Lane:
    """One fragment together with the source that feeds it."""

    fragment: Fragment
    source: TextSource
    label: str = ""


@dataclass
class TickStatus:
    ticks: int = 0
    source_errors: int = 0
    last_error: str | None = None
    budget_warnings: int = 0
    state_errors: int = 0


class TickController:
    def __init__(
        self,
        lanes: Sequence[Lane],
        prefix: Template | None = None,
        suffix: Template | None = None,
        between: str = "",
        tooltip: Template | None = None,
        replacements: Sequence[tuple[str, str]] = (),
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not lanes:
            raise ValueError("at least one fragment is required")
        self.lanes = list(lanes)
        self.prefix = prefix
        self.suffix = suffix
        self.between = between
        self.tooltip = tooltip
        # Escape mapping for the rendered prefix, suffix and tooltip.
        self.replacements = tuple(replacements)

        self._clock = clock
        self._sleep = sleep
        self._logger = get_logger()
        self._status = TickStatus()
        self._positions = [SavedPosition() for _ in self.lanes]
        self._contents: list[str | None] = [None for _ in self.lanes]
        self._snapshot: StatusSnapshot | None = None
        self._events: list[dict[str, Any]] = []

    @property
    def status(self) -> TickStatus:
        return self._status

    @property
    def snapshot(self) -> StatusSnapshot | None:
        return self._snapshot

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event, "tick": self._status.ticks}
        row.update(fields)
        self._events.append(row)
        if len(self._events) > 1000:
            self._events = self._events[-1000:]

    def restore(self, entries: Sequence[SavedPosition]) -> None:
        for i in range(len(self.lanes)):
            self._positions[i] = entries[i] if i < len(entries) else SavedPosition()

    def saved(self) -> list[SavedPosition]:
        return list(self._positions)

    def refresh(self) -> None:
        """Fetch content; dynamic sources every tick, static ones only once."""
        for i, lane in enumerate(self.lanes):
            if self._contents[i] is not None and not lane.source.dynamic:
                continue
            try:
                reading = lane.source.fetch()
            except SourceError as exc:
                if self._contents[i] is None:
                    raise
                self._status.source_errors += 1
                self._status.last_error = str(exc)
                self._log_event("source_error", fragment=lane.label, error=str(exc))
                self._logger.warning(
                    f"keeping previous content for {lane.label or lane.source.describe()}: {exc}",
                    extra={"event": "source_error", "fragment": lane.label},
                )
                continue
            if isinstance(reading, StatusSnapshot):
                self._snapshot = reading
            self._contents[i] = lane.fragment.prepare(reading)

    def _render_extra(self, template: Template | None) -> str | None:
        if template is None:
            return None
        return apply_replacements(template.render(self._snapshot), self.replacements)

    def render_tick(self) -> TickOutput:
        parts: list[str] = []
        for i, lane in enumerate(self.lanes):
            saved = self._positions[i]
            tick = lane.fragment.advance(self._contents[i] or "", saved.position, saved.digest)
            self._positions[i] = SavedPosition(tick.position, tick.digest)
            parts.append(tick.text)

        text = compose(
            parts,
            prefix=self._render_extra(self.prefix) or "",
            suffix=self._render_extra(self.suffix) or "",
            between=self.between,
        )
        tooltip = self._render_extra(self.tooltip)
        self._status.ticks += 1
        return TickOutput(text=text, tooltip=tooltip)

    def tick(self) -> TickOutput:
        self.refresh()
        return self.render_tick()

    def run_once(self, store: StateStore, emitter: Emitter, persist_on_error: bool = True) -> TickOutput:
        """One tick with positions round-tripped through ``store``."""
        try:
            with store.session(persist_on_error=persist_on_error) as session:
                self.restore(session.entries)
                # Rewrite the loaded positions even if this tick fails.
                for i, entry in enumerate(self.saved()):
                    session.set(i, entry)
                output = self.tick()
                for i, entry in enumerate(self.saved()):
                    session.set(i, entry)
        except StateStoreError as exc:
            self._status.state_errors += 1
            self._log_event("state_store_error", error=str(exc))
            self._logger.warning(str(exc), extra={"event": "state_store_failed", "path": str(store.path)})
        emitter.emit(output)
        return output

    def run(
        self,
        emitter: Emitter,
        tick_s: float,
        max_ticks: int | None = None,
        performance: PerformanceController | None = None,
        sample_every: int = 30,
    ) -> None:
        """Continuous mode: positions stay in memory, ticks paced by a monotonic clock."""
        next_at = self._clock()
        try:
            while max_ticks is None or self._status.ticks < max_ticks:
                started = self._clock()
                emitter.emit(self.tick())
                work_s = self._clock() - started

                if performance is not None and self._status.ticks % max(1, sample_every) == 0:
                    budget = performance.sample(work_s=work_s, tick_s=tick_s)
                    if budget.warning:
                        self._status.budget_warnings += 1
                        self._log_event("budget_warning", warning=budget.warning, cpu_percent=budget.cpu_percent)
                        self._logger.warning(
                            f"{budget.warning}: cpu={budget.cpu_percent:.1f}% rss={budget.rss_mb:.1f}MB "
                            f"work={budget.work_s * 1000:.1f}ms",
                            extra={"event": "budget_warning"},
                        )

                if max_ticks is not None and self._status.ticks >= max_ticks:
                    break
                next_at += tick_s
                delay = next_at - self._clock()
                if delay > 0:
                    self._sleep(delay)
                else:
                    # Fell behind: restart the schedule instead of bursting.
                    next_at = self._clock()
        finally:
            emitter.finish()

    def close(self) -> None:
        for lane in self.lanes:
            lane.source.close()
