"""Core app services: settings, state persistence, logging and the tick loop."""

from .config import AppConfig, config_path, load_config, save_config, state_path
from .performance import BudgetStatus, PerformanceController, PerformanceTargets
from .state import SavedPosition, StateSession, StateStore

try:  # Keep import side effects tolerant in minimal test environments.
    from .tick_controller import Lane, TickController, TickStatus
except Exception:  # pragma: no cover
    Lane = None  # type: ignore[assignment]
    TickController = None  # type: ignore[assignment]
    TickStatus = None  # type: ignore[assignment]

__all__ = [
    "AppConfig",
    "BudgetStatus",
    "Lane",
    "PerformanceController",
    "PerformanceTargets",
    "SavedPosition",
    "StateSession",
    "StateStore",
    "TickController",
    "TickStatus",
    "config_path",
    "load_config",
    "save_config",
    "state_path",
]
