import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "engine"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from marquee_core.performance import PerformanceController, PerformanceTargets


class PerformanceTests(unittest.TestCase):
    def test_budget_sample_shape(self):
        ctl = PerformanceController(PerformanceTargets(cpu_percent_max=100_000.0, rss_mb_max=1_000_000.0))
        status = ctl.sample(work_s=0.001, tick_s=1.0)
        self.assertFalse(status.overloaded)
        self.assertIsNone(status.warning)
        self.assertGreaterEqual(status.rss_mb, 0.0)

    def test_tick_overrun(self):
        ctl = PerformanceController(PerformanceTargets(cpu_percent_max=100_000.0, rss_mb_max=1_000_000.0))
        status = ctl.sample(work_s=2.0, tick_s=1.0)
        self.assertEqual(status.warning, "tick_overrun")

    def test_resource_overload(self):
        ctl = PerformanceController(PerformanceTargets(cpu_percent_max=100_000.0, rss_mb_max=0.001))
        status = ctl.sample(work_s=0.001, tick_s=1.0)
        self.assertTrue(status.overloaded)
        self.assertEqual(status.warning, "resource_overload")


if __name__ == "__main__":
    unittest.main()
