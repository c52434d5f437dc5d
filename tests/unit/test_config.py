import json
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "engine"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from marquee_core.config import AppConfig, config_root, load_config, save_config, state_path


class ConfigTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.dict(os.environ)
        patcher.start()
        self.addCleanup(patcher.stop)
        os.environ.pop("MPD_HOST", None)
        os.environ.pop("MPD_PORT", None)

    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_config(Path(tmp) / "missing.json")
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual(cfg.window.width, 32)
            self.assertEqual(cfg.format.running, "{artist} - {title}")
            self.assertEqual(cfg.format.default_placeholder, "N/A")
            self.assertEqual(cfg.mpd.host, "localhost")
            self.assertEqual(cfg.mpd.port, 6600)

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.run.tick_ms = 250
            cfg.icons.repeat = "rR"
            cfg.format.tooltip = "{album}"
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.run.tick_ms, 250)
            self.assertEqual(reloaded.icons.repeat, "rR")
            self.assertEqual(reloaded.format.tooltip, "{album}")

    def test_migrate_v1_shape(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            old = {"format": "{title}", "default_placeholder": "-", "tick_ms": 400}
            path.write_text(json.dumps(old), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.config_version, 2)
            self.assertEqual(cfg.format.running, "{title}")
            self.assertEqual(cfg.format.default_placeholder, "-")
            self.assertEqual(cfg.run.tick_ms, 400)

    def test_values_are_clamped(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {"config_version": 2, "window": {"width": 0}, "run": {"tick_ms": 1}}
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.window.width, 1)
            self.assertEqual(cfg.run.tick_ms, 50)

    def test_corrupt_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path).window.width, 32)

    def test_mpd_environment(self):
        os.environ["MPD_HOST"] = "secret@music.local"
        os.environ["MPD_PORT"] = "6601"
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_config(Path(tmp) / "missing.json")
        self.assertEqual(cfg.mpd.host, "music.local")
        self.assertEqual(cfg.mpd.port, 6601)
        self.assertEqual(cfg.mpd.password, "secret")

    def test_malformed_mpd_port_keeps_configured_port(self):
        os.environ["MPD_PORT"] = "abc"
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"config_version": 2, "mpd": {"port": 6700}}), encoding="utf-8")
            with self.assertLogs("marquee.config", level="WARNING") as logs:
                cfg = load_config(path)
        self.assertEqual(cfg.mpd.port, 6700)
        self.assertIn("MPD_PORT", logs.output[0])

    def test_state_path(self):
        cfg = AppConfig()
        self.assertEqual(state_path(cfg), config_root() / "state")
        cfg.state.path = "/tmp/marquee-state"
        self.assertEqual(state_path(cfg), Path("/tmp/marquee-state"))


if __name__ == "__main__":
    unittest.main()
