import io
import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "output"))

from marquee_output import TerminalEmitter, TickOutput, WaybarEmitter, build_emitter


class EmitterTests(unittest.TestCase):
    def test_terminal_rewrites_line(self):
        out = io.StringIO()
        emitter = TerminalEmitter(out)
        emitter.emit(TickOutput("abc"))
        emitter.emit(TickOutput("bcd"))
        emitter.finish()
        self.assertEqual(out.getvalue(), "\rabc\rbcd\n")

    def test_terminal_newline_mode(self):
        out = io.StringIO()
        emitter = TerminalEmitter(out, newline=True)
        emitter.emit(TickOutput("abc"))
        emitter.finish()
        self.assertEqual(out.getvalue(), "abc\n")

    def test_waybar_record(self):
        out = io.StringIO()
        WaybarEmitter(out).emit(TickOutput("▶ A &amp; B", tooltip="Album"))
        line = out.getvalue()
        self.assertTrue(line.endswith("\n"))
        self.assertIn("▶", line)
        self.assertEqual(json.loads(line), {"text": "▶ A &amp; B", "tooltip": "Album"})

    def test_waybar_without_tooltip(self):
        out = io.StringIO()
        WaybarEmitter(out).emit(TickOutput("x"))
        self.assertEqual(json.loads(out.getvalue()), {"text": "x"})

    def test_build_emitter(self):
        self.assertIsInstance(build_emitter(True), WaybarEmitter)
        self.assertTrue(build_emitter(False, newline=True).newline)


if __name__ == "__main__":
    unittest.main()
