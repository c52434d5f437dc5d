import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "engine"))

from marquee_engine.fragment import Fragment, apply_replacements, compose, content_digest
from marquee_engine.models import StatusSnapshot, WindowConfig
from marquee_engine.placeholders import Template


class ReplacementTests(unittest.TestCase):
    def test_single_pass(self):
        self.assertEqual(apply_replacements("a & b", [("&", "&amp;")]), "a &amp; b")
        self.assertEqual(apply_replacements("&&", [("&", "&amp;")]), "&amp;&amp;")

    def test_first_matching_needle_wins(self):
        self.assertEqual(apply_replacements("aab", [("ab", "X"), ("a", "Y")]), "YX")
        self.assertEqual(apply_replacements("aab", [("a", "Y"), ("ab", "X")]), "YYb")

    def test_empty_needles_are_ignored(self):
        self.assertEqual(apply_replacements("abc", [("", "!")]), "abc")
        self.assertEqual(apply_replacements("", [("a", "b")]), "")


class FragmentTests(unittest.TestCase):
    def test_newlines_replaced_before_windowing(self):
        frag = Fragment(newline=" / ")
        self.assertEqual(frag.prepare("a\nb"), "a / b")

    def test_separator_gets_newline_replacement(self):
        frag = Fragment(window=WindowConfig(width=4, separator="\n"), newline="|")
        self.assertEqual(frag.window_config.separator, "|")
        tick = frag.advance("abcde", 4)
        self.assertEqual(tick.text, "e|ab")

    def test_replacements_apply_to_visible_slice(self):
        frag = Fragment(window=WindowConfig(width=3), replacements=(("&", "&amp;"),))
        tick = frag.advance("a&bcd", 0)
        self.assertEqual(tick.text, "a&amp;b")
        self.assertEqual(tick.position, 1)

    def test_reset_on_change(self):
        frag = Fragment(window=WindowConfig(width=3, reset_on_change=True))
        first = frag.advance("abcdef", 0)
        self.assertEqual((first.text, first.position), ("abc", 1))
        self.assertEqual(first.digest, content_digest("abcdef"))

        second = frag.advance("abcdef", first.position, first.digest)
        self.assertEqual((second.text, second.position), ("bcd", 2))

        changed = frag.advance("uvwxyz", second.position, second.digest)
        self.assertEqual((changed.text, changed.position), ("uvw", 1))

    def test_no_digest_without_reset(self):
        tick = Fragment(window=WindowConfig(width=3)).advance("abcdef", 2, "stale")
        self.assertIsNone(tick.digest)
        self.assertEqual(tick.text, "cde")

    def test_templated_prepare(self):
        frag = Fragment(template=Template.parse("{artist} - {title}"))
        self.assertEqual(frag.prepare(None), "N/A - N/A")
        self.assertEqual(frag.prepare(StatusSnapshot(artist="A", title="B")), "A - B")

    def test_snapshot_needs_template(self):
        with self.assertRaises(TypeError):
            Fragment().prepare(StatusSnapshot())

    def test_compose(self):
        self.assertEqual(compose(["ab", "cd"], prefix="<", suffix=">", between="|"), "<ab|cd>")
        self.assertEqual(compose(["x"]), "x")


if __name__ == "__main__":
    unittest.main()
