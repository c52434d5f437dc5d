import sys
import unittest
from datetime import timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "engine"))

from marquee_engine.errors import FormatSyntaxError, IconConfigError
from marquee_engine.icons import IconSet, IconSets
from marquee_engine.models import Literal, Placeholder, PlaybackState, StatusSnapshot
from marquee_engine.placeholders import Template, format_tokens, parse_format, render
from marquee_engine.timefmt import format_duration


class ParseFormatTests(unittest.TestCase):
    def test_literal_and_placeholders(self):
        self.assertEqual(
            parse_format("{artist} - {title}"),
            (Placeholder("artist"), Literal(" - "), Placeholder("title")),
        )

    def test_escaped_braces(self):
        self.assertEqual(parse_format("{{x}}"), (Literal("{x}"),))
        self.assertEqual(
            parse_format("{{{title}}}"),
            (Literal("{"), Placeholder("title"), Literal("}")),
        )

    def test_modifiers(self):
        self.assertEqual(parse_format("{volume:3}"), (Placeholder("volume", pad=3),))
        self.assertEqual(
            parse_format("{elapsedTime:%H:%M:%S}"),
            (Placeholder("elapsedTime", time_spec="%H:%M:%S"),),
        )

    def test_empty_format(self):
        self.assertEqual(parse_format(""), ())

    def test_syntax_errors(self):
        for fmt in ("{artist", "artist}", "{ar{tist}", "{nope}", "{artist:}", "{volume:x}", "{volume:-1}"):
            with self.subTest(fmt=fmt):
                with self.assertRaises(FormatSyntaxError):
                    parse_format(fmt)

    def test_bad_time_specs(self):
        for fmt in ("{elapsedTime:%Q}", "{totalTime:%M%}"):
            with self.subTest(fmt=fmt):
                with self.assertRaises(FormatSyntaxError):
                    parse_format(fmt)

    def test_error_carries_offset(self):
        with self.assertRaises(FormatSyntaxError) as ctx:
            parse_format("ab {nope}")
        self.assertEqual(ctx.exception.offset, 3)
        self.assertIn("nope", str(ctx.exception))

    def test_format_tokens_is_canonical(self):
        fmt = "{{{stateIcon}}} {title:12} {elapsedTime:%M:%S}"
        self.assertEqual(format_tokens(parse_format(fmt)), fmt)


class RenderTests(unittest.TestCase):
    def test_state_icon_and_text(self):
        snap = StatusSnapshot(artist="A", title="B", state=PlaybackState.PAUSE)
        tpl = Template.parse("{stateIcon:1} {artist} - {title}")
        self.assertEqual(tpl.render(snap), "⏸ A - B")

    def test_missing_field_uses_default(self):
        tpl = Template.parse("{album}")
        self.assertEqual(tpl.render(StatusSnapshot()), "N/A")
        self.assertEqual(tpl.render(None), "N/A")
        custom = Template.parse("{album}", default_placeholder="--")
        self.assertEqual(custom.render(StatusSnapshot()), "--")

    def test_toggle_without_off_glyph(self):
        icons = IconSets.from_specs(repeat=["R"])
        tpl = Template.parse("[{repeatIcon}]", icons)
        self.assertEqual(tpl.render(StatusSnapshot(repeat=False)), "[]")
        self.assertEqual(tpl.render(StatusSnapshot(repeat=True)), "[R]")

    def test_toggle_with_off_glyph(self):
        icons = IconSets.from_specs(random="zx")
        tpl = Template.parse("{randomIcon}", icons)
        self.assertEqual(tpl.render(StatusSnapshot(random=False)), "x")

    def test_times(self):
        snap = StatusSnapshot(elapsed=timedelta(seconds=65), duration=timedelta(seconds=3665))
        self.assertEqual(render(parse_format("{elapsedTime}/{totalTime}"), snap), "01:05/61:05")
        self.assertEqual(render(parse_format("{totalTime:%H:%M:%S}"), snap), "01:01:05")

    def test_padding_counts_display_columns(self):
        self.assertEqual(render(parse_format("{volume:3}"), StatusSnapshot(volume=5)), "  5")
        self.assertEqual(render(parse_format("{title:4}"), StatusSnapshot(title="日")), "  日")
        self.assertEqual(render(parse_format("{title:2}"), StatusSnapshot(title="long")), "long")

    def test_values_are_not_parsed_again(self):
        snap = StatusSnapshot(artist="X", title="{artist}")
        self.assertEqual(Template.parse("{title}").render(snap), "{artist}")

    def test_render_is_repeatable(self):
        tpl = Template.parse("{songPosition}/{queueLength}")
        snap = StatusSnapshot(song_position=2, queue_length=10)
        self.assertEqual(tpl.render(snap), tpl.render(snap))
        self.assertEqual(tpl.render(snap), "2/10")

    def test_is_constant(self):
        self.assertTrue(Template.parse("plain {{text}}").is_constant)
        self.assertFalse(Template.parse("{title}").is_constant)


class IconTests(unittest.TestCase):
    def test_status_needs_three_glyphs(self):
        with self.assertRaises(IconConfigError):
            IconSet.status("ab")
        icons = IconSet.status(["play", "pause", "stop"])
        self.assertEqual(icons.for_state(PlaybackState.STOP), "stop")

    def test_toggle_needs_one_or_two(self):
        with self.assertRaises(IconConfigError):
            IconSet.toggle("")
        with self.assertRaises(IconConfigError):
            IconSet.toggle("abc")

    def test_defaults(self):
        icons = IconSets()
        self.assertEqual(icons.state.for_state(PlaybackState.PLAY), "▶")
        self.assertEqual(icons.toggle_for("consume").for_flag(True), "C")


class DurationTests(unittest.TestCase):
    def test_percent_escape(self):
        self.assertEqual(format_duration(timedelta(seconds=5), "%S%%"), "05%")

    def test_negative_clamps_to_zero(self):
        self.assertEqual(format_duration(timedelta(seconds=-3)), "00:00")


if __name__ == "__main__":
    unittest.main()
