from __future__ import annotations

import unittest

from irexplorer.ansi import clip_ansi_line, display_width, expand_tabs, pad_ansi_line, slice_ansi_line


class AnsiWidthTests(unittest.TestCase):
    def test_display_width_ignores_escapes_and_counts_wide_chars(self) -> None:
        self.assertEqual(display_width("\033[31mabc\033[0m"), 3)
        self.assertEqual(display_width("日本"), 4)
        self.assertEqual(display_width("\tx"), 9)
        self.assertEqual(display_width("\tx", start_col=4), 5)

    def test_expand_tabs_aligns_to_stops(self) -> None:
        self.assertEqual(expand_tabs("a\tb"), "a" + " " * 7 + "b")
        self.assertEqual(expand_tabs("\tb", start_col=6), "  b")

    def test_clip_keeps_escapes_and_stops_before_wide_overflow(self) -> None:
        self.assertEqual(clip_ansi_line("\033[1mhello\033[0m", 3), "\033[1mhel")
        self.assertEqual(clip_ansi_line("a日", 2), "a")
        self.assertEqual(clip_ansi_line("abc", 0), "")

    def test_slice_re_emits_active_color(self) -> None:
        colored = "\033[31mabc\033[32mdef\033[0m"

        self.assertEqual(slice_ansi_line(colored, 1, 2), "\033[31mbc")
        self.assertEqual(slice_ansi_line(colored, 3, 3), "\033[32mdef")
        self.assertEqual(slice_ansi_line(colored, 0, 0), "")

    def test_pad_fills_to_width(self) -> None:
        self.assertEqual(pad_ansi_line("ab", 4), "ab  ")
        self.assertEqual(pad_ansi_line("abcdef", 4), "abcd")


if __name__ == "__main__":
    unittest.main()
