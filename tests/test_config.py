from __future__ import annotations

import os
import unittest
from unittest import mock

from chartkit.config import DEFAULT_PALETTE, FONT_FAMILY_ENV, ChartTheme, resolve_options, validate_theme
from chartkit.series import BarOptions


class ThemeTests(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {FONT_FAMILY_ENV: ""}):
            theme = validate_theme()
        self.assertEqual(theme, ChartTheme())
        self.assertEqual(theme.color_for(len(DEFAULT_PALETTE)), DEFAULT_PALETTE[0])

    def test_overrides_are_validated(self) -> None:
        theme = validate_theme({"palette": ["#000000", "#ffffff"], "font_size_px": 14})
        self.assertEqual(theme.palette, ("#000000", "#ffffff"))
        self.assertEqual(theme.font_size_px, 14.0)

    def test_environment_font(self) -> None:
        with mock.patch.dict(os.environ, {FONT_FAMILY_ENV: "Noto Sans"}):
            self.assertEqual(validate_theme().font_family, "Noto Sans")

    def test_invalid_tokens(self) -> None:
        cases = (
            {"unknown": 1},
            {"palette": "#000000"},
            {"palette": ["red"]},
            {"background": "white"},
            {"font_family": " "},
            {"font_size_px": 0},
        )
        for overrides in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    validate_theme(overrides)


class ResolveOptionsTests(unittest.TestCase):
    def test_mapping_and_instance(self) -> None:
        self.assertEqual(resolve_options(BarOptions, None), BarOptions())
        options = resolve_options(BarOptions, {"bar_width": 12.0})
        self.assertEqual(options.bar_width, 12.0)
        self.assertIs(resolve_options(BarOptions, options), options)

    def test_unknown_key_and_bad_type(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown BarOptions option: width"):
            resolve_options(BarOptions, {"width": 3})
        with self.assertRaises(ValueError):
            resolve_options(BarOptions, [("bar_width", 3)])


if __name__ == "__main__":
    unittest.main()
