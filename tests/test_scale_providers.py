from __future__ import annotations

import os
import unittest
from unittest import mock

from shaped_image.platform import (
    EnvScaleProvider,
    FixedScaleProvider,
    ScreenScaleProvider,
    default_scale_provider,
)


class ScaleProviderTests(unittest.TestCase):
    def test_fixed_provider_rejects_non_positive(self) -> None:
        with self.assertRaises(ValueError):
            FixedScaleProvider(0.0)
        self.assertEqual(FixedScaleProvider(2.5).current_default_scale(), 2.5)

    def test_env_provider_reads_variable(self) -> None:
        provider = EnvScaleProvider(fallback=FixedScaleProvider(1.0))
        with mock.patch.dict(os.environ, {"SHAPED_IMAGE_DEFAULT_SCALE": "3"}):
            self.assertEqual(provider.current_default_scale(), 3.0)

    def test_env_provider_falls_back_on_invalid_value(self) -> None:
        provider = EnvScaleProvider(fallback=FixedScaleProvider(2.0))
        for raw in ("", "abc", "-1", "nan"):
            with mock.patch.dict(os.environ, {"SHAPED_IMAGE_DEFAULT_SCALE": raw}):
                self.assertEqual(provider.current_default_scale(), 2.0)

    def test_screen_provider_uses_detected_scale(self) -> None:
        with mock.patch("shaped_image.platform.scale._detect_screen_scale", return_value=2.0):
            self.assertEqual(ScreenScaleProvider().current_default_scale(), 2.0)
        with mock.patch("shaped_image.platform.scale._detect_screen_scale", return_value=None):
            self.assertEqual(ScreenScaleProvider().current_default_scale(), 1.0)

    def test_default_provider_prefers_env(self) -> None:
        with mock.patch.dict(os.environ, {"SHAPED_IMAGE_DEFAULT_SCALE": "1.5"}):
            with mock.patch("shaped_image.platform.scale._detect_screen_scale") as detect:
                self.assertEqual(default_scale_provider().current_default_scale(), 1.5)
                detect.assert_not_called()


if __name__ == "__main__":
    unittest.main()
