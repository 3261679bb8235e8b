from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from frecd import config
from frecd.frecency import DEFAULT_MODEL


class ConfigPathTests(unittest.TestCase):
    def test_env_override_wins_over_platform_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {config.CONFIG_DIR_ENV: tmp}):
                self.assertEqual(config.database_path(), Path(tmp) / config.DB_FILENAME)
                self.assertEqual(config.config_path(), Path(tmp) / config.CONFIG_FILENAME)

    def test_platform_config_dir_is_used_by_default(self) -> None:
        with mock.patch.dict(os.environ, {config.CONFIG_DIR_ENV: ""}), mock.patch(
            "frecd.config.user_config_dir", return_value="/home/someone/.config/frecd"
        ) as user_config_dir:
            self.assertEqual(config.database_path(), Path("/home/someone/.config/frecd") / config.DB_FILENAME)

        user_config_dir.assert_called_once_with("frecd", appauthor=False)


class ConfigSettingsTests(unittest.TestCase):
    def _with_config(self, payload: str):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        (Path(tmp.name) / config.CONFIG_FILENAME).write_text(payload, encoding="utf-8")
        patcher = mock.patch.dict(os.environ, {config.CONFIG_DIR_ENV: tmp.name})
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_missing_config_gives_default_model(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {config.CONFIG_DIR_ENV: tmp}):
                self.assertEqual(config.load_config(), {})
                self.assertEqual(config.load_frecency_model(), DEFAULT_MODEL)

    def test_settings_override_half_life_and_increment(self) -> None:
        self._with_config(json.dumps({"half_life_days": 2, "visit_increment": 0.5}))

        model = config.load_frecency_model()

        self.assertEqual(model.half_life, 2 * config.SECONDS_PER_DAY)
        self.assertEqual(model.visit_increment, 0.5)
        self.assertEqual(model.decay_factor, DEFAULT_MODEL.decay_factor)

    def test_zero_increment_is_allowed(self) -> None:
        self._with_config(json.dumps({"visit_increment": 0}))

        self.assertEqual(config.load_frecency_model().visit_increment, 0.0)

    def test_invalid_settings_fall_back_with_warning(self) -> None:
        self._with_config(json.dumps({"half_life_days": -1, "visit_increment": True}))

        with self.assertLogs("frecd.config", level="WARNING") as logs:
            model = config.load_frecency_model()

        self.assertEqual(model, DEFAULT_MODEL)
        self.assertEqual(len(logs.records), 2)

    def test_half_life_overflowing_to_infinity_is_ignored(self) -> None:
        self._with_config(json.dumps({"half_life_days": 1e308}))

        with self.assertLogs("frecd.config", level="WARNING"):
            model = config.load_frecency_model()

        self.assertEqual(model, DEFAULT_MODEL)

    def test_malformed_json_is_ignored(self) -> None:
        self._with_config("{not json")

        self.assertEqual(config.load_config(), {})
        self.assertEqual(config.load_frecency_model(), DEFAULT_MODEL)

    def test_non_object_json_is_ignored(self) -> None:
        self._with_config("[1, 2, 3]")

        self.assertEqual(config.load_config(), {})


if __name__ == "__main__":
    unittest.main()
