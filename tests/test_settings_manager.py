import unittest
import os
import json
import shutil
import tempfile

from pydantic import ValidationError

from xliffgate.scan_result import DEFAULT_XLIFF12_UNTRANSLATED_STATES, DEFAULT_XLIFF20_UNTRANSLATED_STATES
from xliffgate.settings_manager import ScanSettings, SettingsManager


class TestSettingsManager(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.test_dir, "config.json")

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_defaults_without_config_file(self):
        manager = SettingsManager(self.config_path)
        self.assertEqual(manager.untranslated_states_for(False), set(DEFAULT_XLIFF12_UNTRANSLATED_STATES))
        self.assertEqual(manager.untranslated_states_for(True), set(DEFAULT_XLIFF20_UNTRANSLATED_STATES))
        self.assertEqual(manager.new_state_for(False), "translated")
        self.assertEqual(manager.new_state_for(True), "translated")
        self.assertTrue(manager.settings.show_reminder_toast)
        self.assertFalse(os.path.exists(self.config_path))

    def test_save_and_reload(self):
        manager = SettingsManager(self.config_path)
        manager.update(xliff12_untranslated_states={"new", "signed-off"}, xliff20_new_state="reviewed")

        with open(self.config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["xliff12_untranslated_states"], ["new", "signed-off"])

        reloaded = SettingsManager(self.config_path)
        self.assertEqual(reloaded.untranslated_states_for(False), {"new", "signed-off"})
        self.assertEqual(reloaded.new_state_for(True), "reviewed")
        self.assertEqual(reloaded.policies, [{"new", "signed-off"}, set(DEFAULT_XLIFF20_UNTRANSLATED_STATES)])

    def test_unknown_state_rejected(self):
        manager = SettingsManager(self.config_path)
        with self.assertRaises(ValidationError):
            manager.update(xliff20_untranslated_states={"new"})
        # Unchanged after a rejected update
        self.assertEqual(manager.untranslated_states_for(True), set(DEFAULT_XLIFF20_UNTRANSLATED_STATES))

    def test_broken_config_falls_back_to_defaults(self):
        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write("{not json")
        manager = SettingsManager(self.config_path)
        self.assertEqual(manager.settings, ScanSettings())

        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump({"xliff12_untranslated_states": ["bogus"]}, f)
        manager = SettingsManager(self.config_path)
        self.assertEqual(manager.untranslated_states_for(False), set(DEFAULT_XLIFF12_UNTRANSLATED_STATES))

    def test_reset_to_defaults(self):
        manager = SettingsManager(self.config_path)
        manager.update(show_reminder_toast=False)
        manager.reset_to_defaults()
        self.assertTrue(SettingsManager(self.config_path).settings.show_reminder_toast)


if __name__ == "__main__":
    unittest.main()
