from __future__ import annotations

import contextlib
import io
import json
from pathlib import Path
import tempfile
import unittest

from posturecheck.cli import main
from posturecheck.settings import RuntimeSettings, load_runtime_settings
from posturecheck.storage.state_store import StateStore


class CliTests(unittest.TestCase):
    def _run(self, tmpdir: str, *args: str) -> tuple[int, str]:
        argv = ["--config", str(Path(tmpdir) / "none.yaml"), "--state", str(Path(tmpdir) / "state.json"), *args]
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            code = main(argv)
        return code, buf.getvalue()

    def test_set_persists_alert_settings(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            code, out = self._run(tmpdir, "set", "--threshold", "0.7", "--sound", "off", "--cue", "alarm")
            self.assertEqual(code, 0)
            self.assertIn("threshold=0.70", out)
            config = StateStore(path=Path(tmpdir) / "state.json").load()
            self.assertEqual(config.thresh_score, 0.7)
            self.assertFalse(config.sound)
            self.assertEqual(config.selected_sound, "alarm")

    def test_invalid_setting_is_refused(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            code, out = self._run(tmpdir, "set", "--threshold", "1.5")
            self.assertEqual(code, 1)
            self.assertIn("Invalid setting", out)

    def test_angle_and_status(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            code, out = self._run(tmpdir, "angle", "side-left")
            self.assertEqual(code, 0)
            self.assertIn("Left side view", out)
            code, out = self._run(tmpdir, "status")
            self.assertEqual(code, 0)
            self.assertIn("(side-left)", out)
            self.assertIn("Capture at least 3 good + 3 bad", out)

    def test_clear_needs_yes(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            code, _out = self._run(tmpdir, "clear")
            self.assertEqual(code, 1)
            code, out = self._run(tmpdir, "clear", "--yes")
            self.assertEqual(code, 0)
            self.assertIn("Removed 0 samples.", out)

    def test_export_and_import(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            self._run(tmpdir, "set", "--delay", "9")
            exported = Path(tmpdir) / "out" / "posture.json"
            code, _out = self._run(tmpdir, "export", str(exported))
            self.assertEqual(code, 0)
            self.assertEqual(json.loads(exported.read_text(encoding="utf-8"))["alertDelay"], 9.0)

            other = tempfile.mkdtemp(dir=tmpdir)
            code, out = self._run(other, "import", str(exported))
            self.assertEqual(code, 0)
            self.assertIn("Imported 0 samples.", out)
            self.assertEqual(StateStore(path=Path(other) / "state.json").load().alert_delay, 9.0)

    def test_import_of_foreign_file_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            foreign = Path(tmpdir) / "foreign.json"
            foreign.write_text('{"hello": "world"}', encoding="utf-8")
            code, out = self._run(tmpdir, "import", str(foreign))
            self.assertEqual(code, 1)
            self.assertIn("Import failed", out)

    def test_cues_lists_every_sound(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            code, out = self._run(tmpdir, "cues")
            self.assertEqual(code, 0)
            for cue_id in ("chime", "ding", "double-beep", "soft-bell", "alarm"):
                self.assertIn(cue_id, out)


class RuntimeSettingsTests(unittest.TestCase):
    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = load_runtime_settings(Path(tmpdir) / "absent.yaml")
            self.assertEqual(settings, RuntimeSettings())

    def test_yaml_overrides_are_coerced(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "settings.yaml"
            path.write_text(
                "relay_url: ws://10.0.0.5:3000/ws\nwidth: '800'\nrelay_enabled: false\ncamera: 2\nheight: tall\n",
                encoding="utf-8",
            )
            settings = load_runtime_settings(path)
            self.assertEqual(settings.relay_url, "ws://10.0.0.5:3000/ws")
            self.assertEqual(settings.width, 800)
            self.assertFalse(settings.relay_enabled)
            self.assertEqual(settings.camera, "2")
            self.assertEqual(settings.height, 480)

    def test_non_mapping_yaml_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "settings.yaml"
            path.write_text("- just\n- a list\n", encoding="utf-8")
            self.assertEqual(load_runtime_settings(path), RuntimeSettings())


if __name__ == "__main__":
    unittest.main()
