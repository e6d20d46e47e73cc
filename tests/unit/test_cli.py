"""
Unit Tests — Command Line Entry Point
=====================================

Tests for main.py
"""

import io
import json
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from PIL import Image

import main
from src.utils.config_manager import default_settings


class TestApplyOverrides(unittest.TestCase):

    def test_overrides_enable_toggles(self):
        args = main.build_parser().parse_args([
            "a.jpg", "--platform", "Adobe Stock", "--keywords", "20",
            "--prefix", "Pro", "--exclude-keywords", "ai", "--relay-url", "https://relay",
        ])
        settings = main.apply_overrides(default_settings(), args)
        c = settings["constraints"]

        self.assertEqual(c["selectedPlatform"], "Adobe Stock")
        self.assertEqual(c["keywordCount"], 20)
        self.assertEqual((c["prefix"], c["prefixEnabled"]), ("Pro", True))
        self.assertEqual((c["negKeywords"], c["negKeywordsEnabled"]), ("ai", True))
        self.assertFalse(c["suffixEnabled"])
        self.assertEqual(settings["relay_url"], "https://relay")

    def test_no_overrides(self):
        args = main.build_parser().parse_args(["a.jpg"])
        self.assertEqual(main.apply_overrides(default_settings(), args), default_settings())


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.tmp, ignore_errors=True)
        self.image = self.tmp / "a.png"
        Image.new("RGB", (4, 4)).save(self.image, format="PNG")
        self.settings_path = self.tmp / "settings.json"

        patcher = patch("main.setup_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, argv):
        out = io.StringIO()
        with patch.dict("os.environ", {}, clear=True), redirect_stdout(out):
            code = main.main(argv)
        return code, [json.loads(line) for line in out.getvalue().splitlines() if line.strip()]

    def test_success_output(self):
        self.settings_path.write_text(json.dumps({"keys": {"openai": "sk-test"}}), encoding="utf-8")
        response = json.dumps({"title": "Black square", "description": "D", "keywords": ["Black", "square"]})

        with patch("main.ProviderAdapter") as adapter_cls:
            adapter_cls.return_value.invoke.return_value = response
            code, lines = self._run([str(self.image), "--settings", str(self.settings_path),
                                     "--platform", "Freepik"])

        self.assertEqual(code, 0)
        self.assertEqual(lines[0]["status"], "completed")
        self.assertEqual(lines[0]["provider"], "openai")
        self.assertEqual(lines[0]["keywords"], ["black", "square"])
        self.assertNotIn("description", lines[0])
        adapter_cls.return_value.close.assert_called_once()

    def test_no_keys(self):
        code, lines = self._run([str(self.image), "--settings", str(self.settings_path)])
        self.assertEqual(code, 1)
        self.assertEqual(lines[0]["status"], "error")
        self.assertEqual(lines[0]["error"], "No active API keys found.")

    def test_interrupt_exits_with_failure(self):
        with patch("main.BatchProcessor") as processor_cls:
            processor_cls.return_value.run.side_effect = KeyboardInterrupt()
            code, lines = self._run([str(self.image), "--settings", str(self.settings_path)])

        self.assertEqual(code, 1)
        self.assertEqual(lines, [])
        processor_cls.return_value.abort.assert_called_once()

    def test_invalid_constraints(self):
        with patch("sys.stderr", new_callable=io.StringIO):
            code, _ = self._run([str(self.image), "--settings", str(self.settings_path), "--keywords", "0"])
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
