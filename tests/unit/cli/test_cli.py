"""CLI argument and output behavior tests.

Verifies how ``quickopener.cli.main`` picks the base directory, applies
overrides, and prints resolved entries.
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from quickopener import cli, config


def _make_tree(root: Path) -> None:
    (root / "pkg").mkdir()
    (root / "pkg" / "mod.py").write_text("x = 1\n", encoding="utf-8")
    (root / "setup.cfg").write_text("", encoding="utf-8")


class CliTests(unittest.TestCase):
    def _run(self, argv: list[str], config_dir: Path) -> str:
        stdout = io.StringIO()
        with mock.patch("quickopener.config.CONFIG_PATH", config_dir / "config.json"), mock.patch(
            "sys.stdout", stdout
        ):
            cli.main(argv)
        return stdout.getvalue()

    def test_main_prints_entries_relative_to_base(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            output = self._run(["--base", str(root), "--timeout", "2000"], root)

            lines = output.splitlines()
            self.assertEqual(lines[0], "pkg" + os.sep)
            self.assertIn("setup.cfg", lines)
            self.assertIn(os.path.join("pkg", "mod.py"), lines)

    def test_main_defaults_to_current_working_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            previous_cwd = Path.cwd()
            try:
                os.chdir(root)
                output = self._run(["pkg" + os.sep, "--timeout", "2000"], root)
            finally:
                os.chdir(previous_cwd)

            self.assertEqual(output.splitlines(), ["pkg" + os.sep, os.path.join("pkg", "mod.py")])

    def test_long_format_marks_kinds_and_workspace_roots(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            output = self._run(
                ["--base", str(root), "--timeout", "2000", "--long", "--workspace", str(root / "pkg")],
                root,
            )

            lines = output.splitlines()
            self.assertEqual(lines[0], "d* pkg" + os.sep)
            self.assertIn("f  setup.cfg", lines)

    def test_max_items_limits_output(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            output = self._run(["--base", str(root), "--timeout", "2000", "--max-items", "1"], root)

            self.assertEqual(output.splitlines(), ["pkg" + os.sep])

    def test_save_prefix_persists_and_applies_to_query(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            output = self._run(
                ["@r" + os.sep, "--base", str(root), "--timeout", "2000", "--save-prefix", f"@r={root}"],
                root,
            )

            self.assertEqual(output.splitlines()[0], os.path.join("@r", "pkg") + os.sep)
            with mock.patch("quickopener.config.CONFIG_PATH", root / "config.json"):
                self.assertEqual(config.load_scan_settings().prefixes["@r"], str(root))

    def test_save_exclude_replaces_exclusions_before_scanning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            output = self._run(
                ["--base", str(root), "--timeout", "2000", "--save-exclude", "pkg", "--save-exclude", "config.json"],
                root,
            )

            self.assertEqual(output.splitlines(), ["setup.cfg"])
            with mock.patch("quickopener.config.CONFIG_PATH", root / "config.json"):
                self.assertEqual(config.load_exclude(config.load_config()), ("pkg", "config.json"))

    def test_rejects_malformed_prefix_assignment(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit):
                self._run(["--save-prefix", "no-equals-sign"], root)

    def test_missing_base_directory_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with self.assertRaises(SystemExit):
                self._run(["--base", str(root / "missing")], root)

    def test_rejects_non_positive_timeout(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit):
                self._run(["--timeout", "0"], root)


if __name__ == "__main__":
    unittest.main()
