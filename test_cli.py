#!/usr/bin/env python3
"""
End-to-end tests for the minivault command line.
"""

import io
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent))

from minivault.cli import create_parser, main


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        self.env = patch.dict(os.environ, {
            "MINIVAULT_STORAGE_BACKEND": "json",
            "MINIVAULT_STORAGE_PATH": str(self.dir / "history.json"),
            "MINIVAULT_HISTORY_KEY": "cli-test",
        })
        self.env.start()

    def tearDown(self):
        self.env.stop()
        self.tmp.cleanup()

    def run_cli(self, *args):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(["--config-dir", str(self.dir / "config"), *args])
        return code, out.getvalue()

    def test_no_command_prints_help(self):
        code, _ = self.run_cli()
        self.assertEqual(code, 1)

    def test_add_list_undo_redo(self):
        code, out = self.run_cli("add", "Rohan Riders", "-c", "Middle-earth Strategy Battle Game",
                                 "-g", "Rohan", "--status", "Primed", "-q", "6")
        self.assertEqual(code, 0)
        self.assertIn("Added Rohan Riders", out)
        self.run_cli("add", "Eomer", "-c", "Middle-earth Strategy Battle Game", "-g", "Rohan")

        code, out = self.run_cli("list", "--sort", "quantity", "--desc")
        self.assertEqual(code, 0)
        lines = out.strip().splitlines()
        self.assertIn("Rohan Riders", lines[0])
        self.assertIn("Eomer", lines[1])
        self.assertIn("2 of 2 entries", lines[-1])

        self.assertEqual(self.run_cli("undo")[0], 0)
        _, out = self.run_cli("list")
        self.assertNotIn("Eomer", out)

        self.run_cli("redo")
        _, out = self.run_cli("list", "--search", "eom")
        self.assertIn("Eomer", out)
        self.assertIn("1 of 2 entries", out)

    def test_invalid_status_fails_cleanly(self):
        code, out = self.run_cli("add", "Thing", "-c", "Battletech", "--status", "Glazed")
        self.assertEqual(code, 1)
        self.assertIn("Unknown status", out)

    def test_import_export_round_trip(self):
        source = self.dir / "in.csv"
        source.write_text(
            "name,category,group,status,quantity,notes\n"
            'Atlas,Battletech,"Davion, House",Painted,1,"Big ""Atlas"""\n'
            "Broken,Battletech,Steiner,Primed\n"
            "Locust,Battletech,Steiner,Purchased,2,\n",
            encoding="utf-8",
        )
        code, out = self.run_cli("import-csv", str(source))
        self.assertEqual(code, 0)
        self.assertIn("Imported 2 entries", out)
        self.assertIn("Skipped 1", out)

        target = self.dir / "out.csv"
        self.assertEqual(self.run_cli("export-csv", "-o", str(target))[0], 0)
        exported = target.read_text(encoding="utf-8")
        self.assertEqual(exported.splitlines()[1], 'Atlas,Battletech,"Davion, House",Painted,1,"Big ""Atlas"""')

    def test_bad_header_reports_error(self):
        source = self.dir / "bad.csv"
        source.write_text("name,category,group,status,count,notes\n", encoding="utf-8")
        code, out = self.run_cli("import-csv", str(source))
        self.assertEqual(code, 1)
        self.assertIn("Invalid CSV header", out)

    def test_backup_and_restore(self):
        self.run_cli("add", "Custodes", "-c", "Warhammer 40,000")
        backup = self.dir / "backup.yaml"
        self.assertEqual(self.run_cli("backup", str(backup))[0], 0)
        self.run_cli("add", "Sisters", "-c", "Warhammer 40,000")

        code, out = self.run_cli("restore", str(backup))
        self.assertEqual(code, 0)
        self.assertIn("Restored 1 entries", out)
        _, out = self.run_cli("list")
        self.assertNotIn("Sisters", out)

    def test_categories(self):
        code, out = self.run_cli("categories", "--add", "Infinity")
        self.assertEqual(code, 0)
        _, out = self.run_cli("categories")
        self.assertIn("Infinity", out.splitlines())
        code, _ = self.run_cli("categories", "--add", "infinity")
        self.assertEqual(code, 1)

    def test_stats(self):
        self.run_cli("add", "A", "-c", "Battletech", "--status", "Painted", "-q", "3")
        self.run_cli("add", "B", "-c", "Battletech", "-q", "1")
        code, out = self.run_cli("stats")
        self.assertEqual(code, 0)
        self.assertIn("Models: 4 (3 painted, 1 unpainted)", out)
        self.assertIn("1. Purchased: 1", out)
        self.assertIn("5. Painted: 3", out)
        self.assertLess(out.index("1. Purchased"), out.index("7. Ready for Game"))

    def test_update_and_delete(self):
        self.run_cli("add", "Marauder", "-c", "Battletech")
        _, out = self.run_cli("list")
        entry_id = out.splitlines()[0].split()[0]

        code, out = self.run_cli("update", entry_id, "--status", "Based", "--quantity", "2")
        self.assertEqual(code, 0)
        _, out = self.run_cli("list")
        self.assertIn("Based x2", out)

        self.assertEqual(self.run_cli("update", "nope", "--name", "X")[0], 1)
        self.assertEqual(self.run_cli("delete", entry_id)[0], 0)
        _, out = self.run_cli("list")
        self.assertIn("0 of 0 entries", out)

    def test_parser_lists_commands(self):
        parser = create_parser()
        args = parser.parse_args(["list", "--sort", "status"])
        self.assertEqual(args.sort, "status")


if __name__ == "__main__":
    unittest.main()
