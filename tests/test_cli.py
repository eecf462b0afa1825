import csv
import json
import logging
import sqlite3
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from radiobio.cli import app

NETWORK = {
    "bio_param": {"pH": 7.0, "radiolytic": {"C": 2.8}},
    "initial_concentrations": {"A": 1.0},
    "k_reactions": [{"reactants": ["A", "A"], "products": ["B"], "k_value": 2.0}],
}


class TestCLI(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmp.name)
        self.runner = CliRunner()
        self._root_handlers = logging.root.handlers[:]
        (self.tmp_path / "reactions.json").write_text(json.dumps(NETWORK))

    def tearDown(self):
        # the CLI reconfigures the root logger onto the runner's streams
        logging.root.handlers[:] = self._root_handlers
        self._tmp.cleanup()

    def write_config(self, **overrides):
        config = {
            "name": "cli test",
            "network": "reactions.json",
            "beam": {"type": "pulsed", "dose_rate": 1.0, "period": 1.0, "on_time": 0.5},
            "solver": {"t_end": 1.0, "step_size": 0.25},
            "unit_scale": 1.0,
        }
        config.update(overrides)
        path = self.tmp_path / "run.json"
        path.write_text(json.dumps(config))
        return path

    def test_run_writes_outputs(self):
        config = self.write_config()
        output = self.tmp_path / "out.csv"
        project = self.tmp_path / "project.db"

        result = self.runner.invoke(
            app, ["run", str(config), "--output", str(output), "--project-file", str(project)]
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"accepted_steps": 4', result.output)
        with open(output, newline="") as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0], ["time", "A", "B", "C"])
        self.assertEqual(len(rows), 6)

        connection = sqlite3.connect(project)
        try:
            (count,) = connection.execute("SELECT COUNT(*) FROM profile").fetchone()
        finally:
            connection.close()
        self.assertEqual(count, 5 * 3)

    def test_inline_network(self):
        config = self.write_config(network=NETWORK)
        result = self.runner.invoke(app, ["run", str(config)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"labels"', result.output)

    def test_missing_config_fails(self):
        result = self.runner.invoke(app, ["run", str(self.tmp_path / "missing.json")])
        self.assertEqual(result.exit_code, 1)

    def test_invalid_beam_fails(self):
        config = self.write_config(beam={"type": "pulsed", "dose_rate": 1.0, "period": 1.0, "on_time": 2.0})
        result = self.runner.invoke(app, ["run", str(config)])
        self.assertEqual(result.exit_code, 1)

    def test_missing_solver_key_fails(self):
        config = self.write_config(solver={"step_size": 0.1})
        result = self.runner.invoke(app, ["run", str(config)])
        self.assertEqual(result.exit_code, 1)

    def assert_fails_with_logged_error(self, config, *extra, message):
        with self.assertLogs("radiobio.cli", level="ERROR") as logs:
            result = self.runner.invoke(app, ["run", str(config), *extra])
        self.assertEqual(result.exit_code, 1)
        self.assertIsInstance(result.exception, SystemExit)
        self.assertTrue(any(message in line for line in logs.output), logs.output)

    def test_non_object_beam_fails(self):
        config = self.write_config(beam="constant")
        self.assert_fails_with_logged_error(config, message="Section 'beam' must be an object")

    def test_non_object_solver_fails(self):
        config = self.write_config(solver=[1.0, 0.1])
        self.assert_fails_with_logged_error(config, message="Section 'solver' must be an object")

    def test_invalid_unit_scale_fails(self):
        config = self.write_config(unit_scale=[1])
        self.assert_fails_with_logged_error(config, message="Invalid unit_scale")

    def test_unwritable_project_file_fails(self):
        config = self.write_config()
        # a directory cannot be opened as a database
        self.assert_fails_with_logged_error(
            config, "--project-file", str(self.tmp_path), message="project file"
        )

    def test_describe(self):
        result = self.runner.invoke(app, ["describe", str(self.tmp_path / "reactions.json")])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("State species:", result.output)
        self.assertIn("2 A -> B", result.output)


if __name__ == '__main__':
    unittest.main()
