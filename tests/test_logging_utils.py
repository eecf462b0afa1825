import logging
import unittest

from radiobio.errors import BuildError, IntegrationError, UnknownSpeciesError
from radiobio.logging_utils import get_user_message, log_exception


class TestErrors(unittest.TestCase):
    def test_integration_error_carries_cause_context(self):
        cause = UnknownSpeciesError("OH", "OH + OH -> H2O2")
        error = IntegrationError(1.5e-6, cause)
        self.assertEqual(error.time, 1.5e-6)
        self.assertIs(error.cause, cause)
        self.assertEqual(error.context["species"], "OH")
        self.assertIn("t=1.5e-06", str(error))

    def test_user_message(self):
        self.assertEqual(get_user_message(BuildError("bad pH", user_message="fix pH")), "fix pH")
        self.assertEqual(get_user_message(RuntimeError("boom")), "Unexpected error: boom")


class TestLogging(unittest.TestCase):
    def test_log_exception(self):
        logger = logging.getLogger("radiobio.test")
        with self.assertLogs(logger, level="DEBUG") as logs:
            message = log_exception(logger, BuildError("Config not found: run.json"))
        self.assertEqual(message, "Config not found: run.json")
        self.assertTrue(any("Config not found" in line for line in logs.output))
        self.assertTrue(any(record.exc_info for record in logs.records))


if __name__ == '__main__':
    unittest.main()
