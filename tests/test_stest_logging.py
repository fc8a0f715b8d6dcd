"""
Tests for the sTest logger hierarchy.
"""

import io
import logging
import unittest
from stest_logging import get_logger, set_log_level, ROOT_LOGGER_NAME


class TestLogging(unittest.TestCase):
    """Test cases for the stest loggers."""

    def setUp(self):
        self.root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        self.saved_level = self.root_logger.level
        self.buffer = io.StringIO()
        self.handler = logging.StreamHandler(self.buffer)
        self.handler.setFormatter(logging.Formatter("%(name)s:%(message)s"))
        self.root_logger.addHandler(self.handler)

    def tearDown(self):
        self.root_logger.removeHandler(self.handler)
        self.root_logger.setLevel(self.saved_level)

    def test_module_loggers_live_under_root(self):
        self.assertEqual(get_logger("stest_module").name, "stest.stest_module")
        self.assertEqual(get_logger("stest.output").name, "stest.output")
        self.assertEqual(get_logger(ROOT_LOGGER_NAME).name, ROOT_LOGGER_NAME)

    def test_library_adds_only_null_handler(self):
        handlers = [h for h in self.root_logger.handlers if h is not self.handler]
        self.assertTrue(handlers)
        self.assertTrue(all(isinstance(h, logging.NullHandler) for h in handlers))

    def test_set_log_level(self):
        set_log_level(logging.DEBUG)
        get_logger("harness").debug("visible")
        set_log_level(logging.ERROR)
        get_logger("harness").warning("hidden")
        self.assertEqual(self.buffer.getvalue(), "stest.harness:visible\n")


if __name__ == "__main__":
    unittest.main()
