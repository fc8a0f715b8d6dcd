"""
Runs the example test program as a separate process and checks its report
and exit status.
"""

import os
import subprocess
import sys
import unittest


ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
EXPECTED_REPORT = (
    "sTest v 1.1 <console:text>\n"
    "\n"
    "test_add\n"
    " -test count: 2\n"
    "\n"
    "test_sub\n"
    " Test failed!   stest_example.py:14   1 - 1 == 1\n"
    " -failed: 1 of 2\n"
    "\n"
    "test_mul\n"
    " Test failed!   stest_example.py:39   2 * 1 == 1\n"
    " -failed: 1 of 2\n"
    "\n"
    "[other]\n"
    "\n"
    "guarded\n"
    " -test count: 2\n"
    "\n"
    "test_div\n"
    " Test failed!   stest_example.py:20   2 * 0 != 0\n"
    " -skipping next tests\n"
    " -failed: 1 of 1*\n"
    "\n"
    "==============================\n"
    "Warning 3 tests failed!\n"
    "Test count: 9*\n"
    "*Some tests may be skipped.\n"
)


class TestExampleProgram(unittest.TestCase):
    """Test the example driver end to end."""

    def run_example(self, *args, input_text=""):
        return subprocess.run(
            [sys.executable, os.path.join(ROOT_DIR, "stest_example.py"), *args],
            cwd=ROOT_DIR, input=input_text, capture_output=True, text=True, timeout=60,
        )

    def test_report_and_exit_status(self):
        result = self.run_example("--no-wait")
        self.assertEqual(result.returncode, 1)
        self.assertEqual(result.stdout, EXPECTED_REPORT)
        self.assertEqual(result.stderr, "")

    def test_waits_for_input_before_exit(self):
        result = self.run_example(input_text="\n")
        self.assertEqual(result.returncode, 1)
        self.assertEqual(result.stdout, EXPECTED_REPORT)


if __name__ == "__main__":
    unittest.main()
