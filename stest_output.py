"""
Console output for the sTest harness.
All report text is written here; the test logic never formats output itself.
"""

import sys
from typing import Optional, TextIO


# Constants
STEST_VERSION = "1.1"
SEPARATOR = "=============================="

# Exception report texts; the default spelling matches existing sTest reports
EXCEPTION_AFTER_TEST = "Exception afer test in: "
EXCEPTION_BEFORE_TEST = "Exception beafore anny test!"
EXCEPTION_AFTER_TEST_CORRECTED = "Exception after test in: "
EXCEPTION_BEFORE_TEST_CORRECTED = "Exception before any test!"


class ConsoleOutput:
    """Writes the sTest report to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None,
                 input_stream: Optional[TextIO] = None,
                 corrected_text: bool = False):
        """
        Create console output.

        Args:
            stream: Report destination (default: sys.stdout at write time)
            input_stream: Source for wait() (default: sys.stdin at wait time)
            corrected_text: Use corrected spelling in the exception report
        """
        self._stream = stream
        self._input_stream = input_stream
        self.corrected_text = corrected_text

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so redirected sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    @property
    def input_stream(self) -> TextIO:
        return self._input_stream if self._input_stream is not None else sys.stdin

    def _write(self, text: str):
        self.stream.write(text)
        self.stream.flush()

    def print_info(self):
        """Print the harness banner."""
        self._write(f"sTest v {STEST_VERSION} <console:text>\n\n")

    def print_test_group(self, name: str):
        self._write(f"{name}\n")

    def print_test_section(self, name: str):
        self._write(f"[{name}]\n\n")

    def print_test_check(self, what: str, file: str, line: int,
                         passed: bool, skip: bool, merged: bool) -> bool:
        """
        Print a failed check.

        Args:
            what: Text of the checked expression
            file: Source file name of the check
            line: Source line of the check
            passed: Check result; nothing is printed for a passed check
            skip: Check was made with skipping of the next tests on failure
            merged: Continuation of an already printed merged run

        Returns:
            True if a line was printed
        """
        if passed:
            return False

        parts = ["      failed!" if merged else " Test failed!"]
        parts.append(f"   {file}:{line}   {what}")
        if skip:
            parts.append("\n -skipping next tests")
        parts.append("\n")
        self._write("".join(parts))
        return True

    def print_group_status(self, failed_count: int, test_count: int, was_skipped: bool):
        """Print the trailer line of a test group."""
        if failed_count:
            text = f" -failed: {failed_count} of {test_count}"
        else:
            text = f" -test count: {test_count}"
        if was_skipped:
            text += "*"
        self._write(text + "\n\n")

    def print_summary(self, failed_count: int, test_count: int, was_skipped: bool):
        """Print the summary of all tests."""
        lines = [SEPARATOR + "\n"]
        if failed_count == 0:
            lines.append("All tests passed!\n")
        else:
            lines.append(f"Warning {failed_count} tests failed!\n")
        lines.append(f"Test count: {test_count}")
        if was_skipped:
            lines.append("*\n*Some tests may be skipped.")
        lines.append("\n")
        self._write("".join(lines))

    def print_exception(self, last_file: Optional[str], last_line: int):
        """Print the exception report with the location of the last check."""
        text = "\n" + SEPARATOR + "\n"
        if last_file is not None:
            prefix = EXCEPTION_AFTER_TEST_CORRECTED if self.corrected_text else EXCEPTION_AFTER_TEST
            text += f"{prefix}{last_file}:{last_line}"
        else:
            text += EXCEPTION_BEFORE_TEST_CORRECTED if self.corrected_text else EXCEPTION_BEFORE_TEST
        self._write(text + "\n")

    def print_print(self, text: str):
        self._write(f"{text}\n")

    def wait(self):
        """Block until a line of input arrives."""
        self.input_stream.readline()
