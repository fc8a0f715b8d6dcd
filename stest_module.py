"""
sTest - minimal unit testing harness driven from a test program.

The driver calls the module-level functions in order; every call is turned
into one log event and handled by a single Harness instance, which keeps the
test counters and writes the report through ConsoleOutput.

Example:
    import stest_module as st

    def test_sub():
        st.begin_group_function()
        st.check(1 - 1 == 0)

    try:
        st.begin_group("test_add")
        st.check(1 + 1 == 2)
        test_sub()
        st.print_summary()
    except Exception as e:
        st.print_exception(e)
"""

import io
import linecache
import os
import sys
import tokenize
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from stest_logging import get_logger
from stest_output import ConsoleOutput


logger = get_logger(__name__)

# Constants
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
UNKNOWN_EXPRESSION = "<unknown>"

CHECK_FUNCTIONS = ("check", "check_if")


class LogType(Enum):
    """Events accepted by Harness.log()."""
    CHECK = "check"
    CHECK_SKIP = "check_skip"
    SUMMARY = "summary"
    EXCEPTION = "exception"
    BEGIN_GROUP = "begin_group"
    BEGIN_SECTION = "begin_section"
    PRINT = "print"
    MERGE = "merge"
    TOTAL_FAILED = "total_failed"
    DO_EXIT = "do_exit"
    DO_WAIT = "do_wait"
    DO_SHOW_MERGED = "do_show_merged"


@dataclass
class Status:
    """Test and failure counts of all tests or of the current group."""
    test_count: int = 0
    failed_count: int = 0
    has_skipped: bool = False  # a check_if() failed

    def clear(self):
        self.test_count = 0
        self.failed_count = 0
        self.has_skipped = False


@dataclass
class MergedInfo:
    """Accumulator of the current merged run."""
    counted: bool = False  # run already added to the test counts
    failed: bool = False  # run already added to the failure counts
    printed: bool = False  # failure of the run already printed

    def clear(self):
        self.counted = False
        self.failed = False
        self.printed = False


@dataclass
class Options:
    exit_at_end: bool = True
    wait_at_exit: bool = True
    show_merged_failures: bool = False  # print later failures of a merged run too


@dataclass
class Harness:
    """Process-wide state of the harness and the single event handler."""
    output: ConsoleOutput = field(default_factory=ConsoleOutput)
    options: Options = field(default_factory=Options)
    total_status: Status = field(default_factory=Status)
    group_status: Status = field(default_factory=Status)
    is_merged: bool = False
    merged: MergedInfo = field(default_factory=MergedInfo)
    last_file: Optional[str] = None
    last_line: int = 0
    has_tests_or_group: bool = False
    info_printed: bool = False

    def log(self, log_type: LogType, what: Optional[str] = None,
            file: Optional[str] = None, line: int = 0, passed: bool = False) -> bool:
        """
        Handle one event.

        Args:
            log_type: Event kind
            what: Checked expression, group/section name or text to print
            file: Source file of a check
            line: Source line of a check
            passed: Check result or option/merge flag

        Returns:
            True if any test failed for TOTAL_FAILED, otherwise passed
        """
        if not isinstance(log_type, LogType):
            raise ValueError(f"Unsupported log type: {log_type!r}")

        if not self.info_printed:
            self.output.print_info()
            self.info_printed = True

        if log_type in (LogType.CHECK, LogType.CHECK_SKIP):
            self._check(what, file, line, passed, log_type == LogType.CHECK_SKIP)

        elif log_type == LogType.SUMMARY:
            self._summary()

        elif log_type == LogType.BEGIN_GROUP:
            if what is not None:
                if self.has_tests_or_group:
                    self._print_group_status()
                self.output.print_test_group(what)
                self._clear_group()
                self.has_tests_or_group = True
                logger.debug("Group started: %s", what)

        elif log_type == LogType.BEGIN_SECTION:
            if what is not None:
                if self.has_tests_or_group:
                    self._print_group_status()
                    self.has_tests_or_group = False
                self.output.print_test_section(what)
                self._clear_group()
                logger.debug("Section started: %s", what)

        elif log_type == LogType.EXCEPTION:
            self._exception()

        elif log_type == LogType.MERGE:
            self.is_merged = passed
            self.merged.clear()
            logger.debug("Merge mode %s", "on" if passed else "off")

        elif log_type == LogType.PRINT:
            if what is not None:
                self.output.print_print(what)

        elif log_type == LogType.TOTAL_FAILED:
            return self.total_status.failed_count != 0

        elif log_type == LogType.DO_EXIT:
            self.options.exit_at_end = passed
            logger.debug("exit_at_end=%s", passed)

        elif log_type == LogType.DO_WAIT:
            self.options.wait_at_exit = passed
            logger.debug("wait_at_exit=%s", passed)

        elif log_type == LogType.DO_SHOW_MERGED:
            self.options.show_merged_failures = passed
            logger.debug("show_merged_failures=%s", passed)

        return passed

    def _check(self, what, file, line, passed, skip):
        self.has_tests_or_group = True

        if not self.is_merged or not self.merged.counted:
            self.total_status.test_count += 1
            self.group_status.test_count += 1
            self.merged.counted = self.is_merged

        self.last_file = file
        self.last_line = line

        if not passed:
            if not self.is_merged or not self.merged.failed:
                self.total_status.failed_count += 1
                self.group_status.failed_count += 1
                self.merged.failed = self.is_merged
            if skip:
                self.total_status.has_skipped = True
                self.group_status.has_skipped = True

        # A reported merged run stays silent unless continuation lines are wanted
        if self.is_merged and self.merged.printed and not self.options.show_merged_failures:
            return

        printed = self.output.print_test_check(what, file, line, passed, skip, self.merged.printed)
        self.merged.printed = printed and self.is_merged

    def _summary(self):
        if self.has_tests_or_group:
            self._print_group_status()
        self.output.print_summary(self.total_status.failed_count,
                                  self.total_status.test_count,
                                  self.total_status.has_skipped)

        test_is_failed = self.total_status.failed_count != 0
        logger.debug("Summary: %d of %d failed",
                     self.total_status.failed_count, self.total_status.test_count)
        self._clear_all()

        if self.options.exit_at_end:
            self._exit(EXIT_FAILURE if test_is_failed else EXIT_SUCCESS)

    def _exception(self):
        self.output.print_exception(self.last_file, self.last_line)
        self._clear_all()

        if self.options.exit_at_end:
            self._exit(EXIT_FAILURE)

    def _exit(self, code: int):
        if self.options.wait_at_exit:
            self.output.wait()
        logger.debug("Exiting with status %d", code)
        sys.exit(code)

    def _print_group_status(self):
        self.output.print_group_status(self.group_status.failed_count,
                                       self.group_status.test_count,
                                       self.group_status.has_skipped)

    def _clear_group(self):
        self.group_status.clear()
        self.is_merged = False
        self.merged.clear()

    def _clear_all(self):
        self.total_status.clear()
        self._clear_group()
        self.has_tests_or_group = False


# Process-wide harness used by the module-level functions
_harness = Harness()


def get_log() -> Harness:
    """Return the process-wide harness."""
    return _harness


def reset_log(output: Optional[ConsoleOutput] = None) -> Harness:
    """Replace the process-wide harness with a fresh one (the banner is printed again)."""
    global _harness
    _harness = Harness(output=output if output is not None else ConsoleOutput())
    return _harness


def _expression_text(frame) -> str:
    """Source text of the check()/check_if() argument at the given frame."""
    source = linecache.getline(frame.f_code.co_filename, frame.f_lineno)
    if not source.strip():
        return UNKNOWN_EXPRESSION
    return _first_check_argument(source) or source.strip()


def _first_check_argument(source: str) -> Optional[str]:
    """
    Text of the first argument of the first check()/check_if() call in a source line.

    Returns:
        Argument text, or None if no complete call is found on the line
    """
    tokens = []
    try:
        for token in tokenize.generate_tokens(io.StringIO(source).readline):
            tokens.append(token)
    except tokenize.TokenError:
        # Call continues on the next line; only the tokens read so far are used
        pass

    for i, token in enumerate(tokens[:-1]):
        if token.type != tokenize.NAME or token.string not in CHECK_FUNCTIONS:
            continue
        if tokens[i + 1].string != "(":
            continue

        start = tokens[i + 1].end[1]
        depth = 0
        for inner in tokens[i + 2:]:
            if inner.type != tokenize.OP:
                continue
            if inner.string in ("(", "[", "{"):
                depth += 1
            elif inner.string in (")", "]", "}"):
                if depth == 0:
                    return source[start:inner.start[1]].strip() or None
                depth -= 1
            elif inner.string == "," and depth == 0:
                return source[start:inner.start[1]].strip() or None
        return None
    return None


def _log_check(log_type, condition, what, file, line, frame) -> bool:
    if file is None:
        file = os.path.basename(frame.f_code.co_filename)
    if line is None:
        line = frame.f_lineno
    if what is None:
        what = _expression_text(frame)
    return _harness.log(log_type, what, file, line, bool(condition))


def check(condition, what: Optional[str] = None,
          file: Optional[str] = None, line: Optional[int] = None) -> bool:
    """
    Check a condition.

    The file, line and expression text are taken from the calling line
    unless given.

    Returns:
        True if the condition holds
    """
    return _log_check(LogType.CHECK, condition, what, file, line, sys._getframe(1))


def check_if(condition, what: Optional[str] = None,
             file: Optional[str] = None, line: Optional[int] = None) -> bool:
    """
    Check a condition that guards the next tests.

    A failure marks the counts as skipped; use the result to leave out the
    dependent checks, e.g. ``if not check_if(x): return``.
    """
    return _log_check(LogType.CHECK_SKIP, condition, what, file, line, sys._getframe(1))


def merge(enabled: bool):
    """Count the next checks as one test (until disabled or the next group)."""
    _harness.log(LogType.MERGE, passed=enabled)


def print_summary():
    """Print the summary of all tests and exit if configured to."""
    _harness.log(LogType.SUMMARY)


def print_exception(exc: Optional[BaseException] = None):
    """Report an exception that escaped the tests and exit if configured to."""
    if exc is not None:
        logger.debug("Exception after tests", exc_info=exc)
    _harness.log(LogType.EXCEPTION)


def begin_group(name: Optional[str]):
    _harness.log(LogType.BEGIN_GROUP, name)


def begin_group_function():
    """Begin a test group named after the calling function."""
    _harness.log(LogType.BEGIN_GROUP, sys._getframe(1).f_code.co_name)


def begin_section(name: Optional[str]):
    _harness.log(LogType.BEGIN_SECTION, name)


def begin_section_function():
    """Begin a test section named after the calling function."""
    _harness.log(LogType.BEGIN_SECTION, sys._getframe(1).f_code.co_name)


def print_line(text: Optional[str]):
    _harness.log(LogType.PRINT, text)


def any_failed() -> bool:
    """True if any test has failed since the last summary."""
    return _harness.log(LogType.TOTAL_FAILED)


def set_exit_at_end(flag: bool):
    _harness.log(LogType.DO_EXIT, passed=flag)


def set_wait_at_exit(flag: bool):
    _harness.log(LogType.DO_WAIT, passed=flag)


def set_show_merged_failures(flag: bool):
    _harness.log(LogType.DO_SHOW_MERGED, passed=flag)
