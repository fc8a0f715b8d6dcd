#!/usr/bin/env python3
"""
Example test program for the stest_module harness.
Some checks fail on purpose, so the program exits with status 1.
"""

import sys

import stest_module as st


def test_sub():
    st.begin_group_function()
    st.check(1 - 1 == 1)
    st.check(1 - 2 == -1)


def test_div():
    st.begin_group_function()
    if not st.check_if(2 * 0 != 0):
        return
    st.check(2 / (2 * 0) == 1)


def main(wait=True):
    st.set_wait_at_exit(wait)
    try:
        st.begin_group("test_add")
        st.check(1 + 1 == 2)
        st.check(1 + 2 == 3)

        test_sub()

        st.begin_group("test_mul")
        st.check(0 * 1 == 0)

        st.merge(True)
        st.check(1 * 2 == 2)
        st.check(2 * 1 == 1)

        st.begin_section("other")
        st.begin_group("guarded")
        if st.check_if(1 * 1 == 1):
            st.check(2 / (1 * 1) == 2)

        test_div()

        st.print_summary()
    except Exception as e:
        st.print_exception(e)


if __name__ == "__main__":
    main(wait="--no-wait" not in sys.argv[1:])
