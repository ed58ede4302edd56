"""Test suite for the dataflow-dsl package.

This package contains unit and integration tests validating grammar
words, both surface languages, the statement validator, renaming,
specification parsing, the pytest plugin and the command-line tools.
"""
