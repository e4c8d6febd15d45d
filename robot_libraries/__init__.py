"""Robot Framework keyword libraries for the OpenMRS UI tests.

This package provides a keyword library that mirrors the pytest-bdd step
definitions in tests/step_defs/. It uses the @keyword decorator to map clean
Python function names to scenario step text.

Libraries:
    OpenmrsKeywords: Browser lifecycle, login, patient search and registration

Usage:
    *** Settings ***
    Library    robot_libraries.OpenmrsKeywords    backend=playwright

    *** Test Cases ***
    Example Test
        Open OpenMRS browser
        The admin is logged in
        The patient search page is open
        The user searches for "John"
        [Teardown]    Close OpenMRS browser
"""

from robot_libraries.openmrs_keywords import OpenmrsKeywords

__all__ = [
    "OpenmrsKeywords",
]
