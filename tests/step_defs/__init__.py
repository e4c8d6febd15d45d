"""Step definitions package for BDD tests.

This package contains modular step definitions organized by page intent.
All *_steps modules are registered as plugins in the root conftest.py so
pytest-bdd can discover them.
"""
