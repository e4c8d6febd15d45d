"""Helper script to run pytest with coverage programmatically."""

import sys
from pathlib import Path
import coverage
import pytest

# Add project root to Python path to ensure modules are found
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Start coverage measurement
# We are interested in the engine, the step definitions and the Robot keywords
cov = coverage.Coverage(source=["ui_engine", "tests.step_defs", "robot_libraries"])
cov.start()

# Run pytest on the unit tests
exit_code = pytest.main(["tests/unit/"])

# Stop coverage and generate report
cov.stop()
cov.save()

# Print report to console
cov.report(show_missing=True)
sys.exit(exit_code)
