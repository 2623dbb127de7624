# tests/test_imports.py

import subprocess
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]


@pytest.mark.parametrize("module", [
    "charterdesk.data_access",
    "charterdesk.business_logic",
    "charterdesk.data_access.yachts_repository",
    "charterdesk.data_access.bookings_repository",
    "charterdesk.business_logic.yacht_manager",
    "charterdesk.business_logic.opportunity_manager",
])
def test_each_layer_imports_on_its_own(module):
    # a fresh interpreter, so nothing imported by other tests hides an import cycle
    result = subprocess.run([sys.executable, "-c", f"import {module}"],
                            cwd=PROJECT_ROOT, capture_output=True, text=True)
    assert result.returncode == 0, result.stderr
