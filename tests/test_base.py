# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Base test class and shared test data for tabpivot tests.
"""

import shutil
import tempfile
import unittest
from pathlib import Path


# Example inputs directory
EXAMPLE_INPUTS_DIR = Path(__file__).parent / "example_inputs"

# Real data file paths
SESSIONS_TSV = EXAMPLE_INPUTS_DIR / "sessions.tsv"
PIVOT_CONFIG_JSON = EXAMPLE_INPUTS_DIR / "pivot_config.json"

# Records of SESSIONS_TSV: date, user, site, amount
SESSIONS_RECORDS = [
    ["2014-11-01", "eric", "abc", "123"],
    ["2014-11-01", "tim", "abc", "1"],
    ["2014-11-01", "eric", "zyx", "321"],
    ["2014-11-02", "tim", "abc", "456"],
    ["2014-11-02", "eric", "zyx", "654"],
    ["2014-11-02", "tim", "zyx", "4"],
]
SESSIONS_RECORD_COUNT = 6

# Expected tsv output of "-r 1 -c 2 -d sum(4)"
SESSIONS_SUM_TSV = "\n".join(
    [
        "\teric\ttim",
        "2014-11-01\t444\t1",
        "2014-11-02\t654\t460",
    ]
)

# Expected tsv output of "-r 1,3 -c 2 -d sum(4)"
SESSIONS_SPARSE_TSV = "\n".join(
    [
        "\t\teric\ttim",
        "2014-11-01\tabc\t123\t1",
        "2014-11-01\tzyx\t321\t",
        "2014-11-02\tabc\t\t456",
        "2014-11-02\tzyx\t654\t4",
    ]
)

# Expected tsv output of "-r 1 -c 2 -d sum(4),count(4)"
SESSIONS_MULTI_TSV = "\n".join(
    [
        "\t\teric\ttim",
        "2014-11-01\tsum(4)\t444\t1",
        "\tcount(4)\t2\t1",
        "2014-11-02\tsum(4)\t654\t460",
        "\tcount(4)\t1\t2",
    ]
)


class BasePivotTest(unittest.TestCase):
    """Base class for tests with shared setup/teardown."""

    @classmethod
    def setUpClass(cls):
        """Verify example input files exist."""
        for path in [SESSIONS_TSV, PIVOT_CONFIG_JSON]:
            if not path.exists():
                raise FileNotFoundError(f"Example input file not found: {path}")

    def setUp(self):
        """Create a temporary directory for test files that need to be generated."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Remove the temporary directory."""
        shutil.rmtree(self.temp_dir)

    def create_temp_file(self, filename: str, content: str) -> Path:
        """Create a temporary file with given content."""
        filepath = self.temp_dir / filename
        filepath.write_text(content, encoding="utf-8")
        return filepath
