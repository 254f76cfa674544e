# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Pytest configuration and shared fixtures for tabpivot tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest
import zstandard as zstd


# Records whose data field is missing or not numeric
SHORT_RECORDS_CONTENT = "a\tx\t1\nb\tx\nb\ty\tabc\na\ty\t12kg\n"

# Records with numeric-looking keys of different lengths
NUMERIC_KEYS_CONTENT = "10\tb\t1\n2\ta\t2\n1\tb\t3\n2\tb\t4\n"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def short_records_file(temp_dir: Path) -> Path:
    """Create a file with short and non-numeric records."""
    filepath = temp_dir / "short.tsv"
    filepath.write_text(SHORT_RECORDS_CONTENT, encoding="utf-8")
    return filepath


@pytest.fixture
def numeric_keys_file(temp_dir: Path) -> Path:
    """Create a file whose row keys look like numbers."""
    filepath = temp_dir / "numeric_keys.tsv"
    filepath.write_text(NUMERIC_KEYS_CONTENT, encoding="utf-8")
    return filepath


@pytest.fixture
def zst_records_file(temp_dir: Path) -> Path:
    """Create a Zstd file made of two independent frames."""
    filepath = temp_dir / "records.tsv.zst"
    cctx = zstd.ZstdCompressor()
    first = cctx.compress(b"a\tx\t1\nb\tx\t2\n")
    second = cctx.compress(b"a\ty\t3\n")
    filepath.write_bytes(first + second)
    return filepath


@pytest.fixture
def empty_file(temp_dir: Path) -> Path:
    """Create an empty file."""
    filepath = temp_dir / "empty.tsv"
    filepath.touch()
    return filepath
